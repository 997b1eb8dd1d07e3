"""Messier Tonight — Streamlit app showing which Messier objects are up each dark hour."""

import datetime
import logging
import os

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import get_geolocation

load_dotenv()

from messiertonight.compute import build_nightly_timeline, local_timezone, observer_today  # noqa: E402
from messiertonight.geocode import resolve_location  # noqa: E402
from messiertonight.images import (  # noqa: E402
    JsonFileCache,
    fetch_thumbnail_url,
    load_last_location,
    save_last_location,
    wikipedia_url,
)
from messiertonight.models import InvalidLocation, NightlyTimeline, TimelineEntry  # noqa: E402
from messiertonight.renderers.plotly_timeline import render_plotly_timeline  # noqa: E402
from messiertonight.renderers.text import (  # noqa: E402
    EMPTY_HOUR,
    NO_DARKNESS,
    NO_DARKNESS_DETAIL,
    TOO_SHORT,
)

logging.basicConfig(level=os.environ.get("MESSIERTONIGHT_LOG_LEVEL", "INFO").upper())

st.set_page_config(
    page_title="Messier Tonight",
    page_icon="✦",
    layout="wide",
)

# --- Dark theme CSS ---
st.markdown(
    """
    <style>
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #050a1a !important;
        color: #e8e8e8;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] { display: none !important; }
    .type-header {
        color: #94a3b8; font-weight: bold;
        border-bottom: 1px solid #334155; margin: 10px 0 5px 0;
    }
    .messier-details { color: #94a3b8; font-size: 0.85rem; }
    .warning { color: #ff9999; }
    </style>
    """,
    unsafe_allow_html=True,
)

_cache = JsonFileCache()

# --- Session state initialization ---
if "location" not in st.session_state:
    st.session_state.location = load_last_location(_cache)
if "status" not in st.session_state:
    st.session_state.status = ""
if "locating" not in st.session_state:
    st.session_state.locating = False


@st.cache_data(show_spinner=False)
def _thumbnail(messier_id: str) -> str | None:
    return fetch_thumbnail_url(messier_id, _cache)


def _render_hour(entry: TimelineEntry, tz: datetime.tzinfo) -> None:
    label = f"{entry.instant.astimezone(tz).strftime('%H:%M')} — {entry.count} Objects"
    with st.expander(label):
        if not entry.groups:
            st.markdown(f"<p class='messier-details'>{EMPTY_HOUR}</p>", unsafe_allow_html=True)
            return
        for group in entry.groups:
            st.markdown(
                f"<div class='type-header'>{group.object_type} ({len(group.records)})</div>",
                unsafe_allow_html=True,
            )
            cols = st.columns(4)
            for i, record in enumerate(group.records):
                obj = record.object
                with cols[i % 4]:
                    thumb = _thumbnail(obj.messier_id)
                    if thumb:
                        st.image(thumb, width=96)
                    st.markdown(
                        f"**[{obj.messier_id}]({wikipedia_url(obj.messier_id)})** {obj.name}<br>"
                        f"<span class='messier-details'>Alt: {record.altitude_deg:.1f}° · "
                        f"Mag: {obj.magnitude} · {obj.constellation}</span>",
                        unsafe_allow_html=True,
                    )


def _render_timeline(timeline: NightlyTimeline) -> None:
    tz = local_timezone(timeline.location)
    window = timeline.window
    st.markdown(f"**Date:** {timeline.day.isoformat()} · **Location:** {timeline.location.label}")
    if window.dusk is None or window.dawn is None:
        st.markdown(f"**Twilight:** {NO_DARKNESS}")
        st.markdown(f"<p class='warning'>{NO_DARKNESS_DETAIL}</p>", unsafe_allow_html=True)
    else:
        dusk = window.dusk.astimezone(tz).strftime("%H:%M")
        dawn = window.dawn.astimezone(tz).strftime("%H:%M")
        st.markdown(f"**Twilight:** {dusk} - {dawn}")

    if timeline.entries:
        st.plotly_chart(render_plotly_timeline(timeline), use_container_width=True)
    for entry in timeline.entries:
        _render_hour(entry, tz)
    if timeline.too_short:
        st.markdown(f"<p class='warning'>{TOO_SHORT}</p>", unsafe_allow_html=True)


st.title("✦ Messier Tonight")

# --- Location input ---
saved = st.session_state.location
col1, col2, col3 = st.columns([2, 2, 3])
with col1:
    lat_raw = st.text_input("Latitude", value=f"{saved.latitude:.4f}" if saved else "")
with col2:
    lon_raw = st.text_input("Longitude", value=f"{saved.longitude:.4f}" if saved else "")
with col3:
    city_raw = st.text_input("City (optional)", value=(saved.name or "") if saved else "")

col_a, col_b, col_c, col_d = st.columns([2, 2, 2, 3])
with col_a:
    today = observer_today(saved) if saved else datetime.date.today()
    day = st.date_input("Date", value=today)
with col_b:
    min_alt = st.slider("Minimum altitude (°)", 0, 60, 15)
    fallback = st.checkbox("Show 18:00-06:00 when there is no darkness", value=False)
with col_c:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    if st.button("Get my location", use_container_width=True):
        st.session_state.locating = True
        st.session_state.status = "Locating..."
with col_d:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    set_manual = st.button("Set location", use_container_width=True)

# --- Browser geolocation ---
# get_geolocation() returns None until the browser answers; the component
# triggers a rerun when it does.
if st.session_state.locating:
    position = get_geolocation()
    if position is not None:
        st.session_state.locating = False
        if "coords" in position:
            coords = position["coords"]
            location = resolve_location(coords["latitude"], coords["longitude"], lookup_name=True)
            save_last_location(_cache, location)
            st.session_state.location = location
            st.session_state.status = "Location found!"
        else:
            error = position.get("error", {})
            st.session_state.status = f"Unable to retrieve your location: {error.get('message', error)}"
        st.rerun()

# --- Manual entry ---
if set_manual:
    try:
        lat, lon = float(lat_raw), float(lon_raw)
    except ValueError:
        st.session_state.status = "Please enter valid latitude and longitude."
    else:
        try:
            location = resolve_location(lat, lon, name=city_raw.strip() or None)
        except InvalidLocation:
            st.session_state.status = "Coordinates out of range."
        else:
            save_last_location(_cache, location)
            st.session_state.location = location
            st.session_state.status = "Manual location set!"
    st.rerun()

if st.session_state.status:
    st.caption(st.session_state.status)

# --- Timeline ---
if st.session_state.location is not None:
    with st.spinner("Computing tonight's sky..."):
        timeline = build_nightly_timeline(
            day, st.session_state.location, threshold_deg=float(min_alt), fallback=fallback
        )
    _render_timeline(timeline)
else:
    st.markdown(
        "<div style='color:#334466; font-size:1.2rem;'>"
        "Share your location or enter coordinates to see tonight's Messier objects</div>",
        unsafe_allow_html=True,
    )
