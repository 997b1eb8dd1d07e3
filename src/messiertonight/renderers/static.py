"""Matplotlib static PNG renderer."""

from pathlib import Path

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from messiertonight.compute import local_timezone
from messiertonight.models import NightlyTimeline

_ROOT = Path(__file__).parent.parent.parent.parent


def _altitude_series(timeline: NightlyTimeline) -> dict[str, np.ndarray]:
    """Altitude per object at every hourly step, NaN where below the threshold."""
    n = len(timeline.entries)
    series: dict[str, np.ndarray] = {}
    for i, entry in enumerate(timeline.entries):
        for record in entry.records:
            alts = series.setdefault(record.object.messier_id, np.full(n, np.nan))
            alts[i] = record.altitude_deg
    return series


def render_static_chart(timeline: NightlyTimeline, top_n: int = 12) -> Figure:
    """Render altitude curves of the highest-culminating objects of the night.

    Args:
        timeline: Fully computed timeline.
        top_n: Number of objects to draw.

    Returns:
        matplotlib Figure object.
    """
    tz = local_timezone(timeline.location)
    fig, ax = plt.subplots(figsize=(10, 6))
    fig.patch.set_facecolor("black")
    ax.set_facecolor("black")

    series = _altitude_series(timeline)
    ranked = sorted(series, key=lambda mid: (-np.nanmax(series[mid]), mid))[:top_n]
    times = [e.instant for e in timeline.entries]
    for messier_id in ranked:
        ax.plot(times, series[messier_id], marker=".", linewidth=1, label=messier_id)

    ax.axhline(timeline.threshold_deg, color="#7ec8e3", linewidth=0.5, linestyle="--")
    ax.set_ylim(0, 90)
    ax.set_ylabel("Altitude (°)", color="white")
    ax.set_title(f"{timeline.location.label} — {timeline.day.isoformat()}", color="white")
    ax.tick_params(colors="white")
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M", tz=tz))
    if ranked:
        ax.legend(loc="upper right", fontsize="small", ncol=2, facecolor="black", labelcolor="white")

    return fig


def save_static_chart(timeline: NightlyTimeline, output_path: Path | None = None) -> Path:
    """Save a NightlyTimeline chart as a PNG file.

    Args:
        timeline: Fully computed timeline.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        loc = timeline.location
        place = loc.name or f"{loc.latitude:.2f}_{loc.longitude:.2f}"
        filename = f"{place}__{timeline.day.strftime('%Y_%m_%d')}.png".replace(" ", "_")
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_chart(timeline)
    fig.savefig(output_path, facecolor="black")
    plt.close(fig)
    return output_path
