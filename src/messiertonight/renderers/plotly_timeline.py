"""Plotly interactive overview of the night.

One stacked bar per hour, one color per object type.
"""

import plotly.graph_objects as go

from messiertonight.compute import local_timezone
from messiertonight.models import NightlyTimeline

_BG = "#050a1a"
_TEXT_COLOR = "#aaaaaa"
_GRID_COLOR = "#1c2840"


def render_plotly_timeline(timeline: NightlyTimeline) -> go.Figure:
    """Render visible-object counts per hour as a stacked bar chart.

    Args:
        timeline: Fully computed timeline.

    Returns:
        Plotly Figure object. Has no traces when the timeline is empty.
    """
    tz = local_timezone(timeline.location)
    hours = [e.instant.astimezone(tz).strftime("%H:%M") for e in timeline.entries]
    type_names = sorted({g.object_type for e in timeline.entries for g in e.groups})

    traces = []
    for name in type_names:
        counts = []
        for entry in timeline.entries:
            group = next((g for g in entry.groups if g.object_type == name), None)
            counts.append(len(group.records) if group else 0)
        traces.append(
            go.Bar(
                x=hours,
                y=counts,
                name=name,
                hovertemplate="%{x} — %{y} " + name + "<extra></extra>",
            )
        )

    fig = go.Figure(data=traces)
    fig.update_layout(
        barmode="stack",
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        font=dict(color=_TEXT_COLOR),
        margin=dict(l=40, r=10, t=40, b=40),
        title=dict(text=f"Messier objects above {timeline.threshold_deg:g}°"),
        legend=dict(orientation="h", yanchor="bottom", y=-0.35),
        xaxis=dict(title="Local time", type="category", gridcolor=_GRID_COLOR),
        yaxis=dict(title="Objects", gridcolor=_GRID_COLOR, rangemode="tozero"),
    )
    return fig
