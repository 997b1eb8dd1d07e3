"""Plain-text timeline renderer for terminals and logs."""

from datetime import datetime, tzinfo

from messiertonight.compute import local_timezone
from messiertonight.models import NightlyTimeline, TimelineEntry

NO_DARKNESS = "No astronomical dark window tonight (Latitude too high/season)."
NO_DARKNESS_DETAIL = "No true darkness tonight. Objects may be washed out."
TOO_SHORT = "Night is too short for hourly intervals."
EMPTY_HOUR = "No Messier objects high enough."


def _clock(instant: datetime, tz: tzinfo) -> str:
    return instant.astimezone(tz).strftime("%H:%M")


def _render_entry(entry: TimelineEntry, tz: tzinfo) -> list[str]:
    lines = [f"{_clock(entry.instant, tz)} — {entry.count} Objects"]
    if not entry.groups:
        lines.append(f"  {EMPTY_HOUR}")
        return lines
    for group in entry.groups:
        lines.append(f"  {group.object_type} ({len(group.records)})")
        for record in group.records:
            obj = record.object
            lines.append(
                f"    {obj.messier_id:<5} Alt: {record.altitude_deg:5.1f}°"
                f"  Mag: {obj.magnitude:<4}  {obj.constellation}"
            )
    return lines


def render_text_timeline(timeline: NightlyTimeline) -> str:
    """Render a NightlyTimeline as a multi-line string.

    Times are shown in the location's timezone (UTC when unknown).

    Args:
        timeline: Fully computed timeline.

    Returns:
        Text with a header, the twilight line or a warning, and one block per hour.
    """
    tz = local_timezone(timeline.location)
    window = timeline.window
    lines = [
        f"Date: {timeline.day.isoformat()}",
        f"Location: {timeline.location.label}",
    ]
    if window.dusk is None or window.dawn is None:
        lines.append(f"Twilight: {NO_DARKNESS}")
        lines.append(NO_DARKNESS_DETAIL)
    else:
        lines.append(f"Twilight: {_clock(window.dusk, tz)} - {_clock(window.dawn, tz)}")
    lines.append(f"Minimum altitude: {timeline.threshold_deg:g}°")
    lines.append("")

    for entry in timeline.entries:
        lines.extend(_render_entry(entry, tz))
        lines.append("")

    if not timeline.entries and not timeline.no_darkness:
        lines.append(TOO_SHORT)
    return "\n".join(lines).rstrip() + "\n"
