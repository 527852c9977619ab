"""Row shaping for the spreadsheet exporter.

The exporter owns sheets, tabs and upload; it only receives a header row
followed by value rows, all plain strings.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from propdefense.models.defense import DefenseRecord
from propdefense.models.enums import NA_RANK
from propdefense.models.prop import MergedRecord

PROP_HEADER = [
    "Player",
    "Team",
    "Opponent",
    "Position",
    "Stat",
    "Line",
    "Defense Strength",
    "Projection ID",
    "Game Time",
]
DEFENSE_HEADER = ["Team", "Opponent", "Game Time", "Position", "Rank"]

_CLOCK_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(AM|PM)?$", re.IGNORECASE)


def _parse_iso(value: str) -> Optional[datetime]:
    if "T" not in value and "-" not in value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _clock_minutes(value: str) -> Optional[int]:
    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2) or 0)
    meridiem = (match.group(3) or "").upper()
    if meridiem == "PM" and hour < 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def game_time_sort_key(game_time: Optional[str]) -> Tuple[int, float]:
    """Full timestamps first, then bare clock times, then unknown times."""
    value = (game_time or "").strip()
    parsed = _parse_iso(value) if value else None
    if parsed is not None:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return 0, parsed.timestamp()
    minutes = _clock_minutes(value) if value else None
    if minutes is not None:
        return 1, float(minutes)
    return 2, 0.0


def format_game_time(game_time: Optional[str]) -> str:
    """Renders timestamps as "7:00 PM"; other values pass through trimmed."""
    value = (game_time or "").strip()
    parsed = _parse_iso(value) if value else None
    if parsed is None:
        return value
    return parsed.strftime("%I:%M %p").lstrip("0")


def _format_line(line: float) -> str:
    return f"{line:g}"


def merged_prop_rows(merged: Sequence[MergedRecord]) -> List[List[str]]:
    """Header plus one row per merged prop, earliest games first."""
    ordered = sorted(merged, key=lambda m: (game_time_sort_key(m.game_time), m.player))
    rows = [list(PROP_HEADER)]
    for record in ordered:
        rows.append(
            [
                record.player,
                record.team,
                record.opponent or "",
                record.position or "",
                record.stat_category,
                _format_line(record.line),
                record.defense_rank or NA_RANK,
                record.projection_id or "",
                format_game_time(record.game_time),
            ]
        )
    return rows


def defense_rows(records: Sequence[DefenseRecord]) -> List[List[str]]:
    """Header plus one row per defense ranking, position prefixed to the stat."""
    ordered = sorted(records, key=lambda r: (game_time_sort_key(r.game_time), r.team))
    rows = [list(DEFENSE_HEADER)]
    for record in ordered:
        label = (
            f"{record.position.value} - {record.stat_category}"
            if record.position
            else record.stat_category
        )
        rows.append(
            [
                record.team,
                record.opponent,
                format_game_time(record.game_time),
                label,
                record.rank,
            ]
        )
    return rows
