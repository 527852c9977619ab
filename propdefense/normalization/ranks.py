"""Ordinal rank parsing for defense-strength ranks ("1st" .. "32nd")."""

import re
from typing import Optional

from propdefense.config.settings import settings

# First integer in the text that is not part of a decimal value ("8.3" is an
# allowed-per-game figure, not a rank)
_RANK_NUMBER_RE = re.compile(r"(?<![\d.])(\d{1,3})(?!\d|[\d.]*\.\d)(?:\s*(st|nd|rd|th))?", re.I)
_SUFFIX_RE = re.compile(r"\d\s*(st|nd|rd|th)\b", re.I)


def ordinal_suffix(number: int) -> str:
    """English ordinal suffix; 11, 12 and 13 always take "th"."""
    if 11 <= number % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def rank_value(text: Optional[str]) -> Optional[int]:
    """Integer carried by a rank string, or None when it has no rank number."""
    if text is None:
        return None
    match = _RANK_NUMBER_RE.search(str(text))
    if not match:
        return None
    return int(match.group(1))


def has_ordinal_suffix(text: Optional[str]) -> bool:
    return bool(text) and bool(_SUFFIX_RE.search(str(text)))


def normalize_rank(text: Optional[str]) -> str:
    """Returns the rank as "<n><suffix>".

    "24" -> "24th", "21" -> "21st", "25TH" -> "25th". Text without a rank
    number comes back stripped and otherwise unchanged.
    """
    stripped = str(text or "").strip()
    number = rank_value(stripped)
    if number is None:
        return stripped
    return f"{number}{ordinal_suffix(number)}"


def is_valid_rank(text: Optional[str], scale_max: Optional[int] = None) -> bool:
    number = rank_value(text)
    top = scale_max if scale_max is not None else settings.rank_scale_max
    return number is not None and 1 <= number <= top


def is_weak_rank(
    text: Optional[str],
    low: Optional[int] = None,
    high: Optional[int] = None,
) -> bool:
    """True when the rank falls inside the weak-defense band (24th-32nd by default)."""
    number = rank_value(text)
    if number is None:
        return False
    low = settings.weak_rank_min if low is None else low
    high = settings.weak_rank_max if high is None else high
    return low <= number <= high
