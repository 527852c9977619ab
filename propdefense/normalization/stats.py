"""Statistic label canonicalization and alias groups.

Two tables live here:

* ``STAT_ALIASES`` backs ``canon_stat`` and maps a label onto one of the nine
  ``StatCategory`` values.
* ``STAT_ALIAS_GROUPS`` is the looser grouping the join uses in its alias
  tiers. It also knows categories that are not props (time on ice, faceoffs
  lost) so that a defense label like "Faceoffs" can still be placed.
"""

import re
from typing import Any, Dict, List, Tuple

from loguru import logger

from propdefense.models.enums import StatCategory

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# Key: normalize_label(alias), Value: canonical category label
STAT_ALIASES: Dict[str, str] = {
    # Shots on goal
    "shots on goal": StatCategory.SHOTS_ON_GOAL.value,
    "shot on goal": StatCategory.SHOTS_ON_GOAL.value,
    "shots": StatCategory.SHOTS_ON_GOAL.value,
    "sog": StatCategory.SHOTS_ON_GOAL.value,
    "player shots on goal": StatCategory.SHOTS_ON_GOAL.value,
    # Faceoffs won
    "faceoffs won": StatCategory.FACEOFFS_WON.value,
    "faceoff wins": StatCategory.FACEOFFS_WON.value,
    "face off wins": StatCategory.FACEOFFS_WON.value,
    "face offs won": StatCategory.FACEOFFS_WON.value,
    "faceoffs": StatCategory.FACEOFFS_WON.value,
    "fow": StatCategory.FACEOFFS_WON.value,
    # Hits
    "hits": StatCategory.HITS.value,
    "hit": StatCategory.HITS.value,
    # Points
    "points": StatCategory.POINTS.value,
    "point": StatCategory.POINTS.value,
    "pts": StatCategory.POINTS.value,
    # Goals
    "goals": StatCategory.GOALS.value,
    "goal": StatCategory.GOALS.value,
    # Assists
    "assists": StatCategory.ASSISTS.value,
    "assist": StatCategory.ASSISTS.value,
    "asts": StatCategory.ASSISTS.value,
    "ast": StatCategory.ASSISTS.value,
    # Blocked shots
    "blocked shots": StatCategory.BLOCKED_SHOTS.value,
    "blocked shot": StatCategory.BLOCKED_SHOTS.value,
    "blocks": StatCategory.BLOCKED_SHOTS.value,
    "blk": StatCategory.BLOCKED_SHOTS.value,
    "bs": StatCategory.BLOCKED_SHOTS.value,
    # Goals allowed
    "goals allowed": StatCategory.GOALS_ALLOWED.value,
    "goals against": StatCategory.GOALS_ALLOWED.value,
    "ga": StatCategory.GOALS_ALLOWED.value,
    # Goalie saves
    "goalie saves": StatCategory.GOALIE_SAVES.value,
    "saves": StatCategory.GOALIE_SAVES.value,
    "save": StatCategory.GOALIE_SAVES.value,
    "sv": StatCategory.GOALIE_SAVES.value,
}

# Ordered: earlier groups win when a label fits more than one
STAT_ALIAS_GROUPS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("points", ("pts", "point", "points")),
    ("goals", ("goal", "goals")),
    ("assists", ("asts", "assist", "assists")),
    ("shots on goal", ("sog", "shots", "shot", "shots on goal", "shot on goal")),
    ("hits", ("hit", "hits")),
    ("blocked shots", ("blocks", "blocked", "blocked shots", "block")),
    ("time on ice", ("toi", "time", "time on ice")),
    ("faceoffs won", ("fow", "faceoff won", "faceoffs won", "face off won")),
    ("faceoffs lost", ("fol", "faceoff lost", "faceoffs lost", "face off lost")),
    ("faceoffs", ("fo", "faceoff", "faceoffs", "face off")),
    ("goals allowed", ("ga", "goals allowed", "goal allowed")),
    ("goalie saves", ("saves", "sv", "save", "goalie saves", "goalie save")),
)

# Labels recognized on the defense page, longest first so that
# "Shots on Goal" wins over "Shots" in an alternation
PAGE_STAT_LABELS: List[str] = sorted(
    [
        "Shots on Goal", "Shots", "SOG",
        "Faceoffs Won", "FOW", "Face Off Wins",
        "Hits",
        "Points", "Pts",
        "Goals Allowed", "GA",
        "Goals", "Assists",
        "Goalie Saves", "Saves", "SV",
        "Blocked Shots", "Blocks",
        "Time On Ice", "TOI",
        "Faceoffs Lost", "FOL",
        "Faceoffs", "FO",
    ],
    key=len,
    reverse=True,
)

PAGE_STAT_LABEL_PATTERN = "|".join(re.escape(label) for label in PAGE_STAT_LABELS)


def normalize_label(raw: Any) -> str:
    """Lower-cases, strips punctuation and collapses whitespace."""
    if raw is None:
        return ""
    text = _PUNCTUATION_RE.sub(" ", str(raw).lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def canon_stat(raw: Any) -> str:
    """Maps a statistic label onto its canonical category label.

    Total and idempotent: unknown labels come back trimmed and otherwise
    unchanged.
    """
    if isinstance(raw, StatCategory):
        return raw.value
    text = "" if raw is None else str(raw).strip()
    canonical = STAT_ALIASES.get(normalize_label(text))
    if canonical is not None:
        return canonical
    if text:
        logger.trace(f"Stat alias miss, passing through: '{text}'")
    return text


def is_allowed_stat(raw: Any) -> bool:
    """True when the label canonicalizes into one of the nine prop categories."""
    return canon_stat(raw) in {category.value for category in StatCategory}


def contains_phrase(haystack: str, needle: str) -> bool:
    """Whole-word containment on already normalized labels."""
    if not haystack or not needle:
        return False
    return re.search(rf"(?<!\w){re.escape(needle)}(?!\w)", haystack) is not None


def alias_groups_for(label: str) -> List[str]:
    """Group keys a normalized prop label resolves into, best fit first.

    Exact alias hits come before whole-word containment hits.
    """
    exact: List[str] = []
    loose: List[str] = []
    for key, aliases in STAT_ALIAS_GROUPS:
        if label == key or label in aliases:
            exact.append(key)
        elif any(
            contains_phrase(label, alias) or contains_phrase(alias, label)
            for alias in aliases
        ):
            loose.append(key)
    return exact + loose


def label_in_group(label: str, key: str) -> bool:
    """Whether a normalized defense label names the group ``key``."""
    aliases = _GROUP_LOOKUP.get(key, ())
    if label == key or label in aliases:
        return True
    return contains_phrase(label, key) or any(
        contains_phrase(label, alias) for alias in aliases if len(alias) > 2
    )


def groups_containing(label: str) -> List[str]:
    """Group keys whose key phrase contains the label or is contained by it."""
    return [
        key
        for key, _ in STAT_ALIAS_GROUPS
        if contains_phrase(key, label) or contains_phrase(label, key)
    ]


def label_matches_aliases(label: str, key: str) -> bool:
    aliases = _GROUP_LOOKUP.get(key, ())
    return any(
        label == alias or contains_phrase(label, alias) or contains_phrase(alias, label)
        for alias in aliases
    )


_GROUP_LOOKUP: Dict[str, Tuple[str, ...]] = dict(STAT_ALIAS_GROUPS)
