from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from loguru import logger

from propdefense.models.prop import PropRecord
from propdefense.normalization.teams import canon_team


def build_matchup_map(games: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Team -> opponent map in both directions from (team_a, team_b) pairs."""
    matchups: Dict[str, str] = {}
    for team_a, team_b in games:
        a, b = canon_team(team_a), canon_team(team_b)
        if not a or not b or a == b:
            logger.debug(f"Ignoring unusable matchup '{team_a}' vs '{team_b}'")
            continue
        matchups[a] = b
        matchups[b] = a
    return matchups


def fill_missing_opponents(
    props: Sequence[PropRecord], matchups: Mapping[str, str]
) -> List[PropRecord]:
    """Fills absent opponents from a team -> opponent map.

    Props that already carry an opponent are returned untouched. Keys of
    ``matchups`` may be any team alias.
    """
    lookup = {canon_team(team): canon_team(opponent) for team, opponent in matchups.items()}
    filled: List[PropRecord] = []
    count = 0
    for prop in props:
        if prop.opponent:
            filled.append(prop)
            continue
        team = canon_team(prop.team)
        opponent = lookup.get(team)
        if opponent and opponent != team:
            filled.append(prop.model_copy(update={"opponent": opponent}))
            count += 1
        else:
            filled.append(prop)
    if count:
        logger.info(f"Filled {count} missing opponents from the schedule")
    return filled
