import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from propdefense.config.settings import settings
from propdefense.models.enums import Position, PropSource
from propdefense.models.prop import PropRecord
from propdefense.normalization.stats import PAGE_STAT_LABEL_PATTERN, is_allowed_stat
from propdefense.normalization.teams import canon_team, find_team_codes, is_known_team

_PLAYER_TYPES = {"new_player", "player"}
_TEAM_TYPES = {"new_team", "team"}
_GAME_TYPES = {"new_game", "game"}
_LEAGUE_TYPES = {"new_league", "league", "sport"}
_PROJECTION_TYPES = {"new_projection", "projection"}

_CARD_STAT_RE = re.compile(
    rf"(?<![A-Za-z])({PAGE_STAT_LABEL_PATTERN}|Fantasy Score)(?![A-Za-z])", re.IGNORECASE
)
_NAME_RE = re.compile(r"(?<![\w'])([A-Z][a-z][A-Za-z'.-]*(?:\s+[A-Z][a-z][A-Za-z'.-]*){1,2})")
_VS_RE = re.compile(r"(?:\bvs\.?|\bversus\b|\bv\.|@)\s*([A-Za-z]{2,4})\b", re.IGNORECASE)
_POSITION_RE = re.compile(
    r"\b(LW|RW|C|D|G|Left Wing|Right Wing|Center|Defenseman|Defense|Goalie|Goaltender)\b"
)
_TIME_RES = [
    re.compile(r"\b(\d{4}-\d{2}-\d{2}[T\s]\d{2}:\d{2}(?::\d{2})?)"),
    re.compile(r"\b(\d{1,2}:\d{2}\s*(?:AM|PM))", re.IGNORECASE),
    re.compile(r"\b(\d{1,2}:\d{2})\b"),
    re.compile(r"\b(\d{1,2}\s*(?:AM|PM))\b", re.IGNORECASE),
]
_NUMBER = r"(\d{1,3}(?:\.\d+)?)"
_TIME_FRAGMENT_RE = re.compile(r"\d{1,2}:\d{2}")

# Capitalized words on a card that are never part of a player's name
_NAME_STOPWORDS = {
    "Shots", "Goal", "Goals", "Faceoffs", "Face", "Off", "Wins", "Won", "Lost",
    "Hits", "Points", "Pts", "Assists", "Blocked", "Blocks", "Allowed", "Goalie",
    "Saves", "Time", "Ice", "Fantasy", "Score", "Left", "Right", "Wing", "Center",
    "Defense", "Defenseman", "Goaltender", "Higher", "Lower", "More", "Less",
    "Over", "Under", "Today", "Tomorrow", "Final", "Live",
}

_POSITION_NAMES = {
    "LEFT WING": Position.LEFT_WING,
    "RIGHT WING": Position.RIGHT_WING,
    "CENTER": Position.CENTER,
    "DEFENSEMAN": Position.DEFENSE,
    "DEFENSE": Position.DEFENSE,
    "GOALIE": Position.GOALTENDER,
    "GOALTENDER": Position.GOALTENDER,
}


class NormalizationError(Exception):
    """Custom exception for prop normalization errors."""

    pass


class PropNormalizer:
    """Turns raw prop source payloads into PropRecords.

    Teams are canonicalized here; statistic labels are kept the way the source
    displays them so the join can resolve them against the defense labels.
    """

    def __init__(self, league_id: Optional[str] = None):
        self.league_id = league_id or settings.prizepicks_league_id

    # --- PrizePicks -------------------------------------------------------

    def normalize_prizepicks(self, payload: Dict[str, Any]) -> List[PropRecord]:
        """Builds PropRecords from a PrizePicks JSON:API projections payload.

        Args:
            payload: The decoded response body with ``data`` (projections)
                and ``included`` (players, teams, games, leagues).

        Returns:
            NHL props in one of the allowed statistic categories, in payload
            order. Malformed projections are skipped.
        """
        if not isinstance(payload, dict):
            raise NormalizationError(f"Expected a JSON object, got {type(payload).__name__}")
        projections = payload.get("data")
        if not isinstance(projections, list):
            logger.warning("PrizePicks payload has no 'data' list, nothing to normalize.")
            return []

        players, teams, games, leagues = self._index_included(payload.get("included") or [])
        logger.debug(
            f"PrizePicks payload: {len(projections)} projections, {len(players)} players, "
            f"{len(teams)} teams, {len(games)} games"
        )

        props: List[PropRecord] = []
        skipped = 0
        for projection in projections:
            if not isinstance(projection, dict) or projection.get("type") not in _PROJECTION_TYPES:
                skipped += 1
                continue
            try:
                prop = self._prizepicks_prop(projection, players, teams, games, leagues)
            except (ValidationError, ValueError, TypeError) as e:
                logger.debug(f"Skipping PrizePicks projection {projection.get('id')}: {e}")
                prop = None
            if prop is None:
                skipped += 1
                continue
            props.append(prop)

        logger.info(
            f"Normalized {len(props)} PrizePicks NHL props ({skipped} projections skipped)."
        )
        return props

    def _index_included(
        self, included: Iterable[Any]
    ) -> Tuple[Dict[str, Dict], Dict[str, str], Dict[str, Dict], Dict[str, bool]]:
        players: Dict[str, Dict] = {}
        teams: Dict[str, str] = {}
        games: Dict[str, Dict] = {}
        leagues: Dict[str, bool] = {}
        for item in included:
            if not isinstance(item, dict):
                continue
            item_id = str(item.get("id", ""))
            item_type = item.get("type")
            attrs = item.get("attributes") or {}
            if item_type in _PLAYER_TYPES:
                players[item_id] = {
                    "name": attrs.get("name") or attrs.get("display_name") or attrs.get("full_name") or "",
                    "team": attrs.get("team") or attrs.get("team_abbreviation") or "",
                    "position": attrs.get("position") or "",
                }
            elif item_type in _TEAM_TYPES:
                teams[item_id] = attrs.get("abbreviation") or attrs.get("name") or ""
            elif item_type in _GAME_TYPES:
                games[item_id] = item
            elif item_type in _LEAGUE_TYPES:
                name = str(attrs.get("name") or attrs.get("display_name") or "").upper()
                leagues[item_id] = (
                    name == "NHL"
                    or "HOCKEY" in name
                    or item_id == self.league_id
                    or str(attrs.get("league_id", "")) == self.league_id
                )
        return players, teams, games, leagues

    def _prizepicks_prop(
        self,
        projection: Dict[str, Any],
        players: Dict[str, Dict],
        teams: Dict[str, str],
        games: Dict[str, Dict],
        leagues: Dict[str, bool],
    ) -> Optional[PropRecord]:
        attrs = projection.get("attributes") or {}
        relationships = projection.get("relationships") or {}

        if not self._is_nhl(attrs, relationships, leagues):
            return None

        stat = str(attrs.get("stat_type") or attrs.get("stat_display_name") or attrs.get("stat") or "").strip()
        if not is_allowed_stat(stat):
            logger.trace(f"PrizePicks stat '{stat}' not tracked")
            return None

        line = float(
            attrs.get("line")
            or attrs.get("line_score")
            or attrs.get("over_under")
            or attrs.get("flash_sale_line_score")
            or 0
        )

        player = players.get(_related_id(relationships, "new_player", "player") or "")
        if not player or not player["name"]:
            return None
        team = canon_team(player["team"])
        if not is_known_team(team):
            return None

        opponent = self._prizepicks_opponent(team, attrs, relationships, teams, games)
        if opponent and not is_known_team(opponent):
            # e.g. an NBA team leaking into the board
            return None

        return PropRecord(
            player=player["name"].strip(),
            team=team,
            opponent=opponent or None,
            stat_category=stat,
            line=line,
            source_id=str(projection.get("id", "")),
            source=PropSource.PRIZEPICKS,
            position=_position_code(player["position"]),
            game_time=attrs.get("start_time") or attrs.get("board_time") or None,
            projection_id=str(projection.get("id", "")) or None,
        )

    def _is_nhl(
        self, attrs: Dict[str, Any], relationships: Dict[str, Any], leagues: Dict[str, bool]
    ) -> bool:
        league_id = _related_id(relationships, "league", "new_league", "sport")
        if league_id:
            if leagues.get(league_id) or league_id == self.league_id:
                return True
        league = str(attrs.get("league") or attrs.get("sport") or attrs.get("league_id") or "")
        return league == self.league_id or league.upper() == "NHL"

    def _prizepicks_opponent(
        self,
        team: str,
        attrs: Dict[str, Any],
        relationships: Dict[str, Any],
        teams: Dict[str, str],
        games: Dict[str, Dict],
    ) -> str:
        opponent_id = _related_id(relationships, "opponent_team", "opponent")
        if opponent_id and teams.get(opponent_id):
            return canon_team(teams[opponent_id])

        raw = attrs.get("opponent") or attrs.get("opponent_team")
        if raw:
            return canon_team(raw)

        game = games.get(_related_id(relationships, "game", "new_game") or "")
        if not game:
            return ""
        game_attrs = game.get("attributes") or {}
        game_rels = game.get("relationships") or {}
        home_id = _related_id(game_rels, "home_team", "home_team_data")
        away_id = _related_id(game_rels, "away_team", "away_team_data")
        home = canon_team(teams.get(home_id or "") or game_attrs.get("home_team") or game_attrs.get("home_team_abbreviation"))
        away = canon_team(teams.get(away_id or "") or game_attrs.get("away_team") or game_attrs.get("away_team_abbreviation"))

        if home and away:
            return away if team == home else home if team == away else ""
        if home and home != team:
            return home
        if away and away != team:
            return away
        return ""

    # --- Underdog ---------------------------------------------------------

    def normalize_underdog_cards(self, cards: Iterable[str]) -> List[PropRecord]:
        """Parses rendered Underdog pick-card text into PropRecords.

        A card reads roughly "Connor McDavid EDM - C vs CGY 7:00 PM 1.5 Points".
        Cards missing a player, a known team, a tracked stat or a positive
        line are skipped. Duplicate (player, team, stat, line) cards collapse
        into the first one.
        """
        props: List[PropRecord] = []
        seen = set()
        skipped = 0
        for index, text in enumerate(cards):
            try:
                prop = self._underdog_prop(str(text or ""), index)
            except (ValidationError, ValueError) as e:
                logger.debug(f"Skipping Underdog card {index}: {e}")
                prop = None
            if prop is None:
                skipped += 1
                continue
            key = (prop.player, prop.team, prop.stat_category.lower(), round(prop.line, 2))
            if key in seen:
                continue
            seen.add(key)
            props.append(prop)

        logger.info(f"Normalized {len(props)} Underdog props ({skipped} cards skipped).")
        return props

    def _underdog_prop(self, text: str, index: int) -> Optional[PropRecord]:
        text = " ".join(text.split())
        if not text:
            return None

        stat_match = _CARD_STAT_RE.search(text)
        if not stat_match or not is_allowed_stat(stat_match.group(1)):
            return None
        stat = stat_match.group(1)

        player = _player_name(text)
        codes = find_team_codes(text)
        if not player or not codes:
            return None
        team = codes[0]

        line = _card_line(text, stat)
        if line is None or line <= 0:
            return None

        return PropRecord(
            player=player,
            team=team,
            opponent=_card_opponent(text, team, codes) or None,
            stat_category=stat,
            line=line,
            source_id=f"underdog-{index}",
            source=PropSource.UNDERDOG,
            position=_card_position(text),
            game_time=_card_time(text),
        )


def _related_id(relationships: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        related = relationships.get(key)
        if not isinstance(related, dict):
            continue
        data = related.get("data")
        if isinstance(data, dict) and data.get("id") is not None:
            return str(data["id"])
        if isinstance(data, (str, int)):
            return str(data)
    return None


def _position_code(raw: Any) -> Optional[str]:
    text = str(raw or "").strip().upper()
    if not text:
        return None
    if text in {position.value for position in Position}:
        return text
    position = _POSITION_NAMES.get(text)
    return position.value if position else None


def _player_name(text: str) -> Optional[str]:
    for match in _NAME_RE.finditer(text):
        words: List[str] = []
        for word in match.group(1).split():
            if word in _NAME_STOPWORDS:
                break
            words.append(word)
        if len(words) >= 2:
            return " ".join(words)
    return None


def _card_line(text: str, stat: str) -> Optional[float]:
    escaped = re.escape(stat)
    for pattern in (rf"{_NUMBER}\s+{escaped}", rf"{escaped}\s*:?\s*{_NUMBER}"):
        match = re.search(pattern, text)
        if match and not _TIME_FRAGMENT_RE.search(text[max(0, match.start() - 3):match.end()]):
            return float(match.group(1))
    decimal = re.search(r"(?<![\d:.])(\d{1,3}\.\d+)(?![\d:])", text)
    return float(decimal.group(1)) if decimal else None


def _card_opponent(text: str, team: str, codes: List[str]) -> str:
    for match in _VS_RE.finditer(text):
        candidate = canon_team(match.group(1))
        if candidate != team and is_known_team(candidate):
            return candidate
    for code in codes:
        if code != team:
            return code
    return ""


def _card_position(text: str) -> Optional[str]:
    match = _POSITION_RE.search(text)
    return _position_code(match.group(1)) if match else None


def _card_time(text: str) -> Optional[str]:
    for pattern in _TIME_RES:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None
