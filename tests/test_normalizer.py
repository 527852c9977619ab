import pytest

from propdefense.models.enums import PropSource
from propdefense.normalization.normalizer import NormalizationError, PropNormalizer


def projection(projection_id, stat, line, player_id, league_id="7", **extra):
    attributes = {"stat_type": stat, "line_score": line}
    attributes.update(extra.pop("attributes", {}))
    relationships = {"new_player": {"data": {"type": "new_player", "id": player_id}}}
    if league_id:
        relationships["league"] = {"data": {"type": "league", "id": league_id}}
    relationships.update(extra.pop("relationships", {}))
    return {
        "type": "projection",
        "id": projection_id,
        "attributes": attributes,
        "relationships": relationships,
    }


@pytest.fixture
def prizepicks_payload():
    return {
        "data": [
            projection(
                "1001",
                "Shots On Goal",
                2.5,
                "p1",
                attributes={"start_time": "2024-01-10T19:00:00-05:00"},
                relationships={"game": {"data": {"type": "game", "id": "g1"}}},
            ),
            projection("1002", "Points", 24.5, "p9", league_id="3"),
            projection("1003", "Fantasy Score", 8.5, "p1"),
            projection("1004", "Hits", 1.5, "p2", attributes={"opponent": "LAL"}),
            projection("1005", "Goals", 0, "p2"),
            projection(
                "1006",
                "SOG",
                3.5,
                "p3",
                league_id=None,
                attributes={"league": "NHL"},
                relationships={"opponent_team": {"data": {"type": "team", "id": "t1"}}},
            ),
            {"type": "banner", "id": "x"},
        ],
        "included": [
            {"type": "new_player", "id": "p1", "attributes": {"name": "David Pastrnak", "team": "BOS", "position": "RW"}},
            {"type": "new_player", "id": "p2", "attributes": {"name": "Auston Matthews", "team": "TOR", "position": "C"}},
            {"type": "new_player", "id": "p3", "attributes": {"name": "Brad Marchand", "team": "Boston Bruins", "position": "Left Wing"}},
            {"type": "new_player", "id": "p9", "attributes": {"name": "LeBron James", "team": "LAL", "position": "F"}},
            {"type": "team", "id": "t1", "attributes": {"abbreviation": "TOR"}},
            {"type": "team", "id": "t2", "attributes": {"abbreviation": "BOS"}},
            {
                "type": "new_game",
                "id": "g1",
                "attributes": {},
                "relationships": {
                    "home_team": {"data": {"type": "team", "id": "t1"}},
                    "away_team": {"data": {"type": "team", "id": "t2"}},
                },
            },
            {"type": "league", "id": "7", "attributes": {"name": "NHL"}},
            {"type": "league", "id": "3", "attributes": {"name": "NBA"}},
        ],
    }


class TestPrizePicks:
    def test_keeps_nhl_props_in_tracked_stats(self, prizepicks_payload):
        props = PropNormalizer(league_id="7").normalize_prizepicks(prizepicks_payload)

        assert [p.source_id for p in props] == ["1001", "1006"]
        first, second = props
        assert first.player == "David Pastrnak"
        assert (first.team, first.opponent) == ("BOS", "TOR")
        assert first.stat_category == "Shots On Goal"
        assert first.line == 2.5
        assert first.position == "RW"
        assert first.game_time == "2024-01-10T19:00:00-05:00"
        assert first.projection_id == "1001"
        assert first.source is PropSource.PRIZEPICKS

        assert (second.player, second.team, second.opponent) == ("Brad Marchand", "BOS", "TOR")
        assert second.stat_category == "SOG"
        assert second.position == "LW"

    def test_payload_without_data(self):
        assert PropNormalizer().normalize_prizepicks({"errors": ["blocked"]}) == []

    def test_payload_must_be_an_object(self):
        with pytest.raises(NormalizationError):
            PropNormalizer().normalize_prizepicks([{"type": "projection"}])

    def test_missing_player_is_skipped(self):
        payload = {"data": [projection("1", "Hits", 1.5, "nobody")], "included": []}
        assert PropNormalizer(league_id="7").normalize_prizepicks(payload) == []


class TestUnderdog:
    def test_parses_card_text(self):
        props = PropNormalizer().normalize_underdog_cards(
            ["Connor McDavid EDM - C vs CGY 7:00 PM 1.5 Points Higher Lower"]
        )

        assert len(props) == 1
        prop = props[0]
        assert prop.player == "Connor McDavid"
        assert (prop.team, prop.opponent) == ("EDM", "CGY")
        assert prop.position == "C"
        assert prop.stat_category == "Points"
        assert prop.line == 1.5
        assert prop.game_time == "7:00 PM"
        assert prop.source is PropSource.UNDERDOG
        assert prop.source_id == "underdog-0"

    def test_at_sign_opponent(self):
        props = PropNormalizer().normalize_underdog_cards(
            ["Auston Matthews TOR @ MTL 3.5 Shots on Goal"]
        )
        assert (props[0].team, props[0].opponent, props[0].line) == ("TOR", "MTL", 3.5)
        assert props[0].stat_category == "Shots on Goal"

    def test_unusable_and_duplicate_cards(self):
        card = "Connor McDavid EDM - C vs CGY 7:00 PM 1.5 Points Higher Lower"
        props = PropNormalizer().normalize_underdog_cards(
            [
                card,
                "Pick 'em promo: boost your entry",
                "Connor McDavid EDM 1.5 Fantasy Score",
                "Some Player 2.5 Hits",
                "   ",
                card,
            ]
        )
        assert [p.source_id for p in props] == ["underdog-0"]
