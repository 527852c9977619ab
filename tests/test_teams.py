import pytest

from propdefense.models.enums import TeamCode
from propdefense.normalization.teams import (
    TEAM_ALIASES,
    canon_team,
    find_team_codes,
    is_known_team,
)


class TestCanonTeam:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("TOR", "TOR"),
            ("tor", "TOR"),
            ("  Toronto Maple Leafs ", "TOR"),
            ("Maple Leafs", "TOR"),
            ("LA", "LAK"),
            ("TB", "TBL"),
            ("NJ", "NJD"),
            ("SJ", "SJS"),
            ("VEG", "VGK"),
            ("WAS", "WSH"),
            ("St. Louis Blues", "STL"),
            ("ARI", "UTA"),
            ("PHX", "UTA"),
            ("ATL", "WPG"),
            ("Montréal Canadiens", "MTL"),
        ],
    )
    def test_aliases(self, raw, expected):
        assert canon_team(raw) == expected

    def test_every_alias_maps_to_a_current_code(self):
        codes = {code.value for code in TeamCode}
        assert set(TEAM_ALIASES.values()) <= codes
        assert codes <= set(TEAM_ALIASES.values())

    def test_miss_returns_trimmed_uppercase(self):
        assert canon_team("  Houston Rockets ") == "HOUSTON ROCKETS"
        assert canon_team("hou") == "HOU"

    @pytest.mark.parametrize("raw", [None, "", "   ", 42, TeamCode.BOS, "xyz", "Bruins"])
    def test_total_and_idempotent(self, raw):
        once = canon_team(raw)
        assert isinstance(once, str)
        assert canon_team(once) == once

    def test_enum_input(self):
        assert canon_team(TeamCode.VGK) == "VGK"

    def test_known_team(self):
        assert is_known_team("bos")
        assert is_known_team("Golden Knights")
        assert not is_known_team("HOU")
        assert not is_known_team(None)


class TestFindTeamCodes:
    def test_codes_in_order_of_appearance(self):
        assert find_team_codes("Connor McDavid EDM - C vs CGY 7:00 PM") == ["EDM", "CGY"]

    def test_at_sign_without_spaces(self):
        assert find_team_codes("TOR@BOS") == ["TOR", "BOS"]

    def test_duplicates_and_unknown_tokens_are_skipped(self):
        assert find_team_codes("SOG 2.5 TOR TOR PM XYZ") == ["TOR"]

    def test_ambiguous_words_ignored_in_free_text(self):
        assert find_team_codes("WIN MON CAL") == []

    def test_empty(self):
        assert find_team_codes(None) == []
        assert find_team_codes("") == []
