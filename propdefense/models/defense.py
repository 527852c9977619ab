from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from propdefense.models.enums import Position
from propdefense.normalization.ranks import is_valid_rank, normalize_rank
from propdefense.normalization.teams import canon_team


class DefenseRecord(BaseModel):
    """A weak defensive ranking observed on the matchup page.

    ``team`` is the defending team the rank belongs to, ``opponent`` the team
    whose players face that defense.
    """

    model_config = ConfigDict(frozen=True)  # Make instances immutable

    team: str = Field(..., description="Canonical code of the defending team.")
    opponent: str = Field(..., description="Canonical code of the team facing it.")
    stat_category: str = Field(..., description="Canonical statistic label.")
    rank: str = Field(..., description="Ordinal rank, e.g. '25th'.")
    position: Optional[Position] = None  # None for the unfiltered pass
    game_time: Optional[str] = None

    @field_validator("rank")
    @classmethod
    def rank_on_scale(cls, value: str) -> str:
        normalized = normalize_rank(value)
        # Records are built against the fixed 32-team scale
        if not is_valid_rank(normalized, scale_max=32):
            raise ValueError(f"rank '{value}' does not decode into 1..32")
        return normalized

    @model_validator(mode="after")
    def distinct_teams(self) -> "DefenseRecord":
        if canon_team(self.team) == canon_team(self.opponent):
            raise ValueError(f"team and opponent are both '{self.team}'")
        return self
