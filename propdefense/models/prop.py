from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from propdefense.models.enums import NA_RANK, MatchTier, PropSource
from propdefense.normalization.ranks import is_valid_rank, normalize_rank
from propdefense.normalization.teams import canon_team


class PropRecord(BaseModel):
    """A single player prop offer as scraped from a prop source."""

    model_config = ConfigDict(frozen=True)  # Make instances immutable

    player: str
    team: str
    opponent: Optional[str] = None
    stat_category: str  # Label as the source displays it, e.g. "SOG"
    line: float = Field(..., gt=0)
    source_id: str = Field(..., description="Identifier of the offer at its source.")
    source: PropSource = PropSource.UNKNOWN
    position: Optional[str] = None
    game_time: Optional[str] = None
    projection_id: Optional[str] = None

    @model_validator(mode="after")
    def distinct_teams(self) -> "PropRecord":
        if self.opponent and canon_team(self.team) == canon_team(self.opponent):
            raise ValueError(f"player '{self.player}' listed against own team '{self.team}'")
        return self


class MergedRecord(PropRecord):
    """A prop annotated with the opposing defense's rank, or "NA"."""

    defense_rank: str = NA_RANK
    match_tier: MatchTier = MatchTier.NONE

    @field_validator("defense_rank")
    @classmethod
    def rank_or_sentinel(cls, value: str) -> str:
        if value == NA_RANK:
            return value
        normalized = normalize_rank(value)
        if not is_valid_rank(normalized, scale_max=32):
            raise ValueError(f"defense rank '{value}' does not decode into 1..32")
        return normalized

    @classmethod
    def from_prop(
        cls, prop: PropRecord, defense_rank: str, match_tier: MatchTier
    ) -> "MergedRecord":
        return cls(**prop.model_dump(), defense_rank=defense_rank, match_tier=match_tier)
