from typing import Dict, List, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from propdefense.models.defense import DefenseRecord
from propdefense.models.enums import NA_RANK, MatchTier
from propdefense.models.prop import MergedRecord, PropRecord
from propdefense.normalization.stats import (
    alias_groups_for,
    groups_containing,
    label_in_group,
    label_matches_aliases,
    normalize_label,
)
from propdefense.normalization.teams import canon_team

# A defense candidate with its normalized stat label
Candidate = Tuple[DefenseRecord, str]


class JoinReport(BaseModel):
    """Counts gathered while joining props to defense rankings."""

    total: int = 0
    matched: int = 0
    without_opponent: int = 0
    by_tier: Dict[str, int] = Field(default_factory=dict)
    prop_opponents: List[str] = Field(default_factory=list)
    defense_teams: List[str] = Field(default_factory=list)

    @property
    def unmatched(self) -> int:
        return self.total - self.matched

    @property
    def overlapping_teams(self) -> List[str]:
        return sorted(set(self.prop_opponents) & set(self.defense_teams))


class DefenseJoiner:
    """Attaches the opposing defense's rank to each prop.

    Candidates are the defense records of the prop's opponent. Tiers are tried
    in order and the first tier with a candidate wins; within a tier the
    first candidate in defense list order is used:

    1. exact: normalized statistic labels are equal
    2. substring: either normalized label contains the other
    3. alias forward: the prop label's alias groups, in order, against each
       candidate label
    4. alias reverse: each candidate label's groups, with the prop label
       matched loosely against the group aliases

    Props without a known opponent, or with no match, get "NA".
    """

    def __init__(self, log=None):
        self.log = log or logger.bind(component="defense-joiner")

    def find_rank(
        self, prop: PropRecord, defense: Sequence[DefenseRecord]
    ) -> Tuple[str, MatchTier]:
        if not prop.opponent or not normalize_label(prop.stat_category):
            return NA_RANK, MatchTier.NONE

        candidates = self._candidates(prop, defense)
        if not candidates:
            return NA_RANK, MatchTier.NONE
        prop_label = normalize_label(prop.stat_category)

        for record, label in candidates:
            if label == prop_label:
                return record.rank, MatchTier.EXACT

        for record, label in candidates:
            if label and (prop_label in label or label in prop_label):
                return record.rank, MatchTier.SUBSTRING

        for key in alias_groups_for(prop_label):
            for record, label in candidates:
                if label_in_group(label, key):
                    return record.rank, MatchTier.ALIAS_FORWARD

        for record, label in candidates:
            for key in groups_containing(label):
                if label_matches_aliases(prop_label, key):
                    return record.rank, MatchTier.ALIAS_REVERSE

        return NA_RANK, MatchTier.NONE

    def join_with_report(
        self, props: Sequence[PropRecord], defense: Sequence[DefenseRecord]
    ) -> Tuple[List[MergedRecord], JoinReport]:
        """One MergedRecord per prop, in prop order, plus match counts."""
        report = JoinReport(
            total=len(props),
            defense_teams=sorted({canon_team(record.team) for record in defense}),
        )
        opponents = set()
        merged: List[MergedRecord] = []

        for prop in props:
            if prop.opponent:
                opponents.add(canon_team(prop.opponent))
            else:
                report.without_opponent += 1
            try:
                rank, tier = self.find_rank(prop, defense)
            except Exception as e:
                self.log.warning(f"Join failed for {prop.player} {prop.stat_category}: {e}")
                rank, tier = NA_RANK, MatchTier.NONE

            if tier is MatchTier.NONE:
                self.log.debug(
                    f"No defense rank for {prop.player} ({prop.team} vs {prop.opponent or '?'}) "
                    f"{prop.stat_category}"
                )
            else:
                report.matched += 1
                report.by_tier[tier.value] = report.by_tier.get(tier.value, 0) + 1
            merged.append(MergedRecord.from_prop(prop, rank, tier))

        report.prop_opponents = sorted(opponents)
        return merged, report

    def join(
        self, props: Sequence[PropRecord], defense: Sequence[DefenseRecord]
    ) -> List[MergedRecord]:
        merged, report = self.join_with_report(props, defense)
        self.log.info(
            f"Joined {report.total} props against {len(defense)} defense rankings: "
            f"{report.matched} matched, {report.unmatched} NA "
            f"({report.without_opponent} without opponent), tiers {report.by_tier}"
        )
        if report.total and not report.overlapping_teams:
            self.log.info(
                f"No overlap between prop opponents {report.prop_opponents} "
                f"and defense teams {report.defense_teams}"
            )
        return merged

    @staticmethod
    def _candidates(
        prop: PropRecord, defense: Sequence[DefenseRecord]
    ) -> List[Candidate]:
        opponent = canon_team(prop.opponent)
        candidates: List[Candidate] = []
        for record in defense:
            if canon_team(record.team) != opponent:
                continue
            candidates.append((record, normalize_label(record.stat_category)))
        return candidates


def merge_props_with_defense(
    props: Sequence[PropRecord],
    defense: Sequence[DefenseRecord],
    log=None,
) -> List[MergedRecord]:
    """Convenience wrapper around ``DefenseJoiner.join``."""
    return DefenseJoiner(log=log).join(props, defense)
