import re
from typing import List, Optional

from bs4 import Tag

from propdefense.extraction.base import (
    CARD_STAT_RANK_RE,
    STAT_RANK_RE,
    ExtractionEmpty,
    PairExtractor,
    StatRank,
    element_text,
    is_hidden,
)
from propdefense.normalization.ranks import has_ordinal_suffix, rank_value

_HAS_LETTER_RE = re.compile(r"[A-Za-z]")
_CARD_TAGS = ["div", "span", "p", "li"]


def _rank_cell(cells: List[Tag]) -> Optional[str]:
    """Prefers a cell reading like "25th" over a bare number."""
    texts = [element_text(cell) for cell in cells]
    for text in texts:
        if has_ordinal_suffix(text) and rank_value(text) is not None:
            return text
    for text in texts:
        if rank_value(text) is not None:
            return text
    return None


class TableRowExtractor(PairExtractor):
    """Label in the first cell, rank in a later cell of the same row."""

    name = "table-rows"

    def extract(self, container: Tag) -> List[StatRank]:
        tables = [container] if container.name == "table" else container.find_all("table")
        pairs: List[StatRank] = []
        for table in tables:
            for row in table.find_all("tr"):
                if is_hidden(row):
                    continue
                cells = row.find_all(["td", "th"])
                if len(cells) < 2:
                    continue
                label = element_text(cells[0])
                if not _HAS_LETTER_RE.search(label):
                    continue
                rank_text = _rank_cell(cells[1:])
                if rank_text is None:
                    continue
                pairs.append(StatRank(label, rank_text))
        if not pairs:
            raise ExtractionEmpty(f"{len(tables)} tables, no ranked rows")
        return pairs


class TextPatternExtractor(PairExtractor):
    """Regex over the container's flattened text, e.g. "Hits 27th"."""

    name = "text-pattern"

    def extract(self, container: Tag) -> List[StatRank]:
        text = element_text(container)
        pairs = [
            StatRank(match.group(1), match.group(2))
            for match in STAT_RANK_RE.finditer(text)
        ]
        if not pairs:
            raise ExtractionEmpty("no 'label rank' pattern in container text")
        return pairs


class CardScanExtractor(PairExtractor):
    """Scans card and grid children, accepting bare numbers as ranks."""

    name = "card-scan"

    def extract(self, container: Tag) -> List[StatRank]:
        pairs: List[StatRank] = []
        seen = set()
        for element in container.find_all(_CARD_TAGS):
            if is_hidden(element):
                continue
            for match in CARD_STAT_RANK_RE.finditer(element_text(element)):
                pair = StatRank(match.group(1), match.group(2))
                key = (pair.label.lower(), pair.rank_text.lower())
                if key not in seen:
                    seen.add(key)
                    pairs.append(pair)
        if not pairs:
            raise ExtractionEmpty("no card elements with statistic ranks")
        return pairs


def default_pair_chain() -> List[PairExtractor]:
    return [TableRowExtractor(), TextPatternExtractor(), CardScanExtractor()]
