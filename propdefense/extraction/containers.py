import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from propdefense.extraction.base import (
    CARD_STAT_RANK_RE,
    ContainerLocator,
    LocatorNotFound,
    element_text,
    is_hidden,
)

_DEFENSE_TAB_RE = re.compile(r"^\s*defen[sc]e\s*$", re.IGNORECASE)
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "strong", "span", "div", "p", "label"]
_BLOCK_TAGS = ["section", "article", "div", "table", "ul"]


def _heading_matches(text: str) -> bool:
    text = text.lower()
    if "opponent" in text and ("positional" in text or "strength" in text or "rank" in text):
        return True
    return "positional strength" in text or "opponent rank" in text


def _pair_count(tag: Tag) -> int:
    return len(CARD_STAT_RANK_RE.findall(element_text(tag)))


class ActivePanelLocator(ContainerLocator):
    """The Defense tab's panel, else the first visible tab panel with ranks."""

    name = "active-panel"

    def locate(self, soup: BeautifulSoup) -> Tag:
        for tab in soup.find_all(["button", "a"]) + soup.find_all(attrs={"role": "tab"}):
            if not _DEFENSE_TAB_RE.match(element_text(tab)):
                continue
            panel_id = tab.get("aria-controls")
            panel = soup.find(id=panel_id) if panel_id else None
            if panel is None and tab.get("id"):
                panel = soup.find(attrs={"aria-labelledby": tab["id"]})
            if panel is not None and not is_hidden(panel) and _pair_count(panel) > 0:
                return panel

        for panel in soup.find_all(attrs={"role": "tabpanel"}):
            if not is_hidden(panel) and _pair_count(panel) > 0:
                return panel
        raise LocatorNotFound("no visible tab panel with statistic ranks")


class HeadingLocator(ContainerLocator):
    """Climbs from an "Opponent Positional Strength" style heading to its block."""

    name = "heading"
    max_depth = 5

    def locate(self, soup: BeautifulSoup) -> Tag:
        for heading in soup.find_all(_HEADING_TAGS):
            # Only the innermost element carrying the heading text
            own_text = " ".join(heading.find_all(string=True, recursive=False)).strip()
            if not own_text or not _heading_matches(own_text) or is_hidden(heading):
                continue
            parent = heading
            depth = 0
            while isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
                if depth >= self.max_depth:
                    break
                if _pair_count(parent) > 0:
                    return parent
                parent = parent.parent
                depth += 1
        raise LocatorNotFound("no positional strength heading with rankings nearby")


class BlockScanLocator(ContainerLocator):
    """Smallest visible block holding the most statistic/rank pairs."""

    name = "block-scan"
    min_pairs = 2

    def locate(self, soup: BeautifulSoup) -> Tag:
        best: Optional[Tag] = None
        best_count = 0
        best_size = 0
        for block in soup.find_all(_BLOCK_TAGS):
            if is_hidden(block):
                continue
            count = _pair_count(block)
            if count < self.min_pairs:
                continue
            size = len(element_text(block))
            if count > best_count or (count == best_count and size < best_size):
                best, best_count, best_size = block, count, size
        if best is None:
            raise LocatorNotFound(f"no block with {self.min_pairs}+ statistic ranks")
        return best


def default_container_chain() -> List[ContainerLocator]:
    return [ActivePanelLocator(), HeadingLocator(), BlockScanLocator()]
