"""Strategy interfaces shared by the defense extraction chains.

Each chain is an ordered list of strategy objects. A strategy raises
``LocatorNotFound`` (or ``ExtractionEmpty`` for pair extractors) when it
cannot do its job. The ``try_*`` wrappers turn that, or any other error the
strategy raises, into a ``None``/``[]``/``False`` result so the engine can
move on to the next strategy.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, List, NamedTuple, Optional

from bs4 import BeautifulSoup, Comment, Tag
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from propdefense.models.enums import Position
from propdefense.normalization.stats import PAGE_STAT_LABEL_PATTERN

# "Shots on Goal 25th"
STAT_RANK_RE = re.compile(
    rf"(?<![A-Za-z])({PAGE_STAT_LABEL_PATTERN})\s+(\d{{1,3}}(?:st|nd|rd|th))\b",
    re.IGNORECASE,
)
# Looser card form: "SOG: 25", "Hits 27 rank"
CARD_STAT_RANK_RE = re.compile(
    rf"(?<![A-Za-z])({PAGE_STAT_LABEL_PATTERN})[\s:]+(\d{{1,3}}(?:st|nd|rd|th)?)(?![\d.%])",
    re.IGNORECASE,
)

_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_NON_TEXT_TAGS = {"script", "style", "noscript", "template"}


class ExtractionError(Exception):
    """Base exception for defense extraction failures."""

    pass


class LocatorNotFound(ExtractionError):
    """A single strategy could not find what it was looking for."""

    pass


class ExtractionEmpty(ExtractionError):
    """No (statistic, rank) pairs could be read."""

    pass


class StatRank(NamedTuple):
    label: str
    rank_text: str


def _hides(node: Tag) -> bool:
    if node.has_attr("hidden") or node.get("aria-hidden") == "true":
        return True
    return bool(_HIDDEN_STYLE_RE.search(node.get("style") or ""))


def is_hidden(tag: Tag) -> bool:
    """True when the element or one of its ancestors is hidden by markup."""
    node: Optional[Tag] = tag
    while node is not None and not isinstance(node, BeautifulSoup):
        if _hides(node):
            return True
        node = node.parent
    return False


def element_text(element: Any) -> str:
    """Text of a parsed element, skipping hidden descendants, whitespace collapsed."""
    if element is None:
        return ""
    parts: List[str] = []
    for text in element.find_all(string=True):
        if isinstance(text, Comment) or text.parent.name in _NON_TEXT_TAGS:
            continue
        node = text.parent
        hidden = False
        # Only descendants are checked; the element's own visibility is the caller's concern
        while node is not None and node is not element:
            if _hides(node):
                hidden = True
                break
            node = node.parent
        if not hidden:
            parts.append(str(text))
    return _WHITESPACE_RE.sub(" ", " ".join(parts)).strip()


class FilterActivator(ABC):
    """Activates one position filter on the live page."""

    name: str = "filter"

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms

    @abstractmethod
    async def activate(self, page: Page, position: Position) -> None:
        """Clicks or selects the filter; raises LocatorNotFound on failure."""
        pass

    async def try_activate(self, page: Page, position: Position, log=logger) -> bool:
        try:
            await self.activate(page, position)
        except LocatorNotFound as e:
            log.debug(f"{self.name}: {position.value} filter not activated ({e})")
            return False
        except PlaywrightError as e:
            log.debug(f"{self.name}: {position.value} filter interaction failed: {e}")
            return False
        except Exception as e:
            log.debug(f"{self.name}: {position.value} filter raised {type(e).__name__}: {e}")
            return False
        log.debug(f"{self.name}: activated {position.value} filter")
        return True


class ContainerLocator(ABC):
    """Finds the ranking container inside a parsed page snapshot."""

    name: str = "container"

    @abstractmethod
    def locate(self, soup: BeautifulSoup) -> Tag:
        pass

    def try_locate(self, soup: BeautifulSoup, log=logger) -> Optional[Tag]:
        try:
            container = self.locate(soup)
        except LocatorNotFound as e:
            log.debug(f"{self.name}: {e}")
            return None
        except Exception as e:
            log.debug(f"{self.name}: locator raised {type(e).__name__}: {e}")
            return None
        log.debug(f"{self.name}: located <{container.name}> container")
        return container


class PairExtractor(ABC):
    """Reads (statistic, rank) pairs out of a located container."""

    name: str = "pairs"

    @abstractmethod
    def extract(self, container: Tag) -> List[StatRank]:
        pass

    def try_extract(self, container: Tag, log=logger) -> List[StatRank]:
        try:
            pairs = self.extract(container)
        except ExtractionEmpty as e:
            log.debug(f"{self.name}: {e}")
            return []
        except Exception as e:
            log.debug(f"{self.name}: extractor raised {type(e).__name__}: {e}")
            return []
        log.debug(f"{self.name}: read {len(pairs)} pairs")
        return pairs
