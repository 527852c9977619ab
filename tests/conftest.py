import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pytest
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from propdefense.config.settings import AppSettings
from propdefense.models.defense import DefenseRecord
from propdefense.models.prop import PropRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeLocator:
    """Just enough of a Playwright Locator for the filter activators."""

    def __init__(self, page: "FakePage", via: str, matches: List[str]):
        self.page = page
        self.via = via
        self.matches = matches

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.via, self.matches[:1])

    async def count(self) -> int:
        return len(self.matches)

    async def scroll_into_view_if_needed(self, timeout: Optional[float] = None) -> None:
        if not self.matches:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def click(self, timeout: Optional[float] = None) -> None:
        if not self.matches:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        self.page.activate(self.via, self.matches[0])


class FakeOptions:
    def __init__(self, options: List[str]):
        self.options = options

    async def all_text_contents(self) -> List[str]:
        return list(self.options)


class FakeSelect:
    def __init__(self, page: "FakePage", options: List[str]):
        self.page = page
        self.options = options

    def locator(self, selector: str) -> FakeOptions:
        assert selector == "option"
        return FakeOptions(self.options)

    async def select_option(self, index: int, timeout: Optional[float] = None) -> List[str]:
        self.page.activate("select", self.options[index])
        return [self.options[index]]


class FakeSelectList:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def count(self) -> int:
        return len(self.page.selects)

    def nth(self, index: int) -> FakeSelect:
        return FakeSelect(self.page, self.page.selects[index])


class FakePage:
    """Async page double: serves HTML snapshots and records filter activations.

    ``panels`` maps an activated label (upper-cased) to the HTML the page shows
    afterwards; activating an unknown label leaves the snapshot unchanged.
    """

    _ATTRIBUTE_SELECTOR = re.compile(r'^\[([\w-]+)="([^"]+)" i\]$')

    def __init__(
        self,
        html: str,
        clickable_text: Iterable[str] = (),
        roles: Optional[Dict[str, List[str]]] = None,
        attributes: Iterable[Tuple[str, str]] = (),
        selects: Sequence[Sequence[str]] = (),
        panels: Optional[Dict[str, str]] = None,
    ):
        self.html = html
        self.clickable_text = list(clickable_text)
        self.roles = roles or {}
        self.attributes: Set[Tuple[str, str]] = {(a, v.upper()) for a, v in attributes}
        self.selects = [list(options) for options in selects]
        self.panels = panels or {}
        self.activations: List[Tuple[str, str]] = []
        self.waits: List[float] = []
        self.content_calls = 0

    def activate(self, via: str, label: str) -> None:
        self.activations.append((via, label))
        self.html = self.panels.get(label.upper(), self.html)

    def get_by_text(self, pattern: "re.Pattern[str]") -> FakeLocator:
        return FakeLocator(self, "text", [t for t in self.clickable_text if pattern.search(t)])

    def get_by_role(self, role: str, name: Optional["re.Pattern[str]"] = None) -> FakeLocator:
        names = self.roles.get(role, [])
        return FakeLocator(
            self, f"role:{role}", [n for n in names if name is None or name.search(n)]
        )

    def locator(self, selector: str):
        if selector == "select":
            return FakeSelectList(self)
        match = self._ATTRIBUTE_SELECTOR.match(selector)
        if match and (match.group(1), match.group(2).upper()) in self.attributes:
            return FakeLocator(self, f"attr:{match.group(1)}", [match.group(2)])
        return FakeLocator(self, "css", [])

    async def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)

    async def content(self) -> str:
        self.content_calls += 1
        return self.html


class BrokenPage(FakePage):
    """A page whose browser went away mid-run."""

    async def content(self) -> str:
        self.content_calls += 1
        raise PlaywrightError("Target page, context or browser has been closed")


@pytest.fixture
def load_html() -> Callable[[str], str]:
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def fast_settings() -> AppSettings:
    """Settings with every wait collapsed so strategy chains run instantly."""
    return AppSettings(
        locator_timeout_ms=10,
        filter_settle_ms=0,
        content_settle_ms=0,
        container_poll_attempts=2,
        container_poll_interval_s=0,
    )


@pytest.fixture
def log_messages():
    """Collects loguru output at DEBUG and above for assertions."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def make_prop() -> Callable[..., PropRecord]:
    def _make(**overrides) -> PropRecord:
        fields = {
            "player": "David Pastrnak",
            "team": "BOS",
            "opponent": "TOR",
            "stat_category": "SOG",
            "line": 2.5,
            "source_id": "pp-1",
        }
        fields.update(overrides)
        return PropRecord(**fields)

    return _make


@pytest.fixture
def make_defense() -> Callable[..., DefenseRecord]:
    def _make(**overrides) -> DefenseRecord:
        fields = {
            "team": "TOR",
            "opponent": "BOS",
            "stat_category": "Shots on Goal",
            "rank": "25th",
        }
        fields.update(overrides)
        return DefenseRecord(**fields)

    return _make
