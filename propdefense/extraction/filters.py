import re
from typing import List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from propdefense.extraction.base import FilterActivator, LocatorNotFound
from propdefense.models.enums import Position


def _exact_label(text: str) -> "re.Pattern[str]":
    return re.compile(rf"^\s*{re.escape(text)}\s*$", re.IGNORECASE)


def _position_labels(position: Position) -> List[str]:
    return [position.value, position.long_name]


class TextFilterActivator(FilterActivator):
    """Clicks the first element whose visible text is exactly the position."""

    name = "text-filter"

    async def activate(self, page: Page, position: Position) -> None:
        for label in _position_labels(position):
            target = page.get_by_text(_exact_label(label)).first
            try:
                await target.scroll_into_view_if_needed(timeout=self.timeout_ms)
                await target.click(timeout=self.timeout_ms)
                return
            except PlaywrightError:
                continue
        raise LocatorNotFound(f"no visible text control reading '{position.value}'")


class RoleFilterActivator(FilterActivator):
    """Looks the filter up by ARIA role, then by data/aria/value attributes."""

    name = "role-filter"
    roles = ("tab", "button", "option", "radio")
    attributes = ("data-position", "aria-label", "value")

    async def activate(self, page: Page, position: Position) -> None:
        for role in self.roles:
            for label in _position_labels(position):
                candidates = page.get_by_role(role, name=_exact_label(label))
                if await candidates.count() > 0:
                    await candidates.first.click(timeout=self.timeout_ms)
                    return

        for attribute in self.attributes:
            candidates = page.locator(f'[{attribute}="{position.value}" i]')
            if await candidates.count() > 0:
                await candidates.first.click(timeout=self.timeout_ms)
                return

        raise LocatorNotFound(f"no role or attribute match for '{position.value}'")


class SelectFilterActivator(FilterActivator):
    """Picks the position from a native <select> element."""

    name = "select-filter"

    async def activate(self, page: Page, position: Position) -> None:
        wanted = {label.upper() for label in _position_labels(position)}
        selects = page.locator("select")
        for i in range(await selects.count()):
            select = selects.nth(i)
            options = await select.locator("option").all_text_contents()
            for index, text in enumerate(options):
                if text.strip().upper() in wanted:
                    await select.select_option(index=index, timeout=self.timeout_ms)
                    return
        raise LocatorNotFound(f"no <select> offers '{position.value}'")


def default_filter_chain(timeout_ms: int) -> List[FilterActivator]:
    return [
        TextFilterActivator(timeout_ms),
        RoleFilterActivator(timeout_ms),
        SelectFilterActivator(timeout_ms),
    ]
