import pytest
from bs4 import BeautifulSoup

from propdefense.extraction.base import LocatorNotFound, element_text, is_hidden
from propdefense.extraction.containers import (
    ActivePanelLocator,
    BlockScanLocator,
    HeadingLocator,
    default_container_chain,
)


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestActivePanelLocator:
    def test_follows_defense_tab_aria_controls(self, load_html):
        container = ActivePanelLocator().locate(soup_of(load_html("panel_table.html")))
        assert container.get("id") == "defense-panel"

    def test_falls_back_to_visible_tabpanel(self, load_html):
        container = ActivePanelLocator().locate(soup_of(load_html("strong_defense.html")))
        assert container.get("role") == "tabpanel"

    def test_hidden_panels_are_skipped(self):
        html = '<div role="tabpanel" hidden><p>Hits 30th</p></div>'
        with pytest.raises(LocatorNotFound):
            ActivePanelLocator().locate(soup_of(html))

    def test_no_panel(self, load_html):
        assert ActivePanelLocator().try_locate(soup_of(load_html("heading_text.html"))) is None

    def test_panel_without_rankings_is_not_a_container(self, load_html):
        with pytest.raises(LocatorNotFound):
            ActivePanelLocator().locate(soup_of(load_html("game_log_panel.html")))


class TestHeadingLocator:
    def test_found_past_an_unrelated_tab_panel(self, load_html):
        container = HeadingLocator().locate(soup_of(load_html("game_log_panel.html")))
        assert container.name == "section"

    def test_climbs_to_block_with_rankings(self, load_html):
        container = HeadingLocator().locate(soup_of(load_html("heading_text.html")))
        assert container.name == "section"
        assert "Assists 30th" in element_text(container)

    def test_heading_without_rankings_nearby(self):
        html = "<div><h2>Opponent Positional Strength</h2><p>Coming soon</p></div>"
        with pytest.raises(LocatorNotFound):
            HeadingLocator().locate(soup_of(html))


class TestBlockScanLocator:
    def test_finds_block_with_most_pairs(self, load_html):
        container = BlockScanLocator().locate(soup_of(load_html("cards_only.html")))
        text = element_text(container)
        assert "SOG : 27" in text
        assert "Blocks" not in text

    def test_single_pair_is_not_enough(self):
        with pytest.raises(LocatorNotFound):
            BlockScanLocator().locate(soup_of("<div><span>Hits 30th</span></div>"))


class TestMarkupHelpers:
    def test_hidden_ancestors(self):
        soup = soup_of('<div style="display:none"><span id="x">Hits</span></div>')
        assert is_hidden(soup.find(id="x"))

    def test_text_skips_hidden_descendants_and_scripts(self):
        soup = soup_of(
            '<div id="root">Hits <b>30th</b><span aria-hidden="true">SOG 29th</span>'
            "<script>var x = 1;</script></div>"
        )
        assert element_text(soup.find(id="root")) == "Hits 30th"


def test_default_chain_order():
    assert [type(s) for s in default_container_chain()] == [
        ActivePanelLocator,
        HeadingLocator,
        BlockScanLocator,
    ]
