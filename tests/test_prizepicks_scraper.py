import httpx
import pytest
from tenacity import wait_none

from propdefense.scrapers import prizepicks_scraper
from propdefense.scrapers.base_scraper import AuthenticationError, BaseScraper, ScraperError
from propdefense.scrapers.prizepicks_scraper import PrizePicksScraper

API_URL = "https://api.example.test/projections"


def scraper_with(handler) -> PrizePicksScraper:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PrizePicksScraper(client=client, api_url=API_URL, league_id="7")


class TestPrizePicksScraper:
    def test_query_variants_in_order(self):
        scraper = PrizePicksScraper(client=httpx.AsyncClient(), api_url=API_URL, league_id="7")
        assert scraper.candidate_params() == [{"league_id": "7"}, {"league": "NHL"}, None]

    @pytest.mark.asyncio
    async def test_first_working_variant_wins(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            if request.url.params.get("league_id") == "7":
                return httpx.Response(404, json={"error": "not found"})
            return httpx.Response(200, json={"data": [{"id": "1"}], "included": []})

        scraper = scraper_with(handler)
        payload = await scraper.fetch_props()
        await scraper.close()

        assert payload["data"] == [{"id": "1"}]
        assert seen == [{"league_id": "7"}, {"league": "NHL"}]

    @pytest.mark.asyncio
    async def test_payload_without_data_tries_next_variant(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            if request.url.params:
                return httpx.Response(200, json={"meta": {}})
            return httpx.Response(200, json={"data": []})

        scraper = scraper_with(handler)
        payload = await scraper.fetch_props()

        assert payload == {"data": []}
        assert seen[-1] == {}

    @pytest.mark.asyncio
    async def test_all_variants_failing(self):
        scraper = scraper_with(lambda request: httpx.Response(404))
        with pytest.raises(ScraperError):
            await scraper.fetch_props()

    @pytest.mark.asyncio
    async def test_authentication_failure(self):
        scraper = scraper_with(lambda request: httpx.Response(403))
        with pytest.raises(AuthenticationError):
            await scraper._make_request("GET", API_URL)

    @pytest.mark.asyncio
    async def test_cookie_header_from_settings(self, monkeypatch):
        monkeypatch.setattr(prizepicks_scraper.settings, "prizepicks_cookie", "sid=abc")
        headers = []

        def handler(request: httpx.Request) -> httpx.Response:
            headers.append(request.headers.get("Cookie"))
            return httpx.Response(200, json={"data": []})

        scraper = scraper_with(handler)
        await scraper.fetch_props()

        assert headers == ["sid=abc"]


class TestRequestRetries:
    @pytest.fixture(autouse=True)
    def no_backoff(self, monkeypatch):
        monkeypatch.setattr(BaseScraper._make_request.retry, "wait", wait_none())

    @pytest.mark.asyncio
    async def test_exhausted_retries_reraise_the_last_error(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        scraper = scraper_with(handler)
        with pytest.raises(httpx.HTTPStatusError):
            await scraper._make_request("GET", API_URL)
        assert len(calls) == 4

    @pytest.mark.asyncio
    async def test_transient_network_error_is_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json={"data": []})

        scraper = scraper_with(handler)
        response = await scraper._make_request("GET", API_URL)

        assert response.json() == {"data": []}
        assert len(calls) == 2
