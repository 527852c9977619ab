from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from propdefense.config.settings import settings
from propdefense.models.enums import PropSource
from propdefense.scrapers.base_scraper import BaseScraper, ScraperError


class PrizePicksScraper(BaseScraper):
    """Fetches the public PrizePicks projections board."""

    source: PropSource = PropSource.PRIZEPICKS

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_url: Optional[str] = None,
        league_id: Optional[str] = None,
    ):
        super().__init__(client)
        self.api_url = api_url or settings.prizepicks_api_url
        self.league_id = league_id or settings.prizepicks_league_id
        if settings.prizepicks_cookie:
            self.client.headers.update({"Cookie": settings.prizepicks_cookie})
            logger.info("PrizePicksScraper initialized with cookie header.")

    def candidate_params(self) -> List[Optional[Dict[str, str]]]:
        """Query variants tried in order; the unfiltered board comes last."""
        return [{"league_id": self.league_id}, {"league": "NHL"}, None]

    async def fetch_props(self) -> Dict[str, Any]:
        """Returns the first projections payload any query variant yields."""
        last_error: Optional[Exception] = None
        for params in self.candidate_params():
            try:
                response = await self._make_request(method="GET", url=self.api_url, params=params)
                payload = response.json()
            except (ScraperError, httpx.HTTPError) as e:
                logger.warning(f"PrizePicks request with params {params} failed: {e}")
                last_error = e
                continue
            except ValueError as e:
                logger.warning(f"PrizePicks returned non-JSON body for params {params}: {e}")
                last_error = e
                continue

            if isinstance(payload, dict) and isinstance(payload.get("data"), list):
                logger.info(
                    f"Fetched {len(payload['data'])} PrizePicks projections (params {params})"
                )
                return payload
            logger.warning(f"PrizePicks payload for params {params} has no 'data' list")

        raise ScraperError("No PrizePicks projections endpoint variant succeeded") from last_error
