from typing import Iterable, List, Optional, Sequence, Set, Tuple

from bs4 import BeautifulSoup
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from propdefense.config.settings import AppSettings, settings
from propdefense.extraction.base import (
    ContainerLocator,
    ExtractionEmpty,
    ExtractionError,
    FilterActivator,
    LocatorNotFound,
    PairExtractor,
    StatRank,
)
from propdefense.extraction.containers import default_container_chain
from propdefense.extraction.extractors import default_pair_chain
from propdefense.extraction.filters import default_filter_chain
from propdefense.models.defense import DefenseRecord
from propdefense.models.enums import Position
from propdefense.normalization.ranks import is_weak_rank, normalize_rank
from propdefense.normalization.stats import canon_stat
from propdefense.normalization.teams import canon_team


class DefenseExtractor:
    """Reads weak defensive rankings off one team's matchup page.

    The page is scoped to the team whose players are being looked at; the
    rankings on it belong to the opposing (defending) team. For every position
    filter the extractor walks three strategy chains in order:

    1. filter activators (visible text, role/attribute, native select)
    2. container locators (active panel, heading, block scan)
    3. pair extractors (table rows, text pattern, card scan)

    Only ranks inside the weak band are kept. When no position produced
    anything, one unfiltered pass is made as a last resort. Failures never
    propagate; an empty list is a valid result.
    """

    def __init__(
        self,
        filters: Optional[Sequence[FilterActivator]] = None,
        locators: Optional[Sequence[ContainerLocator]] = None,
        extractors: Optional[Sequence[PairExtractor]] = None,
        positions: Iterable[Position] = tuple(Position),
        app_settings: Optional[AppSettings] = None,
        log=None,
    ):
        self.settings = app_settings or settings
        self.filters = (
            list(filters)
            if filters is not None
            else default_filter_chain(self.settings.locator_timeout_ms)
        )
        self.locators = list(locators) if locators is not None else default_container_chain()
        self.extractors = list(extractors) if extractors is not None else default_pair_chain()
        self.positions = list(positions)
        self.log = log or logger.bind(component="defense-extractor")

    async def extract(
        self,
        page: Page,
        team: str,
        opponent: str,
        game_time: Optional[str] = None,
    ) -> List[DefenseRecord]:
        """Extracts DefenseRecords for ``opponent``'s defense as faced by ``team``."""
        facing = canon_team(team)
        defending = canon_team(opponent)
        if not facing or not defending or facing == defending:
            self.log.error(
                f"Cannot extract defense for matchup '{team}' vs '{opponent}'"
            )
            return []

        records: List[DefenseRecord] = []
        for position in self.positions:
            try:
                found = await self._extract_position(
                    page, position, defending, facing, game_time
                )
            except PlaywrightError as e:
                self.log.warning(f"Skipping {position.value}: page interaction failed: {e}")
                continue
            except Exception as e:
                self.log.warning(f"Skipping {position.value}: unexpected error: {e}")
                continue
            self.log.debug(f"{position.value}: {len(found)} weak rankings")
            records.extend(found)

        if not records:
            self.log.info(
                f"No position-filtered rankings for {defending}, trying one unfiltered pass"
            )
            try:
                pairs = await self._poll_pairs(page, attempts=1)
                records = self._build_records(pairs, defending, facing, None, game_time)
            except ExtractionError as e:
                self.log.info(f"Unfiltered pass found nothing: {e}")
            except PlaywrightError as e:
                self.log.warning(f"Unfiltered pass failed: {e}")
            except Exception as e:
                self.log.warning(f"Unfiltered pass hit an unexpected error: {e}")

        self.log.info(
            f"Extracted {len(records)} weak defensive rankings for {defending} (facing {facing})"
        )
        return records

    async def _extract_position(
        self,
        page: Page,
        position: Position,
        defending: str,
        facing: str,
        game_time: Optional[str],
    ) -> List[DefenseRecord]:
        for activator in self.filters:
            if await activator.try_activate(page, position, self.log):
                break
        else:
            self.log.warning(f"No strategy could activate the {position.value} filter, skipping")
            return []

        await page.wait_for_timeout(self.settings.filter_settle_ms)
        try:
            pairs = await self._poll_pairs(page, attempts=self.settings.container_poll_attempts)
        except ExtractionError as e:
            self.log.warning(f"Skipping {position.value}: {e}")
            return []
        return self._build_records(pairs, defending, facing, position, game_time)

    async def _poll_pairs(self, page: Page, attempts: int) -> List[StatRank]:
        pairs: List[StatRank] = []
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self.settings.container_poll_interval_s),
            retry=retry_if_exception_type((LocatorNotFound, ExtractionEmpty)),
            reraise=True,
        ):
            with attempt:
                pairs = await self._read_pairs(page)
        return pairs

    async def _read_pairs(self, page: Page) -> List[StatRank]:
        await page.wait_for_timeout(self.settings.content_settle_ms)
        soup = BeautifulSoup(await page.content(), "html.parser")

        located = []
        for locator in self.locators:
            container = locator.try_locate(soup, self.log)
            if container is None:
                continue
            located.append(container.name)
            # An empty container hands over to the next locator
            for extractor in self.extractors:
                pairs = extractor.try_extract(container, self.log)
                if pairs:
                    return pairs

        if not located:
            raise LocatorNotFound("no strategy located the ranking container")
        raise ExtractionEmpty(
            f"located containers {located} held no statistic ranks"
        )

    def _build_records(
        self,
        pairs: List[StatRank],
        defending: str,
        facing: str,
        position: Optional[Position],
        game_time: Optional[str],
    ) -> List[DefenseRecord]:
        records: List[DefenseRecord] = []
        seen: Set[Tuple[str, str]] = set()
        for pair in pairs:
            rank = normalize_rank(pair.rank_text)
            if not is_weak_rank(
                rank, self.settings.weak_rank_min, self.settings.weak_rank_max
            ):
                self.log.trace(f"Discarding {pair.label} {rank}: outside weak band")
                continue
            label = canon_stat(pair.label)
            if (label, rank) in seen:
                continue
            seen.add((label, rank))
            try:
                records.append(
                    DefenseRecord(
                        team=defending,
                        opponent=facing,
                        stat_category=label,
                        rank=rank,
                        position=position,
                        game_time=game_time,
                    )
                )
            except ValidationError as e:
                self.log.debug(f"Dropping {label} {rank}: {e}")
        return records
