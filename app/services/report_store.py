"""
Client-side store holding the physical and digital report collections.

Each classification has its own collection, loading state and error, and the
two are fetched and settled independently: a slow or failing digital fetch
never blocks or clears physical results, and a failed refetch keeps the last
successfully loaded collection in place.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol

from app.clients.report_api import UpstreamReportError
from app.schemas import CLASSIFICATIONS, Classification, ReportWithAnalysis
from app.services.report_merge import merge_reports

logger = logging.getLogger(__name__)


class ReportSource(Protocol):
    async def get_last_reports(
        self,
        *,
        classification: Classification,
        n: int = 10,
        lang: str = "en",
        full_data: bool = False,
    ) -> List[ReportWithAnalysis]: ...


class CollectionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass
class CollectionState:
    """Reports of one classification plus their fetch status."""

    reports: List[ReportWithAnalysis] = field(default_factory=list)
    status: CollectionStatus = CollectionStatus.IDLE
    error: Optional[str] = None
    # Bumped on every fetch start; only the newest fetch may commit.
    generation: int = 0
    pending: int = 0


@dataclass(frozen=True)
class ReportStats:
    total: int
    physical: int
    digital: int


class ReportStore:
    """Fetch, merge and expose the physical and digital report collections."""

    # Digital reports need the full payload for brand projections; physical
    # reports are fetched lite to keep payloads small.
    _FULL_DATA: Dict[Classification, bool] = {"physical": False, "digital": True}

    def __init__(
        self,
        source: ReportSource,
        *,
        default_count: int = 10,
        language: str = "en",
    ) -> None:
        self._source = source
        self._default_count = default_count
        self.language = language
        self._collections: Dict[Classification, CollectionState] = {
            classification: CollectionState() for classification in CLASSIFICATIONS
        }
        self._current_pending = 0

    # Fetching

    async def fetch_all(self, n: int | None = None) -> None:
        """Refresh both classifications concurrently."""
        await asyncio.gather(self.fetch_physical(n), self.fetch_digital(n))

    async def fetch_physical(self, n: int | None = None) -> None:
        await self._fetch("physical", n)

    async def fetch_digital(self, n: int | None = None) -> None:
        await self._fetch("digital", n)

    async def fetch_current(self, tab: Classification, n: int | None = None) -> None:
        """Refresh the classification shown in the active tab."""
        self._current_pending += 1
        try:
            await self._fetch(tab, n)
        finally:
            self._current_pending -= 1

    async def _fetch(self, classification: Classification, n: int | None) -> None:
        state = self._collections[classification]
        state.generation += 1
        generation = state.generation
        state.pending += 1
        state.status = CollectionStatus.LOADING
        state.error = None
        try:
            reports = await self._source.get_last_reports(
                classification=classification,
                n=self._default_count if n is None else n,
                lang=self.language,
                full_data=self._FULL_DATA[classification],
            )
        except UpstreamReportError as exc:
            logger.warning("Error fetching %s reports: %s", classification, exc)
            if generation == state.generation:
                state.error = str(exc) or f"Failed to fetch {classification} reports"
                state.status = CollectionStatus.ERRORED
            return
        finally:
            state.pending -= 1

        if generation != state.generation:
            logger.debug("Discarding superseded %s fetch", classification)
            return
        state.reports = list(reports)
        state.status = CollectionStatus.LOADED
        logger.debug("Loaded %d %s reports", len(state.reports), classification)

    # Live updates

    def append_physical(self, reports: Iterable[ReportWithAnalysis]) -> None:
        self._append("physical", reports)

    def append_digital(self, reports: Iterable[ReportWithAnalysis]) -> None:
        self._append("digital", reports)

    def _append(
        self, classification: Classification, reports: Iterable[ReportWithAnalysis]
    ) -> None:
        state = self._collections[classification]
        state.reports = merge_reports(state.reports, list(reports))

    def set_physical(self, reports: Iterable[ReportWithAnalysis]) -> None:
        self._collections["physical"].reports = list(reports)

    def set_digital(self, reports: Iterable[ReportWithAnalysis]) -> None:
        self._collections["digital"].reports = list(reports)

    # Resetting

    def clear_physical(self) -> None:
        self._clear("physical")

    def clear_digital(self) -> None:
        self._clear("digital")

    def clear_all(self) -> None:
        for classification in CLASSIFICATIONS:
            self._clear(classification)

    def clear_errors(self) -> None:
        for state in self._collections.values():
            state.error = None

    def _clear(self, classification: Classification) -> None:
        state = self._collections[classification]
        state.reports = []
        state.error = None

    # Views; each access recomputes from the current collections.

    @property
    def physical(self) -> List[ReportWithAnalysis]:
        return list(self._collections["physical"].reports)

    @property
    def digital(self) -> List[ReportWithAnalysis]:
        return list(self._collections["digital"].reports)

    def reports_for(self, tab: Classification) -> List[ReportWithAnalysis]:
        return list(self._collections[tab].reports)

    def status(self, classification: Classification) -> CollectionStatus:
        return self._collections[classification].status

    @property
    def loading(self) -> Dict[str, bool]:
        return {
            "physical": self._collections["physical"].pending > 0,
            "digital": self._collections["digital"].pending > 0,
            "current": self._current_pending > 0,
        }

    @property
    def errors(self) -> Dict[str, Optional[str]]:
        return {
            classification: state.error
            for classification, state in self._collections.items()
        }

    def stats(self) -> ReportStats:
        physical = len(self._collections["physical"].reports)
        digital = len(self._collections["digital"].reports)
        return ReportStats(total=physical + digital, physical=physical, digital=digital)


__all__ = [
    "CollectionState",
    "CollectionStatus",
    "ReportSource",
    "ReportStats",
    "ReportStore",
]
