"""Periodic poller for the upstream report counter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError

from app.clients.report_api import UpstreamReportError
from app.schemas import ReportCounts

logger = logging.getLogger(__name__)


class CounterSource(Protocol):
    async def get_reports_count(self) -> Dict[str, Any]: ...


class ReportCounterPoller:
    """Keep the latest report totals, refreshing them on a fixed interval.

    A failed refresh records the error but keeps the last known totals.
    """

    def __init__(self, source: CounterSource, *, interval_seconds: float = 30.0) -> None:
        self._source = source
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task[None]] = None
        self.counts = ReportCounts()
        self.is_loading = False
        self.error: Optional[str] = None

    async def refresh(self) -> ReportCounts:
        self.is_loading = True
        self.error = None
        try:
            payload = await self._source.get_reports_count()
            self.counts = ReportCounts.model_validate(payload)
        except (UpstreamReportError, ValidationError) as exc:
            self.error = str(exc) or "Failed to fetch report counts"
            logger.warning("Report counter refresh failed: %s", self.error)
        finally:
            self.is_loading = False
        return self.counts

    async def run(self) -> None:
        """Refresh forever, sleeping ``interval_seconds`` between refreshes."""
        while True:
            await self.refresh()
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()


__all__ = ["CounterSource", "ReportCounterPoller"]
