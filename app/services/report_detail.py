"""
Cached per-report detail lookups and the invalidation entry points used when
the upstream pipeline edits or reprocesses a report.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Protocol

from app.services.report_cache import SingleFlightCache, report_cache_key


class ReportDetailSource(Protocol):
    async def get_report_by_seq(self, seq: int) -> Dict[str, Any]: ...


class ReportDetailService:
    """Serve report details through the shared single-flight cache."""

    def __init__(
        self,
        client: ReportDetailSource,
        cache: SingleFlightCache[Dict[str, Any]],
    ) -> None:
        self._client = client
        self._cache = cache

    async def get_report(self, seq: int) -> Dict[str, Any]:
        return await self._cache.fetch_or_join(
            report_cache_key(seq), lambda: self._client.get_report_by_seq(seq)
        )

    def invalidate(self, seq: int) -> bool:
        return self._cache.invalidate(report_cache_key(seq))

    def invalidate_many(self, seqs: Iterable[int]) -> int:
        return self._cache.invalidate_many(report_cache_key(seq) for seq in seqs)


__all__ = ["ReportDetailService", "ReportDetailSource"]
