"""Async client for the upstream CleanApp report API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

import httpx
from pydantic import ValidationError

from app.core.config import ReportApiSettings
from app.schemas import Classification, ReportsResponse, ReportWithAnalysis
from app.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)

_JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class UpstreamReportError(RuntimeError):
    """Raised when the report API fails, times out or cannot be reached."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class UpstreamUnavailableError(UpstreamReportError):
    """Raised when the report API timed out or could not be reached."""


class ReportApiClient:
    """Fetch reports, report details and counters from the upstream API."""

    def __init__(
        self,
        settings: ReportApiSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._timeout = httpx.Timeout(settings.timeout_seconds)

    async def get_report_by_seq(self, seq: int) -> Dict[str, Any]:
        """Return the raw report-with-analyses payload for ``seq``."""
        url = f"{self._settings.live_api_url}/api/v4/reports/by-seq"
        return await self._get_json(url, params={"seq": seq})

    async def get_last_reports(
        self,
        *,
        classification: Classification,
        n: int = 10,
        lang: str = "en",
        full_data: bool = False,
    ) -> list[ReportWithAnalysis]:
        """Return the ``n`` latest reports of one classification."""
        url = f"{self._settings.live_api_url}/api/v3/reports/last"
        params = {
            "n": n,
            "lang": lang,
            "full_data": "true" if full_data else "false",
            "classification": classification,
        }
        payload = await self._get_json(url, params=params)
        try:
            return ReportsResponse.model_validate(payload).reports
        except ValidationError as exc:
            raise UpstreamReportError(
                502, f"Malformed {classification} reports payload"
            ) from exc

    async def get_reports_count(self) -> Dict[str, Any]:
        """Return the raw counter payload published upstream."""
        payload = await self._get_json(
            self._settings.report_count_url,
            retry_config=RetryConfig(attempts=self._settings.retry_attempts),
        )
        if not isinstance(payload.get("total_reports"), int):
            raise UpstreamReportError(502, "Invalid response format from API")
        return payload

    async def _get_json(
        self,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        retry_config: RetryConfig | None = None,
    ) -> Dict[str, Any]:
        try:
            # httpx timeouts apply per phase; this bounds the whole exchange.
            response = await asyncio.wait_for(
                self._request(url, params=params, retry_config=retry_config),
                timeout=self._settings.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Report API exceeded %.1fs deadline for %s",
                self._settings.timeout_seconds,
                url,
            )
            raise UpstreamUnavailableError(504, "Upstream request timed out") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Report API returned %s for %s", status, url)
            raise UpstreamReportError(status, f"API returned {status}") from exc
        except httpx.TimeoutException as exc:
            logger.warning("Report API timed out for %s", url)
            raise UpstreamUnavailableError(504, "Upstream request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Report API unreachable for %s: %s", url, exc)
            raise UpstreamUnavailableError(
                502, str(exc) or "Upstream request failed"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamReportError(502, "Upstream returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise UpstreamReportError(502, "Invalid response format from API")
        return payload

    async def _request(
        self,
        url: str,
        *,
        params: Dict[str, Any] | None,
        retry_config: RetryConfig | None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            return await request_with_retry(
                client.get,
                url,
                params=params,
                headers=_JSON_HEADERS,
                retry_config=retry_config,
            )


__all__ = ["ReportApiClient", "UpstreamReportError", "UpstreamUnavailableError"]
