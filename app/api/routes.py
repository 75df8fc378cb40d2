"""
FastAPI routes for report detail caching, invalidation and counters.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.clients import UpstreamReportError, UpstreamUnavailableError
from app.dependencies import (
    get_report_api_client,
    get_report_detail_service,
)
from app.schemas import InvalidateCacheRequest, InvalidateCacheResponse

router = APIRouter()
logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}
_REPORT_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"


def _error(status: int, error: str, details: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/reports/by-seq")
async def get_report_by_seq(
    service: Annotated[Any, Depends(get_report_detail_service)],
    seq: str | None = Query(default=None, description="Report sequence number."),
) -> JSONResponse:
    """Return one report with its analyses, served through the report cache."""
    if not seq:
        return _error(HTTPStatus.BAD_REQUEST, "Missing seq parameter")
    try:
        seq_number = int(seq)
    except ValueError:
        return _error(HTTPStatus.BAD_REQUEST, "Invalid seq parameter")

    try:
        data = await service.get_report(seq_number)
    except UpstreamUnavailableError as exc:
        logger.error("Error fetching report %s: %s", seq_number, exc)
        status = (
            HTTPStatus.GATEWAY_TIMEOUT
            if exc.status_code == HTTPStatus.GATEWAY_TIMEOUT
            else HTTPStatus.INTERNAL_SERVER_ERROR
        )
        return _error(status, "Internal server error", exc.detail)
    except UpstreamReportError as exc:
        return _error(exc.status_code, "Failed to fetch report", exc.detail)

    headers = {"Cache-Control": _REPORT_CACHE_CONTROL, **_CORS_HEADERS}
    return JSONResponse(content=data, headers=headers)


@router.post("/reports/invalidate-cache", response_model=InvalidateCacheResponse)
async def invalidate_report_cache(
    request: Request,
    service: Annotated[Any, Depends(get_report_detail_service)],
) -> Any:
    """Evict one (``seq``) or many (``seqs``) cached reports."""
    try:
        body = await request.json()
    except ValueError:
        return _error(HTTPStatus.BAD_REQUEST, "Request body must be valid JSON")
    if not isinstance(body, dict):
        return _error(HTTPStatus.BAD_REQUEST, "Request body must be a JSON object")

    try:
        payload = InvalidateCacheRequest.model_validate(body)
    except ValidationError:
        return _error(
            HTTPStatus.BAD_REQUEST,
            "Provide exactly one of 'seq' or 'seqs' in the request body",
        )

    if payload.seqs is not None:
        count = service.invalidate_many(payload.seqs)
        message = f"Invalidated {count} cache entries"
    else:
        deleted = service.invalidate(payload.seq)
        count = int(deleted)
        outcome = "invalidated" if deleted else "not found"
        message = f"Cache entry for seq {payload.seq} {outcome}"

    logger.info(message)
    return InvalidateCacheResponse(success=True, message=message, invalidated=count)


@router.get("/reports-count")
async def get_reports_count(
    client: Annotated[Any, Depends(get_report_api_client)],
) -> JSONResponse:
    """Proxy the upstream report counter."""
    try:
        data = await client.get_reports_count()
    except UpstreamReportError as exc:
        logger.warning("Reports count API error: %s", exc)
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to fetch reports count", exc.detail
        )
    return JSONResponse(content=data, headers=_CORS_HEADERS)


__all__ = ["router"]
