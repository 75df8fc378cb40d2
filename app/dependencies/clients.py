"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Any, Dict

from app.clients import ReportApiClient
from app.core.config import get_settings
from app.services import ReportDetailService, SingleFlightCache


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_report_api_client() -> ReportApiClient:
    """Provide the upstream report API client."""
    return ReportApiClient(_settings().report_api)


@lru_cache()
def get_report_cache() -> SingleFlightCache[Dict[str, Any]]:
    """Provide the process-wide report detail cache."""
    settings = _settings().cache
    return SingleFlightCache(
        capacity=settings.capacity,
        ttl_seconds=settings.ttl_seconds,
        eviction_fraction=settings.eviction_fraction,
    )


def get_report_detail_service() -> ReportDetailService:
    """Build a report detail service over the shared cache."""
    return ReportDetailService(
        client=get_report_api_client(),
        cache=get_report_cache(),
    )


__all__ = [
    "get_report_api_client",
    "get_report_cache",
    "get_report_detail_service",
]
