"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_report_api_client,
    get_report_cache,
    get_report_detail_service,
)

__all__ = [
    "get_report_api_client",
    "get_report_cache",
    "get_report_detail_service",
]
