"""Public schema exports."""

from .report import (
    CLASSIFICATIONS,
    Classification,
    InvalidateCacheRequest,
    InvalidateCacheResponse,
    Report,
    ReportAnalysis,
    ReportCounts,
    ReportWithAnalysis,
    ReportsResponse,
)

__all__ = [
    "CLASSIFICATIONS",
    "Classification",
    "InvalidateCacheRequest",
    "InvalidateCacheResponse",
    "Report",
    "ReportAnalysis",
    "ReportCounts",
    "ReportWithAnalysis",
    "ReportsResponse",
]
