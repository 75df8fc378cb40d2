"""Expose constructed client wrappers."""

from .report_api import ReportApiClient, UpstreamReportError, UpstreamUnavailableError

__all__ = [
    "ReportApiClient",
    "UpstreamReportError",
    "UpstreamUnavailableError",
]
