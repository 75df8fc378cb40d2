"""Service layer exports."""

from .report_cache import CacheEntry, SingleFlightCache, report_cache_key
from .report_counter import ReportCounterPoller
from .report_detail import ReportDetailService
from .report_merge import is_classification, merge_reports, report_seq
from .report_store import CollectionStatus, ReportStats, ReportStore
from .report_tabs import InMemoryQueryLocator, ReportTabSync, parse_tab

__all__ = [
    "CacheEntry",
    "CollectionStatus",
    "InMemoryQueryLocator",
    "ReportCounterPoller",
    "ReportDetailService",
    "ReportStats",
    "ReportStore",
    "ReportTabSync",
    "SingleFlightCache",
    "is_classification",
    "merge_reports",
    "parse_tab",
    "report_cache_key",
    "report_seq",
]
