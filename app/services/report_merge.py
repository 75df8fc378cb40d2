"""Deduplication and classification helpers shared by the report store."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, TypeVar, Union

from app.schemas import Classification, ReportWithAnalysis

R = TypeVar("R", bound=Union[ReportWithAnalysis, Mapping[str, Any]])


def report_seq(item: ReportWithAnalysis | Mapping[str, Any]) -> int:
    """Return the sequence number of a report, parsed or raw."""
    if isinstance(item, ReportWithAnalysis):
        return item.report.seq
    report = item.get("report", item)
    return int(report["seq"])


def merge_reports(current: Iterable[R], incoming: Iterable[R]) -> List[R]:
    """Prepend ``incoming`` to ``current`` keeping the first copy of each seq.

    Incoming copies win over existing ones, and existing reports that were not
    replaced keep their relative order after the incoming batch.
    """
    seen: set[int] = set()
    merged: List[R] = []
    for source in (incoming, current):
        for item in source:
            seq = report_seq(item)
            if seq in seen:
                continue
            seen.add(seq)
            merged.append(item)
    return merged


def is_classification(
    report: ReportWithAnalysis, classification: Classification
) -> bool:
    """True when any analysis of ``report`` carries ``classification``."""
    return any(item.classification == classification for item in report.analysis)


__all__ = [
    "is_classification",
    "merge_reports",
    "report_seq",
]
