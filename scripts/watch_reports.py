"""Watch the upstream report feeds the way the dashboard consumes them.

Keeps a dual-classification report store and the report counter fresh, and
prints newly seen reports for the selected tab as they arrive::

    python -m scripts.watch_reports --tab digital --interval 15
"""

from __future__ import annotations

import argparse
import asyncio
from datetime import datetime
from typing import Dict, Sequence

from app.clients import ReportApiClient
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.schemas import CLASSIFICATIONS, Classification, ReportWithAnalysis
from app.services import (
    InMemoryQueryLocator,
    ReportCounterPoller,
    ReportStore,
    ReportTabSync,
    is_classification,
)


def _print_header(title: str) -> None:
    line = "=" * len(title)
    print(f"\n{title}\n{line}")


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _describe(report: ReportWithAnalysis, classification: Classification) -> str:
    analysis = report.analysis[0] if report.analysis else None
    title = (analysis.title or analysis.summary or "") if analysis else ""
    brand = analysis.brand_display_name or analysis.brand_name if analysis else None
    line = f"#{report.seq}"
    if brand:
        line += f" [{brand}]"
    if title:
        line += f" {title}"
    if report.analysis and not is_classification(report, classification):
        line += " (analysis disagrees with feed)"
    return line


def _report_new(
    store: ReportStore,
    classification: Classification,
    seen: Dict[str, set[int]],
) -> None:
    known = seen.setdefault(classification, set())
    for report in store.reports_for(classification):
        if report.seq in known:
            continue
        known.add(report.seq)
        print(f"[{_timestamp()}] {classification.upper()} {_describe(report, classification)}")


async def watch(tab: str, *, interval: float, count: int | None) -> None:
    settings = get_settings()
    client = ReportApiClient(settings.report_api)
    store = ReportStore(
        client,
        default_count=count or settings.sync.default_count,
        language=settings.sync.language,
    )
    tabs = ReportTabSync(InMemoryQueryLocator(query={"tab": tab}))
    counter = ReportCounterPoller(
        client, interval_seconds=settings.sync.counter_poll_seconds
    )
    counter.start()

    _print_header(f"Watching {tabs.selected} reports (Ctrl+C to exit)")
    seen: Dict[str, set[int]] = {}
    last_counts = None
    try:
        await store.fetch_all()
        while True:
            for classification in CLASSIFICATIONS:
                error = store.errors[classification]
                if error:
                    print(f"[{_timestamp()}] {classification} fetch failed: {error}")
            _report_new(store, tabs.selected, seen)

            if counter.counts != last_counts:
                last_counts = counter.counts
                print(
                    f"[{_timestamp()}] TOTAL {last_counts.total_reports}"
                    f" | physical={last_counts.total_physical_reports}"
                    f" | digital={last_counts.total_digital_reports}"
                )

            await asyncio.sleep(interval)
            await store.fetch_current(tabs.selected)
    finally:
        await counter.stop()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Follow the latest CleanApp reports.")
    parser.add_argument(
        "--tab",
        default="physical",
        help="Report tab to follow: physical (default) or digital.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=10.0,
        help="Seconds between refreshes of the selected tab.",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help="Number of latest reports to request per refresh.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    try:
        asyncio.run(watch(args.tab, interval=args.interval, count=args.count))
    except KeyboardInterrupt:
        print("\nStopped watching.")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution path
    raise SystemExit(main())
