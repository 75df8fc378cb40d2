"""Keep the selected report tab in sync with a shareable URL query parameter."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlencode

from app.schemas import Classification

logger = logging.getLogger(__name__)

DEFAULT_TAB: Classification = "physical"


def parse_tab(value: Any) -> Classification:
    """Map a raw query value onto a tab, defaulting to physical."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value == "digital":
        return "digital"
    return DEFAULT_TAB


class QueryLocator(Protocol):
    """Where the selected tab is persisted, e.g. the page URL."""

    @property
    def is_ready(self) -> bool: ...

    def read_tab(self) -> Optional[str]: ...

    def push_tab(self, tab: Classification, *, shallow: bool) -> None: ...


class InMemoryQueryLocator:
    """URL query holder used by headless consumers and tests."""

    def __init__(
        self,
        path: str = "/",
        query: Dict[str, str] | None = None,
        *,
        ready: bool = True,
    ) -> None:
        self.path = path
        self.query: Dict[str, str] = dict(query or {})
        self.ready = ready
        self.history: List[Tuple[str, bool]] = []

    @property
    def is_ready(self) -> bool:
        return self.ready

    def read_tab(self) -> Optional[str]:
        return self.query.get("tab")

    def push_tab(self, tab: Classification, *, shallow: bool) -> None:
        self.query["tab"] = tab
        self.history.append((self.url, shallow))

    def navigate(self, query: Dict[str, str]) -> None:
        """Simulate an external navigation such as back/forward."""
        self.query = dict(query)

    @property
    def url(self) -> str:
        if not self.query:
            return self.path
        return f"{self.path}?{urlencode(self.query)}"


class ReportTabSync:
    """Two-way binding between the selected tab and a :class:`QueryLocator`."""

    def __init__(self, locator: QueryLocator) -> None:
        self._locator = locator
        self._selected: Classification = DEFAULT_TAB
        self.on_locator_change()

    @property
    def selected(self) -> Classification:
        return self._selected

    @property
    def is_physical(self) -> bool:
        return self._selected == "physical"

    @property
    def is_digital(self) -> bool:
        return self._selected == "digital"

    def on_locator_change(self) -> bool:
        """Re-derive the tab after the locator changed; never writes back."""
        if not self._locator.is_ready:
            return False
        tab = parse_tab(self._locator.read_tab())
        if tab == self._selected:
            return False
        logger.debug("Tab changed from locator: %s -> %s", self._selected, tab)
        self._selected = tab
        return True

    def select(self, tab: Classification) -> bool:
        """Select ``tab`` and persist it with a shallow locator update."""
        tab = parse_tab(tab)
        if tab == self._selected and parse_tab(self._locator.read_tab()) == tab:
            return False
        self._selected = tab
        self._locator.push_tab(tab, shallow=True)
        return True


__all__ = [
    "DEFAULT_TAB",
    "InMemoryQueryLocator",
    "QueryLocator",
    "ReportTabSync",
    "parse_tab",
]
