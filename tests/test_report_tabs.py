try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from app.services.report_tabs import InMemoryQueryLocator, ReportTabSync, parse_tab


def test_parse_tab_defaults_to_physical() -> None:
    assert parse_tab("digital") == "digital"
    assert parse_tab("physical") == "physical"
    assert parse_tab(None) == "physical"
    assert parse_tab("satellite") == "physical"
    assert parse_tab(["digital", "physical"]) == "digital"


def test_initial_tab_is_read_from_locator() -> None:
    tabs = ReportTabSync(InMemoryQueryLocator(query={"tab": "digital"}))
    assert tabs.selected == "digital"
    assert tabs.is_digital and not tabs.is_physical


def test_locator_not_ready_keeps_default() -> None:
    locator = InMemoryQueryLocator(query={"tab": "digital"}, ready=False)
    tabs = ReportTabSync(locator)
    assert tabs.selected == "physical"

    locator.ready = True
    assert tabs.on_locator_change() is True
    assert tabs.selected == "digital"


def test_select_pushes_shallow_update() -> None:
    locator = InMemoryQueryLocator()
    tabs = ReportTabSync(locator)

    assert tabs.select("digital") is True

    assert tabs.selected == "digital"
    assert locator.history == [("/?tab=digital", True)]


def test_locator_change_never_writes_back() -> None:
    locator = InMemoryQueryLocator(query={"tab": "digital"})
    tabs = ReportTabSync(locator)

    locator.navigate({"tab": "physical"})
    assert tabs.on_locator_change() is True
    assert tabs.selected == "physical"
    assert tabs.on_locator_change() is False
    assert locator.history == []


def test_selecting_current_tab_is_skipped() -> None:
    locator = InMemoryQueryLocator(query={"tab": "digital"})
    tabs = ReportTabSync(locator)

    assert tabs.select("digital") is False
    assert locator.history == []


def test_unknown_locator_value_falls_back_to_physical() -> None:
    locator = InMemoryQueryLocator(query={"tab": "digital"})
    tabs = ReportTabSync(locator)

    locator.navigate({"tab": "bogus"})
    tabs.on_locator_change()
    assert tabs.selected == "physical"
