"""
Unit Tests for NavHistoryService
"""

import pytest

from app.domain.errors import ValidationError
from app.domain.services.nav_history_service import (
    NavHistoryService,
    NavHistoryState,
    NavHistoryView,
    chart_order,
    to_history_entry,
)
from tests.stubs import StubNavProvider


HISTORY = [
    {"date": "17-10-2026", "nav": "350.25"},
    {"date": "16-10-2026", "nav": "349.80"},
    {"date": "15-10-2026", "nav": "348.10"},
]


@pytest.fixture
def provider():
    return StubNavProvider(
        history={"119551": HISTORY, "100027": []},
        failing={"999999"},
    )


@pytest.mark.asyncio
async def test_loaded_view_has_table_newest_first_and_chart_oldest_first(provider):
    view = await NavHistoryService(provider).view("119551")

    assert view.state == NavHistoryState.LOADED
    assert [e.date for e in view.table] == ["17-10-2026", "16-10-2026", "15-10-2026"]
    assert [e.date for e in view.chart] == ["15-10-2026", "16-10-2026", "17-10-2026"]
    assert list(reversed(view.chart)) == view.table


@pytest.mark.asyncio
async def test_entries_carry_parsed_value_and_display_date(provider):
    table = await NavHistoryService(provider).fetch("119551")

    assert table[0].nav == "350.25"
    assert table[0].nav_value == 350.25
    assert table[0].formatted_date == "Oct 17, 2026"


@pytest.mark.asyncio
async def test_history_is_capped_at_limit():
    long_history = [{"date": "17-10-2026", "nav": str(100 + i)} for i in range(400)]
    provider = StubNavProvider(history={"119551": long_history})

    table = await NavHistoryService(provider, limit=365).fetch("119551")

    assert len(table) == 365
    assert table[0].nav == "100"


@pytest.mark.asyncio
async def test_empty_history_is_its_own_state(provider):
    view = await NavHistoryService(provider).view("100027")

    assert view.state == NavHistoryState.EMPTY
    assert view.table == []
    assert view.chart == []


@pytest.mark.asyncio
async def test_upstream_failure_becomes_error_state(provider):
    view = await NavHistoryService(provider).view("999999")

    assert view.state == NavHistoryState.ERROR
    assert view.scheme_code == "999999"
    assert view.error


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [None, "", "   "])
async def test_no_fund_selected(provider, code):
    view = await NavHistoryService(provider).view(code)

    assert view.state == NavHistoryState.NO_FUND_SELECTED
    assert provider.calls == []


@pytest.mark.asyncio
async def test_fetch_rejects_blank_code(provider):
    with pytest.raises(ValidationError):
        await NavHistoryService(provider).fetch("  ")


def test_not_fetched_view():
    view = NavHistoryView.not_fetched("119551")
    assert view.state == NavHistoryState.NOT_FETCHED
    assert view.table == []


def test_chart_order_does_not_mutate_table():
    table = [to_history_entry(item) for item in HISTORY]
    chart = chart_order(table)
    assert table[0].date == "17-10-2026"
    assert chart[0].date == "15-10-2026"


@pytest.mark.parametrize(
    "item, nav_value, formatted",
    [
        ({"date": "05-01-2024", "nav": "12.5"}, 12.5, "Jan 5, 2024"),
        ({"date": "2024/01/05", "nav": "12.5"}, 12.5, "2024/01/05"),
        ({"date": "05-01-2024", "nav": "N.A."}, None, "Jan 5, 2024"),
        ({"date": "05-01-2024", "nav": "nan"}, None, "Jan 5, 2024"),
    ],
)
def test_to_history_entry_tolerates_bad_fields(item, nav_value, formatted):
    entry = to_history_entry(item)
    assert entry.nav_value == nav_value
    assert entry.formatted_date == formatted
    assert entry.date == item["date"]
