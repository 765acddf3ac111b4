"""
Unit Tests for NavReconciliationService
"""

import asyncio

import pytest

from app.domain.errors import NoDataResolved, PersistenceError, ValidationError
from app.domain.models import Fund, NavQuote
from app.domain.services.nav_reconciliation import NavReconciliationService
from tests.stubs import StubNavProvider


class MockFundRepository:
    """Records saves; fails for the configured fund ids"""

    def __init__(self, failing_ids=()):
        self.saved = {}
        self.failing_ids = set(failing_ids)

    async def save(self, fund: Fund) -> Fund:
        if fund.id in self.failing_ids:
            raise PersistenceError(f"Could not save fund {fund.id}.", fund_id=fund.id)
        self.saved[fund.id] = fund
        return fund


class SlowNavProvider:
    """Tracks how many lookups are in flight at once"""

    def __init__(self):
        self.active = 0
        self.max_active = 0

    async def get_latest_nav(self, scheme_code: str) -> NavQuote:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return NavQuote(scheme_code, f"Fund {scheme_code} Direct Growth", 10.0, "17-10-2026")


def quote(code, nav, name="Some Fund", date="17-10-2026"):
    return NavQuote(scheme_code=code, name=name, nav=nav, date=date)


@pytest.fixture
def funds():
    return [
        Fund.new("100001", user_id="u1").with_units(10),
        Fund.new("100002", user_id="u1").with_units(5),
        Fund.new("100003", user_id="u1").with_units(2),
    ]


@pytest.mark.asyncio
async def test_partial_failures_are_omitted():
    provider = StubNavProvider(
        quotes={"100001": quote("100001", 12.5), "100003": quote("100003", 40.0)},
        failing={"100002"},
    )
    service = NavReconciliationService(provider)

    result = await service.fetch_latest_navs(["100001", "100002", "100003"])

    assert set(result) == {"100001", "100003"}
    assert result["100001"].nav == 12.5


@pytest.mark.asyncio
async def test_all_failures_raise_no_data_resolved():
    service = NavReconciliationService(StubNavProvider(failing={"100001", "100002"}))

    with pytest.raises(NoDataResolved):
        await service.fetch_latest_navs(["100001", "100002"])


@pytest.mark.asyncio
@pytest.mark.parametrize("codes", [[], ["100001", ""], ["  "], [None]])
async def test_invalid_codes_rejected(codes):
    service = NavReconciliationService(StubNavProvider())

    with pytest.raises(ValidationError):
        await service.fetch_latest_navs(codes)


@pytest.mark.asyncio
async def test_duplicate_codes_fetched_once():
    provider = StubNavProvider(quotes={"100001": quote("100001", 12.5)})
    service = NavReconciliationService(provider)

    await service.fetch_latest_navs(["100001", "100001 "])

    assert provider.calls == ["100001"]


@pytest.mark.asyncio
async def test_lookups_run_concurrently():
    provider = SlowNavProvider()
    service = NavReconciliationService(provider)

    result = await service.fetch_latest_navs(["1", "2", "3", "4"])

    assert len(result) == 4
    assert provider.max_active == 4


def test_merge_updates_nav_value_name_and_date(funds):
    quotes = {"100001": quote("100001", 12.5, name="Axis Bluechip Fund", date="16-10-2026")}

    merged = NavReconciliationService.merge(funds, quotes)

    updated = merged[0]
    assert updated.nav == 12.5
    assert updated.current_value == 125.0
    assert updated.name == "Axis Bluechip Fund"
    assert updated.nav_date == "16-10-2026"
    assert merged[1] == funds[1]
    assert merged[2] == funds[2]


def test_merge_keeps_existing_name_when_upstream_name_empty(funds):
    merged = NavReconciliationService.merge(funds, {"100002": quote("100002", 20.0, name="")})

    assert merged[1].name == "Fund 100002"
    assert merged[1].current_value == 100.0


@pytest.mark.asyncio
async def test_refresh_persists_each_resolved_fund(funds):
    provider = StubNavProvider(
        quotes={"100001": quote("100001", 12.5), "100002": quote("100002", 20.0)},
    )
    repo = MockFundRepository()

    outcome = await NavReconciliationService(provider).refresh(funds, repo)

    assert outcome.updated == ["100001", "100002"]
    assert outcome.unresolved == ["100003"]
    assert set(repo.saved) == {"100001", "100002"}
    for fund in outcome.funds:
        assert fund.current_value == fund.nav * fund.units


@pytest.mark.asyncio
async def test_refresh_persistence_failure_does_not_block_siblings(funds):
    provider = StubNavProvider(
        quotes={code: quote(code, 10.0) for code in ("100001", "100002", "100003")},
    )
    repo = MockFundRepository(failing_ids={"100002"})

    outcome = await NavReconciliationService(provider).refresh(funds, repo)

    assert outcome.updated == ["100001", "100003"]
    assert "100002" in outcome.persistence_failures
    assert set(repo.saved) == {"100001", "100003"}


@pytest.mark.asyncio
async def test_refresh_without_funds_rejected():
    with pytest.raises(ValidationError):
        await NavReconciliationService(StubNavProvider()).refresh([], MockFundRepository())


@pytest.mark.asyncio
async def test_refresh_with_nothing_resolved_saves_nothing(funds):
    repo = MockFundRepository()

    with pytest.raises(NoDataResolved):
        await NavReconciliationService(StubNavProvider()).refresh(funds, repo)

    assert repo.saved == {}
