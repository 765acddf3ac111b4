import pytest

from app.domain.errors import PersistenceError
from app.domain.models import Fund, NavQuote
from app.infrastructure.db.repositories.fund_repository import FundRepository


@pytest.mark.asyncio
@pytest.mark.integration
async def test_fund_repository_roundtrip(db_session):
    repo = FundRepository(db_session)
    fund = Fund.new("119551", user_id="user-1")
    await repo.add(fund)

    priced = fund.with_quote(NavQuote("119551", "Debt Fund", 350.25, "17-10-2026")).with_units(4)
    await repo.save(priced)
    await db_session.commit()

    loaded = await repo.get("user-1", "119551")
    assert loaded == priced
    assert await repo.exists_scheme_code("user-1", "119551")
    assert not await repo.exists_scheme_code("user-2", "119551")
    assert await repo.list_for_user("user-2") == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_write_leaves_earlier_writes_intact(db_session):
    repo = FundRepository(db_session)
    await repo.add(Fund.new("119551", user_id="user-1"))

    with pytest.raises(PersistenceError):
        await repo.add(Fund.new("119551", user_id="user-1"))

    await repo.add(Fund.new("120503", user_id="user-1"))
    await db_session.commit()

    codes = [f.scheme_code for f in await repo.list_for_user("user-1")]
    assert codes == ["119551", "120503"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_save_missing_fund_raises(db_session):
    repo = FundRepository(db_session)
    with pytest.raises(PersistenceError):
        await repo.save(Fund.new("119551", user_id="user-1"))


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete(db_session):
    repo = FundRepository(db_session)
    await repo.add(Fund.new("119551", user_id="user-1"))

    assert await repo.delete("user-1", "119551") is True
    assert await repo.delete("user-1", "119551") is False
    assert await repo.get("user-1", "119551") is None
