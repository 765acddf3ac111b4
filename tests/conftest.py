from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.deps import get_nav_provider
from app.api.routes import funds, health, nav, projection, report
from app.domain.models import NavQuote
from app.infrastructure.db.database import Base, enable_sqlite_savepoints, get_db
from app.infrastructure.db import models  # noqa: F401
from tests.stubs import StubNavProvider


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture()
def nav_provider() -> StubNavProvider:
    return StubNavProvider(
        quotes={
            "119551": NavQuote("119551", "Aditya Birla Sun Life Banking & PSU Debt Fund", 350.25, "17-10-2026"),
            "120503": NavQuote("120503", "Axis ELSS Tax Saver Fund", 95.5, "17-10-2026"),
        },
        history={
            "119551": [
                {"date": "17-10-2026", "nav": "350.25"},
                {"date": "16-10-2026", "nav": "349.80"},
                {"date": "15-10-2026", "nav": "348.10"},
            ],
            "100027": [],
        },
    )


@pytest.fixture()
async def app(db_session, nav_provider) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(funds.router, prefix="/api/v1/funds", tags=["Funds"])
    app.include_router(nav.router, prefix="/api/v1", tags=["NAV"])
    app.include_router(projection.router, prefix="/api/v1/projection", tags=["Projection"])
    app.include_router(report.router, prefix="/api/v1/report", tags=["Reports"])

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_nav_provider] = lambda: nav_provider
    app.state.refreshing_users = set()

    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": "user-1", "X-User-Name": "Asha Rao"},
    ) as ac:
        yield ac
