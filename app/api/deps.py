"""
Shared FastAPI dependencies
Identity, storage and NAV provider are injected per request, never global
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.errors import (
    FundNotFound,
    NoDataResolved,
    PersistenceError,
    PortfolioError,
    UpstreamUnavailable,
    ValidationError,
)
from app.domain.models import UserContext
from app.infrastructure.db.database import get_db
from app.infrastructure.db.repositories.fund_repository import FundRepository
from app.infrastructure.market_data.provider_factory import get_nav_data_provider
from app.infrastructure.market_data.types import NavDataProvider
from app.services.portfolio_service import PortfolioService


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
) -> UserContext:
    """
    Resolve the signed-in user

    Sign-in itself happens at the identity provider; the gateway in front of
    this API forwards the verified user id and display name as headers.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Sign in required")
    return UserContext(user_id=user_id, display_name=(x_user_name or "").strip())


def get_nav_provider(request: Request) -> NavDataProvider:
    provider = getattr(request.app.state, "nav_provider", None)
    if provider is None:
        provider = get_nav_data_provider()
        request.app.state.nav_provider = provider
    return provider


def get_fund_repository(db: AsyncSession = Depends(get_db)) -> FundRepository:
    return FundRepository(db)


def get_portfolio_service(repo: FundRepository = Depends(get_fund_repository)) -> PortfolioService:
    return PortfolioService(repo)


_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (FundNotFound, 404),
    (UpstreamUnavailable, 502),
    (NoDataResolved, 502),
    (PersistenceError, 500),
)


def http_error(exc: PortfolioError) -> HTTPException:
    """Map a domain error to an HTTPException carrying its message"""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=500, detail=exc.message)
