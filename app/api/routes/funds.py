"""
Funds API Routes
Add, edit, delete and refresh the signed-in user's fund holdings
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from app.api.deps import (
    get_current_user,
    get_fund_repository,
    get_nav_provider,
    get_portfolio_service,
    http_error,
)
from app.domain.errors import PortfolioError
from app.domain.models import Fund, UserContext
from app.domain.services.nav_reconciliation import NavReconciliationService
from app.infrastructure.db.repositories.fund_repository import FundRepository
from app.infrastructure.market_data.types import NavDataProvider
from app.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)
router = APIRouter()


# Request / response models
class FundResponse(BaseModel):
    id: str
    scheme_code: str
    name: str
    category: str
    units: float
    nav: float
    nav_date: Optional[str] = None
    current_value: float

    @classmethod
    def from_domain(cls, fund: Fund) -> "FundResponse":
        return cls(
            id=fund.id,
            scheme_code=fund.scheme_code,
            name=fund.name,
            category=fund.category,
            units=fund.units,
            nav=fund.nav,
            nav_date=fund.nav_date,
            current_value=fund.current_value,
        )


class PortfolioResponse(BaseModel):
    total_value: float
    funds: List[FundResponse]


class AddFundRequest(BaseModel):
    scheme_code: str = Field(..., description="mfapi.in scheme code")


class UpdateUnitsRequest(BaseModel):
    units: float = Field(..., ge=0)


class RefreshResponse(BaseModel):
    total_value: float
    funds: List[FundResponse]
    updated: List[str]
    unresolved: List[str]
    persistence_failures: Dict[str, str]


@router.get("", response_model=PortfolioResponse)
async def list_funds(
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """List the user's funds with the total portfolio value"""
    funds = await service.list_funds(user)
    return PortfolioResponse(
        total_value=service.total_value(funds),
        funds=[FundResponse.from_domain(f) for f in funds],
    )


@router.post("", response_model=FundResponse, status_code=201)
async def add_fund(
    payload: AddFundRequest,
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Add a scheme code; rejected if already in the portfolio"""
    try:
        fund = await service.add_fund(user, payload.scheme_code)
    except PortfolioError as e:
        raise http_error(e)
    return FundResponse.from_domain(fund)


@router.patch("/{fund_id}", response_model=FundResponse)
async def update_units(
    fund_id: str,
    payload: UpdateUnitsRequest,
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Edit the unit count; current value is recomputed"""
    try:
        fund = await service.update_units(user, fund_id, payload.units)
    except PortfolioError as e:
        raise http_error(e)
    return FundResponse.from_domain(fund)


@router.delete("/{fund_id}", status_code=204)
async def delete_fund(
    fund_id: str,
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    try:
        await service.delete_fund(user, fund_id)
    except PortfolioError as e:
        raise http_error(e)


@router.post("/refresh-nav", response_model=RefreshResponse)
async def refresh_nav(
    request: Request,
    user: UserContext = Depends(get_current_user),
    repo: FundRepository = Depends(get_fund_repository),
    provider: NavDataProvider = Depends(get_nav_provider),
):
    """
    Refresh every fund against the latest NAV

    Only one refresh per user may be in flight.
    """
    in_flight = _refreshing_users(request)
    if user.user_id in in_flight:
        raise HTTPException(status_code=409, detail="A NAV refresh is already in progress.")

    in_flight.add(user.user_id)
    try:
        funds = await repo.list_for_user(user.user_id)
        if not funds:
            raise HTTPException(status_code=400, detail="No funds to refresh.")

        service = NavReconciliationService(provider)
        try:
            outcome = await service.refresh(funds, repo)
        except PortfolioError as e:
            logger.error(f"NAV refresh failed for user {user.user_id}: {e.message}")
            raise http_error(e)
    finally:
        in_flight.discard(user.user_id)

    return RefreshResponse(
        total_value=PortfolioService.total_value(outcome.funds),
        funds=[FundResponse.from_domain(f) for f in outcome.funds],
        updated=outcome.updated,
        unresolved=outcome.unresolved,
        persistence_failures=outcome.persistence_failures,
    )


def _refreshing_users(request: Request) -> set:
    in_flight = getattr(request.app.state, "refreshing_users", None)
    if in_flight is None:
        in_flight = set()
        request.app.state.refreshing_users = in_flight
    return in_flight
