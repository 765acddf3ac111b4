"""
NAV API Routes
Latest NAV lookup and 365-day history, proxied from mfapi.in
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.api.deps import get_current_user, get_nav_provider, http_error
from app.config import settings
from app.domain.errors import PortfolioError
from app.domain.models import NavHistoryEntry, UserContext
from app.domain.services.nav_history_service import NavHistoryService, NavHistoryState
from app.domain.services.nav_reconciliation import NavReconciliationService
from app.infrastructure.market_data.types import NavDataProvider

logger = logging.getLogger(__name__)
router = APIRouter()


class NavQuoteResponse(BaseModel):
    nav: float
    name: str
    date: str


class NavHistoryEntryResponse(BaseModel):
    date: str
    nav: str
    nav_value: Optional[float] = None
    formatted_date: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: NavHistoryEntry) -> "NavHistoryEntryResponse":
        return cls(
            date=entry.date,
            nav=entry.nav,
            nav_value=entry.nav_value,
            formatted_date=entry.formatted_date,
        )


class NavHistoryResponse(BaseModel):
    state: NavHistoryState
    scheme_code: Optional[str] = None
    table: List[NavHistoryEntryResponse]
    chart: List[NavHistoryEntryResponse]
    error: Optional[str] = None


@router.get("/nav", response_model=Dict[str, NavQuoteResponse])
async def latest_nav(
    schemes: Optional[str] = Query(default=None, description="Comma-separated scheme codes"),
    user: UserContext = Depends(get_current_user),
    provider: NavDataProvider = Depends(get_nav_provider),
):
    """
    Latest NAV for each scheme code

    Codes that fail upstream are left out of the response.
    """
    if not schemes:
        raise HTTPException(status_code=400, detail="Scheme codes are required")

    service = NavReconciliationService(provider)
    try:
        quotes = await service.fetch_latest_navs(schemes.split(","))
    except PortfolioError as e:
        logger.error(f"NAV lookup failed for {schemes}: {e.message}")
        raise http_error(e)

    return {
        code: NavQuoteResponse(nav=quote.nav, name=quote.name, date=quote.date)
        for code, quote in quotes.items()
    }


@router.get("/nav-history", response_model=NavHistoryResponse)
async def nav_history(
    scheme_code: Optional[str] = Query(default=None, alias="schemeCode"),
    user: UserContext = Depends(get_current_user),
    provider: NavDataProvider = Depends(get_nav_provider),
):
    """
    Up to 365 daily NAVs: `table` newest first, `chart` oldest first

    400 without a scheme code, 502 when the provider fails.
    """
    if not scheme_code or not scheme_code.strip():
        raise HTTPException(status_code=400, detail="Scheme code is required")

    service = NavHistoryService(provider, limit=settings.NAV_HISTORY_LIMIT)
    view = await service.view(scheme_code)

    if view.state == NavHistoryState.ERROR:
        raise HTTPException(status_code=502, detail=view.error)

    return NavHistoryResponse(
        state=view.state,
        scheme_code=view.scheme_code,
        table=[NavHistoryEntryResponse.from_domain(e) for e in view.table],
        chart=[NavHistoryEntryResponse.from_domain(e) for e in view.chart],
        error=view.error,
    )
