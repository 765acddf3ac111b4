"""
Projection API Routes
Project a stored fund forward under periodic unit contributions
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.deps import get_current_user, get_portfolio_service, http_error
from app.domain.errors import PortfolioError
from app.domain.models import Frequency, UserContext
from app.domain.services.projection_engine import ProjectionEngine
from app.services.portfolio_service import PortfolioService

router = APIRouter()

_engine = ProjectionEngine()


class ProjectionRequest(BaseModel):
    fund_id: str
    contribution_units: float = Field(default=0.0, description="Units added per period")
    frequency: Frequency = Frequency.MONTHLY
    annual_growth_rate_percent: float = Field(default=10.0)
    years: int = Field(default=10)


class ProjectionPointResponse(BaseModel):
    year: int
    value: int


class ProjectionResponse(BaseModel):
    fund_id: str
    starting_value: float
    unit_price: float
    points: List[ProjectionPointResponse]


@router.post("", response_model=ProjectionResponse)
async def project_fund(
    payload: ProjectionRequest,
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Yearly projected values, year 0 through `years`

    400 with the reason when the fund has no NAV yet or an assumption is invalid.
    """
    try:
        fund = await service.get_fund(user, payload.fund_id)
        _engine.validate(
            fund.current_value,
            fund.nav,
            payload.contribution_units,
            payload.frequency,
            payload.annual_growth_rate_percent,
            payload.years,
        )
    except PortfolioError as e:
        raise http_error(e)

    points = _engine.project_fund(
        fund,
        contribution_units=payload.contribution_units,
        frequency=payload.frequency,
        annual_growth_rate_percent=payload.annual_growth_rate_percent,
        years=payload.years,
    )
    return ProjectionResponse(
        fund_id=fund.id,
        starting_value=fund.current_value,
        unit_price=fund.nav,
        points=[ProjectionPointResponse(year=p.year, value=p.value) for p in points],
    )
