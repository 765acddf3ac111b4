# app/services/portfolio_service.py

import logging
import math
from typing import Iterable, List, Protocol

from app.domain.errors import FundNotFound, ValidationError
from app.domain.models import Fund, UserContext

logger = logging.getLogger(__name__)


class FundStore(Protocol):
    async def list_for_user(self, user_id: str) -> List[Fund]: ...
    async def get(self, user_id: str, fund_id: str): ...
    async def exists_scheme_code(self, user_id: str, scheme_code: str) -> bool: ...
    async def add(self, fund: Fund) -> Fund: ...
    async def save(self, fund: Fund) -> Fund: ...
    async def delete(self, user_id: str, fund_id: str) -> bool: ...


class PortfolioService:
    """Fund lifecycle for one user's portfolio"""

    def __init__(self, repository: FundStore):
        self.repository = repository

    async def list_funds(self, user: UserContext) -> List[Fund]:
        return await self.repository.list_for_user(user.user_id)

    async def get_fund(self, user: UserContext, fund_id: str) -> Fund:
        fund = await self.repository.get(user.user_id, fund_id)
        if fund is None:
            raise FundNotFound(f"Fund {fund_id} not found in your portfolio.")
        return fund

    async def add_fund(self, user: UserContext, scheme_code: str) -> Fund:
        """
        Add a scheme code as a placeholder fund

        Raises:
            ValidationError: blank code, or code already in the portfolio
        """
        code = (scheme_code or "").strip()
        if not code:
            raise ValidationError("Scheme code is required")

        if await self.repository.exists_scheme_code(user.user_id, code):
            raise ValidationError("This fund is already in your portfolio.")

        fund = Fund.new(code, user_id=user.user_id)
        await self.repository.add(fund)
        logger.info(f"Added fund {code} for user {user.user_id}")
        return fund

    async def update_units(self, user: UserContext, fund_id: str, units: float) -> Fund:
        """
        Set the unit count; current value is recomputed and saved with it

        Raises:
            ValidationError: negative or non-finite units
            FundNotFound: unknown fund id
        """
        if units is None or not math.isfinite(units) or units < 0:
            raise ValidationError("Units must be a non-negative number.")

        fund = await self.get_fund(user, fund_id)
        updated = fund.with_units(float(units))
        await self.repository.save(updated)
        return updated

    async def delete_fund(self, user: UserContext, fund_id: str) -> None:
        deleted = await self.repository.delete(user.user_id, fund_id)
        if not deleted:
            raise FundNotFound(f"Fund {fund_id} not found in your portfolio.")
        logger.info(f"Deleted fund {fund_id} for user {user.user_id}")

    @staticmethod
    def total_value(funds: Iterable[Fund]) -> float:
        return sum(fund.current_value or 0.0 for fund in funds)
