"""
Fund Repository
CRUD operations for a user's fund holdings
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.errors import PersistenceError
from app.domain.models import Fund
from app.infrastructure.db.models import FundModel

logger = logging.getLogger(__name__)


class FundRepository:
    """Repository for Fund, scoped per call by user_id"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def list_for_user(self, user_id: str) -> List[Fund]:
        """
        Get all funds owned by a user

        Args:
            user_id: Owning user

        Returns:
            Funds in insertion order
        """
        result = await self.session.execute(
            select(FundModel)
            .where(FundModel.user_id == user_id)
            .order_by(FundModel.pk)
        )
        return [self._to_domain(model) for model in result.scalars().all()]

    async def get(self, user_id: str, fund_id: str) -> Optional[Fund]:
        model = await self._get_model(user_id, fund_id)
        return self._to_domain(model) if model else None

    async def exists_scheme_code(self, user_id: str, scheme_code: str) -> bool:
        result = await self.session.execute(
            select(FundModel.pk).where(
                FundModel.user_id == user_id,
                FundModel.scheme_code == scheme_code,
            )
        )
        return result.first() is not None

    async def add(self, fund: Fund) -> Fund:
        """
        Insert a new fund

        Raises:
            PersistenceError: if the write fails (including duplicates)
        """
        model = FundModel(
            user_id=fund.user_id,
            fund_id=fund.id,
            scheme_code=fund.scheme_code,
            name=fund.name,
            category=fund.category,
            units=fund.units,
            nav=fund.nav,
            nav_date=fund.nav_date,
            current_value=fund.current_value,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(model)
        except SQLAlchemyError as exc:
            logger.error(f"Failed to add fund {fund.id} for user {fund.user_id}: {exc}")
            raise PersistenceError(f"Could not save fund {fund.scheme_code}.", fund_id=fund.id) from exc
        return fund

    async def save(self, fund: Fund) -> Fund:
        """
        Persist every mutable field of an existing fund in one write

        Runs in its own savepoint so a failure leaves sibling writes intact.
        """
        try:
            async with self.session.begin_nested():
                model = await self._get_model(fund.user_id, fund.id)
                if model is None:
                    raise PersistenceError(f"Fund {fund.id} no longer exists.", fund_id=fund.id)
                model.name = fund.name
                model.category = fund.category
                model.units = fund.units
                model.nav = fund.nav
                model.nav_date = fund.nav_date
                model.current_value = fund.current_value
        except SQLAlchemyError as exc:
            logger.error(f"Failed to save fund {fund.id} for user {fund.user_id}: {exc}")
            raise PersistenceError(f"Could not save fund {fund.scheme_code}.", fund_id=fund.id) from exc
        return fund

    async def delete(self, user_id: str, fund_id: str) -> bool:
        """
        Delete a fund

        Returns:
            False when the fund did not exist
        """
        try:
            async with self.session.begin_nested():
                model = await self._get_model(user_id, fund_id)
                if model is None:
                    return False
                await self.session.delete(model)
        except SQLAlchemyError as exc:
            logger.error(f"Failed to delete fund {fund_id} for user {user_id}: {exc}")
            raise PersistenceError(f"Could not delete fund {fund_id}.", fund_id=fund_id) from exc
        return True

    async def _get_model(self, user_id: Optional[str], fund_id: str) -> Optional[FundModel]:
        result = await self.session.execute(
            select(FundModel).where(
                FundModel.user_id == user_id,
                FundModel.fund_id == fund_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: FundModel) -> Fund:
        return Fund(
            id=model.fund_id,
            scheme_code=model.scheme_code,
            name=model.name,
            units=float(model.units or 0.0),
            nav=float(model.nav or 0.0),
            current_value=float(model.current_value or 0.0),
            category=model.category,
            nav_date=model.nav_date,
            user_id=model.user_id,
        )
