"""
Database Models (SQLAlchemy ORM)
One row per fund per user
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint

from app.infrastructure.db.database import Base
from app.utils.time import now_ist_naive


class FundModel(Base):
    """Fund holding owned by a single user"""
    __tablename__ = "fund"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)
    fund_id = Column(String(64), nullable=False)
    scheme_code = Column(String(64), nullable=False)

    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, default="Uncategorized")
    units = Column(Float, nullable=False, default=0.0)
    nav = Column(Float, nullable=False, default=0.0)
    nav_date = Column(String(10), nullable=True)
    current_value = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, nullable=False, default=now_ist_naive)
    updated_at = Column(DateTime, nullable=False, default=now_ist_naive, onupdate=now_ist_naive)

    __table_args__ = (
        UniqueConstraint("user_id", "fund_id", name="uq_fund_user_fund_id"),
        UniqueConstraint("user_id", "scheme_code", name="uq_fund_user_scheme_code"),
    )
