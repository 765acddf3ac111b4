"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


DEFAULT_CATEGORY = "Uncategorized"


class Frequency(str, Enum):
    """Contribution frequency for projections"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]


_PERIODS_PER_YEAR = {
    Frequency.DAILY: 365,
    Frequency.WEEKLY: 52,
    Frequency.MONTHLY: 12,
    Frequency.YEARLY: 1,
}


@dataclass(frozen=True)
class UserContext:
    """Signed-in user, resolved per request and passed explicitly"""
    user_id: str
    display_name: str = ""

    def __post_init__(self):
        if not self.user_id:
            raise ValueError("user_id cannot be empty")


@dataclass(frozen=True)
class NavQuote:
    """Latest NAV as resolved from the upstream provider"""
    scheme_code: str
    name: str
    nav: float
    date: str  # dd-MM-yyyy


@dataclass(frozen=True)
class Fund:
    """
    A holding in the user's portfolio - Immutable

    current_value always equals nav * units; use with_units() and
    with_quote() instead of replacing either field directly.
    """
    id: str
    scheme_code: str
    name: str
    units: float
    nav: float
    current_value: float
    category: str = DEFAULT_CATEGORY
    nav_date: Optional[str] = None
    user_id: Optional[str] = None

    @classmethod
    def new(cls, scheme_code: str, user_id: Optional[str] = None) -> "Fund":
        """Placeholder fund for a freshly added scheme code"""
        return cls(
            id=scheme_code,
            scheme_code=scheme_code,
            name=f"Fund {scheme_code}",
            units=0.0,
            nav=0.0,
            current_value=0.0,
            category=DEFAULT_CATEGORY,
            nav_date=None,
            user_id=user_id,
        )

    def with_units(self, units: float) -> "Fund":
        return replace(self, units=units, current_value=self.nav * units)

    def with_quote(self, quote: NavQuote) -> "Fund":
        return replace(
            self,
            nav=quote.nav,
            current_value=quote.nav * self.units,
            name=quote.name or self.name,
            nav_date=quote.date,
        )


@dataclass(frozen=True)
class NavHistoryEntry:
    """One historical NAV point. Never persisted."""
    date: str  # dd-MM-yyyy
    nav: str
    nav_value: Optional[float] = None
    formatted_date: Optional[str] = None


@dataclass(frozen=True)
class ProjectionPoint:
    """Projected portfolio value at the end of a given year"""
    year: int
    value: int
