"""
PROJECTION ENGINE
Project a fund's value forward under periodic unit contributions

ALGORITHM (output-compatible, keep as is):
- total annual contribution = contribution_units * unit_price * periods_per_year
- value[0] = starting_value
- value[y] = (value[y-1] + total annual contribution) * (1 + rate / 100)
- arithmetic is binary float; every year's value is rounded half-up (on
  the exact float, so 57.4999... from 50 * 1.15 rounds to 57) to a whole
  currency unit and the rounded value is what the next year compounds on

The whole year's contribution is added as a lump sum before one annual
compounding step. This is not an intra-year annuity.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

from app.domain.errors import ValidationError
from app.domain.models import Fund, Frequency, ProjectionPoint


class ProjectionEngine:
    """
    Projection Engine
    Pure and stateless: identical inputs always yield identical series
    """

    def project(
        self,
        starting_value: float,
        unit_price: float,
        contribution_units: float,
        frequency: Union[Frequency, str],
        annual_growth_rate_percent: float,
        years: int,
    ) -> List[ProjectionPoint]:
        """
        Compute the yearly projection series

        Args:
            starting_value: Current value of the holding (>= 0)
            unit_price: Latest NAV (> 0)
            contribution_units: Units added per contribution period (>= 0)
            frequency: Contribution frequency
            annual_growth_rate_percent: Expected growth, e.g. 10 for 10% (>= 0)
            years: Horizon in whole years (>= 0)

        Returns:
            years + 1 points starting at year 0, or [] for invalid input
        """
        try:
            self.validate(
                starting_value,
                unit_price,
                contribution_units,
                frequency,
                annual_growth_rate_percent,
                years,
            )
        except ValidationError:
            return []

        periods_per_year = Frequency(frequency).periods_per_year
        total_annual_contribution = float(contribution_units) * float(unit_price) * periods_per_year
        growth = 1 + float(annual_growth_rate_percent) / 100

        value = _round_currency(float(starting_value))
        points = [ProjectionPoint(year=0, value=int(value))]

        for year in range(1, int(years) + 1):
            value = _round_currency((value + total_annual_contribution) * growth)
            points.append(ProjectionPoint(year=year, value=int(value)))

        return points

    def project_fund(
        self,
        fund: Optional[Fund],
        contribution_units: float,
        frequency: Union[Frequency, str],
        annual_growth_rate_percent: float,
        years: int,
    ) -> List[ProjectionPoint]:
        """Project a stored fund; an unresolved fund (no NAV yet) yields []"""
        if fund is None:
            return []
        return self.project(
            starting_value=fund.current_value,
            unit_price=fund.nav,
            contribution_units=contribution_units,
            frequency=frequency,
            annual_growth_rate_percent=annual_growth_rate_percent,
            years=years,
        )

    @staticmethod
    def validate(
        starting_value: float,
        unit_price: float,
        contribution_units: float,
        frequency: Union[Frequency, str],
        annual_growth_rate_percent: float,
        years: int,
    ) -> None:
        """
        Raises:
            ValidationError: describing the first invalid parameter
        """
        numbers = (starting_value, unit_price, contribution_units, annual_growth_rate_percent, years)
        if any(n is None or isinstance(n, bool) or not math.isfinite(n) for n in numbers):
            raise ValidationError("Projection parameters must be finite numbers.")
        if not unit_price > 0:
            raise ValidationError("Fund has no NAV yet; refresh NAV before projecting.")
        if starting_value < 0:
            raise ValidationError("Starting value cannot be negative.")
        if contribution_units < 0:
            raise ValidationError("Periodic investment units cannot be negative.")
        if annual_growth_rate_percent < 0:
            raise ValidationError("Expected annual growth cannot be negative.")
        if int(years) != years or years < 0:
            raise ValidationError("Period must be a whole number of years, zero or more.")
        try:
            Frequency(frequency)
        except ValueError:
            raise ValidationError(
                f"Unknown frequency {frequency!r}; expected one of "
                + ", ".join(f.value for f in Frequency)
            )


def _round_currency(value: float) -> float:
    return float(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))
