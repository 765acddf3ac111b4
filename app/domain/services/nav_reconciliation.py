"""
NAV RECONCILIATION
Refresh stored funds against the latest upstream NAV

RULES:
- One upstream lookup per scheme code, all issued concurrently
- Results merged only after every lookup has settled
- A failing code is logged and omitted; it never fails the batch
- Zero resolved codes -> NoDataResolved
- Each merged fund is persisted on its own; one failed write does not
  block the others
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol

from app.domain.errors import NoDataResolved, PersistenceError, ValidationError
from app.domain.models import Fund, NavQuote
from app.infrastructure.market_data.types import NavDataProvider

logger = logging.getLogger(__name__)


class FundWriter(Protocol):
    async def save(self, fund: Fund) -> Fund:
        ...


@dataclass
class RefreshOutcome:
    """Result of reconciling a portfolio"""
    funds: List[Fund]
    updated: List[str] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    persistence_failures: Dict[str, str] = field(default_factory=dict)


class NavReconciliationService:
    """Fan out NAV lookups, then merge and persist the results"""

    def __init__(self, provider: NavDataProvider):
        self.provider = provider

    async def fetch_latest_navs(self, scheme_codes: Iterable[str]) -> Dict[str, NavQuote]:
        """
        Resolve the latest NAV for every scheme code

        Args:
            scheme_codes: One or more non-empty scheme codes

        Returns:
            scheme_code -> NavQuote for every code that resolved

        Raises:
            ValidationError: empty input or a blank code
            NoDataResolved: not a single code resolved
        """
        codes = _normalize_codes(scheme_codes)

        tasks = [self.provider.get_latest_nav(code) for code in codes]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        resolved: Dict[str, NavQuote] = {}
        for code, result in zip(codes, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(f"Failed to fetch NAV for scheme {code}: {result}")
                continue
            resolved[code] = result

        if not resolved:
            raise NoDataResolved("Could not fetch NAV data for any of the provided schemes.")

        logger.info(f"Resolved NAV for {len(resolved)}/{len(codes)} schemes")
        return resolved

    @staticmethod
    def merge(funds: List[Fund], quotes: Dict[str, NavQuote]) -> List[Fund]:
        """Apply resolved quotes; funds without a quote are returned unchanged"""
        merged = []
        for fund in funds:
            quote = quotes.get(fund.scheme_code)
            merged.append(fund.with_quote(quote) if quote else fund)
        return merged

    async def refresh(self, funds: List[Fund], repository: FundWriter) -> RefreshOutcome:
        """
        Reconcile and persist a user's funds

        Raises:
            ValidationError: no funds to refresh
            NoDataResolved: no scheme code resolved
        """
        if not funds:
            raise ValidationError("No funds to refresh.")

        quotes = await self.fetch_latest_navs(fund.scheme_code for fund in funds)
        outcome = RefreshOutcome(funds=self.merge(funds, quotes))

        for fund in outcome.funds:
            if fund.scheme_code not in quotes:
                outcome.unresolved.append(fund.scheme_code)
                continue
            try:
                await repository.save(fund)
            except PersistenceError as exc:
                logger.error(f"Failed to persist refreshed NAV for {fund.id}: {exc.message}")
                outcome.persistence_failures[fund.id] = exc.message
                continue
            outcome.updated.append(fund.id)

        return outcome


def _normalize_codes(scheme_codes: Iterable[str]) -> List[str]:
    codes: List[str] = []
    for raw in scheme_codes:
        code = (raw or "").strip() if isinstance(raw, str) else ""
        if not code:
            raise ValidationError("Scheme codes must be non-empty strings.")
        if code not in codes:
            codes.append(code)
    if not codes:
        raise ValidationError("Scheme codes are required")
    return codes
