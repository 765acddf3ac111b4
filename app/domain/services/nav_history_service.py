"""
NAV History Service
Fetch once, derive the table (newest first) and chart (oldest first) views
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from app.domain.errors import UpstreamUnavailable, ValidationError
from app.domain.models import NavHistoryEntry
from app.infrastructure.market_data.types import NavDataProvider
from app.utils.time import format_display_date, parse_nav_date

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 365


class NavHistoryState(str, Enum):
    NO_FUND_SELECTED = "no_fund_selected"
    NOT_FETCHED = "not_fetched"
    EMPTY = "empty"
    ERROR = "error"
    LOADED = "loaded"


@dataclass(frozen=True)
class NavHistoryView:
    state: NavHistoryState
    scheme_code: Optional[str] = None
    table: List[NavHistoryEntry] = field(default_factory=list)
    chart: List[NavHistoryEntry] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def no_fund_selected(cls) -> "NavHistoryView":
        return cls(state=NavHistoryState.NO_FUND_SELECTED)

    @classmethod
    def not_fetched(cls, scheme_code: str) -> "NavHistoryView":
        return cls(state=NavHistoryState.NOT_FETCHED, scheme_code=scheme_code)


class NavHistoryService:
    def __init__(self, provider: NavDataProvider, limit: int = DEFAULT_HISTORY_LIMIT):
        self.provider = provider
        self.limit = limit

    async def fetch(self, scheme_code: str) -> List[NavHistoryEntry]:
        """
        Fetch up to `limit` entries, newest first, with derived display fields

        Raises:
            ValidationError: blank scheme code
            UpstreamUnavailable: provider unreachable or code invalid
        """
        code = (scheme_code or "").strip()
        if not code:
            raise ValidationError("Scheme code is required")

        raw = await self.provider.get_nav_history(code, limit=self.limit)
        return [to_history_entry(item) for item in raw[: self.limit]]

    async def view(self, scheme_code: Optional[str]) -> NavHistoryView:
        """
        Fetch history and classify the result into a display state

        Never raises for upstream failures; they become the ERROR state.
        """
        code = (scheme_code or "").strip()
        if not code:
            return NavHistoryView.no_fund_selected()

        try:
            table = await self.fetch(code)
        except UpstreamUnavailable as exc:
            logger.warning(f"NAV history fetch failed for {code}: {exc.message}")
            return NavHistoryView(state=NavHistoryState.ERROR, scheme_code=code, error=exc.message)

        if not table:
            return NavHistoryView(state=NavHistoryState.EMPTY, scheme_code=code)

        return NavHistoryView(
            state=NavHistoryState.LOADED,
            scheme_code=code,
            table=table,
            chart=chart_order(table),
        )


def chart_order(table: List[NavHistoryEntry]) -> List[NavHistoryEntry]:
    """Oldest first, for time-series charting"""
    return list(reversed(table))


def to_history_entry(item: Dict[str, str]) -> NavHistoryEntry:
    raw_date = str(item.get("date") or "")
    raw_nav = str(item.get("nav") or "")

    try:
        nav_value: Optional[float] = float(raw_nav)
    except ValueError:
        nav_value = None
    if nav_value is not None and not math.isfinite(nav_value):
        nav_value = None

    parsed = parse_nav_date(raw_date)
    formatted = format_display_date(parsed) if parsed else raw_date

    return NavHistoryEntry(date=raw_date, nav=raw_nav, nav_value=nav_value, formatted_date=formatted)
