"""
NAV data provider protocol for type hints.
"""

from __future__ import annotations

from typing import Protocol, List, Dict

from app.domain.models import NavQuote


class NavDataProvider(Protocol):
    async def get_latest_nav(self, scheme_code: str) -> NavQuote:
        """Raises UpstreamUnavailable when the code cannot be resolved."""
        ...

    async def get_nav_history(self, scheme_code: str, limit: int = 365) -> List[Dict[str, str]]:
        """Raw {date, nav} entries, newest first, at most `limit` long."""
        ...
