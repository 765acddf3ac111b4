"""
NAV data provider factory (settings-driven).
"""

from __future__ import annotations

from typing import Optional

import httpx

from app.config import settings
from app.infrastructure.market_data.mfapi_provider import MfApiProvider
from app.infrastructure.market_data.types import NavDataProvider


def get_nav_data_provider(client: Optional[httpx.AsyncClient] = None) -> NavDataProvider:
    return MfApiProvider(
        base_url=settings.NAV_API_BASE_URL,
        timeout=float(settings.NAV_API_TIMEOUT),
        client=client,
    )
