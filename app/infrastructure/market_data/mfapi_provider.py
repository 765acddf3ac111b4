"""
mfapi.in NAV Provider
Fetches latest and historical NAVs for Indian mutual fund scheme codes

Payload shape (GET /mf/{scheme_code}):
    {"meta": {"scheme_name": ...}, "data": [{"date": "dd-MM-yyyy", "nav": "123.45"}, ...]}
with `data` ordered newest first.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from app.domain.errors import UpstreamUnavailable
from app.domain.models import NavQuote

logger = logging.getLogger(__name__)


class MfApiProvider:
    """
    mfapi.in NAV provider

    One HTTP request per scheme code. No retries; a failed request is
    reported to the caller as UpstreamUnavailable.
    """

    DEFAULT_BASE_URL = "https://api.mfapi.in"

    HEADERS = {
        'Accept': 'application/json',
        'User-Agent': 'mf-portfolio-tracker/1.0',
    }

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize provider

        Args:
            base_url: API root, without trailing slash
            timeout: Per-request timeout in seconds
            client: Pre-built client (tests inject one with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.HEADERS,
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request_scheme(self, scheme_code: str) -> Dict[str, Any]:
        """
        GET /mf/{scheme_code} and return the decoded JSON object

        Raises:
            UpstreamUnavailable: network error, unusable code, non-2xx, or non-JSON body
        """
        url = f"{self.base_url}/mf/{scheme_code}"
        client = await self._get_client()
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamUnavailable(
                f"Could not reach NAV provider for scheme {scheme_code}: {exc}",
                scheme_code=scheme_code,
            ) from exc

        if not response.is_success:
            logger.warning(f"mfapi status {response.status_code} for {scheme_code}: {response.text[:200]}")
            raise UpstreamUnavailable(
                f"Failed to fetch data for scheme {scheme_code}.",
                scheme_code=scheme_code,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(
                f"Invalid data format received for scheme {scheme_code}.",
                scheme_code=scheme_code,
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamUnavailable(
                f"Invalid data format received for scheme {scheme_code}.",
                scheme_code=scheme_code,
            )
        return payload

    async def get_latest_nav(self, scheme_code: str) -> NavQuote:
        """
        Get the most recently published NAV for a scheme

        Args:
            scheme_code: mfapi.in scheme code

        Returns:
            NavQuote with parsed float NAV

        Raises:
            UpstreamUnavailable: request failed, payload malformed, or NAV unparsable
        """
        payload = await self._request_scheme(scheme_code)

        data = payload.get("data")
        latest = data[0] if isinstance(data, list) and data else None
        if not isinstance(latest, dict):
            raise UpstreamUnavailable(f"No NAV data for scheme {scheme_code}.", scheme_code=scheme_code)

        nav = _parse_nav(latest.get("nav"))
        nav_date = latest.get("date")
        if nav is None or not nav_date:
            raise UpstreamUnavailable(
                f"Unparsable NAV entry for scheme {scheme_code}: {latest!r}",
                scheme_code=scheme_code,
            )

        meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}
        name = str(meta.get("scheme_name") or "").strip()

        return NavQuote(scheme_code=scheme_code, name=name, nav=nav, date=str(nav_date))

    async def get_nav_history(self, scheme_code: str, limit: int = 365) -> List[Dict[str, str]]:
        """
        Get raw historical NAV entries, newest first

        Args:
            scheme_code: mfapi.in scheme code
            limit: Maximum number of entries to keep

        Returns:
            List of {"date": "dd-MM-yyyy", "nav": "<string>"}
        """
        payload = await self._request_scheme(scheme_code)

        data = payload.get("data")
        if not isinstance(data, list):
            raise UpstreamUnavailable(
                "Invalid data format received from API.",
                scheme_code=scheme_code,
            )

        history = []
        for item in data[:limit]:
            if not isinstance(item, dict):
                continue
            history.append({"date": str(item.get("date") or ""), "nav": str(item.get("nav") or "")})
        return history


def _parse_nav(value: Any) -> Optional[float]:
    """Parse an upstream NAV string; None for missing, NaN or infinite values."""
    try:
        nav = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(nav) or math.isinf(nav):
        return None
    return nav
