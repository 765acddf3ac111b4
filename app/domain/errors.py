"""
Domain Errors
Every failure a portfolio operation can surface to its caller
"""


class PortfolioError(Exception):
    """Base class for portfolio errors. The message is user-facing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortfolioError):
    """Missing/duplicate scheme code or invalid parameters. Never retried."""


class FundNotFound(PortfolioError):
    """Fund id does not exist in the user's portfolio"""


class UpstreamUnavailable(PortfolioError):
    """NAV provider unreachable, non-2xx, or returned an unusable payload"""

    def __init__(self, message: str, scheme_code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.scheme_code = scheme_code
        self.status_code = status_code


class NoDataResolved(PortfolioError):
    """Batch reconciliation where every scheme code failed"""


class PersistenceError(PortfolioError):
    """Write to fund storage failed"""

    def __init__(self, message: str, fund_id: str | None = None):
        super().__init__(message)
        self.fund_id = fund_id
