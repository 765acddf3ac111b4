"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    Frequency,

    # Entities
    DEFAULT_CATEGORY,
    Fund,
    NavHistoryEntry,
    NavQuote,
    ProjectionPoint,
    UserContext,
)

__all__ = [
    # Enums
    "Frequency",

    # Entities
    "DEFAULT_CATEGORY",
    "Fund",
    "NavHistoryEntry",
    "NavQuote",
    "ProjectionPoint",
    "UserContext",
]
