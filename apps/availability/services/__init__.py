"""Availability services, constructed per request."""

from .analytics import AnalyticsAggregator, AnalyticsResult
from .blocks import BlockStore, BulkBlockResult
from .calendar import CalendarExporter
from .resolver import ConflictResolver

__all__ = [
    "AnalyticsAggregator",
    "AnalyticsResult",
    "BlockStore",
    "BulkBlockResult",
    "CalendarExporter",
    "ConflictResolver",
]
