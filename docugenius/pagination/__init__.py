"""
Pagination module for DocuGenius.

Distributes the document's blocks over fixed-height pages.
"""

from .page import Page, PageLayout
from .oracle import MeasurementOracle, StaticHeightOracle, TextMetricsOracle
from .selection import Selection
from .host import PaginationHost
from .engine import BalanceOutcome, PaginationEngine
from .scheduler import PaginationScheduler, PendingWork, WorkReason

__all__ = [
    "Page",
    "PageLayout",
    "MeasurementOracle",
    "StaticHeightOracle",
    "TextMetricsOracle",
    "Selection",
    "PaginationHost",
    "BalanceOutcome",
    "PaginationEngine",
    "PaginationScheduler",
    "PendingWork",
    "WorkReason",
]
