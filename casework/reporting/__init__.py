"""Read-only dashboard views."""

from .repository import ReportingRepository
from .service import DashboardCounts, ReportingService

__all__ = ["DashboardCounts", "ReportingRepository", "ReportingService"]
