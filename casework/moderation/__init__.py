"""Audited moderation of user accounts and marketplace listings."""

from .models import ListingAction, ListingState, ListingStatus, ModerationState, UserAction
from .repository import ModerationRepository
from .service import ModerationService

__all__ = [
    "ListingAction",
    "ListingState",
    "ListingStatus",
    "ModerationRepository",
    "ModerationService",
    "ModerationState",
    "UserAction",
]
