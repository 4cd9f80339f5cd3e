"""Route modules exposed by the API package."""

from . import audit, cases, moderation, ping, replies, reports, roles, settings

__all__ = ["audit", "cases", "moderation", "ping", "replies", "reports", "roles", "settings"]
