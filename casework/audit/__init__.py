"""Append-only audit ledger."""

from .models import AuditAction, AuditLogEntry, AuditQuery, TargetType
from .repository import AuditLogRepository
from .service import AuditLogService

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "AuditLogRepository",
    "AuditLogService",
    "AuditQuery",
    "TargetType",
]
