"""Database models and utilities."""

from .models import (
    AuditLogTable,
    CaseMessageTable,
    CaseTable,
    ListingTable,
    SystemSettingTable,
    UserAccountTable,
    UserRoleTable,
)

__all__ = [
    "AuditLogTable",
    "CaseMessageTable",
    "CaseTable",
    "ListingTable",
    "SystemSettingTable",
    "UserAccountTable",
    "UserRoleTable",
]
