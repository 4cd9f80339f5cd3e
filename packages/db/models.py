"""SQLModel table definitions for the casework data layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


class CaseTable(SQLModel, table=True):
    """Support cases opened by users or by automation."""

    __tablename__ = "cases"
    __table_args__ = (Index("ix_cases_status", "status"),)

    id: str = Field(primary_key=True, index=True)
    owner_id: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    type: str = Field(sa_column=Column(String(50), nullable=False))
    subject: str = Field(sa_column=Column(String(255), nullable=False))
    status: str = Field(sa_column=Column(String(50), nullable=False))
    priority: str = Field(sa_column=Column(String(50), nullable=False))
    assigned_agent_id: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    resolved_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    resolved_by: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))


class CaseMessageTable(SQLModel, table=True):
    """Immutable messages belonging to a case thread."""

    __tablename__ = "case_messages"
    __table_args__ = (Index("ix_case_messages_case_created", "case_id", "created_at"),)

    id: str = Field(primary_key=True, index=True)
    case_id: str = Field(
        sa_column=Column(String(36), ForeignKey("cases.id"), nullable=False)
    )
    sender_id: str = Field(sa_column=Column(String(255), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    is_internal: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class AuditLogTable(SQLModel, table=True):
    """Append-only ledger of privileged actions."""

    __tablename__ = "audit_log"
    __table_args__ = (Index("ix_audit_log_target_created", "target_id", "created_at"),)

    id: str = Field(primary_key=True, index=True)
    actor_id: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    actor_role: str = Field(sa_column=Column(String(50), nullable=False))
    action_type: str = Field(sa_column=Column(String(100), nullable=False, index=True))
    target_type: str = Field(sa_column=Column(String(50), nullable=False))
    target_id: str = Field(sa_column=Column(String(255), nullable=False))
    reason: str = Field(sa_column=Column(Text, nullable=False))
    metadata_: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column("metadata", JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class UserAccountTable(SQLModel, table=True):
    """Moderation flags kept on a marketplace user account."""

    __tablename__ = "user_accounts"

    id: str = Field(primary_key=True, index=True)
    is_banned: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    is_suspended: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    is_restricted: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    warnings_count: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    admin_notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class ListingTable(SQLModel, table=True):
    """Marketplace listing columns touched by moderation."""

    __tablename__ = "marketplace_listings"

    id: str = Field(primary_key=True, index=True)
    seller_id: str = Field(sa_column=Column(String(255), nullable=False))
    status: str = Field(sa_column=Column(String(50), nullable=False, index=True))
    admin_notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class UserRoleTable(SQLModel, table=True):
    """Single current role per user; the primary key forbids duplicates."""

    __tablename__ = "user_roles"

    user_id: str = Field(primary_key=True)
    role: str = Field(sa_column=Column(String(50), nullable=False))
    assigned_by: str = Field(sa_column=Column(String(255), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class SystemSettingTable(SQLModel, table=True):
    """Platform level settings editable by administrators."""

    __tablename__ = "system_settings"

    key: str = Field(primary_key=True)
    value: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class SavedReplyTable(SQLModel, table=True):
    """Canned responses support agents paste into case threads."""

    __tablename__ = "saved_replies"

    id: str = Field(primary_key=True, index=True)
    title: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    content: str = Field(sa_column=Column(Text, nullable=False))
    category: str | None = Field(default=None, sa_column=Column(String(100), nullable=True))
    created_by: str = Field(sa_column=Column(String(255), nullable=False))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
