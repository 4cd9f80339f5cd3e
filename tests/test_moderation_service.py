from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError

from casework.audit.models import AuditAction, TargetType
from casework.errors import InvalidTransition, NotFound, PermissionDenied, ValidationError
from casework.moderation.models import ListingAction, ListingStatus, UserAction
from casework.moderation.repository import ModerationRepository
from casework.permissions import Role


@pytest.mark.asyncio
async def test_ban_is_recorded_and_repeatable(moderation_service, audit_repository):
    await moderation_service.register_account("seller-1")

    state, audit = await moderation_service.apply_user_action(
        "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.BAN, reason="fraud"
    )
    assert state.is_banned is True
    assert state.admin_notes == "fraud"
    assert audit.action_type == AuditAction.USER_BANNED
    assert audit.target_type == TargetType.USER
    assert audit.target_id == "seller-1"
    assert audit.reason == "fraud"
    assert audit.actor_role == Role.ADMIN

    again, second = await moderation_service.apply_user_action(
        "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action="ban", reason="fraud"
    )
    assert again.is_banned is True
    assert second.id != audit.id

    entries = await audit_repository.list_for_target("seller-1")
    assert [entry.action_type for entry in entries] == [AuditAction.USER_BANNED, AuditAction.USER_BANNED]


@pytest.mark.asyncio
async def test_unban_clears_every_flag(moderation_service):
    await moderation_service.register_account("seller-1")

    await moderation_service.apply_user_action(
        "seller-1", actor_id="agent-7", actor_role=Role.SUPPORT, action=UserAction.WARN, reason="spam"
    )
    await moderation_service.apply_user_action(
        "seller-1", actor_id="mod-3", actor_role=Role.MODERATOR, action=UserAction.RESTRICT, reason="spam"
    )
    await moderation_service.apply_user_action(
        "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.SUSPEND, reason="spam"
    )
    flagged, _ = await moderation_service.apply_user_action(
        "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.BAN, reason="spam"
    )
    assert flagged.is_restricted and flagged.is_suspended and flagged.is_banned

    restored, audit = await moderation_service.apply_user_action(
        "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.UNBAN, reason="appeal granted"
    )
    assert not restored.is_banned
    assert not restored.is_suspended
    assert not restored.is_restricted
    assert restored.warnings_count == 1
    assert audit.action_type == AuditAction.USER_RESTORED


@pytest.mark.asyncio
async def test_unban_of_clean_account_still_succeeds(moderation_service):
    await moderation_service.register_account("seller-1")

    state, audit = await moderation_service.apply_user_action(
        "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.UNBAN, reason="cleanup"
    )
    assert not state.is_flagged
    assert audit.action_type == AuditAction.USER_RESTORED


@pytest.mark.asyncio
@pytest.mark.parametrize("action", [UserAction.SUSPEND, UserAction.BAN, UserAction.UNBAN])
async def test_destructive_actions_require_admin(moderation_service, audit_repository, action):
    await moderation_service.register_account("seller-1")

    for role in (Role.USER, Role.SUPPORT, Role.MODERATOR):
        with pytest.raises(PermissionDenied):
            await moderation_service.apply_user_action(
                "seller-1", actor_id="someone", actor_role=role, action=action, reason="fraud"
            )

    state = await moderation_service.get_user_state("seller-1", caller_role=Role.ADMIN)
    assert not state.is_flagged
    assert await audit_repository.list_for_target("seller-1") == []


@pytest.mark.asyncio
async def test_user_action_rejects_bad_input(moderation_service, audit_repository):
    await moderation_service.register_account("seller-1")

    with pytest.raises(ValidationError):
        await moderation_service.apply_user_action(
            "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.BAN, reason="   "
        )
    with pytest.raises(ValidationError):
        await moderation_service.apply_user_action(
            "seller-1", actor_id="admin-1", actor_role=Role.ADMIN, action="delete", reason="fraud"
        )
    with pytest.raises(PermissionDenied):
        await moderation_service.apply_user_action(
            "seller-1", actor_id="buyer-1", actor_role=Role.USER, action=UserAction.WARN, reason="rude"
        )
    with pytest.raises(NotFound):
        await moderation_service.apply_user_action(
            "ghost", actor_id="admin-1", actor_role=Role.ADMIN, action=UserAction.BAN, reason="fraud"
        )

    assert await audit_repository.list_for_target("seller-1") == []
    assert await audit_repository.list_for_target("ghost") == []


@pytest.mark.asyncio
async def test_concurrent_warns_are_all_counted(moderation_service, audit_repository):
    await moderation_service.register_account("seller-1")

    results = await asyncio.gather(
        *(
            moderation_service.apply_user_action(
                "seller-1",
                actor_id=f"agent-{index}",
                actor_role=Role.SUPPORT,
                action=UserAction.WARN,
                reason=f"warning {index}",
            )
            for index in range(8)
        )
    )

    assert len(results) == 8
    state = await moderation_service.get_user_state("seller-1", caller_role=Role.SUPPORT)
    assert state.warnings_count == 8
    entries = await audit_repository.list_for_target("seller-1")
    assert len(entries) == 8
    assert {entry.action_type for entry in entries} == {AuditAction.USER_WARNED}


@pytest.mark.asyncio
async def test_get_user_state_requires_staff(moderation_service):
    await moderation_service.register_account("seller-1")

    with pytest.raises(PermissionDenied):
        await moderation_service.get_user_state("seller-1", caller_role=Role.USER)
    with pytest.raises(NotFound):
        await moderation_service.get_user_state("ghost", caller_role=Role.SUPPORT)


@pytest.mark.asyncio
async def test_register_account_is_idempotent(moderation_service):
    await moderation_service.register_account("seller-1")
    await moderation_service.apply_user_action(
        "seller-1", actor_id="agent-7", actor_role=Role.SUPPORT, action=UserAction.WARN, reason="late shipping"
    )

    state = await moderation_service.register_account("seller-1")
    assert state.warnings_count == 1


@pytest.mark.asyncio
async def test_listing_freeze_and_restore(moderation_service, audit_repository):
    await moderation_service.register_listing("listing-9", seller_id="seller-1")

    status, audit = await moderation_service.apply_listing_action(
        "listing-9", actor_id="mod-3", actor_role=Role.MODERATOR, action=ListingAction.FREEZE, reason="counterfeit"
    )
    assert status == ListingStatus.FROZEN
    assert audit.action_type == AuditAction.LISTING_FROZEN
    assert audit.target_type == TargetType.LISTING

    status, audit = await moderation_service.apply_listing_action(
        "listing-9", actor_id="mod-3", actor_role=Role.MODERATOR, action="restore", reason="verified authentic"
    )
    assert status == ListingStatus.ACTIVE
    assert audit.action_type == AuditAction.LISTING_RESTORED

    listing = await moderation_service.get_listing("listing-9", caller_role=Role.SUPPORT)
    assert listing.status == ListingStatus.ACTIVE
    assert listing.admin_notes == "verified authentic"
    assert len(await audit_repository.list_for_target("listing-9")) == 2


@pytest.mark.asyncio
async def test_restore_of_active_listing_is_rejected(moderation_service, audit_repository):
    await moderation_service.register_listing("listing-9", seller_id="seller-1")

    with pytest.raises(InvalidTransition):
        await moderation_service.apply_listing_action(
            "listing-9", actor_id="mod-3", actor_role=Role.MODERATOR, action=ListingAction.RESTORE, reason="oops"
        )
    assert await audit_repository.list_for_target("listing-9") == []


@pytest.mark.asyncio
async def test_listing_action_errors(moderation_service):
    await moderation_service.register_listing("listing-9", seller_id="seller-1")

    with pytest.raises(NotFound):
        await moderation_service.apply_listing_action(
            "missing", actor_id="mod-3", actor_role=Role.MODERATOR, action=ListingAction.REMOVE, reason="scam"
        )
    with pytest.raises(PermissionDenied):
        await moderation_service.apply_listing_action(
            "listing-9", actor_id="buyer-1", actor_role=Role.USER, action=ListingAction.REMOVE, reason="scam"
        )

    status, _ = await moderation_service.apply_listing_action(
        "listing-9", actor_id="admin-1", actor_role=Role.ADMIN, action=ListingAction.REMOVE, reason="scam"
    )
    assert status == ListingStatus.CANCELLED


@pytest.mark.asyncio
async def test_failed_audit_write_rolls_back_user_flags(database, moderation_service, audit_repository):
    await moderation_service.register_account("seller-1")
    _, audit = await moderation_service.apply_user_action(
        "seller-1", actor_id="agent-7", actor_role=Role.SUPPORT, action=UserAction.WARN, reason="spam"
    )
    repository = ModerationRepository(database)

    # Reusing an audit id makes the audit insert fail after the flag update ran.
    with pytest.raises(IntegrityError):
        await repository.apply_user_action("seller-1", action=UserAction.BAN, reason="fraud", audit=audit)
    with pytest.raises(IntegrityError):
        await repository.apply_user_action("seller-1", action=UserAction.WARN, reason="spam again", audit=audit)

    state = await moderation_service.get_user_state("seller-1", caller_role=Role.ADMIN)
    assert state.warnings_count == 1
    assert state.is_banned is False
    assert state.admin_notes == "spam"
    assert len(await audit_repository.list_for_target("seller-1")) == 1


@pytest.mark.asyncio
async def test_failed_audit_write_rolls_back_listing_status(database, moderation_service):
    await moderation_service.register_listing("listing-9", seller_id="seller-1")
    _, audit = await moderation_service.apply_listing_action(
        "listing-9", actor_id="mod-3", actor_role=Role.MODERATOR, action=ListingAction.FREEZE, reason="counterfeit"
    )
    repository = ModerationRepository(database)

    with pytest.raises(IntegrityError):
        await repository.set_listing_status(
            "listing-9", status=ListingStatus.CANCELLED, reason="scam", audit=audit
        )

    listing = await moderation_service.get_listing("listing-9", caller_role=Role.SUPPORT)
    assert listing.status == ListingStatus.FROZEN
    assert listing.admin_notes == "counterfeit"
