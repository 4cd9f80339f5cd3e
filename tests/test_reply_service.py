from __future__ import annotations

import pytest

from casework.audit.models import AuditAction, TargetType
from casework.errors import NotFound, PermissionDenied, ValidationError
from casework.permissions import Role


async def _create(reply_service, title: str, content: str, category: str | None = None):
    return await reply_service.create_reply(
        actor_id="admin-1", actor_role=Role.ADMIN, title=title, content=content, category=category
    )


@pytest.mark.asyncio
async def test_replies_are_listed_by_title(reply_service):
    await _create(reply_service, "Shipping delay", "Your parcel is on its way.", "shipping")
    await _create(reply_service, "Refund issued", "We refunded the full amount.", "Refunds")
    await _create(reply_service, "Account locked", "Reset your password from the login page.")

    replies = await reply_service.list_replies(caller_role=Role.SUPPORT)

    assert [reply.title for reply in replies] == ["Account locked", "Refund issued", "Shipping delay"]


@pytest.mark.asyncio
async def test_search_matches_title_content_and_category(reply_service):
    await _create(reply_service, "Shipping delay", "Your parcel is on its way.", "logistics")
    await _create(reply_service, "Refund issued", "We refunded the full amount.", "Billing")
    await _create(reply_service, "Account locked", "Reset your PASSWORD from the login page.")

    async def titles(term):
        replies = await reply_service.list_replies(caller_role=Role.MODERATOR, search=term)
        return [reply.title for reply in replies]

    assert await titles("refund") == ["Refund issued"]
    assert await titles("password") == ["Account locked"]
    assert await titles("LOGISTICS") == ["Shipping delay"]
    assert await titles("100%") == []
    assert len(await titles("   ")) == 3


@pytest.mark.asyncio
async def test_create_is_admin_only_and_audited(reply_service, audit_repository):
    with pytest.raises(PermissionDenied):
        await reply_service.create_reply(
            actor_id="agent-7", actor_role=Role.SUPPORT, title="Greeting", content="Hello!"
        )
    assert await reply_service.list_replies(caller_role=Role.ADMIN) == []

    reply = await _create(reply_service, "  Greeting  ", "Hello!", "  ")

    assert reply.title == "Greeting"
    assert reply.category is None
    assert reply.created_by == "admin-1"
    entries = await audit_repository.list_for_target(reply.id)
    assert len(entries) == 1
    assert entries[0].action_type == AuditAction.REPLY_TEMPLATE_CREATED
    assert entries[0].target_type == TargetType.SAVED_REPLY
    assert entries[0].actor_role == Role.ADMIN


@pytest.mark.asyncio
async def test_create_rejects_blank_fields(reply_service):
    with pytest.raises(ValidationError):
        await _create(reply_service, "   ", "Hello!")
    with pytest.raises(ValidationError):
        await _create(reply_service, "Greeting", "")
    with pytest.raises(ValidationError):
        await _create(reply_service, "x" * 256, "Hello!")


@pytest.mark.asyncio
async def test_update_changes_only_supplied_fields(reply_service, audit_repository):
    reply = await _create(reply_service, "Greeting", "Hello!", "general")

    updated = await reply_service.update_reply(
        reply.id, {"content": "Hi there!", "category": None}, actor_id="admin-1", actor_role=Role.ADMIN
    )

    assert updated.title == "Greeting"
    assert updated.content == "Hi there!"
    assert updated.category is None
    assert updated.updated_at >= reply.updated_at

    fetched = await reply_service.get_reply(reply.id, caller_role=Role.SUPPORT)
    assert fetched == updated

    entries = await audit_repository.list_for_target(reply.id)
    assert sorted(entry.action_type.value for entry in entries) == [
        "reply_template_created",
        "reply_template_updated",
    ]
    update_entry = next(entry for entry in entries if entry.action_type == AuditAction.REPLY_TEMPLATE_UPDATED)
    assert update_entry.metadata == {"fields": ["category", "content"]}


@pytest.mark.asyncio
async def test_update_errors(reply_service, audit_repository):
    reply = await _create(reply_service, "Greeting", "Hello!")

    with pytest.raises(ValidationError):
        await reply_service.update_reply(reply.id, {}, actor_id="admin-1", actor_role=Role.ADMIN)
    with pytest.raises(ValidationError):
        await reply_service.update_reply(reply.id, {"owner": "x"}, actor_id="admin-1", actor_role=Role.ADMIN)
    with pytest.raises(ValidationError):
        await reply_service.update_reply(reply.id, {"title": " "}, actor_id="admin-1", actor_role=Role.ADMIN)
    with pytest.raises(PermissionDenied):
        await reply_service.update_reply(reply.id, {"title": "Hey"}, actor_id="mod-3", actor_role=Role.MODERATOR)
    with pytest.raises(NotFound):
        await reply_service.update_reply("missing", {"title": "Hey"}, actor_id="admin-1", actor_role=Role.ADMIN)

    assert len(await audit_repository.list_for_target(reply.id)) == 1
    assert await audit_repository.list_for_target("missing") == []


@pytest.mark.asyncio
async def test_delete_removes_reply_and_is_audited(reply_service, audit_repository):
    reply = await _create(reply_service, "Greeting", "Hello!")

    with pytest.raises(PermissionDenied):
        await reply_service.delete_reply(reply.id, actor_id="agent-7", actor_role=Role.SUPPORT)

    await reply_service.delete_reply(reply.id, actor_id="admin-1", actor_role=Role.ADMIN)

    with pytest.raises(NotFound):
        await reply_service.get_reply(reply.id, caller_role=Role.SUPPORT)
    with pytest.raises(NotFound):
        await reply_service.delete_reply(reply.id, actor_id="admin-1", actor_role=Role.ADMIN)

    entries = await audit_repository.list_for_target(reply.id)
    deleted = [entry for entry in entries if entry.action_type == AuditAction.REPLY_TEMPLATE_DELETED]
    assert len(deleted) == 1
    assert deleted[0].reason == "Reply template 'Greeting' deleted"


@pytest.mark.asyncio
async def test_library_is_staff_only(reply_service):
    reply = await _create(reply_service, "Greeting", "Hello!")

    with pytest.raises(PermissionDenied):
        await reply_service.list_replies(caller_role=Role.USER)
    with pytest.raises(PermissionDenied):
        await reply_service.get_reply(reply.id, caller_role=Role.USER)
