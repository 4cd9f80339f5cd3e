import pytest

from casework.audit.models import AuditAction
from casework.errors import PermissionDenied, ValidationError
from casework.permissions import Role
from casework.roles.service import SYSTEM_ACTOR


@pytest.mark.asyncio
async def test_unassigned_users_are_plain_users(role_service):
    assert await role_service.get_role("buyer-1") == Role.USER


@pytest.mark.asyncio
async def test_set_role_requires_admin(role_service, role_repository, audit_repository):
    with pytest.raises(PermissionDenied):
        await role_service.set_role("agent-7", Role.MODERATOR, actor_id="agent-1", actor_role=Role.SUPPORT)

    assert await role_service.get_role("agent-7") == Role.USER
    assert await role_repository.count_assignments("agent-7") == 0
    assert await audit_repository.list_for_target("agent-7") == []


@pytest.mark.asyncio
async def test_set_role_replaces_single_assignment(role_service, role_repository, audit_repository):
    first = await role_service.set_role("agent-7", Role.SUPPORT, actor_id="admin-1", actor_role=Role.ADMIN)
    assert first.role == Role.SUPPORT
    assert first.assigned_by == "admin-1"

    second = await role_service.set_role("agent-7", "moderator", actor_id="admin-1", actor_role=Role.ADMIN)
    assert second.role == Role.MODERATOR

    assert await role_service.get_role("agent-7") == Role.MODERATOR
    assert await role_repository.count_assignments("agent-7") == 1

    entries = await audit_repository.list_for_target("agent-7")
    assert {entry.action_type for entry in entries} == {AuditAction.USER_ROLE_CHANGED}
    assert sorted(entry.reason for entry in entries) == [
        "Role changed from support to moderator",
        "Role changed from user to support",
    ]


@pytest.mark.asyncio
async def test_demotion_keeps_one_row(role_service, role_repository):
    await role_service.set_role("agent-7", Role.ADMIN, actor_id="admin-1", actor_role=Role.ADMIN)
    await role_service.set_role("agent-7", Role.USER, actor_id="admin-1", actor_role=Role.ADMIN)

    assert await role_service.get_role("agent-7") == Role.USER
    assert await role_repository.count_assignments("agent-7") == 1


@pytest.mark.asyncio
async def test_set_role_rejects_unknown_role(role_service):
    with pytest.raises(ValidationError):
        await role_service.set_role("agent-7", "superuser", actor_id="admin-1", actor_role=Role.ADMIN)


@pytest.mark.asyncio
async def test_bootstrap_admin_runs_once(role_service, audit_repository):
    assignment = await role_service.bootstrap_admin("root")
    assert assignment is not None
    assert assignment.role == Role.ADMIN
    assert assignment.assigned_by == SYSTEM_ACTOR

    assert await role_service.bootstrap_admin("root") is None

    entries = await audit_repository.list_for_target("root")
    assert len(entries) == 1
    assert entries[0].actor_id == SYSTEM_ACTOR
    assert entries[0].metadata == {"old_role": "user", "new_role": "admin"}


@pytest.mark.asyncio
async def test_bootstrap_admin_keeps_existing_assignment(role_service):
    await role_service.set_role("root", Role.SUPPORT, actor_id="admin-1", actor_role=Role.ADMIN)

    assert await role_service.bootstrap_admin("root") is None
    assert await role_service.get_role("root") == Role.SUPPORT
