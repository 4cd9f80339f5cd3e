from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from casework.dependencies.auth import Actor, get_current_actor, resolve_actor_id, role_required
from casework.errors import PermissionDenied, ValidationError
from casework.permissions import ADMIN_ROLES, STAFF_ROLES, Role, ensure_role, is_staff


def test_ensure_role_returns_parsed_role():
    assert ensure_role("moderator", STAFF_ROLES, operation="test") == Role.MODERATOR


def test_ensure_role_denies_and_logs(caplog):
    with pytest.raises(PermissionDenied):
        ensure_role(Role.SUPPORT, ADMIN_ROLES, operation="user ban", actor_id="agent-7")

    assert "Permission denied for user ban" in caplog.text
    assert "agent-7" in caplog.text


def test_unknown_role_is_a_validation_error():
    with pytest.raises(ValidationError):
        is_staff("owner")
    assert is_staff(Role.SUPPORT)
    assert not is_staff("user")


def test_resolve_actor_id_uses_configured_tokens():
    assert resolve_actor_id("admin-token") == "admin"

    with pytest.raises(HTTPException) as missing:
        resolve_actor_id(None)
    assert missing.value.status_code == 401

    with pytest.raises(HTTPException) as unknown:
        resolve_actor_id("forged")
    assert unknown.value.status_code == 401


@pytest.mark.asyncio
async def test_get_current_actor_loads_role_once():
    roles = AsyncMock()
    roles.get_role = AsyncMock(return_value=Role.SUPPORT)
    request = SimpleNamespace(state=SimpleNamespace())
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="support-token")

    actor = await get_current_actor(credentials, request, roles)  # type: ignore[arg-type]
    again = await get_current_actor(credentials, request, roles)  # type: ignore[arg-type]

    assert actor.actor_id == "support-agent"
    assert actor.role == Role.SUPPORT
    assert actor.is_staff
    assert again is actor
    roles.get_role.assert_awaited_once_with("support-agent")


@pytest.mark.asyncio
async def test_role_required_allows_authorized_actor():
    dependency = role_required(ADMIN_ROLES)
    result = await dependency(Actor("alice", Role.ADMIN))  # type: ignore[arg-type]
    assert result.actor_id == "alice"


@pytest.mark.asyncio
async def test_role_required_rejects_unauthorized_actor():
    dependency = role_required(STAFF_ROLES)
    with pytest.raises(HTTPException) as exc:
        await dependency(Actor("bob", Role.USER))  # type: ignore[arg-type]

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"
