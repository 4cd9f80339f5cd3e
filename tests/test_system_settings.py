import pytest

from casework.audit.models import AuditAction, TargetType
from casework.errors import NotFound, PermissionDenied
from casework.permissions import Role


@pytest.mark.asyncio
async def test_seed_defines_missing_settings_only(settings_service):
    await settings_service.seed({"support.auto_close_days": 14, "marketplace.max_active_listings": 200})
    await settings_service.update_setting(
        "support.auto_close_days", 30, actor_id="admin-1", actor_role=Role.ADMIN
    )

    await settings_service.seed({"support.auto_close_days": 14})

    settings = {item.key: item.value for item in await settings_service.list_settings(caller_role=Role.SUPPORT)}
    assert settings == {"marketplace.max_active_listings": 200, "support.auto_close_days": 30}


@pytest.mark.asyncio
async def test_update_setting_is_audited(settings_service, audit_repository):
    await settings_service.seed({"moderation.warnings_before_restrict": 3})

    updated = await settings_service.update_setting(
        "moderation.warnings_before_restrict", 5, actor_id="admin-1", actor_role=Role.ADMIN
    )

    assert updated.value == 5
    entries = await audit_repository.list_for_target("moderation.warnings_before_restrict")
    assert len(entries) == 1
    assert entries[0].action_type == AuditAction.SETTING_UPDATED
    assert entries[0].target_type == TargetType.SYSTEM
    assert entries[0].reason == "Setting moderation.warnings_before_restrict updated to 5"


@pytest.mark.asyncio
async def test_update_setting_guards(settings_service, audit_repository):
    await settings_service.seed({"support.auto_close_days": 14})

    with pytest.raises(PermissionDenied):
        await settings_service.update_setting("support.auto_close_days", 1, actor_id="agent-7", actor_role=Role.SUPPORT)
    with pytest.raises(NotFound):
        await settings_service.update_setting("unknown.key", 1, actor_id="admin-1", actor_role=Role.ADMIN)
    with pytest.raises(PermissionDenied):
        await settings_service.list_settings(caller_role=Role.USER)

    assert await audit_repository.list_for_target("support.auto_close_days") == []
    assert await audit_repository.list_for_target("unknown.key") == []
