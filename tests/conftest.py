import pytest
import pytest_asyncio

from casework.audit import AuditLogRepository, AuditLogService
from casework.cases import CaseRepository, CaseService
from casework.db import Database
from casework.moderation import ModerationRepository, ModerationService
from casework.replies import SavedReplyRepository, SavedReplyService
from casework.reporting import ReportingRepository, ReportingService
from casework.roles import RoleRepository, RoleService
from casework.system import SystemSettingsRepository, SystemSettingsService


@pytest_asyncio.fixture
async def database(tmp_path):
    # File backed so concurrent transactions use separate connections and real locks.
    db = Database.from_dsn(f"sqlite+aiosqlite:///{tmp_path / 'casework.db'}", lock_timeout_ms=5000)
    await db.ensure_schema()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def audit_repository(database):
    return AuditLogRepository(database)


@pytest.fixture
def audit_service(audit_repository):
    return AuditLogService(audit_repository)


@pytest.fixture
def case_service(database):
    return CaseService(CaseRepository(database))


@pytest.fixture
def moderation_service(database):
    return ModerationService(ModerationRepository(database))


@pytest.fixture
def role_repository(database):
    return RoleRepository(database)


@pytest.fixture
def role_service(role_repository):
    return RoleService(role_repository)


@pytest.fixture
def reporting_service(database, audit_repository):
    return ReportingService(ReportingRepository(database), audit_repository)


@pytest.fixture
def settings_service(database):
    return SystemSettingsService(SystemSettingsRepository(database))


@pytest.fixture
def reply_service(database):
    return SavedReplyService(SavedReplyRepository(database))
