from contextlib import asynccontextmanager

from fastapi import FastAPI

from casework.api.errors import register_exception_handlers
from casework.api.routes import audit, cases, moderation, ping, replies, reports, roles, settings
from casework.audit.repository import AuditLogRepository
from casework.audit.service import AuditLogService
from casework.cases.repository import CaseRepository
from casework.cases.service import CaseService
from casework.core.config import Settings, get_settings
from casework.core.logging import configure_logging, init_tracer, shutdown_tracer
from casework.db import Database
from casework.moderation.repository import ModerationRepository
from casework.moderation.service import ModerationService
from casework.replies.repository import SavedReplyRepository
from casework.replies.service import SavedReplyService
from casework.reporting.repository import ReportingRepository
from casework.reporting.service import ReportingService
from casework.roles.repository import RoleRepository
from casework.roles.service import RoleService
from casework.system.settings import SystemSettingsRepository, SystemSettingsService


def build_services(app: FastAPI, database: Database, settings: Settings) -> None:
    """Wire repositories and services onto ``app.state``."""

    audit_repository = AuditLogRepository(database)
    app.state.database = database
    app.state.audit_service = AuditLogService(audit_repository, default_limit=settings.audit_query_limit)
    app.state.case_service = CaseService(CaseRepository(database))
    app.state.moderation_service = ModerationService(ModerationRepository(database))
    app.state.role_service = RoleService(RoleRepository(database))
    app.state.reporting_service = ReportingService(
        ReportingRepository(database),
        audit_repository,
        default_limit=settings.queue_limit,
    )
    app.state.settings_service = SystemSettingsService(SystemSettingsRepository(database))
    app.state.reply_service = SavedReplyService(SavedReplyRepository(database))


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider

    database = Database.from_dsn(settings.database_dsn, lock_timeout_ms=settings.lock_timeout_ms)
    try:
        await database.ensure_schema()
        build_services(app, database, settings)
        for user_id in settings.bootstrap_admins:
            await app.state.role_service.bootstrap_admin(user_id)
        await app.state.settings_service.seed(settings.default_system_settings)
        logger.info("Casework services ready (%s)", settings.environment)
        yield
    finally:
        await database.dispose()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    config = get_settings()
    app = FastAPI(title=config.app_name, lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(ping.router)
    app.include_router(cases.router)
    app.include_router(moderation.router)
    app.include_router(audit.router)
    app.include_router(roles.router)
    app.include_router(reports.router)
    app.include_router(settings.router)
    app.include_router(replies.router)
    return app


app = create_app()
