"""Process-wide logging and OpenTelemetry tracing for casework."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from casework import __version__
from casework.core.config import Settings

_active_provider: TracerProvider | None = None

# Driver and ORM loggers are capped at WARNING whatever the casework level is.
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg")


class TraceContextFilter(logging.Filter):
    """Stamp records with the current span's ids so log lines join up with traces.

    Records outside a sampled span get ``-`` for both fields, which keeps
    ``%(trace_id)s`` safe to use in any configured format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = trace.get_current_span().get_span_context()
        if context.is_valid:
            record.trace_id = format(context.trace_id, "032x")
            record.span_id = format(context.span_id, "016x")
        else:
            record.trace_id = "-"
            record.span_id = "-"
        return True


def parse_headers(header_string: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` OTLP header strings, skipping malformed pairs."""

    headers: dict[str, str] = {}
    for item in (header_string or "").split(","):
        key, separator, value = item.partition("=")
        if separator and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def build_logging_config(settings: Settings) -> dict[str, Any]:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    loggers: dict[str, dict[str, Any]] = {"casework": {"level": level}}
    for name in _QUIET_LOGGERS:
        loggers[name] = {"level": max(level, logging.WARNING)}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"trace_context": {"()": TraceContextFilter}},
        "formatters": {"casework": {"format": settings.log_format}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "casework",
                "filters": ["trace_context"],
            }
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": level},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply :func:`build_logging_config` and return the ``casework`` logger."""

    dictConfig(build_logging_config(settings))
    logger = logging.getLogger("casework")
    logger.debug("Logging configured for %s (%s)", settings.app_name, settings.environment)
    return logger


def _exporter(settings: Settings) -> OTLPSpanExporter:
    options: dict[str, Any] = {}
    if settings.otel_exporter_otlp_endpoint:
        options["endpoint"] = settings.otel_exporter_otlp_endpoint
    headers = parse_headers(settings.otel_exporter_otlp_headers)
    if headers:
        options["headers"] = headers
    return OTLPSpanExporter(**options)


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install a global tracer provider exporting over OTLP/HTTP.

    Returns None when tracing is disabled or a provider is already installed,
    so only the first lifespan owns shutdown.
    """

    global _active_provider

    if _active_provider is not None or not settings.otel_enabled:
        return None

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.otel_service_name,
                "service.version": __version__,
                "deployment.environment": settings.environment,
            }
        )
    )
    provider.add_span_processor(BatchSpanProcessor(_exporter(settings)))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None
