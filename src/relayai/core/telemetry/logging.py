from __future__ import annotations

import logging

import structlog

from relayai.core.config.schema import TelemetryConfig
from relayai.core.runtime.errors import redact_secrets

_configured = False


def redact_event_strings(_logger, _method_name: str, event_dict: dict) -> dict:
    """Mask api keys and bearer tokens in every string field before rendering."""
    return {key: redact_secrets(value) if isinstance(value, str) else value for key, value in event_dict.items()}


def configure_logging(
    telemetry: TelemetryConfig | None = None,
    *,
    log_level: str | None = None,
    json_logs: bool | None = None,
) -> None:
    global _configured
    telemetry = telemetry or TelemetryConfig()
    level_name = (log_level or telemetry.log_level).upper()
    use_json = telemetry.json_logs if json_logs is None else json_logs

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        redact_event_strings,
    ]
    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str):
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
