from __future__ import annotations

from relayai.core.config.loader import load_client_config
from relayai.core.providers.dispatcher import AIDispatcher
from relayai.core.telemetry.logging import configure_logging


def build_dispatcher(config_path: str | None = None, *, log_level: str | None = None) -> AIDispatcher:
    cfg = load_client_config(instance_path=config_path)
    configure_logging(cfg.telemetry, log_level=log_level)
    return AIDispatcher(cfg)
