"""Shared CLI helpers for ``relayai-diag`` and ``relayai-api``."""

from __future__ import annotations

import argparse

from relayai.core.config.schema import ClientConfig
from relayai.core.telemetry.logging import configure_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def base_parser(name: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=name, description=description)
    parser.add_argument("--config", default=None, help="Instance config file merged over config/defaults.yaml")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override telemetry.log_level from the config",
    )
    return parser


def setup_logging(args: argparse.Namespace, cfg: ClientConfig) -> None:
    configure_logging(cfg.telemetry, log_level=args.log_level)
