"""structlog configuration for the API server and the scan CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

SERVICE_NAME = "bill-scanner"

# Event keys whose values are never written to the log
REDACTED_KEYS = frozenset({"api_key", "gemini_api_key", "authorization"})


def add_service(logger, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def redact_secrets(logger, method_name: str, event_dict: dict) -> dict:
    for key in REDACTED_KEYS & event_dict.keys():
        event_dict[key] = "***"
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = True, stream: TextIO | None = None):
    """Configure structlog for the process.

    The API logs one JSON object per line to stdout. The CLI passes
    ``json_logs=False`` and ``sys.stderr`` so readable log lines do not mix
    with the JSON result it prints.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            add_service,
            redact_secrets,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
    )
