"""Structlog-based logging configuration for tabrecorder.

Supports different deployment targets:
- Docker: stdout with JSON output
- Development: configurable JSON or human-readable output
"""

import logging
import os
import sys
from collections.abc import Callable
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import structlog

from tabrecorder.config.models import TabRecorderConfig


def is_docker_environment() -> bool:
    """Check if running in a Docker container."""
    return os.path.exists("/.dockerenv") or os.environ.get("DOCKER_CONTAINER") == "true"


def get_package_version() -> str:
    """Get the installed tabrecorder version, or 'unknown' when running from a checkout."""
    try:
        return version("tabrecorder")
    except PackageNotFoundError:
        return "unknown"


def get_deployment_environment() -> str:
    """Get deployment environment with 'unknown' fallback."""
    if is_docker_environment():
        return "docker"
    elif os.environ.get("TABRECORDER_ENV") == "development":
        return "development"
    else:
        return "unknown"


def _add_static_context(extra_fields: dict[str, str]) -> Callable:
    """Processor to add static context fields to all log entries."""

    def processor(
        logger: structlog.BoundLogger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.update(extra_fields)
        return event_dict

    return processor


def _configure_processors(config: TabRecorderConfig, is_docker: bool) -> list:
    """Configure structlog processors based on environment."""
    extra_fields = {
        "service": "tabrecorder",
        "version": get_package_version(),
        "deployment": get_deployment_environment(),
        **config.logging.extra_fields,
    }

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(extra_fields),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if config.logging.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    # Auto-detect when unset: JSON inside containers, human-readable elsewhere
    use_json = config.logging.json_logs
    if use_json is None:
        use_json = is_docker or os.environ.get("TABRECORDER_JSON_LOGS", "false").lower() == "true"

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def _configure_handlers(log_level: int) -> None:
    """Route the standard library root logger to stdout."""
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)


def configure_structlog(config: TabRecorderConfig) -> None:
    """Configure structlog-based logging system.

    Args:
        config: The TabRecorderConfig instance containing logging settings.
    """
    is_docker = is_docker_environment()
    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    structlog.configure(
        processors=_configure_processors(config, is_docker),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_handlers(log_level)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Structured logging configured",
        version=get_package_version(),
        log_level=config.logging.level,
        environment=get_deployment_environment(),
        json_output=config.logging.json_logs,
    )

