"""Process-wide logging setup: stdlib handlers rendered through structlog.

Library modules only call ``logging.getLogger(__name__)``. Entry points (package
imports, the CLI ``--verbose`` flag) call :func:`configure_logging` once; it is
idempotent and leaves existing root handlers alone unless ``force`` is set.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

import structlog

from ne_common.config.env import parse_bool_env

LEVEL_ENV = "NE_LOG_LEVEL"
JSON_ENV = "NE_LOG_JSON"
FILE_ENV = "NE_LOG_FILE"

_SHARED_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
)


def _resolve_level(value: str | int | None, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if value is None:
        return logging.INFO
    if isinstance(value, int):
        return value
    if value.strip().isdigit():
        return int(value)
    return logging._nameToLevel.get(value.strip().upper(), logging.INFO)


@dataclass(frozen=True)
class LogSettings:
    level: int = logging.INFO
    json: bool = False
    log_file: str | None = None

    @classmethod
    def resolve(
        cls,
        *,
        level: str | int | None,
        debug: bool,
        log_file: str | None,
        json: bool | None,
        environ: Mapping[str, str] | None = None,
    ) -> "LogSettings":
        """Explicit arguments first, then NE_LOG_* variables, then defaults."""
        env = os.environ if environ is None else environ
        env_json = parse_bool_env(env.get(JSON_ENV))
        return cls(
            level=_resolve_level(level or env.get(LEVEL_ENV), debug),
            json=bool(env_json if json is None else json),
            log_file=env.get(FILE_ENV) if log_file is None else log_file,
        )


def _build_formatter(as_json: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer()
    )
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=list(_SHARED_PROCESSORS),
    )


def _build_handlers(settings: LogSettings) -> list[logging.Handler]:
    formatter = _build_formatter(settings.json)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _configure_structlog() -> None:
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging(
    *,
    level: str | int | None = None,
    debug: bool = False,
    log_file: str | None = None,
    json: bool | None = None,
    force: bool = False,
) -> None:
    """Configure stdlib logging and structlog with a shared formatter.

    Explicit arguments win over the NE_LOG_LEVEL, NE_LOG_JSON and NE_LOG_FILE
    environment variables. When the root logger already has handlers (for
    example under pytest) only structlog is configured unless ``force`` is set.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        _configure_structlog()
        return

    settings = LogSettings.resolve(level=level, debug=debug, log_file=log_file, json=json)
    if force:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
    root_logger.setLevel(settings.level)
    for handler in _build_handlers(settings):
        root_logger.addHandler(handler)
    _configure_structlog()
