from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(
    filename: str | Path | None = None,
    *,
    level: str = "info",
    fmt: str = "text",
    force: bool = False,
) -> structlog.BoundLogger:
    """Set up structured logging for the manywest package.

    The first call configures structlog and the standard library root logger;
    later calls are no-ops unless `force` is set (the CLI forces once it knows
    the user's level, format and log file).

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Minimum level name, one of `LOG_LEVELS`.
        fmt: "json" for one JSON object per line, "text" for key=value console lines.
        force: Reconfigure even if logging was already set up.

    Returns:
        A structlog logger instance configured for the manywest package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if force or not _LOGGING_CONFIGURED:
        log_level = LOG_LEVELS.get(level.lower(), logging.INFO)
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=log_level,
            handlers=handlers,
            format="%(message)s",
            force=True,
        )
        renderer = (
            structlog.processors.JSONRenderer()
            if fmt == "json"
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                renderer,
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("manywest")


logger = setup_logging()
