"""structlog setup shared by the CLI and the HTTP server."""

import logging
import sys

import structlog


def configure_logging(level: str | int = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog for console or JSON output.

    Args:
        level: Minimum level, name ("DEBUG") or logging constant
        json_output: Render one JSON object per line instead of console output
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # stdout is reserved for command output (--json)
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
