"""structlog setup shared by the API server and scripts."""

import logging

import structlog


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog for console output.

    Args:
        level: Minimum level to emit (stdlib logging constant)
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
