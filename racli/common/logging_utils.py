"""
Logging setup for the racli package.
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping


def setup_logger(logger: logging.Logger, log_level: int) -> None:
    """
    Attach a stderr handler once and (re)apply the level.

    Calling again with a new level adjusts the existing handlers, which is
    how --verbose takes effect after an earlier default setup.

    Args:
        logger: Package logger to configure
        log_level: Level for the logger and its handlers
    """
    logger.setLevel(log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(log_level)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(log_level)


class CorrelationLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every record with the request correlation id."""

    def __init__(self, logger: logging.Logger, correlation_id: str) -> None:
        super().__init__(logger, {"correlation_id": correlation_id})
        self.correlation_id = correlation_id

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.correlation_id}] {msg}", kwargs
