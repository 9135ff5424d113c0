"""Logging configuration for the Ordering domain.

Handlers and processors are configured once by inventory.utils.logging; this
module only hands out loggers and quiets chatty libraries.
"""

import logging

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)
logging.getLogger("stripe").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
