"""Logging infrastructure.

Basic usage:
    import logging
    from koru_service.infra.logging import set_log_context

    logger = logging.getLogger(__name__)
    set_log_context(event_id="1b4e...")
    logger.info("Dispatching event")  # record carries event_id
"""

from koru_service.infra.logging.config import configure_logging, setup_logging, shutdown
from koru_service.infra.logging.context import (
    ContextBoundLogger,
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    get_logger,
    remove_from_log_context,
    set_log_context,
)
from koru_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextBoundLogger",
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
