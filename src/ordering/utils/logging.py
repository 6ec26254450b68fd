"""Logging for the Ordering context."""

import structlog

logger = structlog.get_logger(__name__)
