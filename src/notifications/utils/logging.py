"""Logging for the Notifications context."""

import structlog

logger = structlog.get_logger(__name__)
