"""Logging for the Payments context."""

import structlog

logger = structlog.get_logger(__name__)
