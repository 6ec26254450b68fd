"""Logging for the Reviews context."""

import structlog

logger = structlog.get_logger(__name__)
