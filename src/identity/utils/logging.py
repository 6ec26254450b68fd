"""Logging for the Identity context."""

import structlog

logger = structlog.get_logger(__name__)
