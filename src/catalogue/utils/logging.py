"""Logging for the Catalogue context."""

import structlog

logger = structlog.get_logger(__name__)
