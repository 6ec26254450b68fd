"""Runtime configuration for the storefront.

Settings are read from environment variables once and cached. Tests call
``reset_settings()`` after patching the environment.

    STOREFRONT_ENV          development | test | staging | production
    MONGODB_URI             mongodb connection string
    MONGODB_DATABASE        database name
    CRON_SECRET             shared token for the SMS queue tick endpoint
    REFUND_WINDOW_HOURS     hours after payment during which refunds may be requested
    REVIEW_REPORT_THRESHOLD reports needed to auto-flag a review
    SMS_MAX_RETRIES         delivery attempts before an SMS is marked failed
    SMS_BATCH_SIZE          max queue entries processed per tick
    SMS_PROCESSING_LEASE_MINUTES
                            minutes before a stuck PROCESSING entry is reclaimed
    STORE_URL               public storefront URL used in notifications
    STORE_NAME              brand used in customer messages
    CURRENCY                ISO currency code for display
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "storefront"
    cron_secret: str | None = None
    refund_window_hours: int = 6
    review_report_threshold: int = 5
    sms_max_retries: int = 3
    sms_batch_size: int = 50
    sms_processing_lease_minutes: int = 10
    store_url: str = "http://localhost:3000"
    store_name: str = "ThePlug"
    currency: str = "GHS"

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def allows_dev_tools(self) -> bool:
        """Fake-gateway controls exist only on local and test deployments."""
        return self.env in ("development", "test")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            env=(os.getenv("STOREFRONT_ENV") or os.getenv("ENVIRONMENT") or "development").lower(),
            mongodb_uri=os.getenv("MONGODB_URI", cls.mongodb_uri),
            mongodb_database=os.getenv("MONGODB_DATABASE", cls.mongodb_database),
            cron_secret=os.getenv("CRON_SECRET") or None,
            refund_window_hours=int(os.getenv("REFUND_WINDOW_HOURS", cls.refund_window_hours)),
            review_report_threshold=int(os.getenv("REVIEW_REPORT_THRESHOLD", cls.review_report_threshold)),
            sms_max_retries=int(os.getenv("SMS_MAX_RETRIES", cls.sms_max_retries)),
            sms_batch_size=int(os.getenv("SMS_BATCH_SIZE", cls.sms_batch_size)),
            sms_processing_lease_minutes=int(
                os.getenv("SMS_PROCESSING_LEASE_MINUTES", cls.sms_processing_lease_minutes)
            ),
            store_url=os.getenv("STORE_URL", cls.store_url).rstrip("/"),
            store_name=os.getenv("STORE_NAME", cls.store_name),
            currency=os.getenv("CURRENCY", cls.currency),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings) -> None:
    global _settings
    _settings = settings


def reset_settings() -> None:
    global _settings
    _settings = None
