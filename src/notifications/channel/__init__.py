"""Channel adapter registry — pluggable notification dispatch channels.

Provides singleton access to channel adapters. Uses fake adapters by
default; ``set_channel`` installs a real provider adapter at startup.
"""

from notifications.notification.notification import NotificationChannel

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str):
    """Return the configured channel adapter (singleton per channel type).

    Args:
        channel_type: One of NotificationChannel enum values ("email", "sms")
    """
    if channel_type not in _channel_instances:
        if channel_type == NotificationChannel.EMAIL.value:
            from notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()
        elif channel_type == NotificationChannel.SMS.value:
            from notifications.channel.fake_sms import FakeSMSAdapter

            _channel_instances[channel_type] = FakeSMSAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter) -> None:
    _channel_instances[channel_type] = adapter


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
