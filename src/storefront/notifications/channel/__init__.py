"""Notification channel registry.

Hands out one adapter instance per channel. The fake email adapter is the
default; a real provider adapter implements :class:`EmailPort` and is
installed with :func:`set_channel`.
"""

from storefront.notifications.channel.email_port import EmailPort

EMAIL = "email"

_channel_instances: dict[str, EmailPort] = {}


def get_channel(channel_type: str = EMAIL) -> EmailPort:
    """Return the configured adapter for ``channel_type`` (singleton per channel)."""
    if channel_type not in _channel_instances:
        if channel_type == EMAIL:
            from storefront.notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter: EmailPort) -> None:
    _channel_instances[channel_type] = adapter


def reset_channels():
    """Drop every adapter instance (used between tests)."""
    _channel_instances.clear()
