"""Outbound message channels.

Only email is wired today. Adapters are singletons so tests can inspect what
was sent; ``reset_channels()`` drops them between tests.
"""

EMAIL = "email"

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str = EMAIL):
    """Return the configured adapter for ``channel_type``."""
    if channel_type not in _channel_instances:
        if channel_type == EMAIL:
            from storefront.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
