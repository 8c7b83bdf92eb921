"""Channel adapter registry.

Fakes are installed on first lookup. Production deployments install real
adapters at startup with ``set_channel``.
"""

from medtrack.notification.channel.fakes import FakeEmailAdapter, FakeSMSAdapter
from medtrack.notification.channel.ports import ChannelPort
from medtrack.notification.kinds import NotificationChannel

_FAKES = {
    NotificationChannel.EMAIL: FakeEmailAdapter,
    NotificationChannel.SMS: FakeSMSAdapter,
}

_adapters: dict[NotificationChannel, ChannelPort] = {}


def _resolve(channel_type) -> NotificationChannel:
    try:
        return NotificationChannel(channel_type)
    except ValueError:
        raise ValueError(f"Unknown channel type: {channel_type}") from None


def get_channel(channel_type) -> ChannelPort:
    """Return the adapter for ``channel_type`` ("email" or "sms")."""
    channel = _resolve(channel_type)
    if channel not in _adapters:
        _adapters[channel] = _FAKES[channel]()
    return _adapters[channel]


def set_channel(channel_type, adapter: ChannelPort) -> None:
    channel = _resolve(channel_type)
    if getattr(adapter, "channel", None) is not channel:
        raise ValueError(f"{type(adapter).__name__} cannot deliver on the {channel.value} channel")
    _adapters[channel] = adapter


def reset_channels() -> None:
    """Drop all adapters so the next lookup builds fresh fakes."""
    _adapters.clear()
