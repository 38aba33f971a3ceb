from __future__ import annotations

from enum import Enum

__all__ = [
    "ChannelType",
    "POSITIONAL_PROPERTIES",
    "user_uri",
    "channel_uri",
]

# Audible distance 32, conversational distance 1, fade intensity 1.0, inverse
# distance fade model. Vivox' documented defaults for 3D channels.
POSITIONAL_PROPERTIES = "!p-32-1-1.000-1"


class ChannelType(str, Enum):
    """Vivox channel kinds, valued by their one-letter URI prefix."""

    non_positional = "g"
    positional = "d"
    echo = "e"


def _require(value: str, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{what} must be a non-empty string")
    return value


def user_uri(*, issuer: str, user_id: str, domain: str) -> str:
    """SIP URI naming a user, e.g. `sip:.issuer.alice.@tla.vivox.com`."""
    _require(user_id, "user_id")
    return f"sip:.{issuer}.{user_id}.@{domain}"


def channel_uri(
    *, issuer: str, channel_id: str, domain: str, channel_type: ChannelType
) -> str:
    """SIP URI naming a channel, e.g. `sip:confctl-g-issuer.lobby@tla.vivox.com`.

    Positional channels carry their 3D properties between name and domain.
    """
    _require(channel_id, "channel_id")
    channel_type = ChannelType(channel_type)
    props = POSITIONAL_PROPERTIES if channel_type is ChannelType.positional else ""
    return f"sip:confctl-{channel_type.value}-{issuer}.{channel_id}{props}@{domain}"
