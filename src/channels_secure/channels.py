"""Channel name grammar, classification, and validation."""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable

from .exceptions import ValidationError

CHANNEL_NAME_PATTERN = re.compile(r"\A[-a-zA-Z0-9_=@,.;]+\Z")
SOCKET_ID_PATTERN = re.compile(r"\A\d+\.\d+\Z", re.ASCII)

# An event can be triggered on at most this many channels in one call
MAX_TRIGGER_CHANNELS = 100


class ChannelType(Enum):
    """Access policy encoded by a channel name prefix."""

    PUBLIC = "public"
    PRIVATE = "private"
    PRESENCE = "presence"
    ENCRYPTED = "encrypted"


class Prefixes:
    """Channel name prefixes."""

    ENCRYPTED = "private-encrypted-"
    PRIVATE = "private-"
    PRESENCE = "presence-"


def classify_channel(name: str) -> ChannelType:
    """
    Classify a channel by its name prefix.

    Channel types:
        - "private-encrypted-name" -> ENCRYPTED
        - "private-name" -> PRIVATE
        - "presence-name" -> PRESENCE
        - "name" -> PUBLIC
    """
    if name.startswith(Prefixes.ENCRYPTED):
        return ChannelType.ENCRYPTED
    elif name.startswith(Prefixes.PRIVATE):
        return ChannelType.PRIVATE
    elif name.startswith(Prefixes.PRESENCE):
        return ChannelType.PRESENCE
    else:
        return ChannelType.PUBLIC


def is_encrypted_channel(name: str) -> bool:
    """Whether the channel carries end-to-end encrypted payloads."""
    return classify_channel(name) is ChannelType.ENCRYPTED


def validate_channel(name: str) -> None:
    """Raise ValidationError unless ``name`` matches the channel grammar."""
    if not isinstance(name, str) or not CHANNEL_NAME_PATTERN.match(name):
        raise ValidationError(f"Invalid channel name {name!r}")


def validate_channels(names: Iterable[str]) -> list[str]:
    """
    Validate a set of trigger target channels.

    Args:
        names: Channel names to publish to

    Returns:
        The names as a list, in the given order
    """
    names = list(names)
    if len(names) > MAX_TRIGGER_CHANNELS:
        raise ValidationError(
            f"An event can be triggered on a maximum of {MAX_TRIGGER_CHANNELS} "
            "channels in a single call."
        )
    for name in names:
        validate_channel(name)
    return names


def validate_socket_id(socket_id: str | None) -> None:
    """Raise ValidationError unless ``socket_id`` looks like ``123.456``."""
    if socket_id is None:
        return
    if not isinstance(socket_id, str) or not SOCKET_ID_PATTERN.match(socket_id):
        raise ValidationError(f"Invalid socket ID {socket_id!r}")
