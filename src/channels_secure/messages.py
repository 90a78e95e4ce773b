"""Construction of signed Channels HTTP API requests."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from .channels import (
    is_encrypted_channel,
    validate_channel,
    validate_channels,
    validate_socket_id,
)
from .config import LIBRARY_NAME, LIBRARY_VERSION
from .crypto import ChannelCipher
from .exceptions import ValidationError
from .signing import QueryAuthenticator, serialize_params
from .types import BatchEvent, SignedParams

logger = logging.getLogger(__name__)


class Paths:
    """REST API paths, relative to /apps/{app_id}."""

    EVENTS = "/events"
    BATCH_EVENTS = "/batch_events"
    CHANNELS = "/channels"


def default_headers() -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Pusher-Library": f"{LIBRARY_NAME} {LIBRARY_VERSION}",
    }


def encode_json(data: Any) -> str:
    """JSON-encode user data, raising ValidationError if it cannot be encoded."""
    try:
        return json.dumps(data, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to JSON-encode the provided data: {e}")
        raise ValidationError(f"Event data is not JSON serializable: {e}") from e


@dataclass
class SignedRequest:
    """A fully signed request, ready to hand to an HTTP transport."""

    method: str
    path: str
    query: SignedParams
    headers: dict[str, str] = field(default_factory=default_headers)
    body: str | None = None

    @property
    def query_string(self) -> str:
        """The signed params serialized in signing order."""
        return serialize_params(self.query)

    @property
    def full_path(self) -> str:
        return f"{self.path}?{self.query_string}"

    def query_for_transport(self) -> dict[str, str]:
        """Query params flattened to strings for URL encoding."""
        flat: dict[str, str] = {}
        for key, value in self.query.items():
            if isinstance(value, (list, tuple)):
                value = ",".join(str(v) for v in value)
            flat[key] = str(value)
        return flat


class RequestBuilder:
    """
    Builds signed requests for trigger, batch trigger and GET queries.

    All validation happens before anything is encrypted or signed.
    """

    def __init__(
        self,
        base_path: str,
        authenticator: QueryAuthenticator,
        cipher: ChannelCipher,
    ) -> None:
        self._base_path = base_path
        self._authenticator = authenticator
        self._cipher = cipher

    def trigger(
        self,
        channels: str | Sequence[str],
        event: str,
        data: Any,
        params: Mapping[str, Any] | None = None,
        already_encoded: bool = False,
        timestamp: int | None = None,
    ) -> SignedRequest:
        """
        Build a signed request publishing ``event`` on ``channels``.

        Args:
            channels: A channel name or a list of channel names
            event: Event name
            data: Event data (JSON-encoded unless already_encoded)
            params: Extra body params, e.g. socket_id or info
            already_encoded: Whether ``data`` is already a JSON string
            timestamp: Explicit auth timestamp (defaults to now)
        """
        if isinstance(channels, str):
            channels = [channels]
        channels = validate_channels(channels)
        params = dict(params or {})
        validate_socket_id(params.get("socket_id"))

        has_encrypted_channel = any(is_encrypted_channel(c) for c in channels)
        if has_encrypted_channel and len(channels) > 1:
            raise ValidationError(
                "You cannot trigger to multiple channels when using encrypted channels"
            )

        data_encoded = data if already_encoded else encode_json(data)
        if has_encrypted_channel:
            data_encoded = self._encrypt(channels[0], data_encoded)

        body = {"name": event, "data": data_encoded, "channels": channels, **params}
        return self._signed_post(Paths.EVENTS, body, timestamp)

    def trigger_batch(
        self,
        batch: Sequence[BatchEvent],
        already_encoded: bool = False,
        timestamp: int | None = None,
    ) -> SignedRequest:
        """
        Build a signed request publishing several events at once.

        Each event is a dict with 'channel', 'name', 'data' and optionally
        'socket_id'. Events on encrypted channels are encrypted individually.
        """
        for event in batch:
            validate_channel(event.get("channel"))
            validate_socket_id(event.get("socket_id"))

        prepared: list[BatchEvent] = []
        for event in batch:
            data = event.get("data")
            if not isinstance(data, str) and not already_encoded:
                data = encode_json(data)
            if is_encrypted_channel(event["channel"]):
                data = self._encrypt(event["channel"], data)
            prepared.append({**event, "data": data})

        return self._signed_post(Paths.BATCH_EVENTS, {"batch": prepared}, timestamp)

    def _encrypt(self, channel: str, data: Any) -> str:
        if not isinstance(data, str):
            raise ValidationError(
                f"Already encoded data for {channel!r} must be a string, got {type(data).__name__}"
            )
        return self._cipher.encrypt_payload(channel, data)

    def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        timestamp: int | None = None,
    ) -> SignedRequest:
        """Build a signed GET for ``path`` (relative to /apps/{app_id})."""
        full_path = f"{self._base_path}{path}"
        query = self._authenticator.build(full_path, "GET", params, timestamp)
        return SignedRequest(method="GET", path=full_path, query=query)

    def _signed_post(
        self, path: str, body: Mapping[str, Any], timestamp: int | None
    ) -> SignedRequest:
        full_path = f"{self._base_path}{path}"
        post_value = encode_json(body)
        body_md5 = hashlib.md5(post_value.encode("utf-8"), usedforsecurity=False).hexdigest()
        query = self._authenticator.build(full_path, "POST", {"body_md5": body_md5}, timestamp)
        logger.debug(f"trigger POST: {post_value}")
        return SignedRequest(method="POST", path=full_path, query=query, body=post_value)
