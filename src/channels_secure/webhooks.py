"""Webhook signature verification and event decoding."""

from __future__ import annotations

import hmac
import json
import logging
from dataclasses import dataclass, field

from .channels import is_encrypted_channel
from .crypto import ChannelCipher
from .exceptions import DecryptionFailure, SignatureError, ValidationError
from .signing import hmac_sha256_hex
from .types import Headers, WebhookEvent

logger = logging.getLogger(__name__)

HEADER_KEY = "X-Pusher-Key"
HEADER_SIGNATURE = "X-Pusher-Signature"


def _header(headers: Headers, name: str) -> str | None:
    """Case-insensitive header lookup that works for plain dicts too."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


class WebhookVerifier:
    """
    Verifies that a webhook was sent by the Channels service.

    The signature header must equal:
        hex(HMAC-SHA256(secret, raw_body))

    and the key header must name the configured application key.
    """

    def __init__(self, auth_key: str, secret: str) -> None:
        self.auth_key = auth_key
        self._secret = secret

    def compute_signature(self, body: str | bytes) -> str:
        """Expected signature header value for ``body``."""
        return hmac_sha256_hex(self._secret, body)

    def verify(self, headers: Headers, body: str | bytes) -> None:
        """
        Raise SignatureError unless the webhook headers authenticate ``body``.

        Args:
            headers: Request headers (X-Pusher-Key, X-Pusher-Signature)
            body: The raw request body, exactly as received
        """
        key = _header(headers, HEADER_KEY)
        signature = _header(headers, HEADER_SIGNATURE)

        if key is not None and signature is not None and key == self.auth_key:
            expected = self.compute_signature(body)
            if hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
                return

        raise SignatureError(f"Received WebHook with invalid signature: got {signature}.")


@dataclass
class Webhook:
    """A verified webhook call."""

    time_ms: int
    events: list[WebhookEvent] = field(default_factory=list)


class WebhookProcessor:
    """Verifies a webhook and decrypts events on encrypted channels."""

    def __init__(self, verifier: WebhookVerifier, cipher: ChannelCipher) -> None:
        self._verifier = verifier
        self._cipher = cipher

    def process(self, headers: Headers, body: str | bytes) -> Webhook:
        """
        Verify, parse and decode a webhook.

        A bad signature rejects the whole call. An event that cannot be
        decrypted is logged and dropped; its siblings are still returned.
        """
        self._verifier.verify(headers, body)

        try:
            decoded = json.loads(body)
            time_ms = int(decoded["time_ms"])
            raw_events = decoded.get("events", [])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ValidationError(f"Malformed webhook body: {e}") from e
        if not isinstance(raw_events, list):
            raise ValidationError("Malformed webhook body: 'events' must be a list")

        events: list[WebhookEvent] = []
        for event in raw_events:
            if not isinstance(event, dict) or not isinstance(event.get("channel"), str):
                logger.warning("Got a webhook event without a channel name. Ignoring.")
                continue

            channel = event["channel"]
            if not is_encrypted_channel(channel):
                events.append(event)
                continue

            if not self._cipher.available:
                logger.warning(
                    "Got an encrypted webhook event payload, but no master key specified. Ignoring."
                )
                continue

            try:
                events.append(self._cipher.decrypt_event(event))
            except DecryptionFailure as e:
                logger.warning(
                    f"Unable to decrypt webhook event payload on '{channel}'. Wrong key? Ignoring: {e}"
                )

        return Webhook(time_ms=time_ms, events=events)
