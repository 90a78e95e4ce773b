"""
End-to-end encryption for private-encrypted channels using PyNaCl.

Per-channel keys are derived from a 32-byte master key:
    key = SHA-256(channel_name || master_key)

Payloads are sealed with XSalsa20-Poly1305 (``nacl.secret.SecretBox``)
under a fresh random 24-byte nonce and travel as
``{"nonce": b64, "ciphertext": b64}``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any

import nacl.exceptions
import nacl.secret
import nacl.utils

from .channels import is_encrypted_channel
from .exceptions import ConfigurationError, DecryptionFailure, ValidationError
from .types import WebhookEvent

logger = logging.getLogger(__name__)

MASTER_KEY_BYTES = nacl.secret.SecretBox.KEY_SIZE
NONCE_BYTES = nacl.secret.SecretBox.NONCE_SIZE


def parse_master_key(encoded: str) -> bytes:
    """Decode a base64 master key, which must hold exactly 32 bytes."""
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(
            "encryption_master_key_base64 must be a valid base64 string"
        ) from e
    if len(key) != MASTER_KEY_BYTES:
        raise ConfigurationError(
            f"encryption_master_key_base64 must encode a key which is "
            f"{MASTER_KEY_BYTES} bytes long"
        )
    return key


def _require_encrypted(channel_name: str) -> None:
    if not is_encrypted_channel(channel_name):
        raise ValidationError(
            "You must specify a channel of the form private-encrypted-* "
            f"for end-to-end encryption. Got {channel_name!r}"
        )


def derive_per_channel_key(master_key: bytes, channel_name: str) -> bytes:
    """Derive the 32-byte secretbox key for ``channel_name``."""
    _require_encrypted(channel_name)
    return hashlib.sha256(channel_name.encode("utf-8") + master_key).digest()


def derive_shared_secret(master_key: bytes, channel_name: str) -> bytes:
    """
    Derive the secret disclosed to an authorized realtime subscriber.

    Realtime client libraries open incoming secretboxes with the disclosed
    value directly, so for wire compatibility it must equal the per-channel
    key; a separately derived secret could not decrypt any event.
    """
    return derive_per_channel_key(master_key, channel_name)


class ChannelKeyDeriver:
    """Holds the optional master key and derives per-channel material."""

    def __init__(self, master_key: bytes | None = None) -> None:
        self._master_key = master_key

    @classmethod
    def from_base64(cls, encoded: str | None) -> "ChannelKeyDeriver":
        """Build a deriver from config; empty or None means no master key."""
        if not encoded:
            return cls(None)
        return cls(parse_master_key(encoded))

    @property
    def has_master_key(self) -> bool:
        return self._master_key is not None

    def _master(self) -> bytes:
        if self._master_key is None:
            raise ConfigurationError(
                "You must specify an encryption master key to use encrypted channels"
            )
        return self._master_key

    def per_channel_key(self, channel_name: str) -> bytes:
        _require_encrypted(channel_name)
        return derive_per_channel_key(self._master(), channel_name)

    def shared_secret(self, channel_name: str) -> bytes:
        _require_encrypted(channel_name)
        return derive_shared_secret(self._master(), channel_name)


@dataclass(frozen=True)
class EncryptedPayload:
    """A sealed channel payload; only meaningful alongside its channel name."""

    nonce: bytes
    ciphertext: bytes

    def to_dict(self) -> dict[str, str]:
        return {
            "nonce": base64.b64encode(self.nonce).decode("ascii"),
            "ciphertext": base64.b64encode(self.ciphertext).decode("ascii"),
        }

    def to_json(self) -> str:
        """Serialize to the wire form carried as event ``data``."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, raw: Any) -> "EncryptedPayload":
        """Parse ``{"nonce": b64, "ciphertext": b64}``, raising DecryptionFailure."""
        if not isinstance(raw, dict):
            raise DecryptionFailure("Encrypted payload must be a JSON object")
        try:
            return cls(
                nonce=base64.b64decode(raw["nonce"], validate=True),
                ciphertext=base64.b64decode(raw["ciphertext"], validate=True),
            )
        except (KeyError, TypeError, binascii.Error, ValueError) as e:
            raise DecryptionFailure(f"Malformed encrypted payload: {e}") from e

    @classmethod
    def from_json(cls, raw: str) -> "EncryptedPayload":
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DecryptionFailure(f"Encrypted payload is not valid JSON: {e}") from e
        return cls.from_dict(parsed)


class ChannelCipher:
    """Encrypts and decrypts payloads for private-encrypted channels."""

    def __init__(self, deriver: ChannelKeyDeriver) -> None:
        self._deriver = deriver

    @property
    def available(self) -> bool:
        """Whether a master key is configured."""
        return self._deriver.has_master_key

    def encrypt(self, channel_name: str, plaintext: bytes | str) -> EncryptedPayload:
        """Seal ``plaintext`` for ``channel_name`` under a fresh random nonce."""
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        box = nacl.secret.SecretBox(self._deriver.per_channel_key(channel_name))
        nonce = nacl.utils.random(NONCE_BYTES)
        encrypted = box.encrypt(plaintext, nonce)
        return EncryptedPayload(nonce=encrypted.nonce, ciphertext=encrypted.ciphertext)

    def decrypt(self, channel_name: str, payload: EncryptedPayload) -> bytes:
        """
        Open a sealed payload.

        Raises:
            DecryptionFailure: Wrong key, tampered ciphertext, or bad nonce
            ConfigurationError: No master key is configured
        """
        box = nacl.secret.SecretBox(self._deriver.per_channel_key(channel_name))
        try:
            return box.decrypt(payload.ciphertext, payload.nonce)
        except (nacl.exceptions.CryptoError, ValueError) as e:
            raise DecryptionFailure(
                f"Decryption of the payload on {channel_name!r} failed. Wrong key?"
            ) from e

    def encrypt_payload(self, channel_name: str, data: str) -> str:
        """Encrypt already JSON-encoded event data into its wire form."""
        return self.encrypt(channel_name, data).to_json()

    def decrypt_event(self, event: WebhookEvent) -> WebhookEvent:
        """
        Return a copy of a webhook event with ``data`` replaced by plaintext.

        The sealed payload is read from ``data`` (a JSON string or object)
        or, failing that, from top-level ``nonce``/``ciphertext`` fields.
        """
        channel_name = event.get("channel", "")
        data = event.get("data")
        if isinstance(data, str):
            payload = EncryptedPayload.from_json(data)
        elif isinstance(data, dict):
            payload = EncryptedPayload.from_dict(data)
        else:
            payload = EncryptedPayload.from_dict(event)

        plaintext = self.decrypt(channel_name, payload)
        try:
            decoded = plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionFailure("Decrypted payload is not valid UTF-8") from e

        decrypted = {k: v for k, v in event.items() if k not in ("nonce", "ciphertext")}
        decrypted["data"] = decoded
        return decrypted
