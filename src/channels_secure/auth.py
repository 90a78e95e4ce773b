"""HMAC-SHA256 authorization for private, presence, and encrypted channels."""

from __future__ import annotations

import base64
import json
from typing import Any

from .channels import is_encrypted_channel, validate_channel, validate_socket_id
from .crypto import ChannelKeyDeriver
from .exceptions import ConfigurationError
from .signing import hmac_sha256_hex


class SocketAuthSigner:
    """
    Authorizes a realtime connection to subscribe to a channel.

    The signature is computed as:
        HMAC-SHA256(app_secret, f"{socket_id}:{channel_name}")

    When custom (presence) data is given, it is signed as well:
        HMAC-SHA256(app_secret, f"{socket_id}:{channel_name}:{channel_data}")

    Encrypted channels additionally disclose the per-channel shared secret.
    """

    def __init__(
        self,
        app_key: str,
        app_secret: str,
        deriver: ChannelKeyDeriver | None = None,
    ) -> None:
        self.app_key = app_key
        self.app_secret = app_secret
        self._deriver = deriver or ChannelKeyDeriver(None)

    def authenticate(
        self,
        channel_name: str,
        socket_id: str,
        custom_data: str | None = None,
    ) -> dict[str, str]:
        """
        Generate the authorization payload for a channel subscription.

        Args:
            channel_name: The channel to authorize
            socket_id: The socket ID from the connection established event
            custom_data: JSON-encoded channel data (presence channels)

        Returns:
            Dict with 'auth', plus 'channel_data' and 'shared_secret' when relevant
        """
        validate_channel(channel_name)
        validate_socket_id(socket_id)

        encrypted = is_encrypted_channel(channel_name)
        if encrypted and not self._deriver.has_master_key:
            raise ConfigurationError(
                "You must specify an encryption master key to authorize an encrypted channel"
            )

        if custom_data:
            string_to_sign = f"{socket_id}:{channel_name}:{custom_data}"
        else:
            string_to_sign = f"{socket_id}:{channel_name}"

        result = {"auth": self._sign(string_to_sign)}
        if custom_data:
            result["channel_data"] = custom_data
        if encrypted:
            shared_secret = self._deriver.shared_secret(channel_name)
            result["shared_secret"] = base64.b64encode(shared_secret).decode("ascii")
        return result

    def authorize(
        self,
        channel_name: str,
        socket_id: str,
        custom_data: str | None = None,
    ) -> str:
        """Same as authenticate(), encoded as the JSON response body."""
        return json.dumps(
            self.authenticate(channel_name, socket_id, custom_data),
            separators=(",", ":"),
        )

    def presence_auth(
        self,
        channel_name: str,
        socket_id: str,
        user_id: str,
        user_info: Any = None,
    ) -> str:
        """Authorize a presence channel subscription for ``user_id``."""
        user_data: dict[str, Any] = {"user_id": user_id}
        if user_info:
            user_data["user_info"] = user_info
        return self.authorize(
            channel_name, socket_id, json.dumps(user_data, separators=(",", ":"))
        )

    def _sign(self, message: str) -> str:
        """
        Generate HMAC-SHA256 signature.

        Returns:
            String in format "app_key:hex_digest"
        """
        return f"{self.app_key}:{hmac_sha256_hex(self.app_secret, message)}"
