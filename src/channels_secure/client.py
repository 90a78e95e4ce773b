"""Main ChannelsClient class for the Channels HTTP API."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Sequence

import aiohttp

from .auth import SocketAuthSigner
from .channels import validate_channel
from .config import ChannelsConfig
from .crypto import ChannelCipher, ChannelKeyDeriver
from .exceptions import ApiError
from .messages import Paths, RequestBuilder, SignedRequest
from .signing import QueryAuthenticator
from .types import BatchEvent, Headers
from .webhooks import Webhook, WebhookProcessor, WebhookVerifier

logger = logging.getLogger(__name__)


class ChannelsClient:
    """
    Client for publishing to and authorizing Channels applications.

    Example:
        async with ChannelsClient(app_id="1", key="my-key", secret="s3cret") as client:
            await client.trigger("my-channel", "my-event", {"message": "hello"})
    """

    def __init__(
        self,
        key: str | None = None,
        secret: str | None = None,
        app_id: str | None = None,
        *,
        config: ChannelsConfig | None = None,
        session: aiohttp.ClientSession | None = None,
        cluster: str | None = None,
        host: str | None = None,
        encryption_master_key_base64: str | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            key: Application key (or use PUSHER_KEY env var)
            secret: Application secret (or use PUSHER_SECRET env var)
            app_id: Application id (or use PUSHER_APP_ID env var)
            config: Optional ChannelsConfig instance (overrides individual params)
            session: aiohttp session to send requests with (created lazily if omitted)
            cluster: Cluster name, used to build the default host
            host: API hostname
            encryption_master_key_base64: Base64 master key for encrypted channels
        """
        if config is not None:
            self._config = config
        else:
            # Build kwargs for config, only including non-None values
            config_kwargs: dict[str, Any] = {}
            if key is not None:
                config_kwargs["key"] = key
            if secret is not None:
                config_kwargs["secret"] = secret
            if app_id is not None:
                config_kwargs["app_id"] = app_id
            if cluster is not None:
                config_kwargs["cluster"] = cluster
            if host is not None:
                config_kwargs["host"] = host
            if encryption_master_key_base64 is not None:
                config_kwargs["encryption_master_key_base64"] = encryption_master_key_base64

            self._config = ChannelsConfig(**config_kwargs)

        # Set up logging
        logging.basicConfig(level=getattr(logging, self._config.log_level.upper()))

        secret_value = self._config.secret.get_secret_value()
        deriver = ChannelKeyDeriver.from_base64(self._config.master_key_base64)

        self._cipher = ChannelCipher(deriver)
        self._requests = RequestBuilder(
            self._config.base_path,
            QueryAuthenticator(self._config.key, secret_value),
            self._cipher,
        )
        self._socket_signer = SocketAuthSigner(self._config.key, secret_value, deriver)
        self._verifier = WebhookVerifier(self._config.key, secret_value)
        self._webhooks = WebhookProcessor(self._verifier, self._cipher)

        self._session = session
        self._owns_session = session is None

    @property
    def config(self) -> ChannelsConfig:
        return self._config

    @property
    def requests(self) -> RequestBuilder:
        """Builder for signed requests, for callers bringing their own transport."""
        return self._requests

    # Publishing

    async def trigger(
        self,
        channels: str | Sequence[str],
        event: str,
        data: Any,
        params: Mapping[str, Any] | None = None,
        already_encoded: bool = False,
    ) -> dict[str, Any]:
        """
        Trigger an event on one or more channels.

        Args:
            channels: A channel name or a list of up to 100 channel names
            event: Event name
            data: Event data
            params: Extra params, e.g. {"socket_id": "123.456"} to exclude a client
            already_encoded: Whether ``data`` is already a JSON string
        """
        request = self._requests.trigger(channels, event, data, params, already_encoded)
        return await self._send(request)

    async def trigger_batch(
        self,
        batch: Sequence[BatchEvent],
        already_encoded: bool = False,
    ) -> dict[str, Any]:
        """Trigger multiple events in a single call."""
        request = self._requests.trigger_batch(batch, already_encoded)
        return await self._send(request)

    # Queries

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """
        GET an arbitrary REST API resource. All request signing is automatic.

        Args:
            path: Path excluding /apps/{app_id}
            params: API query params
        """
        return await self._send(self._requests.get(path, params))

    async def get_channel_info(
        self, channel: str, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Fetch information for a single channel, e.g. params={"info": "user_count"}."""
        validate_channel(channel)
        return await self.get(f"{Paths.CHANNELS}/{channel}", params)

    async def get_channels(self, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Fetch the list of occupied channels."""
        result = await self.get(Paths.CHANNELS, params)
        result["channels"] = dict(result.get("channels") or {})
        return result

    async def get_users_info(self, channel: str) -> dict[str, Any]:
        """Fetch the user ids subscribed to a presence channel."""
        validate_channel(channel)
        return await self.get(f"{Paths.CHANNELS}/{channel}/users")

    # Authorization and webhooks

    def authorize_channel(
        self, channel: str, socket_id: str, custom_data: str | None = None
    ) -> str:
        """Create the JSON authorization response for a channel subscription."""
        return self._socket_signer.authorize(channel, socket_id, custom_data)

    socket_auth = authorize_channel

    def presence_auth(
        self, channel: str, socket_id: str, user_id: str, user_info: Any = None
    ) -> str:
        """Create the JSON authorization response for a presence channel."""
        return self._socket_signer.presence_auth(channel, socket_id, user_id, user_info)

    def ensure_valid_signature(self, headers: Headers, body: str | bytes) -> None:
        """Raise SignatureError unless the webhook came from the Channels service."""
        self._verifier.verify(headers, body)

    def webhook(self, headers: Headers, body: str | bytes) -> Webhook:
        """Verify a webhook, decrypt any encrypted events, and decode it."""
        return self._webhooks.process(headers, body)

    # Transport

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout)
            )
        return self._session

    async def _send(self, request: SignedRequest) -> Any:
        """Send a signed request and decode the JSON response."""
        url = f"{self._config.channels_url_prefix()}{request.path}"
        logger.debug(f"{request.method} {request.path}")

        session = self._get_session()
        async with session.request(
            request.method,
            url,
            params=request.query_for_transport(),
            data=request.body,
            headers=request.headers,
        ) as response:
            body = await response.text()
            status = response.status

        if status != 200:
            logger.error(f"API error {status} for {request.method} {request.path}")
            raise ApiError(status, body)

        result = json.loads(body) if body else {}
        if isinstance(result, dict) and "channels" in result:
            result["channels"] = dict(result["channels"] or {})
        return result

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "ChannelsClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
