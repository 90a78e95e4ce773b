"""
python-channels-secure - Security layer for the Channels HTTP API.

Signs REST requests, verifies webhooks, authorizes socket subscriptions and
encrypts payloads on private-encrypted channels.

Example:
    from channels_secure import ChannelsClient

    async def main():
        async with ChannelsClient(app_id="1", key="key", secret="secret") as client:
            await client.trigger("my-channel", "my-event", {"message": "hi"})
"""

from channels_secure.auth import SocketAuthSigner
from channels_secure.channels import ChannelType, classify_channel, is_encrypted_channel
from channels_secure.client import ChannelsClient
from channels_secure.config import LIBRARY_VERSION, ChannelsConfig
from channels_secure.crypto import (
    ChannelCipher,
    ChannelKeyDeriver,
    EncryptedPayload,
    derive_per_channel_key,
    derive_shared_secret,
    parse_master_key,
)
from channels_secure.exceptions import (
    ApiError,
    ChannelsError,
    ConfigurationError,
    DecryptionFailure,
    SignatureError,
    ValidationError,
)
from channels_secure.messages import RequestBuilder, SignedRequest
from channels_secure.signing import CanonicalSigner, QueryAuthenticator
from channels_secure.webhooks import Webhook, WebhookProcessor, WebhookVerifier

__version__ = LIBRARY_VERSION

__all__ = [
    # Main client
    "ChannelsClient",
    "ChannelsConfig",
    # Signing
    "CanonicalSigner",
    "QueryAuthenticator",
    "RequestBuilder",
    "SignedRequest",
    "SocketAuthSigner",
    # Channels
    "ChannelType",
    "classify_channel",
    "is_encrypted_channel",
    # Encryption
    "ChannelCipher",
    "ChannelKeyDeriver",
    "EncryptedPayload",
    "derive_per_channel_key",
    "derive_shared_secret",
    "parse_master_key",
    # Webhooks
    "Webhook",
    "WebhookProcessor",
    "WebhookVerifier",
    # Exceptions
    "ChannelsError",
    "ConfigurationError",
    "ValidationError",
    "SignatureError",
    "DecryptionFailure",
    "ApiError",
]
