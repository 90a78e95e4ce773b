"""Custom exceptions for python-channels-secure."""


class ChannelsError(Exception):
    """Base exception for all channels-secure errors."""

    pass


class ConfigurationError(ChannelsError):
    """Client configuration does not allow the requested operation."""

    pass


class ValidationError(ChannelsError):
    """Malformed channel name, socket id, or request arguments."""

    pass


class SignatureError(ChannelsError):
    """Webhook signature did not match the configured credentials."""

    pass


class DecryptionFailure(ChannelsError):
    """Authenticated decryption of an encrypted channel payload failed."""

    pass


class ApiError(ChannelsError):
    """The Channels HTTP API responded with a non-200 status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"API request failed with status {status}: {body}")
        self.status = status
        self.body = body
