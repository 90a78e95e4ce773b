"""Type definitions for python-channels-secure."""

from typing import Any, Mapping, TypeAlias

# Signed query parameters, in serialization order
SignedParams: TypeAlias = dict[str, Any]

# HTTP headers as received from a web framework (any mapping works)
Headers: TypeAlias = Mapping[str, str]

# A single decoded webhook event ({"channel": ..., "name": ..., ...})
WebhookEvent: TypeAlias = dict[str, Any]

# One entry of a batch trigger ({"channel", "name", "data", "socket_id"?})
BatchEvent: TypeAlias = dict[str, Any]
