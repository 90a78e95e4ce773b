"""Canonical HMAC-SHA256 signing of REST API requests."""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any, Callable, Mapping

from .types import SignedParams

AUTH_VERSION = "1.0"


def serialize_params(params: Mapping[str, Any]) -> str:
    """
    Serialize params as ``key1=val1&key2=val2`` in the mapping's order.

    List and tuple values are comma-joined. No URL encoding is applied;
    the signature covers the raw values.
    """
    pairs = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        pairs.append(f"{key}={value}")
    return "&".join(pairs)


def string_to_sign(method: str, path: str, params: Mapping[str, Any]) -> str:
    """Build ``METHOD\\nPATH\\nSORTED_PARAMS`` for an already sorted mapping."""
    return f"{method.upper()}\n{path}\n{serialize_params(params)}"


def hmac_sha256_hex(secret: str | bytes, message: str | bytes) -> str:
    """Lower-case hex HMAC-SHA256 of ``message`` keyed with ``secret``."""
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


class CanonicalSigner:
    """
    Builds signed query parameters for a Channels REST call.

    The signature is computed as:
        HMAC-SHA256(secret, f"{METHOD}\\n{path}\\n{sorted_params}")

    where ``sorted_params`` holds auth_key, auth_timestamp, auth_version and
    the caller's query params, sorted by key.
    """

    def __init__(self, auth_key: str, auth_version: str = AUTH_VERSION) -> None:
        self.auth_key = auth_key
        self.auth_version = auth_version

    def sign(
        self,
        method: str,
        path: str,
        secret: str | bytes,
        query_params: Mapping[str, Any] | None = None,
        timestamp: int | None = None,
    ) -> SignedParams:
        """
        Sign a request.

        Args:
            method: HTTP method, upper-cased before signing
            path: Request path, e.g. "/apps/3/events"
            secret: Application secret
            query_params: Extra query params covered by the signature
            timestamp: Seconds since epoch (defaults to now)

        Returns:
            Key-sorted params with ``auth_signature`` appended last
        """
        merged: dict[str, Any] = dict(query_params or {})
        # Auth fields are never overridden by caller params
        merged["auth_key"] = self.auth_key
        merged["auth_timestamp"] = int(time.time()) if timestamp is None else timestamp
        merged["auth_version"] = self.auth_version

        params: SignedParams = {key: merged[key] for key in sorted(merged)}
        params["auth_signature"] = hmac_sha256_hex(
            secret, string_to_sign(method, path, params)
        )
        return params


class QueryAuthenticator:
    """Signs REST calls with stored credentials and the current time."""

    def __init__(
        self,
        auth_key: str,
        secret: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._signer = CanonicalSigner(auth_key)
        self._secret = secret
        self._clock = clock

    @property
    def auth_key(self) -> str:
        return self._signer.auth_key

    def build(
        self,
        path: str,
        method: str = "GET",
        query_params: Mapping[str, Any] | None = None,
        timestamp: int | None = None,
    ) -> SignedParams:
        """Sign ``method path`` with ``query_params``."""
        if timestamp is None:
            timestamp = int(self._clock())
        return self._signer.sign(method, path, self._secret, query_params, timestamp)
