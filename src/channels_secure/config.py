"""Configuration management for python-channels-secure."""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LIBRARY_NAME = "python-channels-secure"
LIBRARY_VERSION = "0.1.0"

DEFAULT_HOST = "api-mt1.pusher.com"

_SCHEME_PREFIX = re.compile(r"^https?://")


class ChannelsConfig(BaseSettings):
    """
    Configuration for the Channels HTTP API client.

    Values are loaded from (in order of precedence):
    1. Constructor arguments
    2. Environment variables (prefixed with PUSHER_)
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="PUSHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Required settings
    app_id: str = Field(..., description="Channels application id")
    key: str = Field(..., description="Channels application key")
    secret: SecretStr = Field(..., description="Channels application secret")

    # Endpoint settings
    host: Optional[str] = Field(default=None, description="API hostname (overrides cluster)")
    cluster: Optional[str] = Field(default=None, description="Cluster name, e.g. 'eu'")
    use_tls: bool = Field(default=True, description="Use https on port 443 by default")
    scheme: Optional[Literal["http", "https"]] = Field(default=None, description="URL scheme")
    port: Optional[int] = Field(default=None, ge=1, le=65535, description="HTTP port")
    path: str = Field(default="", description="Path prefix in front of /apps")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")

    # Encryption
    encryption_master_key_base64: Optional[SecretStr] = Field(
        default=None, description="Base64 of the 32-byte master key for encrypted channels"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("host")
    @classmethod
    def _strip_scheme(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _SCHEME_PREFIX.sub("", value, count=1).rstrip("/")

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def resolved_scheme(self) -> str:
        if self.scheme is not None:
            return self.scheme
        if self.port is not None:
            return "https" if self.port == 443 else "http"
        return "https" if self.use_tls else "http"

    @property
    def resolved_port(self) -> int:
        if self.port is not None:
            return self.port
        return 443 if self.resolved_scheme == "https" else 80

    @property
    def resolved_host(self) -> str:
        if self.host:
            return self.host
        if self.cluster:
            return f"api-{self.cluster}.pusher.com"
        return DEFAULT_HOST

    @property
    def base_path(self) -> str:
        """Path prefix of every signed request."""
        return f"/apps/{self.app_id}"

    @property
    def master_key_base64(self) -> str | None:
        if self.encryption_master_key_base64 is None:
            return None
        return self.encryption_master_key_base64.get_secret_value() or None

    def channels_url_prefix(self) -> str:
        """Construct the HTTP API base URL."""
        return f"{self.resolved_scheme}://{self.resolved_host}:{self.resolved_port}{self.path}"
