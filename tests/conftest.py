"""Pytest fixtures for python-channels-secure tests."""

import base64

import pytest

from channels_secure.config import ChannelsConfig
from channels_secure.crypto import ChannelCipher, ChannelKeyDeriver

MASTER_KEY = bytes(range(32))


@pytest.fixture
def master_key() -> bytes:
    """Raw 32-byte master key."""
    return MASTER_KEY


@pytest.fixture
def master_key_base64() -> str:
    """The master key as it appears in configuration."""
    return base64.b64encode(MASTER_KEY).decode("ascii")


@pytest.fixture
def config(master_key_base64: str) -> ChannelsConfig:
    """Create a test configuration with encryption enabled."""
    return ChannelsConfig(
        app_id="3",
        key="test-key",
        secret="test-secret-32-characters-long!",
        host="localhost",
        port=8080,
        scheme="http",
        encryption_master_key_base64=master_key_base64,
    )


@pytest.fixture
def plain_config() -> ChannelsConfig:
    """Create a test configuration without a master key."""
    return ChannelsConfig(app_id="3", key="test-key", secret="test-secret")


@pytest.fixture
def cipher(master_key: bytes) -> ChannelCipher:
    return ChannelCipher(ChannelKeyDeriver(master_key))


@pytest.fixture
def socket_id() -> str:
    """Sample socket ID for testing."""
    return "123456.7890123"
