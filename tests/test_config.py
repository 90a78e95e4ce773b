"""Tests for configuration management."""

import pytest

from channels_secure.config import ChannelsConfig


class TestChannelsConfig:
    """Tests for the ChannelsConfig class."""

    def test_required_fields(self, monkeypatch):
        """Test that required fields are enforced."""
        for name in ("PUSHER_APP_ID", "PUSHER_KEY", "PUSHER_SECRET"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(Exception):  # ValidationError
            ChannelsConfig(_env_file=None)

    def test_default_values(self, plain_config):
        """Test default configuration values."""
        assert plain_config.use_tls is True
        assert plain_config.resolved_scheme == "https"
        assert plain_config.resolved_port == 443
        assert plain_config.resolved_host == "api-mt1.pusher.com"
        assert plain_config.timeout == 30.0
        assert plain_config.master_key_base64 is None

    def test_base_path(self, plain_config):
        assert plain_config.base_path == "/apps/3"

    def test_url_prefix(self, config):
        """Test base URL construction."""
        assert config.channels_url_prefix() == "http://localhost:8080"

    def test_without_tls(self):
        config = ChannelsConfig(app_id="1", key="k", secret="s", use_tls=False)

        assert config.channels_url_prefix() == "http://api-mt1.pusher.com:80"

    def test_cluster_host(self):
        config = ChannelsConfig(app_id="1", key="k", secret="s", cluster="eu")

        assert config.resolved_host == "api-eu.pusher.com"

    def test_host_overrides_cluster_and_loses_scheme(self):
        config = ChannelsConfig(
            app_id="1", key="k", secret="s", cluster="eu", host="https://example.com/"
        )

        assert config.resolved_host == "example.com"

    def test_scheme_implies_port(self):
        config = ChannelsConfig(app_id="1", key="k", secret="s", scheme="http")

        assert config.resolved_port == 80

    def test_invalid_port(self):
        with pytest.raises(Exception):  # ValidationError
            ChannelsConfig(app_id="1", key="k", secret="s", port=70000)

    def test_frozen(self, plain_config):
        with pytest.raises(Exception):  # ValidationError
            plain_config.app_id = "other"

    def test_from_environment(self, monkeypatch, master_key_base64):
        monkeypatch.setenv("PUSHER_APP_ID", "77")
        monkeypatch.setenv("PUSHER_KEY", "env-key")
        monkeypatch.setenv("PUSHER_SECRET", "env-secret")
        monkeypatch.setenv("PUSHER_ENCRYPTION_MASTER_KEY_BASE64", master_key_base64)

        config = ChannelsConfig(_env_file=None)

        assert config.app_id == "77"
        assert config.key == "env-key"
        assert config.master_key_base64 == master_key_base64

    def test_secret_is_secret(self, config, master_key_base64):
        """Test that secrets are SecretStr."""
        assert "test-secret" not in str(config)
        assert "test-secret" not in repr(config)
        assert master_key_base64 not in repr(config)

        # But can get the actual value when needed
        assert "test-secret" in config.secret.get_secret_value()
