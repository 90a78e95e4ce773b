"""Tests for signed request construction."""

import hashlib
import json

import pytest

from channels_secure.crypto import ChannelCipher, ChannelKeyDeriver
from channels_secure.exceptions import ConfigurationError, ValidationError
from channels_secure.messages import RequestBuilder, SignedRequest
from channels_secure.signing import CanonicalSigner, QueryAuthenticator

TIMESTAMP = 1000000000


@pytest.fixture
def authenticator() -> QueryAuthenticator:
    return QueryAuthenticator("key1", "secret123", clock=lambda: TIMESTAMP)


@pytest.fixture
def builder(authenticator, cipher) -> RequestBuilder:
    return RequestBuilder("/apps/3", authenticator, cipher)


class TestTrigger:
    """Tests for RequestBuilder.trigger()."""

    def test_single_channel(self, builder):
        request = builder.trigger("my-channel", "my-event", {"message": "hello"})

        assert request.method == "POST"
        assert request.path == "/apps/3/events"
        body = json.loads(request.body)
        assert body == {
            "name": "my-event",
            "data": '{"message":"hello"}',
            "channels": ["my-channel"],
        }

    def test_body_md5_is_signed(self, builder):
        request = builder.trigger(["a", "b"], "my-event", {"x": 1})

        body_md5 = hashlib.md5(request.body.encode("utf-8")).hexdigest()
        assert request.query["body_md5"] == body_md5
        expected = CanonicalSigner("key1").sign(
            "POST", "/apps/3/events", "secret123", {"body_md5": body_md5}, timestamp=TIMESTAMP
        )
        assert request.query == expected

    def test_params_are_merged_into_body(self, builder, socket_id):
        request = builder.trigger("a", "e", "x", params={"socket_id": socket_id, "info": "user_count"})

        body = json.loads(request.body)
        assert body["socket_id"] == socket_id
        assert body["info"] == "user_count"

    def test_already_encoded(self, builder):
        request = builder.trigger("a", "e", '{"raw":true}', already_encoded=True)

        assert json.loads(request.body)["data"] == '{"raw":true}'

    def test_invalid_socket_id(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger("a", "e", {}, params={"socket_id": "nope"})

    def test_invalid_channel(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger(["ok", "not ok"], "e", {})

    def test_unserializable_data(self, builder):
        with pytest.raises(ValidationError, match="JSON"):
            builder.trigger("a", "e", {"when": object()})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_rejected(self, builder, value):
        """NaN and Infinity have no JSON encoding."""
        with pytest.raises(ValidationError, match="JSON"):
            builder.trigger("a", "e", {"x": value})

    def test_already_encoded_non_string_for_encrypted_channel(self, builder):
        with pytest.raises(ValidationError, match="must be a string"):
            builder.trigger("private-encrypted-room", "e", {"x": 1}, already_encoded=True)

    def test_encrypted_channel(self, builder, cipher):
        request = builder.trigger("private-encrypted-room", "e", {"secret": "plans"})

        wire = json.loads(request.body)["data"]
        decrypted = cipher.decrypt_event({"channel": "private-encrypted-room", "data": wire})
        assert json.loads(decrypted["data"]) == {"secret": "plans"}

    def test_multiple_channels_with_encrypted_rejected_before_signing(self, cipher):
        class RecordingAuthenticator(QueryAuthenticator):
            calls = 0

            def build(self, *args, **kwargs):
                RecordingAuthenticator.calls += 1
                return super().build(*args, **kwargs)

        builder = RequestBuilder("/apps/3", RecordingAuthenticator("k", "s"), cipher)

        with pytest.raises(ValidationError, match="multiple channels"):
            builder.trigger(["a", "private-encrypted-b"], "e", {})
        assert RecordingAuthenticator.calls == 0

    def test_encrypted_without_master_key(self, authenticator):
        builder = RequestBuilder("/apps/3", authenticator, ChannelCipher(ChannelKeyDeriver(None)))

        with pytest.raises(ConfigurationError):
            builder.trigger("private-encrypted-room", "e", {})


class TestTriggerBatch:
    """Tests for RequestBuilder.trigger_batch()."""

    def test_batch(self, builder, cipher):
        batch = [
            {"channel": "a", "name": "e1", "data": {"n": 1}},
            {"channel": "b", "name": "e2", "data": "already a string"},
            {"channel": "private-encrypted-c", "name": "e3", "data": {"n": 3}},
        ]

        request = builder.trigger_batch(batch)

        assert request.path == "/apps/3/batch_events"
        events = json.loads(request.body)["batch"]
        assert events[0] == {"channel": "a", "name": "e1", "data": '{"n":1}'}
        assert events[1]["data"] == "already a string"
        decrypted = cipher.decrypt_event(events[2])
        assert decrypted["data"] == '{"n":3}'
        # Input events are left untouched
        assert batch[0]["data"] == {"n": 1}

    def test_batch_validates_every_event(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger_batch([{"channel": "a", "name": "e", "data": 1}, {"name": "e"}])

    def test_batch_already_encoded_non_string_for_encrypted_channel(self, builder):
        batch = [{"channel": "private-encrypted-c", "name": "e", "data": {"n": 1}}]

        with pytest.raises(ValidationError, match="must be a string"):
            builder.trigger_batch(batch, already_encoded=True)

    def test_batch_non_finite_float_rejected(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger_batch([{"channel": "a", "name": "e", "data": {"x": float("nan")}}])

    def test_batch_socket_id(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger_batch([{"channel": "a", "name": "e", "data": 1, "socket_id": "x"}])


class TestGet:
    """Tests for RequestBuilder.get()."""

    def test_get_channels(self, builder):
        request = builder.get("/channels", {"info": "connection_count"})

        assert request.method == "GET"
        assert request.path == "/apps/3/channels"
        assert request.body is None
        assert request.query_string.startswith(
            "auth_key=key1&auth_timestamp=1000000000&auth_version=1.0&info=connection_count"
            "&auth_signature="
        )


class TestSignedRequest:
    """Tests for the SignedRequest dataclass."""

    def test_headers(self):
        request = SignedRequest(method="GET", path="/p", query={})

        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["X-Pusher-Library"].startswith("python-channels-secure ")

    def test_query_for_transport(self):
        request = SignedRequest(
            method="GET", path="/p", query={"auth_timestamp": 5, "info": ["a", "b"]}
        )

        assert request.query_for_transport() == {"auth_timestamp": "5", "info": "a,b"}
        assert request.full_path == "/p?auth_timestamp=5&info=a,b"
