"""Tests for subsonic-response envelope decoding."""

import pytest

from airsonic_plugin.exceptions import (
    NegotiationError,
    SubsonicAuthenticationError,
    SubsonicError,
    SubsonicNotFoundError,
    SubsonicVersionError,
    TokenAuthenticationNotSupportedError,
    error_for_code,
)
from airsonic_plugin.response import Failure, Success, as_list, decode_envelope, dig


class TestDecodeEnvelope:
    """Tests for decode_envelope."""

    def test_ok_envelope(self):
        body = {"subsonic-response": {"status": "ok", "version": "1.16.1", "album": {"id": "1"}}}

        result = decode_envelope(body)

        assert isinstance(result, Success)
        assert result.payload["album"] == {"id": "1"}

    def test_failed_envelope_maps_error_code(self):
        body = {
            "subsonic-response": {
                "status": "failed",
                "error": {"code": 40, "message": "Wrong username or password"},
            }
        }

        result = decode_envelope(body)

        assert isinstance(result, Failure)
        assert isinstance(result.error, SubsonicAuthenticationError)
        assert result.error.code == 40
        assert "Wrong username or password" in result.reason

    def test_failed_envelope_without_error_object(self):
        result = decode_envelope({"subsonic-response": {"status": "failed"}})

        assert isinstance(result, Failure)
        assert type(result.error) is SubsonicError
        assert result.error.code == 0

    @pytest.mark.parametrize(
        "body",
        [None, [], "ok", {}, {"subsonic-response": None}, {"subsonic-response": "ok"}],
    )
    def test_non_envelope_bodies(self, body):
        result = decode_envelope(body)

        assert isinstance(result, Failure)
        assert result.error is None

    def test_unknown_status(self):
        result = decode_envelope({"subsonic-response": {"status": "maybe"}})

        assert isinstance(result, Failure)
        assert "maybe" in result.reason


class TestErrorForCode:
    @pytest.mark.parametrize(
        "code,expected",
        [
            (40, SubsonicAuthenticationError),
            (41, SubsonicAuthenticationError),
            (42, TokenAuthenticationNotSupportedError),
            (20, SubsonicVersionError),
            (30, SubsonicVersionError),
            (70, SubsonicNotFoundError),
            (999, SubsonicError),
        ],
    )
    def test_mapping(self, code, expected):
        error = error_for_code(code, "message")

        assert type(error) is expected
        assert str(error) == f"Subsonic Error {code}: message"

    def test_negotiation_error_lists_attempts(self):
        error = NegotiationError(["token: refused", "password: refused"])

        assert error.attempts == ["token: refused", "password: refused"]
        assert "token: refused; password: refused" in str(error)


class TestHelpers:
    def test_dig_follows_keys(self):
        assert dig({"a": {"b": {"c": 1}}}, "a", "b", "c") == 1

    def test_dig_stops_at_non_dict(self):
        assert dig({"a": [1, 2]}, "a", "b") is None
        assert dig(None, "a") is None

    def test_as_list_variants(self):
        assert as_list(None) == []
        assert as_list({"id": "1"}) == [{"id": "1"}]
        assert as_list([{"id": "1"}, "junk", {"id": "2"}]) == [{"id": "1"}, {"id": "2"}]
        assert as_list("junk") == []
