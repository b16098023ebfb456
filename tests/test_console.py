"""
Tests for console sign-in URLs.
"""

import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from aws_login.broker import ResolvedCredentials
from aws_login.console import (
    FEDERATION_URL,
    ConsoleLinkBuilder,
    FederationClient,
    session_payload,
)
from aws_login.exceptions import SigninRequestError, SigninTokenMissingError


def make_credentials(from_cache: bool = True, duration: int = 3600):
    return ResolvedCredentials(
        account_id="123456789012",
        access_key_id="ASIAEXAMPLE",
        secret_access_key="secret",
        session_token="token",
        expires_at=datetime(2026, 10, 19, 13, 0, tzinfo=timezone.utc),
        duration_seconds=duration,
        from_cache=from_cache,
    )


def mock_session(body=None, json_error=None, http_error=None):
    response = Mock()
    if http_error:
        response.raise_for_status.side_effect = http_error
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    session = Mock()
    session.get.return_value = response
    return session


class TestSessionPayload:
    def test_compact_json(self):
        payload = session_payload(make_credentials())
        assert payload == (
            '{"sessionId":"ASIAEXAMPLE","sessionKey":"secret","sessionToken":"token"}'
        )


class TestFederationClient:
    """Test the getSigninToken request."""

    def test_get_signin_token(self):
        session = mock_session({"SigninToken": "abc123"})
        client = FederationClient(session=session)

        assert client.get_signin_token('{"sessionId":"x"}', 43200) == "abc123"
        session.get.assert_called_once_with(
            FEDERATION_URL,
            params={
                "Action": "getSigninToken",
                "SessionDuration": "43200",
                "Session": '{"sessionId":"x"}',
            },
        )

    def test_duration_is_optional(self):
        session = mock_session({"SigninToken": "abc123"})
        FederationClient(session=session).get_signin_token("{}")

        params = session.get.call_args.kwargs["params"]
        assert "SessionDuration" not in params

    def test_missing_signin_token(self):
        client = FederationClient(session=mock_session({"Other": "value"}))

        with pytest.raises(SigninTokenMissingError) as exc_info:
            client.get_signin_token("{}", 3600)
        assert exc_info.value.error_code == "SIGNIN_TOKEN_MISSING"

    def test_non_json_response(self):
        client = FederationClient(
            session=mock_session(json_error=json.JSONDecodeError("Expecting value", "", 0))
        )

        with pytest.raises(SigninRequestError):
            client.get_signin_token("{}", 3600)

    def test_non_object_response(self):
        client = FederationClient(session=mock_session(["SigninToken"]))

        with pytest.raises(SigninRequestError):
            client.get_signin_token("{}", 3600)

    def test_http_error(self):
        client = FederationClient(
            session=mock_session(http_error=requests.HTTPError("400 Client Error"))
        )

        with pytest.raises(SigninRequestError) as exc_info:
            client.get_signin_token("{}", 3600)
        assert isinstance(exc_info.value.original_error, requests.HTTPError)

    def test_connection_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(SigninRequestError):
            FederationClient(session=session).get_signin_token("{}", 3600)


class TestConsoleLinkBuilder:
    """Test building the console login URL."""

    def test_build(self):
        broker = Mock()
        broker.resolve.return_value = make_credentials(duration=7200)
        federation = Mock()
        federation.get_signin_token.return_value = "abc123"

        url = ConsoleLinkBuilder(broker, federation).build(
            "admin", "https://console.aws.amazon.com/s3/home?region=eu-west-1", 0
        )

        broker.resolve.assert_called_once_with("admin", 0)
        federation.get_signin_token.assert_called_once_with(
            '{"sessionId":"ASIAEXAMPLE","sessionKey":"secret","sessionToken":"token"}',
            7200,
        )
        assert url == (
            "https://signin.aws.amazon.com/federation?Action=login"
            "&SigninToken=abc123"
            "&Destination=https%3A%2F%2Fconsole.aws.amazon.com%2Fs3%2Fhome"
            "%3Fregion%3Deu-west-1"
        )

    def test_missing_token_propagates(self):
        broker = Mock()
        broker.resolve.return_value = make_credentials()
        federation = FederationClient(session=mock_session({}))

        with pytest.raises(SigninTokenMissingError):
            ConsoleLinkBuilder(broker, federation).build("123456789012")

    def test_resolution_errors_propagate(self):
        from aws_login.exceptions import UnknownAliasError

        broker = Mock()
        broker.resolve.side_effect = UnknownAliasError("staging")
        federation = Mock()

        with pytest.raises(UnknownAliasError):
            ConsoleLinkBuilder(broker, federation).build("staging")
        federation.get_signin_token.assert_not_called()
