"""
AWS console sign-in links.

Exchanges assumed-role credentials for a sign-in token at the AWS
federation endpoint and builds the console login URL from it.
"""

import json
from typing import Optional
from urllib.parse import quote_plus

import requests

from .broker import CredentialBroker, ResolvedCredentials
from .exceptions import SigninRequestError, SigninTokenMissingError
from .utils import get_logger

logger = get_logger(__name__)

FEDERATION_URL = "https://signin.aws.amazon.com/federation"
DEFAULT_DESTINATION = "https://console.aws.amazon.com/"


def session_payload(credentials: ResolvedCredentials) -> str:
    """Compact JSON session document expected by getSigninToken."""
    return json.dumps(
        {
            "sessionId": credentials.access_key_id,
            "sessionKey": credentials.secret_access_key,
            "sessionToken": credentials.session_token,
        },
        separators=(",", ":"),
    )


class FederationClient:
    """HTTP client for the AWS federation endpoint."""

    def __init__(self, url: str = FEDERATION_URL, session=None):
        self.url = url
        self.session = session or requests.Session()

    def get_signin_token(
        self, session_json: str, duration_seconds: Optional[int] = None
    ) -> str:
        """
        Exchange a session document for a sign-in token.

        Args:
            session_json: Compact JSON with sessionId, sessionKey and sessionToken
            duration_seconds: Optional console session length; range checking
                is left to the endpoint

        Returns:
            str: The SigninToken value

        Raises:
            SigninRequestError: If the request fails or the body is not a JSON object
            SigninTokenMissingError: If the response has no SigninToken
        """
        params = {"Action": "getSigninToken"}
        if duration_seconds:
            params["SessionDuration"] = str(duration_seconds)
        params["Session"] = session_json

        try:
            response = self.session.get(self.url, params=params)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SigninRequestError(f"failed to generate signin token: {e}", e) from e

        try:
            body = response.json()
        except ValueError as e:
            raise SigninRequestError(f"failed to parse signin token: {e}", e) from e

        if not isinstance(body, dict):
            raise SigninRequestError("failed to parse signin token: expected an object")

        token = body.get("SigninToken")
        if not token:
            raise SigninTokenMissingError()
        return token


class ConsoleLinkBuilder:
    """Builds console sign-in URLs for configured accounts."""

    def __init__(self, broker: CredentialBroker, federation: FederationClient):
        self.broker = broker
        self.federation = federation

    def build(
        self,
        identifier: str,
        destination: str = DEFAULT_DESTINATION,
        duration_seconds: int = 0,
    ) -> str:
        """
        Resolve credentials for an account and return a console login URL.

        The console session length is the effective duration computed while
        resolving the credentials.
        """
        credentials = self.broker.resolve(identifier, duration_seconds)
        logger.debug(
            f"Requesting signin token for {credentials.account_id} "
            f"(cached credentials: {credentials.from_cache})"
        )

        token = self.federation.get_signin_token(
            session_payload(credentials), credentials.duration_seconds
        )

        return (
            f"{FEDERATION_URL}"
            f"?Action=login"
            f"&SigninToken={token}"
            f"&Destination={quote_plus(destination)}"
        )
