"""
TickTick OAuth 2.0 authorization-code flow for a local user.

Flow:
1. Print the TickTick consent URL (with a fresh anti-forgery state)
2. Wait for the browser redirect on http://localhost:PORT/callback
3. Check the echoed state, then exchange the code at the token endpoint
   using HTTP Basic client authentication

The resulting access token is returned to the caller; nothing is stored.
"""

import base64
import logging
import secrets
from urllib.parse import urlencode

import click
import requests

from .callback_server import CALLBACK_PATH, CallbackServer
from .errors import (
    AuthorizationDeniedError,
    AuthorizationError,
    AuthorizationTimeoutError,
    NetworkError,
)

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://ticktick.com/oauth/authorize"
TOKEN_URL = "https://ticktick.com/oauth/token"
SCOPE = "tasks:read tasks:write"

DEFAULT_PORT = 8585
DEFAULT_TIMEOUT = 300


def generate_state() -> str:
    """128 bits of randomness, hex encoded."""
    return secrets.token_hex(16)


class OAuthFlow:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        port: int = DEFAULT_PORT,
        session: requests.Session | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.port = port
        self.session = session or requests.Session()

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.port}{CALLBACK_PATH}"

    def build_authorize_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "scope": SCOPE,
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def run(self, timeout: float = DEFAULT_TIMEOUT) -> str:
        """Drive the whole handshake and return the access token.

        Raises:
            AuthorizationTimeoutError: no callback within ``timeout`` seconds
            AuthorizationDeniedError: the provider redirected with an error
            AuthorizationError: state mismatch or unusable token response
            NetworkError: the token endpoint could not be reached
        """
        state = generate_state()
        url = self.build_authorize_url(state)

        click.echo("Open the following URL in your browser to authorize TickTick:\n", err=True)
        click.echo(f"  {url}\n", err=True)
        click.echo(f"Waiting for authorization (timeout: {int(timeout)} seconds)...", err=True)

        server = CallbackServer(port=self.port)
        result = server.wait_for_code(timeout)

        if result is None:
            raise AuthorizationTimeoutError("Timed out waiting for authorization. Please try again.")
        if result.is_error:
            raise AuthorizationDeniedError(f"Authorization was denied: {result.error}")
        # Must hold before the code is sent anywhere
        if result.state != state:
            logger.error("OAuth state mismatch on callback")
            raise AuthorizationError("State mismatch. Possible CSRF attack.")

        return self.exchange_code_for_token(result.code or "")

    def exchange_code_for_token(self, code: str) -> str:
        credentials = base64.b64encode(
            f"{self.client_id}:{self.client_secret}".encode()
        ).decode("ascii")
        headers = {
            "Authorization": f"Basic {credentials}",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }

        logger.info(f"Exchanging authorization code at {TOKEN_URL}")
        try:
            response = self.session.post(TOKEN_URL, data=data, headers=headers)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach the token endpoint: {e}") from e

        if not response.ok:
            logger.error(f"Token exchange failed: {response.status_code}")
            raise AuthorizationError(
                f"Token exchange failed (HTTP {response.status_code}): {response.text}"
            )

        try:
            token_data = response.json()
        except requests.exceptions.JSONDecodeError as e:
            raise AuthorizationError(
                f"Token endpoint returned invalid JSON: {response.text}"
            ) from e

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise AuthorizationError(f"No access_token in response: {response.text}")

        logger.info("Successfully exchanged code for access token")
        return access_token
