"""Google OAuth redirect flow.

The flow opens Google's consent page through a host-supplied ``open_url``
callable, then waits for the host to deliver the redirect back through
``handle_callback``. The authorization code is exchanged (with PKCE) for
tokens that the identity backend accepts.
"""

import base64
import hashlib
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from authkit.auth.interactive import (
    CredentialContinuation,
    InteractiveFlowError,
    InteractiveFlowReason,
)
from authkit.core.constants import DEFAULT_OAUTH_CALLBACK_TIMEOUT
from authkit.core.http import get_oauth_client

logger = logging.getLogger(__name__)

# OAuth configuration
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_SCOPES = ["openid", "email", "profile"]


@dataclass(frozen=True)
class OAuthTokens:
    id_token: str
    access_token: str | None = None


class OAuthProvider(Protocol):
    async def sign_in(self) -> OAuthTokens: ...

    def handle_callback(self, url: str) -> bool: ...


def _code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


@dataclass
class _PendingAuthorization:
    state: str
    code_verifier: str
    continuation: CredentialContinuation[str]


class GoogleOAuthFlow:
    """Authorization-code flow against Google with state and PKCE."""

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        open_url: Callable[[str], None],
        *,
        client_secret: str | None = None,
        timeout: float | None = DEFAULT_OAUTH_CALLBACK_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._open_url = open_url
        self._timeout = timeout
        self._client = client
        self._pending: _PendingAuthorization | None = None

    @property
    def in_progress(self) -> bool:
        return self._pending is not None

    def get_authorization_url(self, state: str, code_challenge: str) -> str:
        """Generate the Google consent URL."""
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": " ".join(GOOGLE_SCOPES),
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def sign_in(self) -> OAuthTokens:
        """Run one redirect round-trip and return Google's tokens.

        Raises:
            InteractiveFlowError: if a flow is already pending, the user
                denies consent, the redirect never arrives in time, or the
                token exchange is rejected
            httpx.RequestError: if Google cannot be reached
        """
        if self._pending is not None:
            raise InteractiveFlowError(
                InteractiveFlowReason.failed, "Google Sign-In already in progress"
            )

        pending = _PendingAuthorization(
            state=secrets.token_urlsafe(32),
            code_verifier=secrets.token_urlsafe(64),
            continuation=CredentialContinuation(),
        )
        self._pending = pending
        try:
            self._open_url(
                self.get_authorization_url(
                    pending.state, _code_challenge(pending.code_verifier)
                )
            )
            code = await pending.continuation.wait(self._timeout)
        finally:
            self._pending = None

        return await self.exchange_code_for_tokens(code, pending.code_verifier)

    def handle_callback(self, url: str) -> bool:
        """Deliver a redirect URL. Returns True if it completed a pending flow."""
        pending = self._pending
        if pending is None:
            return False

        parsed = urlparse(url)
        expected = urlparse(self._redirect_uri)
        if (parsed.scheme, parsed.netloc, parsed.path) != (
            expected.scheme,
            expected.netloc,
            expected.path,
        ):
            return False

        params = parse_qs(parsed.query)
        if params.get("state", [None])[0] != pending.state:
            logger.warning("OAuth callback state mismatch")
            return False

        error = params.get("error", [None])[0]
        if error is not None:
            reason = (
                InteractiveFlowReason.canceled
                if error == "access_denied"
                else InteractiveFlowReason.failed
            )
            return pending.continuation.resume_throwing(
                InteractiveFlowError(reason, f"Google authorization error: {error}")
            )

        code = params.get("code", [None])[0]
        if not code:
            return pending.continuation.resume_throwing(
                InteractiveFlowError(
                    InteractiveFlowReason.invalid_response,
                    "Google callback carried no authorization code",
                )
            )
        return pending.continuation.resume_returning(code)

    async def exchange_code_for_tokens(self, code: str, code_verifier: str) -> OAuthTokens:
        data = {
            "client_id": self._client_id,
            "code": code,
            "code_verifier": code_verifier,
            "grant_type": "authorization_code",
            "redirect_uri": self._redirect_uri,
        }
        if self._client_secret:
            data["client_secret"] = self._client_secret

        client = self._client if self._client is not None else get_oauth_client()
        response = await client.post(GOOGLE_TOKEN_URL, data=data)

        if response.status_code != 200:
            logger.info("Google token exchange failed: status=%s", response.status_code)
            raise InteractiveFlowError(
                InteractiveFlowReason.failed, "Google token exchange failed"
            )

        token_data = response.json()
        id_token = token_data.get("id_token")
        if not id_token:
            raise InteractiveFlowError(
                InteractiveFlowReason.invalid_response, "Google returned no ID token"
            )
        return OAuthTokens(id_token=id_token, access_token=token_data.get("access_token"))
