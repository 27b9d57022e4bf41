"""Identity backend contract and its Firebase implementation.

``IdentityToolkitBackend`` talks to the Firebase Identity Toolkit REST API
and keeps a snapshot of the signed-in account. It raises ``BackendError``
carrying the provider's error code; adapters translate those into the
authentication taxonomy.
"""

import logging
import re
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import urlencode

import httpx

from authkit.auth.identity_toolkit import (
    IDENTITY_TOOLKIT_ENDPOINTS,
    LookupResponse,
    SendOobCodeRequest,
    SignInWithIdpRequest,
    SignInWithIdpResponse,
    SignInWithPasswordRequest,
    SignInWithPasswordResponse,
    SignUpRequest,
    SignUpResponse,
    UpdateAccountRequest,
    UpdateAccountResponse,
)
from authkit.core.http import IDENTITY_TOOLKIT_BASE_URL, get_identity_toolkit_client

logger = logging.getLogger(__name__)

NETWORK_REQUEST_FAILED = "NETWORK_REQUEST_FAILED"
INVALID_RESPONSE = "INVALID_RESPONSE"


class BackendError(Exception):
    """Error reported by the identity backend.

    ``code`` is the backend's error code (e.g. ``EMAIL_EXISTS``); ``message``
    is the full original text.
    """

    def __init__(self, code: str, message: str | None = None):
        self.code = code
        self.message = message or code
        super().__init__(self.message)


@dataclass(frozen=True)
class BackendUser:
    """Snapshot of the account held by the identity backend."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    email_verified: bool = False
    created_at: datetime | None = None
    id_token: str | None = None
    refresh_token: str | None = None


@dataclass(frozen=True)
class PasswordCredential:
    email: str
    password: str


@dataclass(frozen=True)
class IdpCredential:
    """Token issued by an external identity provider."""

    provider_id: str
    id_token: str
    access_token: str | None = None
    raw_nonce: str | None = None


Credential = PasswordCredential | IdpCredential


class IdentityBackend(Protocol):
    """Operations the session facade needs from an identity backend."""

    @property
    def current_user(self) -> BackendUser | None: ...

    async def authenticate(self, credential: Credential) -> BackendUser: ...

    async def create_account(self, email: str, password: str) -> BackendUser: ...

    async def send_password_reset(self, email: str) -> None: ...

    async def reauthenticate(self, credential: Credential) -> None: ...

    async def update_password(self, new_password: str) -> None: ...

    async def update_profile(
        self, *, display_name: str | None = None, photo_url: str | None = None
    ) -> BackendUser: ...

    async def delete_current_account(self) -> None: ...

    async def sign_out(self) -> None: ...


def _sanitize_error_code(error_message: str) -> str:
    """Extract a safe, non-sensitive error code for logging."""
    match = re.match(r"[A-Z0-9_]+", error_message)
    return match.group(0) if match else "UNKNOWN"


def _parse_millis(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=UTC)
    except (TypeError, ValueError):
        return None


class IdentityToolkitBackend:
    """Firebase Authentication over the Identity Toolkit REST API."""

    def __init__(
        self,
        api_key: str,
        identity_toolkit_base_url: str = IDENTITY_TOOLKIT_BASE_URL,
        *,
        request_uri: str = "http://localhost",
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._identity_toolkit_base_url = identity_toolkit_base_url.rstrip("/")
        self._request_uri = request_uri
        self._client = client
        self._current_user: BackendUser | None = None

    @property
    def current_user(self) -> BackendUser | None:
        return self._current_user

    def _get_client(self) -> httpx.AsyncClient:
        return self._client if self._client is not None else get_identity_toolkit_client()

    async def _make_identity_toolkit_request(
        self, endpoint: str, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Make a request to Identity Toolkit REST API.

        Raises:
            BackendError: with the backend's error code, or
                NETWORK_REQUEST_FAILED when the backend is unreachable
        """
        if not self._api_key:
            raise BackendError("MISSING_API_KEY", "Firebase API key not configured")
        url = f"{self._identity_toolkit_base_url}/{endpoint}?key={self._api_key}"

        try:
            response = await self._get_client().post(url, json=payload)
        except httpx.RequestError as e:
            raise BackendError(
                NETWORK_REQUEST_FAILED, "Authentication provider unavailable"
            ) from e

        if response.status_code != 200:
            self._handle_identity_toolkit_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                INVALID_RESPONSE, "Authentication provider returned an invalid response"
            ) from e

    def _handle_identity_toolkit_error(self, response: httpx.Response) -> None:
        """Raise BackendError from an Identity Toolkit error response."""
        try:
            error_data = response.json()
            error_message = error_data.get("error", {}).get("message", "Unknown error")
        except (ValueError, AttributeError) as e:
            raise BackendError(
                INVALID_RESPONSE, "Authentication provider returned an invalid response"
            ) from e

        error_code = _sanitize_error_code(error_message)
        logger.info(
            "Identity Toolkit error: status=%s, code=%s",
            response.status_code,
            error_code,
            extra={"status_code": response.status_code, "error_code": error_code},
        )
        raise BackendError(error_code, error_message)

    def _require_id_token(self) -> tuple[BackendUser, str]:
        user = self._current_user
        if user is None or not user.id_token:
            raise BackendError("USER_NOT_FOUND", "No signed-in user")
        return user, user.id_token

    async def _lookup(self, id_token: str) -> BackendUser:
        data: LookupResponse = await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["lookup"],
            payload={"idToken": id_token},
        )
        users = data.get("users") or []
        if not users or not users[0].get("localId"):
            raise BackendError("USER_NOT_FOUND", "Account lookup returned no user")
        info = users[0]
        return BackendUser(
            uid=info["localId"],
            email=info.get("email"),
            display_name=info.get("displayName"),
            photo_url=info.get("photoUrl"),
            email_verified=info.get("emailVerified", False),
            created_at=_parse_millis(info.get("createdAt")),
            id_token=id_token,
        )

    async def _establish(self, id_token: str | None, refresh_token: str | None) -> BackendUser:
        if not id_token:
            raise BackendError(INVALID_RESPONSE, "Authentication response had no token")
        user = replace(await self._lookup(id_token), refresh_token=refresh_token)
        self._current_user = user
        return user

    async def authenticate(self, credential: Credential) -> BackendUser:
        if isinstance(credential, PasswordCredential):
            request: SignInWithPasswordRequest = {
                "email": credential.email,
                "password": credential.password,
                "returnSecureToken": True,
            }
            data: SignInWithPasswordResponse = await self._make_identity_toolkit_request(
                endpoint=IDENTITY_TOOLKIT_ENDPOINTS["signInWithPassword"],
                payload=request,
            )
            return await self._establish(data.get("idToken"), data.get("refreshToken"))

        post_body: dict[str, str] = {
            "id_token": credential.id_token,
            "providerId": credential.provider_id,
        }
        if credential.access_token:
            post_body["access_token"] = credential.access_token
        if credential.raw_nonce:
            post_body["nonce"] = credential.raw_nonce

        idp_request: SignInWithIdpRequest = {
            "postBody": urlencode(post_body),
            "requestUri": self._request_uri,
            "returnSecureToken": True,
            "returnIdpCredential": True,
        }
        idp: SignInWithIdpResponse = await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["signInWithIdp"],
            payload=idp_request,
        )
        user = await self._establish(idp.get("idToken"), idp.get("refreshToken"))
        # The IdP response knows the provider profile even when the account
        # record does not have it yet.
        user = replace(
            user,
            email=user.email or idp.get("email"),
            display_name=user.display_name
            or idp.get("displayName")
            or idp.get("fullName"),
            photo_url=user.photo_url or idp.get("photoUrl"),
        )
        self._current_user = user
        return user

    async def create_account(self, email: str, password: str) -> BackendUser:
        request: SignUpRequest = {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        }
        data: SignUpResponse = await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["signUp"],
            payload=request,
        )
        return await self._establish(data.get("idToken"), data.get("refreshToken"))

    async def send_password_reset(self, email: str) -> None:
        request: SendOobCodeRequest = {"requestType": "PASSWORD_RESET", "email": email}
        await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["sendOobCode"],
            payload=request,
        )

    async def reauthenticate(self, credential: Credential) -> None:
        """Verify the credential against the signed-in account.

        The current session is only refreshed when the credential belongs to
        the same account.
        """
        current, _ = self._require_id_token()
        previous = self._current_user
        user = await self.authenticate(credential)
        if user.uid != current.uid:
            self._current_user = previous
            raise BackendError("USER_MISMATCH", "Credential belongs to another account")

    async def update_password(self, new_password: str) -> None:
        user, id_token = self._require_id_token()
        request: UpdateAccountRequest = {
            "idToken": id_token,
            "password": new_password,
            "returnSecureToken": True,
        }
        data: UpdateAccountResponse = await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["update"],
            payload=request,
        )
        if not data.get("localId"):
            raise BackendError(INVALID_RESPONSE, "Failed to update password")
        self._current_user = replace(
            user,
            id_token=data.get("idToken") or id_token,
            refresh_token=data.get("refreshToken") or user.refresh_token,
        )

    async def update_profile(
        self, *, display_name: str | None = None, photo_url: str | None = None
    ) -> BackendUser:
        user, id_token = self._require_id_token()
        payload: UpdateAccountRequest = {"idToken": id_token, "returnSecureToken": False}
        if display_name is not None:
            payload["displayName"] = display_name
        if photo_url is not None:
            payload["photoUrl"] = photo_url

        data: UpdateAccountResponse = await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["update"],
            payload=payload,
        )
        self._current_user = replace(
            user,
            display_name=data.get("displayName", user.display_name),
            photo_url=data.get("photoUrl", user.photo_url),
        )
        return self._current_user

    async def delete_current_account(self) -> None:
        _, id_token = self._require_id_token()
        await self._make_identity_toolkit_request(
            endpoint=IDENTITY_TOOLKIT_ENDPOINTS["delete"],
            payload={"idToken": id_token},
        )
        self._current_user = None

    async def sign_out(self) -> None:
        # Tokens are bearer tokens; dropping them ends the local session.
        self._current_user = None
