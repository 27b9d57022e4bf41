import inspect
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import anyio
import pytest

from authkit.auth.backend import (
    BackendError,
    BackendUser,
    Credential,
    IdpCredential,
    PasswordCredential,
)
from authkit.auth.interactive import (
    AppleIDCredential,
    AppleIDRequest,
    CredentialContinuation,
)
from authkit.auth.oauth import OAuthTokens
from authkit.auth.service import AuthenticationService
from authkit.core.configuration import AuthenticationConfiguration
from authkit.user.profiles import ProfileRepository
from authkit.user.store import InMemoryProfileStore


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


class FakeIdentityBackend:
    """Stateful in-memory identity backend.

    Password accounts are keyed by email; IdP accounts by the id token the
    provider issued. Set ``fail_on[method] = BackendError(...)`` to make the
    next call to ``method`` fail.
    """

    def __init__(self) -> None:
        self.accounts: dict[str, dict] = {}
        self.idp_accounts: dict[str, BackendUser] = {}
        self.fail_on: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.last_idp_credential: IdpCredential | None = None
        self._current_user: BackendUser | None = None
        self._next_uid = 0

    @property
    def current_user(self) -> BackendUser | None:
        return self._current_user

    def _record(self, method: str) -> None:
        self.calls.append(method)
        error = self.fail_on.pop(method, None)
        if error is not None:
            raise error

    def _uid(self) -> str:
        self._next_uid += 1
        return f"uid-{self._next_uid}"

    def add_account(self, email: str, password: str, display_name: str | None = None) -> BackendUser:
        user = BackendUser(
            uid=self._uid(), email=email, display_name=display_name, id_token="token"
        )
        self.accounts[email] = {"password": password, "user": user}
        return user

    def add_idp_account(self, id_token: str, **fields) -> BackendUser:
        user = BackendUser(uid=self._uid(), id_token=id_token, **fields)
        self.idp_accounts[id_token] = user
        return user

    async def authenticate(self, credential: Credential) -> BackendUser:
        self._record("authenticate")
        if isinstance(credential, PasswordCredential):
            account = self.accounts.get(credential.email)
            if account is None:
                raise BackendError("EMAIL_NOT_FOUND")
            if account["password"] != credential.password:
                raise BackendError("INVALID_PASSWORD")
            self._current_user = account["user"]
            return account["user"]

        self.last_idp_credential = credential
        user = self.idp_accounts.get(credential.id_token)
        if user is None:
            raise BackendError("INVALID_IDP_RESPONSE", "INVALID_IDP_RESPONSE : bad token")
        self._current_user = user
        return user

    async def create_account(self, email: str, password: str) -> BackendUser:
        self._record("create_account")
        if email in self.accounts:
            raise BackendError("EMAIL_EXISTS")
        if len(password) < 6:
            raise BackendError("WEAK_PASSWORD", "WEAK_PASSWORD : Password should be at least 6 characters")
        user = self.add_account(email, password)
        self._current_user = user
        return user

    async def send_password_reset(self, email: str) -> None:
        self._record("send_password_reset")
        if email not in self.accounts:
            raise BackendError("EMAIL_NOT_FOUND")

    async def reauthenticate(self, credential: Credential) -> None:
        self._record("reauthenticate")
        if self._current_user is None:
            raise BackendError("USER_NOT_FOUND")
        account = self.accounts.get(credential.email)
        if account is None or account["password"] != credential.password:
            raise BackendError("INVALID_PASSWORD")

    async def update_password(self, new_password: str) -> None:
        self._record("update_password")
        user = self._current_user
        if user is None:
            raise BackendError("USER_NOT_FOUND")
        self.accounts[user.email]["password"] = new_password

    async def update_profile(
        self, *, display_name: str | None = None, photo_url: str | None = None
    ) -> BackendUser:
        self._record("update_profile")
        user = self._current_user
        if user is None:
            raise BackendError("USER_NOT_FOUND")
        user = replace(
            user,
            display_name=display_name if display_name is not None else user.display_name,
            photo_url=photo_url if photo_url is not None else user.photo_url,
        )
        self._current_user = user
        if user.email in self.accounts:
            self.accounts[user.email]["user"] = user
        return user

    async def delete_current_account(self) -> None:
        self._record("delete_current_account")
        user = self._current_user
        if user is None:
            raise BackendError("USER_NOT_FOUND")
        self.accounts.pop(user.email, None)
        self._current_user = None

    async def sign_out(self) -> None:
        self._record("sign_out")
        self._current_user = None


class FakeOAuth:
    """OAuth provider that returns canned tokens or raises a canned error."""

    def __init__(self, tokens: OAuthTokens | None = None, error: Exception | None = None):
        self.tokens = tokens or OAuthTokens(id_token="google-id-token", access_token="at")
        self.error = error
        self.callbacks: list[str] = []
        self.handles = True

    async def sign_in(self) -> OAuthTokens:
        if self.error is not None:
            raise self.error
        return self.tokens

    def handle_callback(self, url: str) -> bool:
        self.callbacks.append(url)
        return self.handles


class FakeAppleCredentialProvider:
    """Platform sheet stand-in.

    ``outcome`` is delivered synchronously when a request is performed: an
    ``AppleIDCredential`` resolves it, an exception fails it and ``None``
    leaves it pending (the user never answers).
    """

    def __init__(self, outcome=None, available: bool = True):
        self.outcome = outcome
        self.available = available
        self.requests: list[AppleIDRequest] = []
        self.continuations: list[CredentialContinuation] = []
        self.cancelled = 0

    def is_available(self) -> bool:
        return self.available

    def perform_request(
        self,
        request: AppleIDRequest,
        continuation: CredentialContinuation[AppleIDCredential],
    ) -> None:
        self.requests.append(request)
        self.continuations.append(continuation)
        if isinstance(self.outcome, AppleIDCredential):
            continuation.resume_returning(self.outcome)
        elif isinstance(self.outcome, BaseException):
            continuation.resume_throwing(self.outcome)

    def cancel_request(self) -> None:
        self.cancelled += 1


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture(name="backend")
def backend_fixture():
    return FakeIdentityBackend()


@pytest.fixture(name="store")
def store_fixture():
    return InMemoryProfileStore()


@pytest.fixture(name="clock")
def clock_fixture():
    return TickingClock()


@pytest.fixture(name="profiles")
def profiles_fixture(store: InMemoryProfileStore, clock: TickingClock):
    return ProfileRepository(store, clock=clock)


@pytest.fixture(name="configuration")
def configuration_fixture():
    return AuthenticationConfiguration(
        firebase_project_id="demo-project",
        firebase_api_key="test-api-key",
        google_client_id="client-id",
        google_redirect_uri="http://localhost:8000/auth/callback/google",
        apple_sign_in_timeout=1.0,
    )


@pytest.fixture(name="oauth")
def oauth_fixture():
    return FakeOAuth()


@pytest.fixture(name="apple_credentials")
def apple_credentials_fixture():
    return FakeAppleCredentialProvider(
        outcome=AppleIDCredential(
            user="apple-user",
            identity_token="apple-id-token",
            email="jane@example.com",
            given_name="Jane",
            family_name="Appleseed",
        )
    )


@pytest.fixture(name="service")
def service_fixture(
    configuration: AuthenticationConfiguration,
    backend: FakeIdentityBackend,
    profiles: ProfileRepository,
    oauth: FakeOAuth,
    apple_credentials: FakeAppleCredentialProvider,
):
    return AuthenticationService(
        configuration,
        backend,
        profiles,
        oauth=oauth,
        credential_provider=apple_credentials,
    )
