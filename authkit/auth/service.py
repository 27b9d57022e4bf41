"""Authentication session facade.

``AuthenticationService`` is the single entry point applications call. It
owns the session state, dispatches each operation to the provider adapter
whose capability table allows it, and guarantees that every operation
either returns a ``User`` or raises one ``AuthenticationError``.
"""

import logging
import threading
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from authkit.auth.backend import IdentityBackend, IdentityToolkitBackend
from authkit.auth.exceptions import (
    AppleSignInNotAvailableError,
    BiometricNotImplementedError,
    GoogleSignInFailedError,
    UnknownAuthError,
    UserNotFoundError,
)
from authkit.auth.interactive import InteractiveCredentialProvider
from authkit.auth.oauth import GoogleOAuthFlow, OAuthProvider
from authkit.auth.providers.apple import AppleProvider
from authkit.auth.providers.base import AuthProvider, Capability, ProviderKind
from authkit.auth.providers.biometric import BiometricProvider
from authkit.auth.providers.google import GoogleProvider
from authkit.auth.providers.password import PasswordProvider
from authkit.core.configuration import (
    AuthenticationConfiguration,
    configuration_manager,
)
from authkit.core.firebase import get_firestore_client, init_firebase
from authkit.user.models import User
from authkit.user.profiles import ProfileRepository
from authkit.user.store import FirestoreProfileStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unauthenticated:
    pass


@dataclass(frozen=True)
class Authenticated:
    user: User
    provider: ProviderKind


SessionState = Unauthenticated | Authenticated


class AuthenticationService:
    """Provider-agnostic authentication client."""

    def __init__(
        self,
        configuration: AuthenticationConfiguration,
        backend: IdentityBackend,
        profiles: ProfileRepository,
        *,
        oauth: OAuthProvider | None = None,
        credential_provider: InteractiveCredentialProvider | None = None,
    ):
        self._configuration = configuration
        self._backend = backend
        self._profiles = profiles
        self._state: SessionState = Unauthenticated()
        self._state_lock = threading.Lock()

        self._providers: dict[ProviderKind, AuthProvider] = {}
        if configuration.enable_password_auth:
            self._providers[ProviderKind.password] = PasswordProvider(backend, profiles)
        if configuration.enable_google_sign_in and oauth is not None:
            self._providers[ProviderKind.google] = GoogleProvider(
                backend, profiles, oauth
            )
        if configuration.enable_apple_sign_in:
            self._providers[ProviderKind.apple] = AppleProvider(
                backend,
                profiles,
                credential_provider,
                timeout=configuration.apple_sign_in_timeout,
            )
        if configuration.enable_biometric_auth:
            self._providers[ProviderKind.biometric] = BiometricProvider()

    # --- state ---

    @property
    def configuration(self) -> AuthenticationConfiguration:
        return self._configuration

    @property
    def state(self) -> SessionState:
        with self._state_lock:
            return self._state

    @property
    def current_user(self) -> User | None:
        state = self.state
        return state.user if isinstance(state, Authenticated) else None

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.state, Authenticated)

    def _set_state(self, state: SessionState) -> None:
        with self._state_lock:
            self._state = state

    def _authenticated(
        self,
        user: User,
        provider: ProviderKind,
        *,
        session: Authenticated | None = None,
    ) -> User:
        """Commit ``user`` as the session, unless a sign-out ended it meanwhile.

        With ``session``, the commit only refreshes that same session and
        fails if the state moved on while the operation was suspended.

        Raises:
            UserNotFoundError: if the backend session is gone or belongs to
                another user, or ``session`` is no longer current
        """
        backend_user = self._backend.current_user
        with self._state_lock:
            if session is not None and (
                not isinstance(self._state, Authenticated)
                or self._state.user.id != session.user.id
            ):
                raise UserNotFoundError()
            if backend_user is None or backend_user.uid != user.id:
                raise UserNotFoundError()
            self._state = Authenticated(user=user, provider=provider)
        return user

    def _require_session(self) -> Authenticated:
        state = self.state
        if not isinstance(state, Authenticated):
            raise UserNotFoundError()
        return state

    # --- dispatch ---

    def supports(self, kind: ProviderKind, capability: Capability) -> bool:
        provider = self._providers.get(kind)
        return provider is not None and provider.supports(capability)

    def _provider(self, kind: ProviderKind, capability: Capability):
        provider = self._providers.get(kind)
        if provider is None:
            raise self._unavailable(kind)
        if not provider.supports(capability):
            raise UnknownAuthError(
                f"{kind.value} provider does not support {capability.value}"
            )
        return provider

    def _unavailable(self, kind: ProviderKind):
        if kind is ProviderKind.google:
            if self._configuration.enable_google_sign_in:
                return GoogleSignInFailedError(
                    "Google Sign-In is not configured: "
                    "set google_client_id and google_redirect_uri"
                )
            return GoogleSignInFailedError("Google Sign-In is not enabled")
        if kind is ProviderKind.apple:
            return AppleSignInNotAvailableError("Apple Sign-In is not enabled")
        if kind is ProviderKind.biometric:
            return BiometricNotImplementedError(
                "Biometric authentication not implemented (disabled)"
            )
        return UnknownAuthError("Email/password authentication is not enabled")

    def _session_provider(self, capability: Capability):
        """Adapter that established the session, or the password adapter."""
        state = self._require_session()
        provider = self._providers.get(state.provider)
        if provider is not None and provider.supports(capability):
            return provider
        return self._provider(ProviderKind.password, capability)

    # --- email/password ---

    async def sign_in(self, email: str, password: str) -> User:
        provider = self._provider(ProviderKind.password, Capability.sign_in)
        user = await provider.sign_in(email, password)
        return self._authenticated(user, ProviderKind.password)

    async def sign_up(self, email: str, password: str, display_name: str) -> User:
        provider = self._provider(ProviderKind.password, Capability.sign_up)
        user = await provider.sign_up(email, password, display_name)
        return self._authenticated(user, ProviderKind.password)

    async def reset_password(self, email: str) -> None:
        provider = self._provider(ProviderKind.password, Capability.reset_password)
        await provider.reset_password(email)

    async def update_password(self, current_password: str, new_password: str) -> None:
        self._require_session()
        provider = self._provider(ProviderKind.password, Capability.update_password)
        await provider.update_password(current_password, new_password)

    # --- social ---

    async def sign_in_with_google(self) -> User:
        provider = self._provider(ProviderKind.google, Capability.sign_in)
        user = await provider.sign_in()
        return self._authenticated(user, ProviderKind.google)

    async def sign_in_with_apple(self) -> User:
        provider = self._provider(ProviderKind.apple, Capability.sign_in)
        user = await provider.sign_in()
        return self._authenticated(user, ProviderKind.apple)

    def handle_callback(self, url: str) -> bool:
        """Route an OAuth redirect URL to the pending flow, if any."""
        provider = self._providers.get(ProviderKind.google)
        if provider is None:
            return False
        return provider.handle_callback(url)

    # --- session and account ---

    async def sign_out(self) -> None:
        state = self.state
        if isinstance(state, Authenticated):
            await self._session_provider(Capability.sign_out).sign_out()
            logger.info("Signed out", extra={"uid": state.user.id})
        else:
            await self._backend.sign_out()
        self._set_state(Unauthenticated())

    async def update_profile(
        self,
        display_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        state = self._require_session()
        provider = self._session_provider(Capability.update_profile)
        user = await provider.update_profile(display_name, profile_image_url)
        return self._authenticated(user, state.provider, session=state)

    async def delete_account(self) -> None:
        self._require_session()
        await self._session_provider(Capability.delete_account).delete_account()
        self._set_state(Unauthenticated())

    # --- biometric ---

    async def enable_biometric_auth(self) -> None:
        await self._provider(ProviderKind.biometric, Capability.enable).enable()

    async def disable_biometric_auth(self) -> None:
        await self._provider(ProviderKind.biometric, Capability.disable).disable()

    async def authenticate_with_biometrics(self) -> User:
        provider = self._provider(ProviderKind.biometric, Capability.sign_in)
        user = await provider.sign_in()
        return self._authenticated(user, ProviderKind.biometric)


def build_authentication_service(
    configuration: AuthenticationConfiguration,
    *,
    open_url: Callable[[str], object] = webbrowser.open,
    credential_provider: InteractiveCredentialProvider | None = None,
) -> AuthenticationService:
    """Wire the Firebase-backed service from a configuration.

    ``open_url`` presents Google's consent page; the default opens the
    system browser. Google sign-in is only wired when the client id and
    redirect URI are configured. Apple sign-in needs a host-supplied
    ``credential_provider``.
    """
    init_firebase(configuration.firebase_project_id)
    backend = IdentityToolkitBackend(
        api_key=configuration.firebase_api_key,
        identity_toolkit_base_url=configuration.identity_toolkit_base_url,
        request_uri=configuration.google_redirect_uri or "http://localhost",
    )
    profiles = ProfileRepository(FirestoreProfileStore(get_firestore_client()))

    oauth = None
    if configuration.google_client_id and configuration.google_redirect_uri:
        oauth = GoogleOAuthFlow(
            client_id=configuration.google_client_id,
            client_secret=configuration.google_client_secret,
            redirect_uri=configuration.google_redirect_uri,
            open_url=open_url,
        )

    return AuthenticationService(
        configuration,
        backend,
        profiles,
        oauth=oauth,
        credential_provider=credential_provider,
    )


@lru_cache
def get_authentication_service() -> AuthenticationService:
    """Get the cached service for the configured process.

    Raises:
        ConfigurationNotSetError: if authkit.configure() was never called
    """
    return build_authentication_service(configuration_manager.configuration)
