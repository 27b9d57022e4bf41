"""Sign in with Apple.

The adapter generates a single-use nonce, hands only its SHA-256 digest to
the platform sheet, and sends the raw nonce with the identity token to the
identity backend, which checks it against the digest embedded in the token.
"""

import asyncio
import hashlib
import logging
import secrets
from typing import ClassVar

from authkit.auth.backend import IdentityBackend, IdpCredential
from authkit.auth.errors import (
    map_apple_flow_error,
    map_backend_error,
    mapped_errors,
)
from authkit.auth.exceptions import (
    AppleSignInFailedError,
    AppleSignInNotAvailableError,
    AuthenticationError,
)
from authkit.auth.interactive import (
    AppleIDCredential,
    AppleIDRequest,
    CredentialContinuation,
    InteractiveCredentialProvider,
    InteractiveFlowError,
    InteractiveFlowTimeout,
)
from authkit.auth.providers.base import (
    AccountOperations,
    AuthProvider,
    Capability,
    ProviderKind,
)
from authkit.core.constants import (
    APPLE_PRIVATE_RELAY_DOMAIN,
    DEFAULT_APPLE_SIGN_IN_TIMEOUT,
    DefaultDisplayNames,
    ProviderIds,
)
from authkit.user.models import User
from authkit.user.profiles import ProfileRepository

logger = logging.getLogger(__name__)

NONCE_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVXYZabcdefghijklmnopqrstuvwxyz-._"


def random_nonce(length: int = 32) -> str:
    """Return a nonce drawn from a cryptographically secure source."""
    if length <= 0:
        raise ValueError("nonce length must be positive")
    return "".join(secrets.choice(NONCE_CHARSET) for _ in range(length))


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _identity_token(credential: AppleIDCredential) -> str:
    token = credential.identity_token
    if isinstance(token, bytes):
        try:
            token = token.decode("utf-8")
        except UnicodeDecodeError as e:
            raise AppleSignInFailedError("Could not decode identity token") from e
    if not token:
        raise AppleSignInFailedError("No identity token")
    return token


def resolve_email(
    provider_email: str | None, backend_email: str | None, uid: str
) -> str:
    """Pick the first available email, falling back to a private-relay placeholder."""
    if provider_email:
        return provider_email
    if backend_email:
        return backend_email
    return f"{uid}@{APPLE_PRIVATE_RELAY_DOMAIN}"


class AppleProvider(AccountOperations, AuthProvider):
    kind = ProviderKind.apple
    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {
            Capability.sign_in,
            Capability.sign_out,
            Capability.update_profile,
            Capability.delete_account,
        }
    )

    def __init__(
        self,
        backend: IdentityBackend,
        profiles: ProfileRepository,
        credential_provider: InteractiveCredentialProvider | None,
        *,
        timeout: float = DEFAULT_APPLE_SIGN_IN_TIMEOUT,
    ):
        self._backend = backend
        self._profiles = profiles
        self._credential_provider = credential_provider
        self._timeout = timeout
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def _request_credential(self, nonce: str) -> AppleIDCredential:
        provider = self._credential_provider
        if provider is None or not provider.is_available():
            raise AppleSignInNotAvailableError()
        if self._in_flight:
            raise AppleSignInFailedError("Apple Sign-In already in progress")

        self._in_flight = True
        continuation: CredentialContinuation[AppleIDCredential] = (
            CredentialContinuation()
        )
        try:
            provider.perform_request(
                AppleIDRequest(hashed_nonce=sha256_hex(nonce)), continuation
            )
            return await continuation.wait(self._timeout)
        except InteractiveFlowTimeout as e:
            provider.cancel_request()
            logger.info(
                "Apple Sign-In timed out after %ss",
                self._timeout,
                extra={"provider": self.kind.value},
            )
            raise AppleSignInFailedError("Apple Sign-In timed out") from e
        except InteractiveFlowError as e:
            mapped = map_apple_flow_error(e)
            logger.info(
                "Apple Sign-In ended: %s",
                e.reason.value,
                extra={"provider": self.kind.value, "error_type": mapped.kind.value},
            )
            raise mapped from e
        except AuthenticationError:
            raise
        except Exception as e:
            raise map_backend_error(e, fallback=AppleSignInFailedError) from e
        except asyncio.CancelledError:
            continuation.cancel()
            provider.cancel_request()
            raise
        finally:
            self._in_flight = False

    async def sign_in(self) -> User:
        nonce = random_nonce()
        credential = await self._request_credential(nonce)
        id_token = _identity_token(credential)

        with mapped_errors(fallback=AppleSignInFailedError):
            backend_user = await self._backend.authenticate(
                IdpCredential(
                    provider_id=ProviderIds.APPLE,
                    id_token=id_token,
                    raw_nonce=nonce,
                )
            )

        # Apple only shares the name and email on the first authorization.
        email = resolve_email(credential.email, backend_user.email, backend_user.uid)

        with mapped_errors():
            user = await self._profiles.upsert(
                backend_user.uid,
                email=email,
                display_name=credential.full_name or None,
                default_display_name=DefaultDisplayNames.APPLE,
                verified_on_create=backend_user.email_verified,
            )
        logger.info("Apple sign-in", extra={"provider": self.kind.value, "uid": user.id})
        return user
