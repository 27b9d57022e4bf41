import logging
from typing import ClassVar

from authkit.auth.backend import IdentityBackend, IdpCredential
from authkit.auth.errors import mapped_errors
from authkit.auth.exceptions import GoogleSignInFailedError
from authkit.auth.oauth import OAuthProvider
from authkit.auth.providers.base import (
    AccountOperations,
    AuthProvider,
    Capability,
    ProviderKind,
)
from authkit.core.constants import DefaultDisplayNames, ProviderIds
from authkit.user.models import User
from authkit.user.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class GoogleProvider(AccountOperations, AuthProvider):
    """Google sign-in; registration and sign-in are the same operation."""

    kind = ProviderKind.google
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
        oauth: OAuthProvider,
    ):
        self._backend = backend
        self._profiles = profiles
        self._oauth = oauth

    def handle_callback(self, url: str) -> bool:
        return self._oauth.handle_callback(url)

    async def sign_in(self) -> User:
        # Consent denial, timeouts and rejected exchanges all surface as
        # google_sign_in_failed; there is no separate cancelled kind.
        with mapped_errors(fallback=GoogleSignInFailedError):
            tokens = await self._oauth.sign_in()

        with mapped_errors(fallback=GoogleSignInFailedError):
            backend_user = await self._backend.authenticate(
                IdpCredential(
                    provider_id=ProviderIds.GOOGLE,
                    id_token=tokens.id_token,
                    access_token=tokens.access_token,
                )
            )

        with mapped_errors():
            user = await self._profiles.upsert(
                backend_user.uid,
                email=backend_user.email,
                display_name=backend_user.display_name,
                default_display_name=DefaultDisplayNames.GOOGLE,
                profile_image_url=backend_user.photo_url,
                verified_on_create=True,
            )
        logger.info("Google sign-in", extra={"provider": self.kind.value, "uid": user.id})
        return user
