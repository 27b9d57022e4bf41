import logging
from typing import ClassVar

from authkit.auth.backend import IdentityBackend, PasswordCredential
from authkit.auth.errors import mapped_errors
from authkit.auth.exceptions import UserNotFoundError
from authkit.auth.providers.base import (
    AccountOperations,
    AuthProvider,
    Capability,
    ProviderKind,
)
from authkit.user.models import User
from authkit.user.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class PasswordProvider(AccountOperations, AuthProvider):
    """Email/password accounts.

    Sign-up creates the backend account, sets its display name and writes a
    fresh profile. Sign-in fetches the existing profile and never recreates
    it: an account without a profile means the store and the backend have
    drifted apart.
    """

    kind = ProviderKind.password
    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {
            Capability.sign_in,
            Capability.sign_up,
            Capability.sign_out,
            Capability.reset_password,
            Capability.update_password,
            Capability.update_profile,
            Capability.delete_account,
        }
    )

    def __init__(self, backend: IdentityBackend, profiles: ProfileRepository):
        self._backend = backend
        self._profiles = profiles

    async def sign_in(self, email: str, password: str) -> User:
        with mapped_errors():
            backend_user = await self._backend.authenticate(
                PasswordCredential(email=email, password=password)
            )
            user = await self._profiles.fetch(backend_user.uid)
        logger.info("Password sign-in", extra={"provider": self.kind.value, "uid": user.id})
        return user

    async def sign_up(self, email: str, password: str, display_name: str) -> User:
        with mapped_errors():
            backend_user = await self._backend.create_account(email, password)
            backend_user = await self._backend.update_profile(display_name=display_name)
            user = await self._profiles.create(backend_user, display_name, email=email)
        logger.info("Password sign-up", extra={"provider": self.kind.value, "uid": user.id})
        return user

    async def reset_password(self, email: str) -> None:
        with mapped_errors():
            await self._backend.send_password_reset(email)

    async def update_password(self, current_password: str, new_password: str) -> None:
        """Re-authenticate with the current password, then set the new one.

        If re-authentication fails the password is left untouched.
        """
        backend_user = self._backend.current_user
        if backend_user is None:
            raise UserNotFoundError()
        with mapped_errors():
            await self._backend.reauthenticate(
                PasswordCredential(
                    email=backend_user.email or "", password=current_password
                )
            )
            await self._backend.update_password(new_password)
