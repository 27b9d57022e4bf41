"""Provider adapter base classes.

Each adapter declares the operations it supports in ``capabilities``; the
session facade consults that table before dispatching instead of assuming
every adapter has every method.
"""

import logging
from abc import ABC
from enum import Enum
from typing import ClassVar

from authkit.auth.backend import IdentityBackend
from authkit.auth.errors import mapped_errors
from authkit.auth.exceptions import UserNotFoundError
from authkit.user.models import User
from authkit.user.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    password = "password"
    google = "google"
    apple = "apple"
    biometric = "biometric"


class Capability(str, Enum):
    sign_in = "sign_in"
    sign_up = "sign_up"
    sign_out = "sign_out"
    reset_password = "reset_password"
    update_password = "update_password"
    update_profile = "update_profile"
    delete_account = "delete_account"
    enable = "enable"
    disable = "disable"


class AuthProvider(ABC):
    kind: ClassVar[ProviderKind]
    capabilities: ClassVar[frozenset[Capability]] = frozenset()

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities


class AccountOperations:
    """Account-level operations shared by backend-backed adapters."""

    _backend: IdentityBackend
    _profiles: ProfileRepository

    def _current_uid(self) -> str:
        backend_user = self._backend.current_user
        if backend_user is None:
            raise UserNotFoundError()
        return backend_user.uid

    async def sign_out(self) -> None:
        with mapped_errors():
            await self._backend.sign_out()

    async def update_profile(
        self,
        display_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        uid = self._current_uid()
        with mapped_errors():
            await self._backend.update_profile(
                display_name=display_name, photo_url=profile_image_url
            )
            return await self._profiles.update(
                uid, display_name=display_name, profile_image_url=profile_image_url
            )

    async def delete_account(self) -> None:
        uid = self._current_uid()
        with mapped_errors():
            await self._profiles.delete(uid)
            await self._backend.delete_current_account()
        logger.info("Account deleted", extra={"uid": uid})
