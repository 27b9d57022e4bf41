"""Profile records on top of a ``ProfileStore``.

Every method returns the ``User`` as re-read from the store, so the
facade's view of a user is always reconciled with what was persisted.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from authkit.auth.backend import BackendUser
from authkit.auth.exceptions import ProfileDataError
from authkit.core.constants import UserFields
from authkit.user.models import User, utc_now
from authkit.user.store import ProfileStore

logger = logging.getLogger(__name__)


class ProfileRepository:
    def __init__(
        self, store: ProfileStore, clock: Callable[[], datetime] = utc_now
    ):
        self._store = store
        self._clock = clock

    @property
    def store(self) -> ProfileStore:
        return self._store

    async def create(
        self,
        backend_user: BackendUser,
        display_name: str,
        *,
        email: str | None = None,
        profile_image_url: str | None = None,
        email_verified: bool | None = None,
    ) -> User:
        """Write a brand-new profile document keyed by the backend uid."""
        now = self._clock()
        document = {
            UserFields.ID: backend_user.uid,
            UserFields.EMAIL: email if email is not None else backend_user.email or "",
            UserFields.DISPLAY_NAME: display_name,
            UserFields.CREATED_AT: now,
            UserFields.UPDATED_AT: now,
            UserFields.PROFILE_IMAGE_URL: profile_image_url or backend_user.photo_url,
            UserFields.IS_EMAIL_VERIFIED: (
                backend_user.email_verified if email_verified is None else email_verified
            ),
        }
        await self._store.set(backend_user.uid, document)
        logger.info("Profile created", extra={"uid": backend_user.uid})
        return await self.fetch(backend_user.uid)

    async def fetch(self, uid: str) -> User:
        """Read a profile.

        Raises:
            ProfileDataError: if there is no document, or it is malformed
        """
        document = await self._store.get(uid)
        if document is None:
            raise ProfileDataError(f"Profile record missing for user {uid}")
        return User.from_document(document)

    async def upsert(
        self,
        uid: str,
        *,
        email: str | None,
        display_name: str | None,
        default_display_name: str,
        profile_image_url: str | None = None,
        verified_on_create: bool = False,
    ) -> User:
        """Create the profile if absent, otherwise refresh it.

        Safe to repeat: the same uid always maps to one document, and
        ``createdAt`` is only written on the create path. Without a
        ``display_name`` an existing record keeps its name and a new one gets
        ``default_display_name``. Without an ``email`` an existing record
        keeps its email and a new one gets an empty one.
        """
        fields: dict[str, Any] = {
            UserFields.ID: uid,
            UserFields.UPDATED_AT: self._clock(),
        }
        if email:
            fields[UserFields.EMAIL] = email
        if display_name:
            fields[UserFields.DISPLAY_NAME] = display_name
        if profile_image_url is not None:
            fields[UserFields.PROFILE_IMAGE_URL] = profile_image_url

        if await self._store.exists(uid):
            await self._store.update(uid, fields)
        else:
            fields.setdefault(UserFields.EMAIL, "")
            fields.setdefault(UserFields.DISPLAY_NAME, default_display_name)
            fields[UserFields.CREATED_AT] = fields[UserFields.UPDATED_AT]
            fields.setdefault(UserFields.PROFILE_IMAGE_URL, None)
            fields[UserFields.IS_EMAIL_VERIFIED] = verified_on_create
            await self._store.set(uid, fields)
            logger.info("Profile created", extra={"uid": uid})
        return await self.fetch(uid)

    async def update(
        self,
        uid: str,
        *,
        display_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        fields: dict[str, Any] = {UserFields.UPDATED_AT: self._clock()}
        if display_name is not None:
            fields[UserFields.DISPLAY_NAME] = display_name
        if profile_image_url is not None:
            fields[UserFields.PROFILE_IMAGE_URL] = profile_image_url
        await self._store.update(uid, fields)
        return await self.fetch(uid)

    async def delete(self, uid: str) -> None:
        await self._store.delete(uid)
