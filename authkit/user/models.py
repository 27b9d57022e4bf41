"""User domain model.

``User`` is the one record shape every sign-in method returns. Stored
profile documents use camelCase keys (see ``UserFields``); the display name
is stored as ``fullName``.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from authkit.auth.backend import BackendUser
from authkit.auth.exceptions import ProfileDataError
from authkit.core.constants import UserFields


def utc_now() -> datetime:
    return datetime.now(UTC)


class User(BaseModel):
    """Authenticated identity.

    Equality and hashing use ``id`` only: two records with the same id are
    the same identity even if other fields drifted.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(min_length=1)
    email: str
    display_name: str = Field(min_length=1, alias=UserFields.DISPLAY_NAME)
    created_at: datetime
    updated_at: datetime
    profile_image_url: str | None = None
    is_email_verified: bool

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_backend_user(
        cls,
        backend_user: BackendUser,
        display_name: str,
        *,
        now: datetime | None = None,
    ) -> "User":
        now = now or utc_now()
        return cls(
            id=backend_user.uid,
            email=backend_user.email or "",
            display_name=display_name,
            created_at=backend_user.created_at or now,
            updated_at=now,
            profile_image_url=backend_user.photo_url,
            is_email_verified=backend_user.email_verified,
        )

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "User":
        """Build a User from a stored profile document.

        Raises:
            ProfileDataError: if a field is missing or malformed
        """
        try:
            return cls.model_validate(dict(document))
        except ValidationError as e:
            fields = sorted(
                {".".join(str(loc) for loc in err["loc"]) for err in e.errors()}
            )
            raise ProfileDataError(
                f"Malformed profile record: invalid or missing {', '.join(fields)}"
            ) from e

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
