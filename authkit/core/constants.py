"""
Package-wide constants.

Single source of truth for profile document layout, validation defaults,
provider identifiers and user-facing messages.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for the callback surface."""

    AUTH = RouteConfig(prefix="/auth", tag="auth")


class FirestoreCollections:
    USERS = "users"


class UserFields:
    """Keys of a stored profile document."""

    ID = "id"
    EMAIL = "email"
    DISPLAY_NAME = "fullName"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    PROFILE_IMAGE_URL = "profileImageUrl"
    IS_EMAIL_VERIFIED = "isEmailVerified"


class Validation:
    EMAIL_PATTERN = r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"
    PHONE_PATTERN = r"\+?[0-9]{10,15}"
    MIN_PASSWORD_LENGTH = 8
    MAX_PASSWORD_LENGTH = 128
    MIN_NAME_LENGTH = 2
    MAX_NAME_LENGTH = 50


class ProviderIds:
    """Identity Toolkit provider identifiers."""

    PASSWORD = "password"
    GOOGLE = "google.com"
    APPLE = "apple.com"


class DefaultDisplayNames:
    GOOGLE = "Google User"
    APPLE = "Apple User"


# Hidden Apple emails fall back to <uid>@<this domain>
APPLE_PRIVATE_RELAY_DOMAIN = "privaterelay.appleid.com"

# Seconds to wait for the interactive Apple sheet before giving up
DEFAULT_APPLE_SIGN_IN_TIMEOUT = 120.0
# Seconds to wait for the Google redirect to come back
DEFAULT_OAUTH_CALLBACK_TIMEOUT = 300.0

