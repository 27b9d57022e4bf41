"""Authentication error taxonomy.

Every public operation either returns a ``User`` or raises exactly one of
the errors below. The set of kinds is closed; ``UnknownAuthError`` is the
catch-all and carries the provider's original message.
"""

from enum import Enum

from authkit.core.exceptions import AppException


class AuthErrorKind(str, Enum):
    invalid_email = "invalid_email"
    wrong_password = "wrong_password"
    user_not_found = "user_not_found"
    email_already_in_use = "email_already_in_use"
    weak_password = "weak_password"
    google_sign_in_failed = "google_sign_in_failed"
    apple_sign_in_failed = "apple_sign_in_failed"
    apple_sign_in_cancelled = "apple_sign_in_cancelled"
    apple_sign_in_not_available = "apple_sign_in_not_available"
    network_error = "network_error"
    unknown = "unknown"


class AuthenticationError(AppException):
    """Base class for the authentication taxonomy.

    ``description`` is the display text for the kind. ``message`` may carry
    a more specific diagnostic, but equality only looks at the kind (and at
    the message for ``unknown``).
    """

    status_code = 500
    error_type = AuthErrorKind.unknown.value
    kind: AuthErrorKind = AuthErrorKind.unknown
    default_description: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_description)

    @property
    def description(self) -> str:
        return self.default_description

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthenticationError):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if self.kind is AuthErrorKind.unknown:
            return self.message == other.message
        return True

    def __hash__(self) -> int:
        if self.kind is AuthErrorKind.unknown:
            return hash((self.kind, self.message))
        return hash(self.kind)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class InvalidEmailError(AuthenticationError):
    """Raised when the email address is malformed."""

    status_code = 400
    error_type = AuthErrorKind.invalid_email.value
    kind = AuthErrorKind.invalid_email
    default_description = "The email address is not valid."


class WrongPasswordError(AuthenticationError):
    """Raised when the password is wrong or the account has no password."""

    status_code = 401
    error_type = AuthErrorKind.wrong_password.value
    kind = AuthErrorKind.wrong_password
    default_description = "The password is not valid or user has no password."


class UserNotFoundError(AuthenticationError):
    """Raised when no user matches, or an operation needs a signed-in user."""

    status_code = 404
    error_type = AuthErrorKind.user_not_found.value
    kind = AuthErrorKind.user_not_found
    default_description = (
        "There is no user record corresponding to this identifier. "
        "The user may have been deleted."
    )


class EmailAlreadyInUseError(AuthenticationError):
    """Raised when registering with an email that already has an account."""

    status_code = 409
    error_type = AuthErrorKind.email_already_in_use.value
    kind = AuthErrorKind.email_already_in_use
    default_description = "The email address is already in use by another account."


class WeakPasswordError(AuthenticationError):
    """Raised when the backend rejects a password as too weak."""

    status_code = 400
    error_type = AuthErrorKind.weak_password.value
    kind = AuthErrorKind.weak_password
    default_description = "The password is too weak. Please choose a stronger password."


class GoogleSignInFailedError(AuthenticationError):
    status_code = 502
    error_type = AuthErrorKind.google_sign_in_failed.value
    kind = AuthErrorKind.google_sign_in_failed
    default_description = "Google Sign-In failed."


class AppleSignInFailedError(AuthenticationError):
    status_code = 502
    error_type = AuthErrorKind.apple_sign_in_failed.value
    kind = AuthErrorKind.apple_sign_in_failed
    default_description = "Apple Sign-In failed."


class AppleSignInCancelledError(AuthenticationError):
    """Raised when the user dismisses the Apple sign-in sheet."""

    status_code = 400
    error_type = AuthErrorKind.apple_sign_in_cancelled.value
    kind = AuthErrorKind.apple_sign_in_cancelled
    default_description = "Apple Sign-In was cancelled."


class AppleSignInNotAvailableError(AuthenticationError):
    """Raised when Apple sign-in is not possible in this environment."""

    status_code = 501
    error_type = AuthErrorKind.apple_sign_in_not_available.value
    kind = AuthErrorKind.apple_sign_in_not_available
    default_description = "Apple Sign-In is not available on this device."


class NetworkError(AuthenticationError):
    status_code = 503
    error_type = AuthErrorKind.network_error.value
    kind = AuthErrorKind.network_error
    default_description = "Please check your internet connection."


class UnknownAuthError(AuthenticationError):
    """Catch-all kind; the message is the diagnostic and the description."""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)

    @property
    def description(self) -> str:
        return self.message


class ProfileDataError(UnknownAuthError):
    """Raised when a stored profile record is missing or malformed."""


class BiometricNotImplementedError(UnknownAuthError):
    """Raised by every biometric operation."""

    status_code = 501

    def __init__(self, message: str = "Biometric authentication not implemented"):
        super().__init__(message)
