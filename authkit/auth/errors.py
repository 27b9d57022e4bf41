"""Translation of provider-native errors into the authentication taxonomy.

Adapters wrap every backend and profile-store call in ``mapped_errors`` so
that nothing backend-specific crosses their boundary.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import httpx
from firebase_admin.exceptions import FirebaseError
from google.api_core import exceptions as google_exceptions

from authkit.auth.backend import BackendError
from authkit.auth.exceptions import (
    AppleSignInCancelledError,
    AppleSignInFailedError,
    AppleSignInNotAvailableError,
    AuthenticationError,
    EmailAlreadyInUseError,
    InvalidEmailError,
    NetworkError,
    UnknownAuthError,
    UserNotFoundError,
    WeakPasswordError,
    WrongPasswordError,
)
from authkit.auth.interactive import InteractiveFlowError, InteractiveFlowReason

logger = logging.getLogger(__name__)

BACKEND_ERROR_KINDS: dict[str, type[AuthenticationError]] = {
    "INVALID_EMAIL": InvalidEmailError,
    "MISSING_EMAIL": InvalidEmailError,
    "INVALID_PASSWORD": WrongPasswordError,
    "MISSING_PASSWORD": WrongPasswordError,
    "INVALID_LOGIN_CREDENTIALS": WrongPasswordError,
    "EMAIL_NOT_FOUND": UserNotFoundError,
    "USER_NOT_FOUND": UserNotFoundError,
    "EMAIL_EXISTS": EmailAlreadyInUseError,
    "EMAIL_ALREADY_EXISTS": EmailAlreadyInUseError,
    "WEAK_PASSWORD": WeakPasswordError,
    "PASSWORD_DOES_NOT_MEET_REQUIREMENTS": WeakPasswordError,
    "NETWORK_REQUEST_FAILED": NetworkError,
}

# Firebase Admin / Google API codes that mean the service could not be reached
_UNREACHABLE_CODES = {"UNAVAILABLE", "DEADLINE_EXCEEDED"}
# HTTP statuses of Firestore (google-api-core) call errors with the same meaning
_UNREACHABLE_STATUSES = {503, 504}

# Kinds that keep their meaning even inside a provider-specific flow
_GENERIC_KINDS = (
    InvalidEmailError,
    UserNotFoundError,
    EmailAlreadyInUseError,
    NetworkError,
)


def map_backend_error(
    error: BaseException,
    fallback: type[AuthenticationError] = UnknownAuthError,
) -> AuthenticationError:
    """Map any provider-native error to exactly one taxonomy error.

    Known backend codes map 1:1. Anything unrecognized becomes ``fallback``;
    for the default ``UnknownAuthError`` the original message is preserved.
    """
    if isinstance(error, AuthenticationError):
        return error

    if isinstance(error, BackendError):
        mapped = BACKEND_ERROR_KINDS.get(error.code)
        if mapped is not None:
            if fallback is not UnknownAuthError and not issubclass(
                mapped, _GENERIC_KINDS
            ):
                return fallback()
            return mapped()
        return fallback(error.message)

    if isinstance(error, InteractiveFlowError):
        return fallback(error.message)

    if isinstance(error, httpx.RequestError):
        return NetworkError()

    if isinstance(error, google_exceptions.RetryError):
        return NetworkError()

    if isinstance(error, google_exceptions.GoogleAPICallError):
        if error.code in _UNREACHABLE_STATUSES:
            return NetworkError()
        return fallback(str(error))

    if isinstance(error, FirebaseError):
        if error.code in _UNREACHABLE_CODES:
            return NetworkError()
        return fallback(str(error))

    return fallback(str(error) or type(error).__name__)


def map_apple_flow_error(error: InteractiveFlowError) -> AuthenticationError:
    """Map an interactive Apple flow outcome.

    Cancellation, failure and capability absence stay distinct.
    """
    if error.reason is InteractiveFlowReason.canceled:
        return AppleSignInCancelledError()
    if error.reason is InteractiveFlowReason.not_available:
        return AppleSignInNotAvailableError(error.message)
    return AppleSignInFailedError(error.message)


@contextmanager
def mapped_errors(
    fallback: type[AuthenticationError] = UnknownAuthError,
) -> Iterator[None]:
    """Re-raise any non-taxonomy exception as its mapped taxonomy error."""
    try:
        yield
    except AuthenticationError:
        raise
    except Exception as e:
        mapped = map_backend_error(e, fallback=fallback)
        logger.info(
            "Provider error mapped: %s -> %s",
            type(e).__name__,
            mapped.kind.value,
            extra={"error_type": mapped.kind.value},
        )
        raise mapped from e
