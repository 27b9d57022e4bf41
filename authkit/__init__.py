"""
authkit: one async client for email/password, Google and Apple sign-in.

Typical bootstrap:

    import authkit

    authkit.configure(authkit.get_settings().to_configuration())
    service = authkit.get_authentication_service()
    user = await service.sign_in(email, password)
"""

from authkit.auth.exceptions import (
    AppleSignInCancelledError,
    AppleSignInFailedError,
    AppleSignInNotAvailableError,
    AuthenticationError,
    AuthErrorKind,
    BiometricNotImplementedError,
    EmailAlreadyInUseError,
    GoogleSignInFailedError,
    InvalidEmailError,
    NetworkError,
    ProfileDataError,
    UnknownAuthError,
    UserNotFoundError,
    WeakPasswordError,
    WrongPasswordError,
)
from authkit.auth.service import (
    Authenticated,
    AuthenticationService,
    Unauthenticated,
    build_authentication_service,
    get_authentication_service,
)
from authkit.core.configuration import (
    AuthenticationConfiguration,
    PasswordPolicy,
    configuration_manager,
)
from authkit.core.exceptions import ConfigurationNotSetError
from authkit.core.firebase import init_firebase
from authkit.core.settings import get_settings
from authkit.user.models import User


def configure(configuration: AuthenticationConfiguration) -> None:
    """Set the process-wide configuration and initialize Firebase.

    Any cached service is dropped so the next
    ``get_authentication_service()`` call uses the new configuration.
    """
    configuration_manager.set_configuration(configuration)
    init_firebase(configuration.firebase_project_id)
    get_authentication_service.cache_clear()


__all__ = [
    "AppleSignInCancelledError",
    "AppleSignInFailedError",
    "AppleSignInNotAvailableError",
    "AuthErrorKind",
    "Authenticated",
    "AuthenticationConfiguration",
    "AuthenticationError",
    "AuthenticationService",
    "BiometricNotImplementedError",
    "ConfigurationNotSetError",
    "EmailAlreadyInUseError",
    "GoogleSignInFailedError",
    "InvalidEmailError",
    "NetworkError",
    "PasswordPolicy",
    "ProfileDataError",
    "Unauthenticated",
    "UnknownAuthError",
    "User",
    "UserNotFoundError",
    "WeakPasswordError",
    "WrongPasswordError",
    "build_authentication_service",
    "configure",
    "get_authentication_service",
    "get_settings",
]
