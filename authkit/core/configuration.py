"""Authentication configuration and the process-wide registry.

``AuthenticationConfiguration`` is an immutable snapshot handed to
``AuthenticationService`` at construction. ``ConfigurationManager`` keeps
the most recently configured snapshot for hosts that bootstrap through
``authkit.configure()``.
"""

import threading

from pydantic import BaseModel, ConfigDict, Field, model_validator

from authkit.core.constants import DEFAULT_APPLE_SIGN_IN_TIMEOUT, Validation
from authkit.core.exceptions import ConfigurationNotSetError


class PasswordPolicy(BaseModel):
    """Client-side password rules."""

    model_config = ConfigDict(frozen=True)

    min_length: int = Field(default=Validation.MIN_PASSWORD_LENGTH, ge=1)
    max_length: int = Field(default=Validation.MAX_PASSWORD_LENGTH, ge=1)
    require_special_characters: bool = False
    require_numbers: bool = False

    @model_validator(mode="after")
    def _check_bounds(self) -> "PasswordPolicy":
        if self.min_length > self.max_length:
            raise ValueError("min_length must not exceed max_length")
        return self


class Branding(BaseModel):
    """UI fields carried for presentation layers; unused by the core."""

    model_config = ConfigDict(frozen=True)

    app_name: str = "authkit"
    app_logo: str | None = None
    primary_color: str = "#000000"
    background_color: str = "#F2F2F2"
    show_splash_screen: bool = True
    splash_screen_duration: float = 3.0


class AuthenticationConfiguration(BaseModel):
    """Immutable snapshot of authentication settings."""

    model_config = ConfigDict(frozen=True)

    # Firebase
    firebase_project_id: str
    firebase_api_key: str
    firebase_app_id: str = ""
    identity_toolkit_base_url: str = "https://identitytoolkit.googleapis.com"

    # Google OAuth client
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str | None = None

    # Feature flags
    enable_password_auth: bool = True
    enable_google_sign_in: bool = True
    enable_apple_sign_in: bool = True
    enable_biometric_auth: bool = False

    password_policy: PasswordPolicy = PasswordPolicy()
    apple_sign_in_timeout: float = Field(default=DEFAULT_APPLE_SIGN_IN_TIMEOUT, gt=0)

    branding: Branding = Branding()


class ConfigurationManager:
    """Holds the active configuration.

    Reads before the first ``set_configuration`` raise
    ``ConfigurationNotSetError`` instead of falling back to defaults.
    """

    def __init__(self) -> None:
        self._configuration: AuthenticationConfiguration | None = None
        self._lock = threading.Lock()

    def set_configuration(self, configuration: AuthenticationConfiguration) -> None:
        with self._lock:
            self._configuration = configuration

    @property
    def configuration(self) -> AuthenticationConfiguration:
        with self._lock:
            configuration = self._configuration
        if configuration is None:
            raise ConfigurationNotSetError()
        return configuration

    @property
    def is_configured(self) -> bool:
        with self._lock:
            return self._configuration is not None

    def reset(self) -> None:
        """Forget the configuration (used by tests and re-bootstrapping)."""
        with self._lock:
            self._configuration = None


configuration_manager = ConfigurationManager()
