"""Environment-driven settings using Pydantic Settings.

Hosts that configure authkit from the environment (or a ``.env`` file) use
``get_settings().to_configuration()``; hosts that build the configuration in
code can skip this module entirely.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from authkit.core.configuration import (
    AuthenticationConfiguration,
    Branding,
    PasswordPolicy,
)
from authkit.core.constants import DEFAULT_APPLE_SIGN_IN_TIMEOUT, Validation


class Settings(BaseSettings):
    """authkit settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Firebase
    firebase_project_id: str = Field(alias="FIREBASE_PROJECT_ID")
    firebase_api_key: str = Field(alias="FIREBASE_API_KEY")
    firebase_app_id: str = Field(default="", alias="FIREBASE_APP_ID")
    identity_toolkit_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com",
        alias="IDENTITY_TOOLKIT_BASE_URL",
    )

    # Google OAuth
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(
        default=None, alias="GOOGLE_CLIENT_SECRET"
    )
    google_redirect_uri: str | None = Field(default=None, alias="GOOGLE_REDIRECT_URI")

    # Feature flags
    enable_password_auth: bool = Field(default=True, alias="ENABLE_PASSWORD_AUTH")
    enable_google_sign_in: bool = Field(default=True, alias="ENABLE_GOOGLE_SIGN_IN")
    enable_apple_sign_in: bool = Field(default=True, alias="ENABLE_APPLE_SIGN_IN")
    enable_biometric_auth: bool = Field(default=False, alias="ENABLE_BIOMETRIC_AUTH")

    # Password policy
    password_min_length: int = Field(
        default=Validation.MIN_PASSWORD_LENGTH, alias="PASSWORD_MIN_LENGTH", ge=1
    )
    password_max_length: int = Field(
        default=Validation.MAX_PASSWORD_LENGTH, alias="PASSWORD_MAX_LENGTH", ge=1
    )
    password_require_special_characters: bool = Field(
        default=False, alias="PASSWORD_REQUIRE_SPECIAL_CHARACTERS"
    )
    password_require_numbers: bool = Field(
        default=False, alias="PASSWORD_REQUIRE_NUMBERS"
    )

    apple_sign_in_timeout_seconds: float = Field(
        default=DEFAULT_APPLE_SIGN_IN_TIMEOUT,
        alias="APPLE_SIGN_IN_TIMEOUT_SECONDS",
        gt=0,
    )

    app_name: str = Field(default="authkit", alias="APP_NAME")

    def to_configuration(self) -> AuthenticationConfiguration:
        """Build the immutable configuration snapshot from these settings."""
        return AuthenticationConfiguration(
            firebase_project_id=self.firebase_project_id,
            firebase_api_key=self.firebase_api_key,
            firebase_app_id=self.firebase_app_id,
            identity_toolkit_base_url=self.identity_toolkit_base_url,
            google_client_id=self.google_client_id,
            google_client_secret=self.google_client_secret,
            google_redirect_uri=self.google_redirect_uri,
            enable_password_auth=self.enable_password_auth,
            enable_google_sign_in=self.enable_google_sign_in,
            enable_apple_sign_in=self.enable_apple_sign_in,
            enable_biometric_auth=self.enable_biometric_auth,
            password_policy=PasswordPolicy(
                min_length=self.password_min_length,
                max_length=self.password_max_length,
                require_special_characters=self.password_require_special_characters,
                require_numbers=self.password_require_numbers,
            ),
            apple_sign_in_timeout=self.apple_sign_in_timeout_seconds,
            branding=Branding(app_name=self.app_name),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
