"""Input validators.

Pure functions returning booleans; they never raise. Callers validate before
invoking a provider operation, and the backend re-validates on its side.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlparse

from authkit.core.configuration import AuthenticationConfiguration
from authkit.core.constants import Validation

_EMAIL_RE = re.compile(Validation.EMAIL_PATTERN)
_PHONE_RE = re.compile(Validation.PHONE_PATTERN)


@dataclass(frozen=True)
class ValidationRules:
    min_password_length: int = Validation.MIN_PASSWORD_LENGTH
    max_password_length: int = Validation.MAX_PASSWORD_LENGTH
    min_name_length: int = Validation.MIN_NAME_LENGTH
    max_name_length: int = Validation.MAX_NAME_LENGTH
    require_special_characters: bool = False
    require_numbers: bool = False

    @classmethod
    def from_configuration(
        cls, configuration: AuthenticationConfiguration
    ) -> "ValidationRules":
        policy = configuration.password_policy
        return cls(
            min_password_length=policy.min_length,
            max_password_length=policy.max_length,
            require_special_characters=policy.require_special_characters,
            require_numbers=policy.require_numbers,
        )


DEFAULT_RULES = ValidationRules()


def is_valid_email(email: str) -> bool:
    return _EMAIL_RE.fullmatch(email) is not None


def is_valid_password(password: str, rules: ValidationRules = DEFAULT_RULES) -> bool:
    """Check length bounds and, when required, digits and special characters."""
    if not rules.min_password_length <= len(password) <= rules.max_password_length:
        return False
    if rules.require_numbers and not any(ch.isdigit() for ch in password):
        return False
    if rules.require_special_characters and all(ch.isalnum() for ch in password):
        return False
    return True


def is_valid_name(name: str, rules: ValidationRules = DEFAULT_RULES) -> bool:
    trimmed = name.strip()
    return rules.min_name_length <= len(trimmed) <= rules.max_name_length


def passwords_match(password: str, confirm_password: str) -> bool:
    # Two empty strings never count as a match.
    return bool(password) and password == confirm_password


def is_valid_phone_number(phone_number: str) -> bool:
    return _PHONE_RE.fullmatch(phone_number) is not None


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.hostname)
