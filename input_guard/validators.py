"""
Django validators backed by the validation engine.

These callables can be used anywhere Django accepts validators (model
fields, form fields, DRF fields). A failed result becomes a
django.core.exceptions.ValidationError carrying every error message.

PasswordStrengthValidator also implements the AUTH_PASSWORD_VALIDATORS
interface (validate/get_help_text).
"""

import logging
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.utils.deconstruct import deconstructible
from django.utils.translation import gettext as _

from .results import ValidationResult
from .validation import (
    PASSWORD_MIN_LENGTH,
    PASSWORD_SPECIAL_CHARS,
    ValidationKind,
    validate,
)

logger = logging.getLogger(__name__)


class ResultValidator:
    """
    Base class running one validation kind with fixed options.
    """

    kind: ValidationKind
    code = 'invalid'

    def __init__(self, **options: Any):
        self.options = options

    def run(self, value: Any) -> ValidationResult:
        return validate(self.kind, value, self.options)

    def __call__(self, value: Any) -> None:
        result = self.run(value)
        if result.is_valid:
            return

        # Never log the value itself
        logger.debug(
            "%s rejected input with %d error(s)",
            self.__class__.__name__,
            len(result.errors),
        )
        raise ValidationError(
            [ValidationError(message, code=self.code) for message in result.errors]
        )

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, self.__class__)
            and self.options == other.options
        )


@deconstructible
class StrictEmailValidator(ResultValidator):
    """
    Email validator.

    Rejects addresses longer than 254 characters, malformed addresses,
    consecutive dots and leading/trailing dots.
    """

    kind = ValidationKind.EMAIL
    code = 'invalid_email'


@deconstructible
class PhoneNumberValidator(ResultValidator):
    """
    Phone number validator.

    mode='us' (default) accepts 10 digits or 11 with country code 1;
    mode='international' accepts +[country code][number].
    """

    kind = ValidationKind.PHONE
    code = 'invalid_phone'


@deconstructible
class SafeURLValidator(ResultValidator):
    """Absolute http/https URL validator."""

    kind = ValidationKind.URL
    code = 'invalid_url'


@deconstructible
class TextValidator(ResultValidator):
    """
    Free text validator.

    Options: min_length, max_length, allowed_pattern, required,
    trim_whitespace.
    """

    kind = ValidationKind.TEXT
    code = 'invalid_text'


@deconstructible
class NumericValidator(ResultValidator):
    """
    Numeric validator.

    Options: type ('integer', 'decimal', 'currency'), min, max, required,
    allow_negative.
    """

    kind = ValidationKind.NUMERIC
    code = 'invalid_number'


@deconstructible
class DateValidator(ResultValidator):
    """Date validator. Options: min_date, max_date, required."""

    kind = ValidationKind.DATE
    code = 'invalid_date'


@deconstructible
class PasswordStrengthValidator(ResultValidator):
    """
    Validate password strength.

    Requires at least 8 characters, lowercase and uppercase letters, a
    digit, a special character, and rejects common passwords and ascending
    sequences such as '123' or 'abc'.

    Usable as a field validator or in AUTH_PASSWORD_VALIDATORS:
        {'NAME': 'input_guard.validators.PasswordStrengthValidator'}
    """

    kind = ValidationKind.PASSWORD
    code = 'password_too_weak'

    def validate(self, password: str, user: Optional[Any] = None) -> None:
        """
        Validate password strength.

        Args:
            password: The password to validate
            user: The user object (unused)

        Raises:
            ValidationError: If any strength check fails
        """
        self(password)

    def get_help_text(self) -> str:
        """Return help text for this validator."""
        return _(
            f"Your password must contain at least {PASSWORD_MIN_LENGTH} characters, "
            f"lowercase and uppercase letters, a number and a special character "
            f"({PASSWORD_SPECIAL_CHARS}), and must not be common or contain "
            f"sequences like '123' or 'abc'."
        )
