"""
Django REST Framework integration.

This module provides DRF fields and serializers that apply:
- Context-aware sanitization (SanitizedCharField, SanitizingSerializerMixin)
- Engine validation with cleaned/formatted output (ValidatedField family)
"""

import logging
from datetime import date
from typing import Any, Dict, Optional, Union

from rest_framework import serializers

from .results import ValidationResult
from .sanitization import DictSanitizer, SanitizationContext, get_context, sanitize
from .validation import ValidationKind, get_kind, validate

logger = logging.getLogger(__name__)


class SanitizingSerializerMixin:
    """
    Mixin that sanitizes validated data per field.

    Usage:
        class MySerializer(SanitizingSerializerMixin, serializers.Serializer):
            sanitize_contexts = {'bio': 'text-content', 'website': 'link'}
    """

    # Field name -> sanitization context
    sanitize_contexts: Dict[str, Union[str, SanitizationContext]] = {}

    def to_internal_value(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Override to sanitize data after field validation."""
        data = super().to_internal_value(data)  # type: ignore

        contexts = getattr(self, 'sanitize_contexts', {})
        if contexts:
            data = DictSanitizer(contexts).sanitize(dict(data))

        return data


class SanitizedCharField(serializers.CharField):
    """
    CharField that sanitizes its input for a destination context.
    """

    def __init__(
        self,
        context: Union[str, SanitizationContext] = SanitizationContext.HTML_CONTENT,
        sanitize_options: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ):
        self.sanitize_context = get_context(context)
        self.sanitize_options = sanitize_options or {}
        super().__init__(**kwargs)

    def to_internal_value(self, data: Any) -> str:
        # Sanitize before validation
        if isinstance(data, str):
            data = sanitize(self.sanitize_context, data, **self.sanitize_options)

        return super().to_internal_value(data)


class UsernameField(SanitizedCharField):
    """
    Username field: lower-cased, [a-z0-9_-] only, 3-30 characters.
    """

    def __init__(self, **kwargs: Any):
        kwargs.setdefault('min_length', 3)
        kwargs.setdefault('max_length', 30)
        super().__init__(context=SanitizationContext.USERNAME, **kwargs)


class ValidatedField(serializers.Field):
    """
    Field running a validation engine kind.

    All engine errors are reported together. Callable option values (e.g.
    `{'max_date': date.today}`) are evaluated on every validation.
    """

    kind: Optional[ValidationKind] = None

    def __init__(
        self,
        kind: Optional[Union[str, ValidationKind]] = None,
        options: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ):
        if kind is not None:
            self.kind = get_kind(kind)
        assert self.kind is not None, 'ValidatedField requires a validation kind.'

        self.options = dict(options or {})
        if not kwargs.get('required', True):
            self.options.setdefault('required', False)

        super().__init__(**kwargs)

    def get_options(self) -> Dict[str, Any]:
        return {
            key: value() if callable(value) else value
            for key, value in self.options.items()
        }

    def run_engine(self, data: Any) -> ValidationResult:
        result = validate(self.kind, data, self.get_options())

        if not result.is_valid:
            logger.debug(
                "%s field '%s' rejected input with %d error(s)",
                self.kind.value,
                self.field_name,
                len(result.errors),
            )
            raise serializers.ValidationError(list(result.errors))

        return result

    def to_internal_value(self, data: Any) -> Any:
        return self.get_cleaned_value(self.run_engine(data), data)

    def get_cleaned_value(self, result: ValidationResult, data: Any) -> Any:
        return result.cleaned

    def to_representation(self, value: Any) -> Any:
        return value


class SecureEmailField(ValidatedField):
    kind = ValidationKind.EMAIL


class PhoneNumberField(ValidatedField):
    """Phone number field returning the formatted number."""

    kind = ValidationKind.PHONE

    def get_cleaned_value(self, result: ValidationResult, data: Any) -> str:
        return result.formatted


class StrongPasswordField(ValidatedField):
    """Write-only password field enforcing the password strength checks."""

    kind = ValidationKind.PASSWORD

    def __init__(self, **kwargs: Any):
        kwargs.setdefault('write_only', True)
        kwargs.setdefault('style', {'input_type': 'password'})
        super().__init__(**kwargs)

    def get_cleaned_value(self, result: ValidationResult, data: Any) -> str:
        return '' if data is None else str(data)


class SecureURLField(ValidatedField):
    kind = ValidationKind.URL


class SecureTextField(ValidatedField):
    kind = ValidationKind.TEXT


class NumericField(ValidatedField):
    kind = ValidationKind.NUMERIC

    def get_cleaned_value(self, result: ValidationResult, data: Any) -> Any:
        return result.value


class SecureDateField(ValidatedField):
    kind = ValidationKind.DATE

    def get_cleaned_value(self, result: ValidationResult, data: Any) -> Any:
        return result.date

    def to_representation(self, value: Any) -> Any:
        if value is None:
            return None
        return value.isoformat()


# =============================================================================
# Example Serializers
# =============================================================================


class RegistrationSerializer(SanitizingSerializerMixin, serializers.Serializer):
    """
    Registration form: every field validated, free text sanitized.
    """

    sanitize_contexts = {
        'bio': SanitizationContext.TEXT_CONTENT,
        'website': SanitizationContext.LINK,
    }

    username = UsernameField()
    email = SecureEmailField()
    password = StrongPasswordField()
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    first_name = SecureTextField(
        options={'min_length': 2, 'max_length': 50, 'required': True}
    )
    last_name = SecureTextField(
        options={'min_length': 2, 'max_length': 50, 'required': True}
    )
    phone = PhoneNumberField(required=False)
    birth_date = SecureDateField(options={'max_date': date.today, 'required': True})
    website = serializers.CharField(required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        """Validate that passwords match."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match.'
            })

        # Remove password_confirm from validated data
        attrs.pop('password_confirm')

        return attrs
