"""
Input Validation and Sanitization

Pure, synchronous engines for validating and sanitizing untrusted text,
plus Django validators and DRF fields built on them. The engines work
without configured Django settings.

    from input_guard import sanitize, validate

    validate('email', ' User@Example.com ').cleaned  # 'user@example.com'
    sanitize('url', 'javascript:alert(1)')           # ''
"""

from .exceptions import InputGuardError, UnknownSanitizationContext, UnknownValidationKind
from .primitives import escape_html, unescape_html
from .results import (
    DateValidationResult,
    FormValidationResult,
    NumericValidationResult,
    PasswordValidationResult,
    TextValidationResult,
    UrlValidationResult,
    ValidationResult,
)
from .sanitization import (
    DictSanitizer,
    InputSanitizer,
    SanitizationContext,
    sanitize,
    sanitize_link,
    sanitize_text_content,
)
from .validation import (
    ValidationKind,
    validate,
    validate_date,
    validate_email,
    validate_form,
    validate_numeric,
    validate_password,
    validate_phone,
    validate_text,
    validate_url,
)

__all__ = [
    # Validation
    "ValidationKind",
    "validate",
    "validate_email",
    "validate_phone",
    "validate_password",
    "validate_url",
    "validate_text",
    "validate_numeric",
    "validate_date",
    "validate_form",
    # Results
    "ValidationResult",
    "UrlValidationResult",
    "PasswordValidationResult",
    "TextValidationResult",
    "NumericValidationResult",
    "DateValidationResult",
    "FormValidationResult",
    # Sanitization
    "SanitizationContext",
    "InputSanitizer",
    "DictSanitizer",
    "sanitize",
    "sanitize_link",
    "sanitize_text_content",
    "escape_html",
    "unescape_html",
    # Errors
    "InputGuardError",
    "UnknownValidationKind",
    "UnknownSanitizationContext",
]
