"""
Validation engine.

One validator per semantic input type:
- Email
- Phone number (US and international)
- Password strength
- URL
- Generic text
- Numeric (integer, decimal, currency)
- Date

Every validator takes a raw value plus options and returns a result object
listing *all* violated rules in the order they were checked. Validators
never raise for bad input data and have no side effects.
"""

import math
import re
from dataclasses import asdict, dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Pattern, Tuple, Union
from urllib.parse import urlsplit

from .conf import get_setting
from .exceptions import UnknownValidationKind
from .primitives import (
    clean_numeric_input,
    comparable_datetime,
    format_currency,
    format_date,
    format_decimal,
    format_integer,
    has_sequential_chars,
    is_common_password,
    parse_date_value,
)
from .results import (
    DateValidationResult,
    FormValidationResult,
    NumericValidationResult,
    PasswordValidationResult,
    TextValidationResult,
    UrlValidationResult,
    ValidationResult,
)


class ValidationKind(str, Enum):
    EMAIL = 'email'
    PHONE = 'phone'
    PASSWORD = 'password'
    URL = 'url'
    TEXT = 'text'
    NUMERIC = 'numeric'
    DATE = 'date'


# =============================================================================
# Options
# =============================================================================

@dataclass(frozen=True)
class RequiredOptions:
    required: bool = True


@dataclass(frozen=True)
class PhoneOptions:
    mode: str = 'us'  # 'us' or 'international'
    required: bool = True


@dataclass(frozen=True)
class TextOptions:
    min_length: int = 0
    max_length: Optional[int] = None  # settings TEXT.MAX_LENGTH when None
    allowed_pattern: Optional[Union[str, Pattern]] = None
    required: bool = False
    trim_whitespace: bool = True


@dataclass(frozen=True)
class NumericOptions:
    type: str = 'integer'  # 'integer', 'decimal' or 'currency'
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    required: bool = False
    allow_negative: bool = True


@dataclass(frozen=True)
class DateOptions:
    min_date: Any = None
    max_date: Any = None
    required: bool = False


OptionsArg = Union[None, Mapping[str, Any], Any]


def coerce_options(options_class, options: OptionsArg):
    """
    Build an options record from None, an instance, or a mapping.

    Unrecognized keys are ignored and missing keys take their defaults.
    """
    if options is None:
        return options_class()
    if isinstance(options, options_class):
        return options
    if is_dataclass(options):
        options = asdict(options)

    known = {f.name for f in fields(options_class)}
    return options_class(**{
        key: value for key, value in dict(options).items() if key in known
    })


def _is_blank(value: Any) -> bool:
    return value is None or value == ''


# =============================================================================
# Email
# =============================================================================

# local@domain; the domain must also hold a dot that is not its first or
# last character (checked separately to keep matching linear).
EMAIL_PATTERN = re.compile(r'[^\s@]+@[^\s@]+')
EMAIL_MAX_LENGTH = 254


def _has_email_format(value: str) -> bool:
    if not EMAIL_PATTERN.fullmatch(value):
        return False
    domain = value.partition('@')[2]
    return '.' in domain[1:-1]


def validate_email(value: Optional[str], options: OptionsArg = None) -> ValidationResult:
    opts = coerce_options(RequiredOptions, options)

    if _is_blank(value):
        errors = ('Email is required',) if opts.required else ()
        return ValidationResult(errors=errors)

    cleaned = str(value).strip().lower()
    errors = []

    if len(cleaned) > EMAIL_MAX_LENGTH:
        errors.append(f'Email is too long (max {EMAIL_MAX_LENGTH} characters)')

    if not _has_email_format(cleaned):
        errors.append('Invalid email format')

    if '..' in cleaned:
        errors.append('Email cannot contain consecutive dots')

    if cleaned.startswith('.') or cleaned.endswith('.'):
        errors.append('Email cannot start or end with a dot')

    return ValidationResult(errors=tuple(errors), cleaned=cleaned)


# =============================================================================
# Phone
# =============================================================================

INTERNATIONAL_PHONE_PATTERN = re.compile(r'^\+?[1-9][0-9]{1,14}$')


def validate_phone(value: Optional[str], options: OptionsArg = None) -> ValidationResult:
    """
    Validate a phone number.

    US mode accepts 10 digits, or 11 digits with a leading country code 1,
    in any punctuation. International mode accepts an optionally
    `+`-prefixed number of 2-15 digits.
    """
    opts = coerce_options(PhoneOptions, options)

    if _is_blank(value):
        errors = ('Phone number is required',) if opts.required else ()
        return ValidationResult(errors=errors)

    cleaned = re.sub(r'[^0-9+]', '', str(value))

    if opts.mode == 'us':
        digits = re.sub(r'[^0-9]', '', cleaned)

        if len(digits) == 10:
            formatted = f'({digits[:3]}) {digits[3:6]}-{digits[6:]}'
            return ValidationResult(cleaned=cleaned, formatted=formatted)

        if len(digits) == 11 and digits.startswith('1'):
            local = digits[1:]
            formatted = f'+1 ({local[:3]}) {local[3:6]}-{local[6:]}'
            return ValidationResult(cleaned=cleaned, formatted=formatted)

        return ValidationResult(
            errors=('US phone number must be 10 digits (or 11 with country code 1)',),
            cleaned=cleaned,
        )

    if INTERNATIONAL_PHONE_PATTERN.match(cleaned):
        formatted = cleaned if cleaned.startswith('+') else '+' + cleaned
        return ValidationResult(cleaned=cleaned, formatted=formatted)

    return ValidationResult(
        errors=('Invalid international phone number format',),
        cleaned=cleaned,
    )


# =============================================================================
# Password
# =============================================================================

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = '@$!%*?&'

# (check name, error, suggestion) in evaluation order
PASSWORD_RULES: Tuple[Tuple[str, str, str], ...] = (
    ('length',
     f'Password must be at least {PASSWORD_MIN_LENGTH} characters long',
     f'Use at least {PASSWORD_MIN_LENGTH} characters'),
    ('lowercase',
     'Password must contain at least one lowercase letter',
     'Add lowercase letters (a-z)'),
    ('uppercase',
     'Password must contain at least one uppercase letter',
     'Add uppercase letters (A-Z)'),
    ('numbers',
     'Password must contain at least one number',
     'Add numbers (0-9)'),
    ('special',
     f'Password must contain at least one special character ({PASSWORD_SPECIAL_CHARS})',
     f'Add special characters ({PASSWORD_SPECIAL_CHARS})'),
    ('no_common',
     'Password is too common',
     "Avoid common passwords like 'password123'"),
    ('no_sequential',
     'Password contains sequential characters',
     "Avoid sequential patterns like '123' or 'abc'"),
)


def password_strength(score: int) -> str:
    if score >= 6:
        return 'strong'
    if score >= 4:
        return 'medium'
    return 'weak'


def validate_password(value: Optional[str], options: OptionsArg = None) -> PasswordValidationResult:
    """
    Score a password against seven independent checks.

    The score is the number of passed checks (0-7); strength is "strong"
    from 6, "medium" from 4, otherwise "weak". Each failed check adds one
    error and one suggestion. The password itself is never echoed back.
    """
    opts = coerce_options(RequiredOptions, options)

    if _is_blank(value):
        errors = ('Password is required',) if opts.required else ()
        return PasswordValidationResult(errors=errors)

    password = str(value)
    extra_common = get_setting('EXTRA_COMMON_PASSWORDS', [])

    checks: Dict[str, bool] = {
        'length': len(password) >= PASSWORD_MIN_LENGTH,
        'lowercase': bool(re.search(r'[a-z]', password)),
        'uppercase': bool(re.search(r'[A-Z]', password)),
        'numbers': bool(re.search(r'[0-9]', password)),
        'special': any(char in PASSWORD_SPECIAL_CHARS for char in password),
        'no_common': not is_common_password(password, extra_common),
        'no_sequential': not has_sequential_chars(password),
    }

    errors = []
    suggestions = []
    for name, error, suggestion in PASSWORD_RULES:
        if not checks[name]:
            errors.append(error)
            suggestions.append(suggestion)

    score = sum(checks.values())

    return PasswordValidationResult(
        errors=tuple(errors),
        score=score,
        strength=password_strength(score),
        suggestions=tuple(suggestions),
    )


# =============================================================================
# URL
# =============================================================================

URL_PATTERN = re.compile(
    r'^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b'
    r'([-a-zA-Z0-9()@:%_+.~#?&/=]*)$',
    re.ASCII,
)
ALLOWED_URL_SCHEMES = ('http', 'https')


def validate_url(value: Optional[str], options: OptionsArg = None) -> UrlValidationResult:
    """
    Validate an absolute http(s) URL.

    Two independent gates must pass: the parsed URL (scheme and hostname)
    and a conservative structural pattern.
    """
    opts = coerce_options(RequiredOptions, options)

    if _is_blank(value):
        errors = ('URL is required',) if opts.required else ()
        return UrlValidationResult(errors=errors)

    cleaned = str(value).strip()

    try:
        parts = urlsplit(cleaned)
        hostname = parts.hostname or ''
    except ValueError:
        return UrlValidationResult(errors=('Invalid URL format',), cleaned=cleaned)

    scheme = parts.scheme.lower()
    # Not an absolute URL at all: no scheme, or a web URL without authority
    if not scheme or (scheme in ALLOWED_URL_SCHEMES and not parts.netloc):
        return UrlValidationResult(errors=('Invalid URL format',), cleaned=cleaned)

    path = parts.path
    if not path and scheme in ALLOWED_URL_SCHEMES:
        path = '/'

    errors = []

    if scheme not in ALLOWED_URL_SCHEMES:
        errors.append('URL must use HTTP or HTTPS protocol')

    if len(hostname) < 3:
        errors.append('URL must have a valid domain')

    if not URL_PATTERN.match(cleaned):
        errors.append('Invalid URL format')

    return UrlValidationResult(
        errors=tuple(errors),
        cleaned=cleaned,
        protocol=f'{scheme}:',
        domain=hostname,
        path=path,
    )


# =============================================================================
# Text
# =============================================================================

# ASCII word characters only; non-ASCII letters are rejected by default.
DEFAULT_TEXT_PATTERN = re.compile(r'^[\w\s\-.,!?\'"()]*$', re.ASCII)


def validate_text(value: Optional[str], options: OptionsArg = None) -> TextValidationResult:
    """
    Validate free text against length bounds and an allowed pattern.

    Whitespace runs are collapsed to single spaces (after trimming, unless
    `trim_whitespace` is off). Word and character counts are computed on the
    cleaned text.
    """
    opts = coerce_options(TextOptions, options)

    if _is_blank(value):
        errors = ('This field is required',) if opts.required else ()
        return TextValidationResult(errors=errors)

    max_length = opts.max_length
    if max_length is None:
        max_length = get_setting('TEXT.MAX_LENGTH', 1000)

    pattern = opts.allowed_pattern
    if pattern is None:
        pattern = DEFAULT_TEXT_PATTERN
    elif isinstance(pattern, str):
        pattern = re.compile(pattern)

    text = str(value)
    cleaned = text.strip() if opts.trim_whitespace else text
    cleaned = re.sub(r'\s+', ' ', cleaned)

    errors = []

    if len(cleaned) < opts.min_length:
        errors.append(f'Must be at least {opts.min_length} characters long')

    if len(cleaned) > max_length:
        errors.append(f'Must be no more than {max_length} characters long')

    if cleaned and not pattern.search(cleaned):
        errors.append('Contains invalid characters')

    return TextValidationResult(
        errors=tuple(errors),
        cleaned=cleaned,
        word_count=len(cleaned.split()),
        char_count=len(cleaned),
    )


# =============================================================================
# Numeric
# =============================================================================

INTEGER_PATTERNS = {
    True: re.compile(r'-?[0-9]+'),
    False: re.compile(r'[0-9]+'),
}
DECIMAL_PATTERNS = {
    True: re.compile(r'-?(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)'),
    False: re.compile(r'(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)'),
}
NUMERIC_TYPES = ('integer', 'decimal', 'currency')


def validate_numeric(value: Any, options: OptionsArg = None) -> NumericValidationResult:
    """
    Validate an integer, decimal or currency amount.

    `$` and `,` are stripped before matching. An unknown `type` is treated
    as 'integer'.
    """
    opts = coerce_options(NumericOptions, options)

    if _is_blank(value):
        errors = ('This field is required',) if opts.required else ()
        return NumericValidationResult(errors=errors)

    number_type = opts.type if opts.type in NUMERIC_TYPES else 'integer'
    allow_negative = bool(opts.allow_negative)
    cleaned = clean_numeric_input(value)

    number: Union[int, float]
    if number_type == 'integer':
        if not INTEGER_PATTERNS[allow_negative].fullmatch(cleaned):
            return NumericValidationResult(
                errors=('Must be a valid integer',), cleaned=cleaned
            )
        try:
            number = int(cleaned)
        except ValueError:
            # Digit strings beyond the interpreter's conversion limit
            return NumericValidationResult(
                errors=('Must be a valid integer',), cleaned=cleaned
            )
        formatted = format_integer(number)
    else:
        if not DECIMAL_PATTERNS[allow_negative].fullmatch(cleaned):
            return NumericValidationResult(
                errors=('Must be a valid decimal number',), cleaned=cleaned
            )
        number = float(cleaned)
        if not math.isfinite(number):
            return NumericValidationResult(
                errors=('Must be a valid decimal number',), cleaned=cleaned
            )
        if number_type == 'currency':
            formatted = format_currency(number)
        else:
            formatted = format_decimal(number)

    errors = []

    if opts.min is not None and number < opts.min:
        errors.append(f'Must be at least {opts.min}')

    if opts.max is not None and number > opts.max:
        errors.append(f'Must be no more than {opts.max}')

    return NumericValidationResult(
        errors=tuple(errors),
        cleaned=cleaned,
        formatted=formatted,
        value=number,
    )


# =============================================================================
# Date
# =============================================================================

def validate_date(value: Any, options: OptionsArg = None) -> DateValidationResult:
    """
    Validate a date, optionally within [min_date, max_date].

    Bounds accept the same inputs as the value itself; a bound that cannot
    be parsed is ignored.
    """
    opts = coerce_options(DateOptions, options)

    if _is_blank(value):
        errors = ('Date is required',) if opts.required else ()
        return DateValidationResult(errors=errors)

    input_formats = get_setting('DATE_INPUT_FORMATS', [])
    display_format = get_setting('DATE_DISPLAY_FORMAT', 'n/j/Y')

    parsed = parse_date_value(value, input_formats)
    if parsed is None:
        return DateValidationResult(
            errors=('Invalid date format',), cleaned=str(value).strip()
        )

    errors = []
    moment = comparable_datetime(parsed)

    if not _is_blank(opts.min_date):
        min_date = parse_date_value(opts.min_date, input_formats)
        if min_date is not None and moment < comparable_datetime(min_date):
            errors.append(
                f'Date must be on or after {format_date(min_date, display_format)}'
            )

    if not _is_blank(opts.max_date):
        max_date = parse_date_value(opts.max_date, input_formats)
        if max_date is not None and moment > comparable_datetime(max_date):
            errors.append(
                f'Date must be on or before {format_date(max_date, display_format)}'
            )

    return DateValidationResult(
        errors=tuple(errors),
        cleaned=parsed.isoformat(),
        formatted=format_date(parsed, display_format),
        date=parsed,
    )


# =============================================================================
# Dispatch
# =============================================================================

VALIDATORS: Dict[ValidationKind, Callable[..., ValidationResult]] = {
    ValidationKind.EMAIL: validate_email,
    ValidationKind.PHONE: validate_phone,
    ValidationKind.PASSWORD: validate_password,
    ValidationKind.URL: validate_url,
    ValidationKind.TEXT: validate_text,
    ValidationKind.NUMERIC: validate_numeric,
    ValidationKind.DATE: validate_date,
}


def get_kind(kind: Union[str, ValidationKind]) -> ValidationKind:
    try:
        return ValidationKind(kind)
    except ValueError:
        raise UnknownValidationKind(kind) from None


def validate(kind: Union[str, ValidationKind], value: Any, options: OptionsArg = None) -> ValidationResult:
    """
    Validate `value` as the given kind.

    Args:
        kind: One of ValidationKind, or its string value (e.g. 'email')
        value: Raw input; may be None or empty
        options: Options record or mapping for that kind

    Returns:
        The kind-specific ValidationResult

    Raises:
        UnknownValidationKind: If `kind` is not a known validation kind
    """
    return VALIDATORS[get_kind(kind)](value, options)


SchemaEntry = Union[str, ValidationKind, Tuple[Union[str, ValidationKind], OptionsArg]]


def _cleaned_value(result: ValidationResult) -> Any:
    if isinstance(result, NumericValidationResult):
        return result.value
    if isinstance(result, DateValidationResult):
        return result.date
    return result.cleaned or result.formatted


def validate_form(data: Mapping[str, Any], schema: Mapping[str, SchemaEntry]) -> FormValidationResult:
    """
    Validate several fields at once.

    Example:
        validate_form(request_data, {
            'email': 'email',
            'first_name': ('text', {'min_length': 2, 'max_length': 50, 'required': True}),
            'birth_date': ('date', {'max_date': date.today(), 'required': True}),
        })

    `cleaned_data` holds the cleaned value of every valid field, except
    passwords which are never copied.
    """
    form = FormValidationResult()

    for name, entry in schema.items():
        if isinstance(entry, tuple):
            kind, options = entry
        else:
            kind, options = entry, None
        kind = get_kind(kind)

        result = VALIDATORS[kind](data.get(name), options)
        form.results[name] = result

        if result.is_valid and kind is not ValidationKind.PASSWORD:
            form.cleaned_data[name] = _cleaned_value(result)

    return form
