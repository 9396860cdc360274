"""
Shared primitives for validation and sanitization.

Reference tables and small helpers used by both engines:
- HTML entity escape/unescape maps
- Common password and sequential character detection
- Control character stripping and truncation
- Number and date parsing/formatting
"""

import re
from datetime import date, datetime, time
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from django.utils import dateformat
from django.utils.dateparse import parse_date, parse_datetime

DateValue = Union[date, datetime]

# Order matters only for readability; escaping is done in a single pass.
HTML_ESCAPE_MAP = {
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
    '/': '&#x2F;',
}

HTML_UNESCAPE_MAP = {entity: char for char, entity in HTML_ESCAPE_MAP.items()}

_HTML_ESCAPE_RE = re.compile(r'[&<>"\'/]')
_HTML_UNESCAPE_RE = re.compile(r'&(?:amp|lt|gt|quot|#x27|#x2F);')

COMMON_PASSWORDS = frozenset({
    'password', '123456', 'password123', 'admin', 'qwerty',
    'letmein', 'welcome', 'monkey', '1234567890', 'abc123',
})

# Ascending runs only: "abc", "123". Descending runs are not detected.
SEQUENTIAL_PATTERN = re.compile(
    r'(?:abc|bcd|cde|def|efg|fgh|ghi|hij|ijk|jkl|klm|lmn|mno|nop|opq|pqr|'
    r'qrs|rst|stu|tuv|uvw|vwx|wxy|xyz|123|234|345|456|567|678|789)',
    re.IGNORECASE,
)

# Control characters except tab, newline and carriage return
CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')


def escape_html(text: Optional[str]) -> str:
    """
    Escape the six HTML-sensitive characters.

    `&` is handled in the same pass as the others, so existing text is never
    double-escaped within one call.
    """
    if not text:
        return ''
    return _HTML_ESCAPE_RE.sub(lambda match: HTML_ESCAPE_MAP[match.group(0)], text)


def unescape_html(text: Optional[str]) -> str:
    """Reverse `escape_html` for the six entities it produces."""
    if not text:
        return ''
    return _HTML_UNESCAPE_RE.sub(lambda match: HTML_UNESCAPE_MAP[match.group(0)], text)


def is_common_password(password: str, extra: Iterable[str] = ()) -> bool:
    """Case-insensitive membership in the common password list."""
    lowered = password.lower()
    if lowered in COMMON_PASSWORDS:
        return True
    return any(lowered == candidate.lower() for candidate in extra)


def has_sequential_chars(password: str) -> bool:
    return bool(SEQUENTIAL_PATTERN.search(password))


def strip_control_chars(text: str) -> str:
    return CONTROL_CHARS_PATTERN.sub('', text)


def truncate(text: str, max_length: int, suffix: str = '...') -> str:
    """
    Truncate string to maximum length, including the suffix.

    Args:
        text: String to truncate
        max_length: Maximum length of the result
        suffix: Suffix appended when the text was cut

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[:max(max_length - len(suffix), 0)] + suffix


# An entity or tag left open at the end of a cut
_PARTIAL_MARKUP_RE = re.compile(r'(?:&[#\w]*|<[^<>]*)$')


def truncate_html(text: str, max_length: int, suffix: str = '...') -> str:
    """
    Truncate escaped HTML without splitting an entity or tag.

    The cut backs off to before any trailing partial `&...;` or `<...>`, so
    the result may be shorter than `max_length` but never longer.
    """
    if len(text) <= max_length:
        return text
    head = truncate(text, max(max_length - len(suffix), 0), suffix='')
    return _PARTIAL_MARKUP_RE.sub('', head) + suffix


# =============================================================================
# Numbers
# =============================================================================

def clean_numeric_input(value: Union[str, int, float, Decimal]) -> str:
    """Trim and remove currency symbols and grouping separators."""
    return re.sub(r'[$,]', '', str(value).strip())


def format_integer(value: int) -> str:
    return f'{value:,}'


def format_currency(value: float) -> str:
    sign = '-' if value < 0 else ''
    return f'{sign}${abs(value):,.2f}'


def format_decimal(value: float) -> str:
    """Shortest plain representation: 100.0 -> '100', 0.5 -> '0.5'."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


# =============================================================================
# Dates
# =============================================================================

def parse_date_value(value, input_formats: Sequence[str] = ()) -> Optional[DateValue]:
    """
    Parse a date or datetime from user input.

    Tries ISO date, ISO datetime and then each of `input_formats`.
    Returns None when nothing matches or the date does not exist
    (e.g. 2023-02-30).
    """
    if isinstance(value, (date, datetime)):
        return value

    text = str(value).strip()
    if not text:
        return None

    for parser in (parse_date, parse_datetime):
        try:
            parsed = parser(text)
        except ValueError:
            return None
        if parsed is not None:
            return parsed

    for input_format in input_formats:
        try:
            return datetime.strptime(text, input_format).date()
        except ValueError:
            continue

    return None


def comparable_datetime(value: DateValue) -> datetime:
    """Naive UTC datetime for ordering dates and datetimes together."""
    if isinstance(value, datetime):
        if value.tzinfo is not None and value.utcoffset() is not None:
            return value.astimezone(dt_timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def format_date(value: DateValue, display_format: str = 'n/j/Y') -> str:
    # dateformat reads TIME_ZONE for datetimes; plain dates need no settings.
    if isinstance(value, datetime):
        value = value.date()
    return dateformat.format(value, display_format)
