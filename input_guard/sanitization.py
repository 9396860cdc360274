"""
Context-aware input sanitization.

Each sanitization context names the destination of a string (HTML body,
HTML attribute, URL, JSON string literal, filename, ...) and selects the
rules that make the string safe to place there:
- html-content: escape HTML, optionally keeping basic formatting tags
- html-attribute: remove markup characters, script protocols and handlers
- url: reject script/data/file schemes
- json: escape for a JSON string literal
- filename: remove characters illegal in file systems
- email / username / search-query: allow-list characters and cap length
- text-content: escape and normalize multi-line user text
- link: allow only http, https, ftp and mailto schemes (or relative links)
- sql: escape quotes and control characters for a SQL string literal

All sanitizers are pure str -> str transforms; empty input yields ''.
"""

import html
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import bleach

from .conf import get_setting
from .exceptions import UnknownSanitizationContext
from .primitives import escape_html, strip_control_chars, truncate_html


class SanitizationContext(str, Enum):
    HTML_CONTENT = 'html-content'
    HTML_ATTRIBUTE = 'html-attribute'
    URL = 'url'
    JSON = 'json'
    FILENAME = 'filename'
    EMAIL = 'email'
    USERNAME = 'username'
    SEARCH_QUERY = 'search-query'
    TEXT_CONTENT = 'text-content'
    LINK = 'link'
    SQL = 'sql'


BASIC_FORMAT_TAGS = frozenset({'b', 'i', 'em', 'strong', 'u'})
BASIC_FORMAT_TAG_PATTERN = re.compile(r'(</?(?:b|i|em|strong|u)>)', re.IGNORECASE)

ATTRIBUTE_STRIP_PATTERNS = (
    re.compile(r'[<>"\'&]'),
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
    re.compile(r'data:', re.IGNORECASE),
    re.compile(r'on\w+=', re.IGNORECASE | re.ASCII),
)

DANGEROUS_URL_SCHEMES = ('javascript:', 'vbscript:', 'data:', 'file:')
SAFE_LINK_PATTERN = re.compile(r'^(?:https?|ftp|mailto):', re.IGNORECASE)

FILENAME_ILLEGAL_PATTERN = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
FILENAME_MAX_LENGTH = 255
USERNAME_MAX_LENGTH = 30
SEARCH_QUERY_MAX_LENGTH = 100


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def _escape_with_basic_formatting(text: str) -> str:
    # bleach drops disallowed tags and all attributes; the text between the
    # remaining bare tags is then re-escaped with the entity map.
    cleaned = bleach.clean(text, tags=BASIC_FORMAT_TAGS, attributes={}, strip=True)
    # With one capture group, odd indexes are the allow-listed tags
    parts = BASIC_FORMAT_TAG_PATTERN.split(cleaned)
    return ''.join(
        part if index % 2 else escape_html(html.unescape(part))
        for index, part in enumerate(parts)
    )


class InputSanitizer:
    """
    Main sanitizer class, one method per sanitization context.
    """

    @staticmethod
    def sanitize_html(value: Any, allow_tags: bool = False, max_length: Optional[int] = None) -> str:
        """
        Sanitize text for placement inside an HTML element.

        Args:
            value: Input to sanitize
            allow_tags: Keep <b>, <i>, <em>, <strong> and <u> tags without
                attributes, drop every other tag and escape the text
            max_length: Maximum length (default from settings HTML_MAX_LENGTH)

        Returns:
            Escaped, truncated string
        """
        text = _as_text(value)
        if not text:
            return ''

        if max_length is None:
            max_length = get_setting('HTML_MAX_LENGTH', 1000)

        if allow_tags:
            cleaned = _escape_with_basic_formatting(text)
        else:
            cleaned = escape_html(text)

        return truncate_html(cleaned, max_length, get_setting('TRUNCATION_SUFFIX', '...'))

    @staticmethod
    def sanitize_attribute(value: Any) -> str:
        """
        Sanitize a value for an HTML attribute.

        Markup characters are removed rather than escaped; script protocols
        and on*= handlers are stripped wherever they occur. Stripping repeats
        until nothing changes, so removed fragments cannot reassemble a
        dangerous token (e.g. 'javajavascript:script:').
        """
        cleaned = _as_text(value)
        previous = None

        while cleaned != previous:
            previous = cleaned
            for pattern in ATTRIBUTE_STRIP_PATTERNS:
                cleaned = pattern.sub('', cleaned)
            cleaned = cleaned.strip()

        return cleaned

    @staticmethod
    def sanitize_url(value: Any) -> str:
        """Return the trimmed URL, or '' when it uses a dangerous scheme."""
        cleaned = _as_text(value).strip()

        lowered = cleaned.lower()
        for scheme in DANGEROUS_URL_SCHEMES:
            if lowered.startswith(scheme):
                return ''

        return cleaned

    @staticmethod
    def sanitize_link(value: Any) -> str:
        """
        Stricter URL sanitization for links.

        A value with a scheme must use http, https, ftp or mailto; values
        without ':' are relative links and pass unchanged.
        """
        cleaned = _as_text(value).strip()

        if ':' in cleaned and not SAFE_LINK_PATTERN.match(cleaned):
            return ''

        return cleaned

    @staticmethod
    def sanitize_json(value: Any) -> str:
        """Escape a value for embedding inside a JSON string literal."""
        return (
            _as_text(value)
            .replace('\\', '\\\\')
            .replace('"', '\\"')
            .replace('\n', '\\n')
            .replace('\r', '\\r')
            .replace('\t', '\\t')
        )

    @staticmethod
    def sanitize_filename(value: Any) -> str:
        """
        Sanitize a filename.

        Removes characters illegal in file systems and control characters,
        replaces whitespace with underscores, caps the length at 255 and
        strips leading/trailing dots.
        """
        cleaned = FILENAME_ILLEGAL_PATTERN.sub('', _as_text(value))
        cleaned = re.sub(r'\s+', '_', cleaned)
        cleaned = cleaned[:FILENAME_MAX_LENGTH]
        return cleaned.strip('.')

    @staticmethod
    def sanitize_email(value: Any) -> str:
        cleaned = _as_text(value).lower().strip()
        return re.sub(r'[^a-z0-9@._-]', '', cleaned)

    @staticmethod
    def sanitize_username(value: Any) -> str:
        cleaned = _as_text(value).lower().strip()
        cleaned = re.sub(r'[^a-z0-9_-]', '', cleaned)
        return cleaned[:USERNAME_MAX_LENGTH]

    @staticmethod
    def sanitize_search_query(value: Any) -> str:
        cleaned = re.sub(r'[<>\'"]', '', _as_text(value)).strip()
        return cleaned[:SEARCH_QUERY_MAX_LENGTH].strip()

    @staticmethod
    def sanitize_sql(value: Any) -> str:
        """
        Escape a value for a quoted SQL string literal.

        Note: This is a defense-in-depth measure. Always use parameterized queries.
        """
        return (
            _as_text(value)
            .replace("'", "''")
            .replace('\\', '\\\\')
            .replace('\x00', '\\0')
            .replace('\n', '\\n')
            .replace('\r', '\\r')
            .replace('\x1a', '\\Z')
        )

    @staticmethod
    def sanitize_text_content(
        value: Any,
        allow_line_breaks: bool = True,
        max_length: int = 1000,
        remove_extra_whitespace: bool = True,
        allow_basic_formatting: bool = False,
    ) -> str:
        """
        Sanitize multi-line user text for display in HTML.

        Args:
            value: Input to sanitize
            allow_line_breaks: Keep line breaks (normalized to \\n); when
                False they become spaces
            max_length: Maximum length of the result
            remove_extra_whitespace: Collapse space/tab runs and limit blank
                lines to one
            allow_basic_formatting: Keep <b>, <i>, <em>, <strong>, <u> tags

        Returns:
            Sanitized string
        """
        text = strip_control_chars(_as_text(value))
        if not text:
            return ''

        if allow_basic_formatting:
            cleaned = _escape_with_basic_formatting(text)
        else:
            cleaned = escape_html(text)

        if allow_line_breaks:
            cleaned = cleaned.replace('\r\n', '\n').replace('\r', '\n')
        else:
            cleaned = re.sub(r'\r?\n|\r', ' ', cleaned)

        if remove_extra_whitespace:
            cleaned = re.sub(r'[ \t]+', ' ', cleaned)
            cleaned = re.sub(r'\n{3,}', '\n\n', cleaned)

        cleaned = cleaned.strip()

        return truncate_html(cleaned, max_length, get_setting('TRUNCATION_SUFFIX', '...'))


HANDLERS: Dict[SanitizationContext, Callable[..., str]] = {
    SanitizationContext.HTML_CONTENT: InputSanitizer.sanitize_html,
    SanitizationContext.HTML_ATTRIBUTE: InputSanitizer.sanitize_attribute,
    SanitizationContext.URL: InputSanitizer.sanitize_url,
    SanitizationContext.JSON: InputSanitizer.sanitize_json,
    SanitizationContext.FILENAME: InputSanitizer.sanitize_filename,
    SanitizationContext.EMAIL: InputSanitizer.sanitize_email,
    SanitizationContext.USERNAME: InputSanitizer.sanitize_username,
    SanitizationContext.SEARCH_QUERY: InputSanitizer.sanitize_search_query,
    SanitizationContext.TEXT_CONTENT: InputSanitizer.sanitize_text_content,
    SanitizationContext.LINK: InputSanitizer.sanitize_link,
    SanitizationContext.SQL: InputSanitizer.sanitize_sql,
}

# Options each context understands; anything else is ignored.
CONTEXT_OPTIONS: Dict[SanitizationContext, Tuple[str, ...]] = {
    SanitizationContext.HTML_CONTENT: ('allow_tags', 'max_length'),
    SanitizationContext.TEXT_CONTENT: (
        'allow_line_breaks',
        'max_length',
        'remove_extra_whitespace',
        'allow_basic_formatting',
    ),
}

sanitize_text_content = InputSanitizer.sanitize_text_content
sanitize_link = InputSanitizer.sanitize_link


def get_context(context: Union[str, SanitizationContext]) -> SanitizationContext:
    try:
        return SanitizationContext(context)
    except ValueError:
        raise UnknownSanitizationContext(context) from None


def sanitize(context: Union[str, SanitizationContext], value: Any, **options: Any) -> str:
    """
    Sanitize `value` for the given destination context.

    Args:
        context: One of SanitizationContext, or its string value
        value: Raw input; None or '' yields ''
        **options: Context options (e.g. allow_tags, max_length for
            html-content); unknown options are ignored

    Returns:
        Sanitized string

    Raises:
        UnknownSanitizationContext: If `context` is not a known context
    """
    ctx = get_context(context)
    accepted = CONTEXT_OPTIONS.get(ctx, ())
    kwargs = {key: val for key, val in options.items() if key in accepted}
    return HANDLERS[ctx](value, **kwargs)


class DictSanitizer:
    """
    Sanitizer for dictionary data (useful for JSON payloads).

    Usage:
        DictSanitizer({'bio': 'html-content', 'email': 'email'}).sanitize(data)
    """

    def __init__(
        self,
        field_contexts: Mapping[str, Union[str, SanitizationContext]],
        default_context: Optional[Union[str, SanitizationContext]] = None,
    ):
        """
        Initialize DictSanitizer with field-specific contexts.

        Args:
            field_contexts: Field name -> sanitization context
            default_context: Context for string fields not listed; when None
                such fields are left untouched
        """
        self.field_contexts = {
            name: get_context(context) for name, context in field_contexts.items()
        }
        self.default_context = (
            get_context(default_context) if default_context is not None else None
        )

    def sanitize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Return a sanitized copy of `data`, recursing into dicts and lists."""
        result: Dict[str, Any] = {}

        for key, value in data.items():
            if isinstance(value, dict):
                result[key] = self.sanitize(value)
            elif isinstance(value, list):
                result[key] = self._sanitize_list(key, value)
            else:
                result[key] = self._sanitize_value(key, value)

        return result

    def _sanitize_list(self, key: str, values: List[Any]) -> List[Any]:
        return [
            self.sanitize(item) if isinstance(item, dict) else self._sanitize_value(key, item)
            for item in values
        ]

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if not isinstance(value, str):
            return value

        context = self.field_contexts.get(key, self.default_context)
        if context is None:
            return value

        return sanitize(context, value)
