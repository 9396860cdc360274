"""Configuration and settings for input_guard."""

from typing import Any, Dict

# Default settings, overridable through settings.INPUT_GUARD
DEFAULTS: Dict[str, Any] = {
    'HTML_MAX_LENGTH': 1000,
    'TRUNCATION_SUFFIX': '...',
    # Merged with the built-in common password list
    'EXTRA_COMMON_PASSWORDS': [],
    'DATE_INPUT_FORMATS': [
        '%m/%d/%Y',  # '12/25/2023'
        '%m/%d/%y',  # '12/25/23'
        '%b %d %Y',  # 'Dec 25 2023'
        '%b %d, %Y',  # 'Dec 25, 2023'
        '%d %b %Y',  # '25 Dec 2023'
        '%B %d %Y',  # 'December 25 2023'
        '%B %d, %Y',  # 'December 25, 2023'
        '%d %B %Y',  # '25 December 2023'
    ],
    'DATE_DISPLAY_FORMAT': 'n/j/Y',
    'TEXT': {
        'MAX_LENGTH': 1000,
    },
}


def get_user_settings() -> Dict[str, Any]:
    """Return the INPUT_GUARD dict, or {} outside a configured Django project."""
    from django.conf import settings

    if not settings.configured:
        return {}
    return getattr(settings, 'INPUT_GUARD', None) or {}


def get_setting(key: str, default: Any = None) -> Any:
    """
    Get an input_guard setting from Django settings or use default.

    Args:
        key: Dotted path to the setting (e.g., 'TEXT.MAX_LENGTH')
        default: Default value if setting is not found

    Returns:
        The setting value or default
    """
    keys = key.split('.')

    for source in (get_user_settings(), DEFAULTS):
        value: Any = source
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                value = None
                break
        if value is not None:
            return value

    return default
