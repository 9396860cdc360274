"""
Django System Checks for input_guard

Run with:
    python manage.py check --tag input_guard
"""

from django.conf import settings
from django.core.checks import Error, Warning, register

from .conf import DEFAULTS
from .sanitization import HANDLERS, SanitizationContext
from .validation import VALIDATORS, ValidationKind


@register("input_guard")
def check_input_guard_settings(app_configs, **kwargs):
    """Check the INPUT_GUARD setting."""
    errors = []

    user_settings = getattr(settings, "INPUT_GUARD", {})
    if user_settings is None:
        return errors

    if not isinstance(user_settings, dict):
        errors.append(
            Error(
                "INPUT_GUARD must be a dict",
                hint="Define INPUT_GUARD = {...} or remove it to use the defaults",
                id="input_guard.E001",
            )
        )
        return errors

    for key in user_settings:
        if key not in DEFAULTS:
            errors.append(
                Warning(
                    f"Unknown INPUT_GUARD key '{key}' is ignored",
                    hint=f"Known keys: {', '.join(sorted(DEFAULTS))}",
                    id="input_guard.W001",
                )
            )

    max_length = user_settings.get("HTML_MAX_LENGTH", DEFAULTS["HTML_MAX_LENGTH"])
    if not isinstance(max_length, int) or isinstance(max_length, bool) or max_length <= 0:
        errors.append(
            Error(
                "INPUT_GUARD['HTML_MAX_LENGTH'] must be a positive integer",
                id="input_guard.E002",
            )
        )
        max_length = None

    suffix = user_settings.get("TRUNCATION_SUFFIX", DEFAULTS["TRUNCATION_SUFFIX"])
    if not isinstance(suffix, str):
        errors.append(
            Error(
                "INPUT_GUARD['TRUNCATION_SUFFIX'] must be a string",
                id="input_guard.E003",
            )
        )
    elif max_length is not None and len(suffix) >= max_length:
        errors.append(
            Error(
                "INPUT_GUARD['TRUNCATION_SUFFIX'] is longer than HTML_MAX_LENGTH",
                hint="Use a shorter suffix or a larger HTML_MAX_LENGTH",
                id="input_guard.E003",
            )
        )

    for key in ("DATE_INPUT_FORMATS", "EXTRA_COMMON_PASSWORDS"):
        value = user_settings.get(key, DEFAULTS[key])
        if not isinstance(value, (list, tuple, set, frozenset)) or not all(
            isinstance(item, str) for item in value
        ):
            errors.append(
                Error(
                    f"INPUT_GUARD['{key}'] must be a list of strings",
                    id="input_guard.E004",
                )
            )

    return errors


@register("input_guard")
def check_engine_dispatch(app_configs, **kwargs):
    """Check that every validation kind and sanitization context has a handler."""
    errors = []

    missing_contexts = [ctx.value for ctx in SanitizationContext if ctx not in HANDLERS]
    if missing_contexts:
        errors.append(
            Error(
                f"No sanitizer registered for: {', '.join(missing_contexts)}",
                id="input_guard.E010",
            )
        )

    missing_kinds = [kind.value for kind in ValidationKind if kind not in VALIDATORS]
    if missing_kinds:
        errors.append(
            Error(
                f"No validator registered for: {', '.join(missing_kinds)}",
                id="input_guard.E011",
            )
        )

    return errors
