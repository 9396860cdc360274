from django.apps import AppConfig


class InputGuardConfig(AppConfig):
    """
    Configuration for the input_guard app.

    This app provides:
    - A validation engine for emails, phones, passwords, URLs, text, numbers and dates
    - Context-aware sanitizers (HTML content/attributes, URLs, JSON, filenames, ...)
    - Django validators and DRF fields built on both engines
    - System checks for the INPUT_GUARD setting
    """
    name = 'input_guard'
    verbose_name = 'Input Validation & Sanitization'

    def ready(self) -> None:
        # Register system checks
        from . import checks  # noqa: F401
