"""
Exceptions raised by input_guard.

Bad input data never raises; it is reported through result errors. These
exceptions signal programming errors in the caller.
"""


class InputGuardError(Exception):
    """Base class for input_guard errors."""


class UnknownValidationKind(InputGuardError, ValueError):
    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown validation kind: {kind!r}")


class UnknownSanitizationContext(InputGuardError, ValueError):
    def __init__(self, context):
        self.context = context
        super().__init__(f"Unknown sanitization context: {context!r}")
