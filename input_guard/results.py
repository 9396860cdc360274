"""
Result types returned by the validation engine.

Results are built once per call and never mutated afterwards.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .primitives import DateValue


@dataclass(frozen=True)
class ValidationResult:
    errors: Tuple[str, ...] = ()
    cleaned: str = ''
    formatted: str = ''

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['errors'] = list(self.errors)
        data['is_valid'] = self.is_valid
        return data


@dataclass(frozen=True)
class UrlValidationResult(ValidationResult):
    protocol: str = ''
    domain: str = ''
    path: str = ''


@dataclass(frozen=True)
class PasswordValidationResult(ValidationResult):
    score: int = 0
    strength: str = 'weak'
    suggestions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TextValidationResult(ValidationResult):
    word_count: int = 0
    char_count: int = 0


@dataclass(frozen=True)
class NumericValidationResult(ValidationResult):
    value: Optional[Union[int, float]] = None


@dataclass(frozen=True)
class DateValidationResult(ValidationResult):
    date: Optional[DateValue] = None


@dataclass
class FormValidationResult:
    """Outcome of validating several fields against a schema."""

    results: Dict[str, ValidationResult] = field(default_factory=dict)
    cleaned_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return all(result.is_valid for result in self.results.values())

    @property
    def errors(self) -> Dict[str, Tuple[str, ...]]:
        return {
            name: result.errors
            for name, result in self.results.items()
            if result.errors
        }
