"""Result types for fallible pipeline steps.

Async codec calls and validation return explicit success/failure values so
that batch code can branch on outcomes instead of wrapping every call site
in try/except.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from heic_converter.core.exceptions import ImageConverterError, ValidationError
from heic_converter.models.conversion import CandidateFile

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A step that produced a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A step that failed, carrying the error."""

    error: ImageConverterError

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success[T], Failure]


@dataclass(frozen=True)
class Accepted:
    """The file satisfies the acceptance policy."""

    file: CandidateFile

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The file violates the acceptance policy."""

    file: CandidateFile
    error: ValidationError

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return self.error.message


ValidationResult = Union[Accepted, Rejected]
