from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

class ErrorKind(str, Enum):
    VALIDATION = "validation"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    STORE = "store"

class SkillSwapError(Exception):
    """Base class for failures scoped to a single user action."""

    kind = ErrorKind.VALIDATION

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

class ValidationFailure(SkillSwapError):
    kind = ErrorKind.VALIDATION

class PermissionDenied(SkillSwapError):
    kind = ErrorKind.FORBIDDEN

class NotFoundError(SkillSwapError):
    kind = ErrorKind.NOT_FOUND

class StoreError(SkillSwapError):
    """A backend call failed. The original exception is kept as ``__cause__``."""

    kind = ErrorKind.STORE

@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a mutating operation.

    Services return an Outcome instead of raising so the caller decides
    whether to retry or report the failure.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None
    cause: Optional[BaseException] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Outcome[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        error: ErrorKind,
        detail: str,
        cause: Optional[BaseException] = None
    ) -> "Outcome[T]":
        return cls(success=False, error=error, detail=detail, cause=cause)

    @classmethod
    def from_error(cls, exc: SkillSwapError) -> "Outcome[T]":
        return cls.fail(exc.kind, exc.detail, cause=exc.__cause__)
