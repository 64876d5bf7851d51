"""
Tri-state result returned by every service operation.

A service never raises for bad caller input; it returns
``ServiceResult.fail(kind, message)`` and the controller maps it to a
response.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from .exceptions import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    success: bool
    error: Optional[str] = None
    data: Optional[T] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "ServiceResult":
        return cls(success=False, error=message, error_kind=kind)
