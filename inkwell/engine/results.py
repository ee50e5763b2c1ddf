"""
Operation results — explicit success / failure values returned by the stores.

Expected conditions (validation, not-found, authorization) and converted
file-system failures travel back to the request layer as an
``OperationResult`` instead of an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from inkwell.engine.errors import InkwellError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a store operation: either ``value`` or ``error`` is set."""

    ok: bool
    value: Optional[T] = None
    error: Optional[InkwellError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: InkwellError) -> "OperationResult[T]":
        return cls(ok=False, error=error)

    @property
    def message(self) -> Optional[str]:
        """User-facing failure message, or None on success."""
        return self.error.message if self.error else None

    @property
    def error_type(self) -> Optional[str]:
        return self.error.error_type if self.error else None

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if not self.ok:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
