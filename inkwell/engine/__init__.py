"""Inkwell Engine — Configuration, paths, errors, results, locking, logging."""

from inkwell.engine.errors import (  # noqa: F401
    InkwellAuthorizationError,
    InkwellConfigError,
    InkwellError,
    InkwellNotFoundError,
    InkwellStorageError,
    InkwellValidationError,
)
from inkwell.engine.paths import PathResolver, StoragePaths  # noqa: F401
from inkwell.engine.results import OperationResult  # noqa: F401

__all__ = [
    "InkwellError",
    "InkwellValidationError",
    "InkwellNotFoundError",
    "InkwellAuthorizationError",
    "InkwellStorageError",
    "InkwellConfigError",
    "OperationResult",
    "PathResolver",
    "StoragePaths",
]
