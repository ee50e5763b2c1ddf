"""
Inkwell Error Hierarchy — Structured exceptions for the storage core.

Errors are carried inside ``OperationResult`` values for expected conditions
(validation, not-found, authorization) and are only raised for I/O failures
in total query operations. Every error serializes to JSON so it can be
written to the audit log unchanged.

Hierarchy:
    InkwellError
    ├── InkwellValidationError     — User input rejected before any mutation
    ├── InkwellNotFoundError       — Document / version / image / user missing
    ├── InkwellAuthorizationError  — Mutation attempted without a session
    ├── InkwellStorageError        — File-system failure (disk, permissions)
    └── InkwellConfigError         — Invalid inkwell.yaml
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class InkwellError(Exception):
    """
    Base error for all Inkwell failures.
    ``message`` is always safe to show to the end user.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.resource: Optional[str] = context.get("resource")
        self.operation: Optional[str] = context.get("operation")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for the audit log."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "resource": self.resource,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("resource", "operation")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.resource:
            parts.append(f"resource={self.resource}")
        if self.operation:
            parts.append(f"operation={self.operation}")
        return " | ".join(parts)


class InkwellValidationError(InkwellError):
    """
    Input validation failed (empty name, unsupported extension, duplicate
    name, password mismatch). No state has been written.
    """

    def __init__(self, message: str, **context: Any):
        self.field: Optional[str] = context.get("field")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["field"] = self.field
        return d


class InkwellNotFoundError(InkwellError):
    """A document, version, image or user does not exist."""

    def __init__(self, message: str, **context: Any):
        self.version: Optional[str] = (
            str(context["version"]) if context.get("version") is not None else None
        )
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["version"] = self.version
        return d


class InkwellAuthorizationError(InkwellError):
    """Mutating operation attempted by a caller without an authenticated session."""
    pass


class InkwellStorageError(InkwellError):
    """
    File-system failure: disk full, permission denied, file removed
    out from under a read. Wraps the originating ``OSError``.
    """

    def __init__(self, message: str, **context: Any):
        self.path: Optional[str] = (
            str(context["path"]) if context.get("path") is not None else None
        )
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["path"] = self.path
        return d


class InkwellConfigError(InkwellError):
    """Configuration error — invalid or unreadable inkwell.yaml."""
    pass
