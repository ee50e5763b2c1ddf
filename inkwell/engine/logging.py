"""
Inkwell Audit Logging — Structured JSON file-based audit trail.

Implements:
- FileLogger: Per-object-type, per-category log files (daily rotation)
- Log entry builders for document, image, user, security and system events
- Global logger singleton (init_logging / log / shutdown_logging)

Layout: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl

Module diagnostics still go through ``logging.getLogger("inkwell.*")``;
this module only records the audit trail of store operations.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger("inkwell.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "documents": ["execution", "security"],
    "images": ["execution", "security"],
    "users": ["execution", "security"],
    "system": ["execution", "security"],
}


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-object-type, per-category files.
    Files rotate daily: logs/{object_type}/{category}/{YYYY-MM-DD}.jsonl

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = ".inkwell/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        file_path = self._resolve_path(entry.object_type, entry.category)
        key = str(file_path)

        with self._file_locks[key]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, object_type: str, category: str) -> Path:
        today = date.today().isoformat()
        return self._log_dir / object_type / category / f"{today}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def entries(
        self,
        object_type: str,
        category: str,
        *,
        since: Optional[date] = None,
        resource: Optional[str] = None,
        event: Optional[str] = None,
    ) -> Iterator[Dict[str, Any]]:
        """
        Yield audit entries oldest first, optionally restricted to files
        dated *since* or later and to an exact *resource* / *event*.
        Lines that are not valid JSON are skipped.
        """
        folder = self._log_dir / object_type / category
        if not folder.is_dir():
            return
        for path in sorted(folder.glob("*.jsonl")):
            if since is not None and path.stem < since.isoformat():
                continue
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if resource is not None and data.get("resource") != resource:
                        continue
                    if event is not None and data.get("event") != event:
                        continue
                    yield data


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, resource: str, **extra: Any) -> Dict[str, Any]:
    """Build a base log entry with common fields."""
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        "resource": resource,
    }
    entry.update(extra)
    return entry


def log_document_operation(
    operation: str,
    name: str,
    success: bool,
    version: Optional[int] = None,
    error: Optional[str] = None,
    **extra: Any,
) -> LogEntry:
    """Build a document create/save/duplicate/rename/delete entry."""
    data = _base_entry(
        event=f"document_{operation}",
        level="INFO" if success else "ERROR",
        resource=name,
        operation=operation,
        success=success,
        **extra,
    )
    if version is not None:
        data["version"] = version
    if error:
        data["error"] = error
    return LogEntry("documents", "execution", data)


def log_image_operation(
    operation: str,
    name: str,
    success: bool,
    size_bytes: Optional[int] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build an image upload/delete entry."""
    data = _base_entry(
        event=f"image_{operation}",
        level="INFO" if success else "ERROR",
        resource=name,
        operation=operation,
        success=success,
    )
    if size_bytes is not None:
        data["size_bytes"] = size_bytes
    if error:
        data["error"] = error
    return LogEntry("images", "execution", data)


def log_user_event(
    event: str,
    username: str,
    success: bool,
    error: Optional[str] = None,
) -> LogEntry:
    """
    Build a user registration/removal/sign-in entry.
    Sign-in attempts go to the security category.
    """
    data = _base_entry(
        event=event,
        level="INFO" if success else "WARNING",
        resource=username,
        success=success,
    )
    if error:
        data["error"] = error
    category = "security" if event.startswith("sign_in") else "execution"
    return LogEntry("users", category, data)


def log_security_event(
    event: str,
    object_type: str,
    resource: str,
    operation: str,
    level: str = "WARNING",
) -> LogEntry:
    """Build a security event entry (unauthenticated mutation attempt)."""
    data = _base_entry(
        event=event,
        level=level,
        resource=resource,
        operation=operation,
    )
    return LogEntry(object_type if object_type in OBJECT_TYPE_CATEGORIES else "system", "security", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event entry (init, config load)."""
    data = _base_entry(event=event, level=level, resource="system")
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global File Logger Singleton
# ---------------------------------------------------------------------------

_global_logger: Optional[FileLogger] = None


def init_logging(log_dir: str = ".inkwell/logs", level: str = "INFO") -> FileLogger:
    """Configure module loggers and initialize the global audit logger."""
    global _global_logger
    logging.getLogger("inkwell").setLevel(level)
    _global_logger = FileLogger(log_dir=log_dir)
    return _global_logger


def get_file_logger() -> Optional[FileLogger]:
    """Get the global audit logger."""
    return _global_logger


def log(entry: LogEntry) -> bool:
    """
    Write an audit entry. Returns False when the audit trail is not
    initialized or the write fails; audit failures never fail the operation.
    """
    if _global_logger is None:
        logger.debug("Audit logger not initialized, entry dropped: %s", entry.data.get("event"))
        return False
    try:
        _global_logger.write(entry)
        return True
    except OSError as e:
        logger.error(f"Audit log write error: {e}")
        return False


def shutdown_logging() -> None:
    """Detach the global audit logger."""
    global _global_logger
    _global_logger = None
