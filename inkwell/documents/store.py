"""
Inkwell Versioned Document Store — directory-per-document version ledger.

Handles:
- Listing documents and their version numbers
- Reading the latest or a specific version
- Appending new versions (create, edit, duplicate)
- Renaming and deleting a document with all of its versions

Physical storage:
    {documents_root}/{document_name}/{1, 2, 3, ...}

Each version file holds the full content of the document at that version.
Version files are never modified after they are written; the store only
ever consults the highest number present.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from inkwell.documents.content_types import ContentTypeResolver
from inkwell.documents.models import Document, DocumentVersion
from inkwell.engine.collection import entry_path, is_safe_name, list_names
from inkwell.engine.errors import (
    InkwellError,
    InkwellNotFoundError,
    InkwellStorageError,
    InkwellValidationError,
)
from inkwell.engine.locks import NamedLocks
from inkwell.engine.logging import log, log_document_operation
from inkwell.engine.results import OperationResult

logger = logging.getLogger("inkwell.documents.store")

Content = Union[str, bytes]


class VersionedDocumentStore:
    """
    File-system document store with immutable, numbered versions.

    One instance owns one document root. Saves to the same document name
    are serialised in-process; version files are published with a hard link
    so a writer in another process can never overwrite an existing version.
    """

    def __init__(
        self,
        documents_root: Union[str, Path],
        content_types: Optional[ContentTypeResolver] = None,
        locks: Optional[NamedLocks] = None,
    ):
        self._root = Path(documents_root)
        self._content_types = content_types or ContentTypeResolver()
        self._locks = locks or NamedLocks()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def content_types(self) -> ContentTypeResolver:
        return self._content_types

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def list(self) -> List[str]:
        """Names of all documents (one per directory). Unordered."""
        try:
            return list_names(self._root, Path.is_dir)
        except OSError as e:
            raise _storage_error(e, "list", self._root)

    def versions(self, name: str) -> List[int]:
        """
        Version numbers present for *name*. A file name that is not an
        integer counts as version 0 so it can never become the latest.
        """
        doc_path = entry_path(self._root, name)
        if doc_path is None:
            return []
        try:
            return [_parse_version(v) for v in list_names(doc_path, Path.is_file)]
        except OSError as e:
            raise _storage_error(e, "versions", doc_path, resource=name)

    def max_version(self, name: str) -> int:
        """Highest version number of *name*, 0 if it has no version files."""
        return max(self.versions(name), default=0)

    def exists(self, name: str, version: Optional[Union[int, str]] = None) -> bool:
        """True if the given (or latest) version file of *name* is a regular file."""
        path = self._version_path(name, version)
        return path is not None and path.is_file()

    def history(self, name: str) -> List[DocumentVersion]:
        """Version records for *name*, newest first."""
        doc_path = entry_path(self._root, name)
        if doc_path is None:
            return []
        records = []
        try:
            for file_name in list_names(doc_path, Path.is_file):
                stat = (doc_path / file_name).stat()
                records.append(DocumentVersion(
                    document=name,
                    version=_parse_version(file_name),
                    size_bytes=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                ))
        except OSError as e:
            raise _storage_error(e, "history", doc_path, resource=name)
        return sorted(records, key=lambda r: r.version, reverse=True)

    def document(self, name: str) -> Document:
        return Document(
            name=name,
            latest_version=self.max_version(name),
            content_type=self._content_types.content_type(name),
        )

    def documents(self) -> List[Document]:
        """All documents as records, sorted by name."""
        return [self.document(name) for name in sorted(self.list())]

    def load(self, name: str, version: Optional[Union[int, str]] = None) -> OperationResult[bytes]:
        """Full content of the given (or latest) version of *name*."""
        try:
            path = self._version_path(name, version)
        except InkwellStorageError as e:
            return OperationResult.failure(e)
        if path is None or not path.is_file():
            return OperationResult.failure(_not_found(name, version))
        try:
            return OperationResult.success(path.read_bytes())
        except FileNotFoundError:
            return OperationResult.failure(_not_found(name, version))
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            return OperationResult.failure(_storage_error(e, "load", path, resource=name))

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------

    def name_error(self, name: Optional[str]) -> Optional[str]:
        """
        First validation failure for a new document name, or None.

        Order: required, unique, has extension, supported extension,
        file-system safe.
        """
        name = (name or "").strip()
        extension = self._content_types.extension(name)

        if not name:
            return "A name is required."
        if name in self.list():
            return f"{name} already exists."
        if not extension:
            return "A valid document extension is required (e.g. .txt)."
        if not self._content_types.is_supported(extension):
            return f"{extension} extension is not currently supported."
        if not is_safe_name(name):
            return f"{name} is not a valid name."
        return None

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def create(self, name: Optional[str], content: Content = "") -> OperationResult[str]:
        """
        Validate *name* and write its version 1. Returns the trimmed name.
        Creation from the new-document form passes its initial content;
        otherwise the first version is empty.
        """
        name = (name or "").strip()
        with self._locks.hold(name):
            try:
                error = self.name_error(name)
            except InkwellStorageError as e:
                return OperationResult.failure(e)
            if error:
                logger.info(f"Rejected document name '{name}': {error}")
                log(log_document_operation("create", name, success=False, error=error))
                return OperationResult.failure(
                    InkwellValidationError(error, resource=name, operation="create", field="name")
                )
            saved = self.save(name, content)
        if not saved.ok:
            return OperationResult.failure(saved.error)
        return OperationResult.success(name)

    def save(self, name: str, content: Content) -> OperationResult[int]:
        """
        Append a new version (latest + 1) holding *content*, creating the
        document directory if needed. Returns the new version number.
        """
        doc_path = entry_path(self._root, name)
        if doc_path is None:
            return OperationResult.failure(
                InkwellValidationError(f"{name} is not a valid name.", resource=name, operation="save")
            )
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)

        try:
            with self._locks.hold(name):
                doc_path.mkdir(parents=True, exist_ok=True)
                version = self._write_next_version(name, doc_path, data)
        except (OSError, InkwellStorageError) as e:
            error = e if isinstance(e, InkwellError) else _storage_error(e, "save", doc_path, resource=name)
            logger.error(f"Failed to save '{name}': {error.message}")
            log(log_document_operation("save", name, success=False, error=error.message))
            return OperationResult.failure(error)

        logger.info(f"Saved '{name}' version {version} ({len(data)} bytes)")
        log(log_document_operation("save", name, success=True, version=version, size_bytes=len(data)))
        return OperationResult.success(version)

    def duplicate(self, name: str) -> OperationResult[str]:
        """
        Copy the latest content of *name* into ``{stem}-copy{ext}`` as its
        version 1. Fails if the copy already has versions.
        """
        try:
            if not self.exists(name):
                return OperationResult.failure(_not_found(name))
        except InkwellStorageError as e:
            return OperationResult.failure(e)

        copy_name = self.duplicate_name(name)
        with self._locks.hold(name, copy_name):
            try:
                copy_taken = self.exists(copy_name)
            except InkwellStorageError as e:
                return OperationResult.failure(e)
            if copy_taken:
                message = f"{copy_name} already exists."
                log(log_document_operation("duplicate", name, success=False, error=message))
                return OperationResult.failure(
                    InkwellValidationError(message, resource=copy_name, operation="duplicate")
                )
            loaded = self.load(name)
            if not loaded.ok:
                return OperationResult.failure(loaded.error)
            saved = self.save(copy_name, loaded.value)
            if not saved.ok:
                return OperationResult.failure(saved.error)

        logger.info(f"Duplicated '{name}' as '{copy_name}'")
        log(log_document_operation("duplicate", name, success=True, copy=copy_name))
        return OperationResult.success(copy_name)

    def rename(self, name: str, new_name: Optional[str]) -> OperationResult[str]:
        """Move *name* and all of its versions to a validated *new_name*."""
        try:
            if not self.exists(name):
                return OperationResult.failure(_not_found(name))
        except InkwellStorageError as e:
            return OperationResult.failure(e)

        new_name = (new_name or "").strip()
        with self._locks.hold(name, new_name):
            try:
                error = self.name_error(new_name)
            except InkwellStorageError as e:
                return OperationResult.failure(e)
            if error:
                log(log_document_operation("rename", name, success=False, error=error))
                return OperationResult.failure(
                    InkwellValidationError(error, resource=new_name, operation="rename", field="name")
                )
            try:
                os.rename(self._root / name, self._root / new_name)
            except OSError as e:
                error = _storage_error(e, "rename", self._root / name, resource=name)
                logger.error(f"Failed to rename '{name}': {e}")
                return OperationResult.failure(error)

        logger.info(f"Renamed '{name}' to '{new_name}'")
        log(log_document_operation("rename", name, success=True, new_name=new_name))
        return OperationResult.success(new_name)

    def delete(self, name: str) -> OperationResult[None]:
        """Remove the document directory and every version in it."""
        doc_path = entry_path(self._root, name)
        if doc_path is None or not doc_path.is_dir():
            return OperationResult.failure(_not_found(name))

        with self._locks.hold(name):
            try:
                shutil.rmtree(doc_path)
            except FileNotFoundError:
                return OperationResult.failure(_not_found(name))
            except OSError as e:
                logger.error(f"Failed to delete {doc_path}: {e}")
                log(log_document_operation("delete", name, success=False, error=str(e)))
                return OperationResult.failure(_storage_error(e, "delete", doc_path, resource=name))

        logger.info(f"Deleted document '{name}'")
        log(log_document_operation("delete", name, success=True))
        return OperationResult.success(None)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------

    @staticmethod
    def duplicate_name(name: str) -> str:
        """``about.md`` → ``about-copy.md``."""
        stem, extension = os.path.splitext(name)
        return f"{stem}-copy{extension}"

    def _version_path(self, name: str, version: Optional[Union[int, str]]) -> Optional[Path]:
        doc_path = entry_path(self._root, name)
        if doc_path is None:
            return None
        if version is None:
            number = self.max_version(name)
        else:
            number = _parse_version(version)
        if number <= 0:
            return None
        return doc_path / str(number)

    def _write_next_version(self, name: str, doc_path: Path, data: bytes) -> int:
        """
        Stage *data* in a temp file, then hard-link it to the first free
        version number. ``os.link`` refuses an existing target, so a version
        taken concurrently pushes this write to the next number.
        """
        fd, tmp_name = tempfile.mkstemp(prefix=".version.", suffix=".tmp", dir=str(doc_path))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            version = self.max_version(name) + 1
            while True:
                try:
                    os.link(tmp_name, doc_path / str(version))
                    return version
                except FileExistsError:
                    version += 1
        finally:
            os.unlink(tmp_name)

    def __repr__(self) -> str:
        return f"<VersionedDocumentStore root='{self._root}'>"


def _parse_version(value: Union[int, str]) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _not_found(name: str, version: Optional[Union[int, str]] = None) -> InkwellNotFoundError:
    if version is None:
        message = f"{name} does not exist."
    else:
        message = f"Version {version} of {name} does not exist."
    return InkwellNotFoundError(message, resource=name, version=version)


def _storage_error(
    error: OSError,
    operation: str,
    path: Path,
    resource: Optional[str] = None,
) -> InkwellStorageError:
    return InkwellStorageError(
        f"Storage failure during {operation}: {error.strerror or error}",
        operation=operation,
        path=path,
        resource=resource,
    )
