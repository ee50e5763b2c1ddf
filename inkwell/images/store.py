"""
Inkwell Image Store — one flat file per uploaded image.

Handles:
- Listing, existence checks and reads for the image root
- Upload validation (payload present, name present, name unused)
- Atomic save (overwrite-or-create) and delete

Physical storage:
    {images_root}/{image_name}
"""

from __future__ import annotations

import logging
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from inkwell.engine.collection import atomic_write, entry_path, is_safe_name, list_names
from inkwell.engine.errors import InkwellNotFoundError, InkwellStorageError, InkwellValidationError
from inkwell.engine.logging import log, log_image_operation
from inkwell.engine.results import OperationResult
from inkwell.images.models import Image

logger = logging.getLogger("inkwell.images.store")

Payload = Union[bytes, BinaryIO]


class ImageStore:
    """Unversioned sibling of the document store."""

    def __init__(self, images_root: Union[str, Path]):
        self._root = Path(images_root)

    @property
    def root(self) -> Path:
        return self._root

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def list(self) -> List[str]:
        """Names of all images. Unordered."""
        try:
            return list_names(self._root, Path.is_file)
        except OSError as e:
            raise InkwellStorageError(
                f"Storage failure during list: {e.strerror or e}",
                operation="list",
                path=self._root,
            )

    def exists(self, name: str) -> bool:
        path = entry_path(self._root, name)
        return path is not None and path.is_file()

    def images(self) -> List[Image]:
        """All images as records, sorted by name."""
        records = []
        for name in sorted(self.list()):
            try:
                size = (self._root / name).stat().st_size
            except FileNotFoundError:
                continue
            records.append(Image(name=name, size_bytes=size, mime_type=self.content_type(name)))
        return records

    def load(self, name: str) -> OperationResult[bytes]:
        path = entry_path(self._root, name)
        if path is None or not path.is_file():
            return OperationResult.failure(_not_found(name))
        try:
            return OperationResult.success(path.read_bytes())
        except FileNotFoundError:
            return OperationResult.failure(_not_found(name))
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            return OperationResult.failure(_storage_error(e, "load", path, name))

    @staticmethod
    def content_type(name: str) -> str:
        """Detect MIME type from the image name."""
        mime, _ = mimetypes.guess_type(name)
        return mime or "application/octet-stream"

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------

    def upload_error(self, name: Optional[str], payload: Optional[Payload]) -> Optional[str]:
        """
        First validation failure for an upload, or None.

        Order: payload present, name present, name unused, name safe.
        """
        name = (name or "").strip()

        if payload is None:
            return "Please select an image to upload."
        if not name:
            return "An image name is required."
        if name in self.list():
            return f"{name} already exists."
        if not is_safe_name(name):
            return f"{name} is not a valid name."
        return None

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def upload(self, name: Optional[str], payload: Optional[Payload]) -> OperationResult[Image]:
        """
        Validate and store a new image. *name* is the upload's file name;
        any directory part a browser sends along is dropped.
        """
        name = os.path.basename((name or "").strip())
        try:
            error = self.upload_error(name, payload)
        except InkwellStorageError as e:
            return OperationResult.failure(e)
        if error:
            logger.info(f"Rejected image upload '{name}': {error}")
            log(log_image_operation("upload", name, success=False, error=error))
            return OperationResult.failure(
                InkwellValidationError(error, resource=name, operation="upload")
            )
        return self.save(name, payload)

    def save(self, name: str, payload: Payload) -> OperationResult[Image]:
        """Write *payload* as *name*, replacing any existing image of that name."""
        path = entry_path(self._root, name)
        if path is None:
            return OperationResult.failure(
                InkwellValidationError(f"{name} is not a valid name.", resource=name, operation="save")
            )
        try:
            size = atomic_write(path, payload)
        except OSError as e:
            logger.error(f"Failed to save image {path}: {e}")
            log(log_image_operation("upload", name, success=False, error=str(e)))
            return OperationResult.failure(_storage_error(e, "save", path, name))

        logger.info(f"Uploaded image '{name}' ({size} bytes)")
        log(log_image_operation("upload", name, success=True, size_bytes=size))
        return OperationResult.success(
            Image(name=name, size_bytes=size, mime_type=self.content_type(name))
        )

    def delete(self, name: str) -> OperationResult[None]:
        path = entry_path(self._root, name)
        if path is None or not path.is_file():
            return OperationResult.failure(_not_found(name))
        try:
            path.unlink()
        except FileNotFoundError:
            return OperationResult.failure(_not_found(name))
        except OSError as e:
            logger.error(f"Failed to delete image {path}: {e}")
            log(log_image_operation("delete", name, success=False, error=str(e)))
            return OperationResult.failure(_storage_error(e, "delete", path, name))

        logger.info(f"Deleted image '{name}'")
        log(log_image_operation("delete", name, success=True))
        return OperationResult.success(None)

    def __repr__(self) -> str:
        return f"<ImageStore root='{self._root}'>"


def _not_found(name: str) -> InkwellNotFoundError:
    return InkwellNotFoundError(f"{name} does not exist.", resource=name)


def _storage_error(error: OSError, operation: str, path: Path, name: str) -> InkwellStorageError:
    return InkwellStorageError(
        f"Storage failure during {operation}: {error.strerror or error}",
        operation=operation,
        path=path,
        resource=name,
    )
