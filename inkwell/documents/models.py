"""
Inkwell Document Models — Pydantic views over the on-disk layout.

Document: a directory named after the document.
DocumentVersion: one immutable version file inside that directory.

The file system is the source of truth; these records are built on read
and never persisted themselves.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Document record
# ---------------------------------------------------------------------------

class Document(BaseModel):
    """
    A named document. ``latest_version`` is 0 when the directory holds no
    version files, which reads the same as a missing document.
    """

    name: str = Field(max_length=255, description="Document name including extension")
    latest_version: int = Field(default=0, ge=0, description="Highest version number present")
    content_type: str = Field(default="text/plain", description="MIME type served for the document")

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1]

    @property
    def exists(self) -> bool:
        return self.latest_version > 0


# ---------------------------------------------------------------------------
# DocumentVersion record
# ---------------------------------------------------------------------------

class DocumentVersion(BaseModel):
    """One snapshot of a document's full content."""

    document: str = Field(description="Parent document name")
    version: int = Field(description="Version number parsed from the file name")
    size_bytes: int = Field(ge=0, description="Size of this version's content")
    modified_at: Optional[datetime] = Field(default=None, description="File modification time")
