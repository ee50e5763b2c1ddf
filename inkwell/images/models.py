"""Inkwell Image Model — an uploaded image as stored on disk."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field


class Image(BaseModel):
    """A single flat file in the image root. Images are not versioned."""

    name: str = Field(max_length=255, description="Upload file name including extension")
    size_bytes: int = Field(default=0, ge=0, description="File size in bytes")
    mime_type: str = Field(default="application/octet-stream", description="Guessed MIME type")

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1]
