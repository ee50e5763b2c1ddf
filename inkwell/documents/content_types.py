"""
Content types — file extension → (MIME type, renderer).

    .md     text/html    markdown → HTML
    .txt    text/plain   passthrough
    other   text/plain   passthrough

Only the table's extensions are accepted when a document is created, but a
resource that already exists with any other extension is still served as
plain text.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

import markdown


def render_markdown(text: str) -> str:
    return markdown.markdown(text)


def passthrough(text: str) -> str:
    return text


@dataclass(frozen=True)
class ContentType:
    mime_type: str
    renderer: Callable[[str], str]
    renderer_name: str


@dataclass(frozen=True)
class RenderedContent:
    """A body ready to hand to the response, plus its Content-Type."""
    body: Union[str, bytes]
    content_type: str


EXT_TYPE: Dict[str, Tuple[str, str]] = {
    ".md": ("text/html", "markdown"),
    ".txt": ("text/plain", "passthrough"),
}

RENDERERS: Dict[str, Callable[[str], str]] = {
    "markdown": render_markdown,
    "passthrough": passthrough,
}

FALLBACK = ContentType("text/plain", passthrough, "passthrough")


class ContentTypeResolver:
    """Static lookup from a resource name's extension to its content type."""

    def __init__(self, table: Optional[Dict[str, Tuple[str, str]]] = None):
        self._table = dict(EXT_TYPE if table is None else table)

    @staticmethod
    def extension(name: str) -> str:
        return os.path.splitext(name)[1]

    def is_supported(self, extension: str) -> bool:
        return extension in self._table

    @property
    def supported_extensions(self) -> Tuple[str, ...]:
        return tuple(sorted(self._table))

    def resolve(self, name: str) -> ContentType:
        entry = self._table.get(self.extension(name))
        if entry is None:
            return FALLBACK
        mime_type, renderer_name = entry
        return ContentType(mime_type, RENDERERS[renderer_name], renderer_name)

    def content_type(self, name: str) -> str:
        return self.resolve(name).mime_type

    def render(self, name: str, text: str) -> RenderedContent:
        content_type = self.resolve(name)
        return RenderedContent(body=content_type.renderer(text), content_type=content_type.mime_type)
