"""
Inkwell Documents — versioned document store and content-type dispatch.

Physical storage: {documents_root}/{document_name}/{version_number}
"""

from inkwell.documents.content_types import ContentTypeResolver, RenderedContent
from inkwell.documents.models import Document, DocumentVersion
from inkwell.documents.store import VersionedDocumentStore

__all__ = [
    "ContentTypeResolver",
    "RenderedContent",
    "Document",
    "DocumentVersion",
    "VersionedDocumentStore",
]
