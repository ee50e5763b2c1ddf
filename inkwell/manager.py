"""
Inkwell Content Manager — the function-call boundary for the request layer.

The request layer resolves a document / image / user name, calls one of
these operations with plain values plus an ``authenticated`` flag taken
from its session, and presents the returned ``OperationResult``.
Everything other than listing, reading, signing in and registering
requires ``authenticated=True``.

Usage:
    manager = ContentManager.from_config(load_config())
    result = manager.view_document("about.md")
    if result.ok:
        body, content_type = result.value.body, result.value.content_type
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from inkwell.documents.content_types import ContentTypeResolver, RenderedContent
from inkwell.documents.models import Document, DocumentVersion
from inkwell.documents.store import Content, VersionedDocumentStore
from inkwell.engine.config import InkwellConfig
from inkwell.engine.errors import InkwellAuthorizationError, InkwellNotFoundError, InkwellStorageError
from inkwell.engine.logging import log, log_security_event, log_user_event
from inkwell.engine.paths import PathResolver
from inkwell.engine.results import OperationResult
from inkwell.engine.security import require_authenticated
from inkwell.images.models import Image
from inkwell.images.store import ImageStore, Payload
from inkwell.users.store import CredentialStore

logger = logging.getLogger("inkwell.manager")


class ContentManager:
    """Composes the document, image and credential stores behind one gate."""

    def __init__(
        self,
        documents: VersionedDocumentStore,
        images: ImageStore,
        users: CredentialStore,
    ):
        self.documents = documents
        self.images = images
        self.users = users

    @classmethod
    def from_config(cls, config: InkwellConfig) -> "ContentManager":
        paths = PathResolver.from_config(config).storage_paths()
        return cls(
            documents=VersionedDocumentStore(paths.documents_root, ContentTypeResolver()),
            images=ImageStore(paths.images_root),
            users=CredentialStore(paths.credentials_file, bcrypt_rounds=config.security.bcrypt_rounds),
        )

    # -------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------

    def list_documents(self) -> List[Document]:
        return self.documents.documents()

    def view_document(
        self,
        name: str,
        version: Optional[Union[int, str]] = None,
    ) -> OperationResult[RenderedContent]:
        """Latest (or given) version rendered for its content type."""
        source = self.document_source(name, version)
        if not source.ok:
            return OperationResult.failure(source.error)
        return OperationResult.success(self.documents.content_types.render(name, source.value))

    def document_source(self, name: str, version: Optional[Union[int, str]] = None) -> OperationResult[str]:
        """Raw text of a version, as shown in the edit form."""
        loaded = self.documents.load(name, version)
        if not loaded.ok:
            return OperationResult.failure(loaded.error)
        return OperationResult.success(loaded.value.decode("utf-8", errors="replace"))

    def document_history(self, name: str) -> OperationResult[List[DocumentVersion]]:
        try:
            history = self.documents.history(name)
        except InkwellStorageError as e:
            return OperationResult.failure(e)
        if not history:
            return OperationResult.failure(
                InkwellNotFoundError(f"{name} does not exist.", resource=name)
            )
        return OperationResult.success(history)

    def create_document(
        self,
        name: Optional[str],
        content: Content = "",
        *,
        authenticated: bool,
    ) -> OperationResult[str]:
        denied = self._deny("documents", "create", name, authenticated)
        if denied is not None:
            return denied
        return self.documents.create(name, content)

    def update_document(self, name: str, content: Content, *, authenticated: bool) -> OperationResult[int]:
        """Store *content* as the next version of an existing document."""
        denied = self._deny("documents", "update", name, authenticated)
        if denied is not None:
            return denied
        try:
            present = self.documents.exists(name)
        except InkwellStorageError as e:
            return OperationResult.failure(e)
        if not present:
            return OperationResult.failure(
                InkwellNotFoundError(f"{name} does not exist.", resource=name, operation="update")
            )
        return self.documents.save(name, content)

    def duplicate_document(self, name: str, *, authenticated: bool) -> OperationResult[str]:
        denied = self._deny("documents", "duplicate", name, authenticated)
        if denied is not None:
            return denied
        return self.documents.duplicate(name)

    def rename_document(self, name: str, new_name: Optional[str], *, authenticated: bool) -> OperationResult[str]:
        denied = self._deny("documents", "rename", name, authenticated)
        if denied is not None:
            return denied
        return self.documents.rename(name, new_name)

    def delete_document(self, name: str, *, authenticated: bool) -> OperationResult[None]:
        denied = self._deny("documents", "delete", name, authenticated)
        if denied is not None:
            return denied
        try:
            present = self.documents.exists(name)
        except InkwellStorageError as e:
            return OperationResult.failure(e)
        if not present:
            return OperationResult.failure(
                InkwellNotFoundError(f"{name} does not exist.", resource=name, operation="delete")
            )
        return self.documents.delete(name)

    # -------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------

    def list_images(self) -> List[Image]:
        return self.images.images()

    def view_image(self, name: str) -> OperationResult[RenderedContent]:
        """Image bytes are returned undecoded in ``RenderedContent.body``."""
        loaded = self.images.load(name)
        if not loaded.ok:
            return OperationResult.failure(loaded.error)
        return OperationResult.success(
            RenderedContent(body=loaded.value, content_type=self.images.content_type(name))
        )

    def upload_image(
        self,
        name: Optional[str],
        payload: Optional[Payload],
        *,
        authenticated: bool,
    ) -> OperationResult[Image]:
        denied = self._deny("images", "upload", name, authenticated)
        if denied is not None:
            return denied
        return self.images.upload(name, payload)

    def delete_image(self, name: str, *, authenticated: bool) -> OperationResult[None]:
        denied = self._deny("images", "delete", name, authenticated)
        if denied is not None:
            return denied
        return self.images.delete(name)

    # -------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------

    def register_user(
        self,
        username: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> OperationResult[str]:
        return self.users.register(username, password, confirm_password)

    def sign_in(self, username: Optional[str], password: Optional[str]) -> OperationResult[str]:
        """Returns the username on success; failure carries 'Invalid Credentials'."""
        try:
            authentic = self.users.authenticate(username, password)
        except InkwellStorageError as e:
            return OperationResult.failure(e)

        log(log_user_event("sign_in", username or "", success=authentic))
        if not authentic:
            logger.info(f"Failed sign-in for '{username}'")
            return OperationResult.failure(
                InkwellAuthorizationError("Invalid Credentials", resource=username, operation="sign_in")
            )
        return OperationResult.success(username)

    def delete_user(self, username: str, *, authenticated: bool) -> OperationResult[None]:
        denied = self._deny("users", "delete", username, authenticated)
        if denied is not None:
            return denied
        return self.users.unregister(username)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------

    def _deny(
        self,
        object_type: str,
        operation: str,
        resource: Optional[str],
        authenticated: bool,
    ) -> Optional[OperationResult]:
        error = require_authenticated(authenticated, operation, resource)
        if error is None:
            return None
        logger.warning(f"Unauthenticated {operation} on {object_type} '{resource}' denied")
        log(log_security_event("access_denied", object_type, resource or "", operation))
        return OperationResult.failure(error)

    def __repr__(self) -> str:
        return f"<ContentManager documents={self.documents!r} images={self.images!r} users={self.users!r}>"
