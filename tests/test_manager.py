"""Tests for inkwell.manager — the authenticated-caller gate and composed flows."""

import pytest

from inkwell.engine.errors import (
    InkwellAuthorizationError,
    InkwellNotFoundError,
    InkwellStorageError,
    InkwellValidationError,
)
from inkwell.engine.security import SIGN_IN_REQUIRED
from inkwell.manager import ContentManager


class TestAuthenticationGate:

    @pytest.mark.parametrize("call", [
        lambda m: m.create_document("new.md", authenticated=False),
        lambda m: m.update_document("about.md", "x", authenticated=False),
        lambda m: m.duplicate_document("about.md", authenticated=False),
        lambda m: m.rename_document("about.md", "other.md", authenticated=False),
        lambda m: m.delete_document("about.md", authenticated=False),
        lambda m: m.upload_image("cat.png", b"png", authenticated=False),
        lambda m: m.delete_image("cat.png", authenticated=False),
        lambda m: m.delete_user("alice", authenticated=False),
    ])
    def test_mutations_require_sign_in(self, manager, call):
        manager.documents.create("about.md", "original")
        result = call(manager)
        assert not result.ok
        assert isinstance(result.error, InkwellAuthorizationError)
        assert result.message == SIGN_IN_REQUIRED
        assert manager.documents.list() == ["about.md"]
        assert manager.documents.versions("about.md") == [1]
        assert manager.images.list() == []

    def test_denial_is_audited(self, manager, audit_log):
        manager.delete_document("about.md", authenticated=False)
        entries = list(audit_log.entries("documents", "security"))
        assert entries[0]["event"] == "access_denied"
        assert entries[0]["operation"] == "delete"

    def test_reads_are_open(self, manager):
        manager.documents.create("about.md", "hi")
        assert manager.view_document("about.md").ok
        assert manager.list_documents()[0].name == "about.md"


class TestDocuments:

    def test_view_markdown_renders_html(self, manager):
        manager.create_document("about.md", "# About Ruby", authenticated=True)
        result = manager.view_document("about.md")
        assert result.ok
        assert result.value.content_type == "text/html"
        assert "<h1>About Ruby</h1>" in result.value.body

    def test_view_text_passthrough(self, manager):
        manager.create_document("notes.txt", "# not a heading", authenticated=True)
        result = manager.view_document("notes.txt")
        assert result.value.content_type == "text/plain"
        assert result.value.body == "# not a heading"

    def test_view_specific_version(self, manager):
        manager.create_document("notes.txt", "one", authenticated=True)
        manager.update_document("notes.txt", "two", authenticated=True)
        assert manager.view_document("notes.txt", 1).value.body == "one"
        assert manager.view_document("notes.txt", "2").value.body == "two"
        assert manager.document_source("notes.txt").value == "two"

    def test_view_missing(self, manager):
        result = manager.view_document("ghost.md")
        assert isinstance(result.error, InkwellNotFoundError)
        assert result.message == "ghost.md does not exist."

    def test_update_missing_document(self, manager):
        result = manager.update_document("ghost.md", "x", authenticated=True)
        assert isinstance(result.error, InkwellNotFoundError)
        assert manager.documents.list() == []

    def test_delete_missing_document(self, manager):
        result = manager.delete_document("ghost.md", authenticated=True)
        assert isinstance(result.error, InkwellNotFoundError)

    def test_history(self, manager):
        manager.create_document("notes.txt", "a", authenticated=True)
        manager.update_document("notes.txt", "bb", authenticated=True)
        history = manager.document_history("notes.txt")
        assert [v.version for v in history.value] == [2, 1]
        assert history.value[0].size_bytes == 2
        assert not manager.document_history("ghost.txt").ok

    def test_create_validation_surfaces(self, manager):
        result = manager.create_document("story.rtf", authenticated=True)
        assert isinstance(result.error, InkwellValidationError)
        assert result.message == ".rtf extension is not currently supported."


class TestImages:

    def test_upload_view_delete(self, manager):
        assert manager.upload_image("cat.png", b"\x89PNG", authenticated=True).ok
        viewed = manager.view_image("cat.png")
        assert viewed.value.body == b"\x89PNG"
        assert viewed.value.content_type == "image/png"
        assert [i.name for i in manager.list_images()] == ["cat.png"]
        assert manager.delete_image("cat.png", authenticated=True).ok
        assert not manager.view_image("cat.png").ok


class TestUsers:

    def test_sign_in(self, manager):
        manager.register_user("alice", "pw1", "pw1")
        result = manager.sign_in("alice", "pw1")
        assert result.ok
        assert result.value == "alice"

    def test_sign_in_invalid(self, manager):
        manager.register_user("alice", "pw1", "pw1")
        result = manager.sign_in("alice", "nope")
        assert isinstance(result.error, InkwellAuthorizationError)
        assert result.message == "Invalid Credentials"

    def test_sign_in_attempts_audited(self, manager, audit_log):
        manager.sign_in("mallory", "guess")
        entries = list(audit_log.entries("users", "security"))
        assert entries[0]["event"] == "sign_in"
        assert entries[0]["success"] is False

    def test_delete_user(self, manager):
        manager.register_user("alice", "pw1", "pw1")
        assert manager.delete_user("alice", authenticated=True).ok
        assert not manager.sign_in("alice", "pw1").ok


class TestFromConfig:

    def test_wires_test_mode_paths(self, config, tmp_path):
        manager = ContentManager.from_config(config)
        assert manager.documents.root == (tmp_path / "test" / "data").resolve()
        assert manager.images.root == (tmp_path / "test" / "public" / "images").resolve()
        assert manager.users.path == (tmp_path / "test" / "config" / "users.yml").resolve()


class TestScenario:

    def test_alice_session(self, manager):
        assert manager.register_user("alice", "pw1", "pw1").ok
        assert manager.sign_in("alice", "pw1").ok

        assert manager.create_document("about.md", "# About", authenticated=True).ok
        assert manager.update_document("about.md", "# About Ruby", authenticated=True).value == 2
        assert manager.duplicate_document("about.md", authenticated=True).value == "about-copy.md"
        assert manager.view_document("about-copy.md").value.body == "<h1>About Ruby</h1>"
        assert manager.documents.versions("about-copy.md") == [1]

        assert manager.delete_document("about.md", authenticated=True).ok
        assert [d.name for d in manager.list_documents()] == ["about-copy.md"]


class TestStorageFailures:

    def test_update_and_delete_return_results(self, manager, unreadable):
        manager.create_document("notes.txt", "hello", authenticated=True)
        unreadable("notes.txt")

        updated = manager.update_document("notes.txt", "x", authenticated=True)
        assert isinstance(updated.error, InkwellStorageError)

        deleted = manager.delete_document("notes.txt", authenticated=True)
        assert isinstance(deleted.error, InkwellStorageError)

        viewed = manager.view_document("notes.txt")
        assert isinstance(viewed.error, InkwellStorageError)

        assert not manager.document_history("notes.txt").ok
