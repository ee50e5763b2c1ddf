"""
Inkwell Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from pathlib import Path

import pytest

from inkwell.engine.config import InkwellConfig


# ---------------------------------------------------------------------------
# Environment setup — never touch real data or a shared audit log
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset global singletons between tests."""
    import inkwell.engine.config as cfg_mod
    import inkwell.engine.logging as log_mod

    cfg_mod._config = None
    log_mod._global_logger = None
    yield
    cfg_mod._config = None
    log_mod._global_logger = None


@pytest.fixture
def project_root(tmp_path):
    """
    Create a minimal Inkwell project tree with inkwell.yaml in test mode.
    Returns the root Path.
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "inkwell.yaml").write_text(
        "site:\n"
        "  name: TestSite\n"
        "  mode: test\n"
        "storage:\n"
        "  root: .\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  directory: " + str(root / ".inkwell" / "logs") + "\n"
        "security:\n"
        "  bcrypt_rounds: 4\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def config(tmp_path):
    """An InkwellConfig rooted in a temp directory, test mode, cheap bcrypt."""
    return InkwellConfig(
        site={"mode": "test"},
        storage={"root": str(tmp_path)},
        logging={"directory": str(tmp_path / "logs")},
        security={"bcrypt_rounds": 4},
    )


@pytest.fixture
def storage_paths(config):
    from inkwell.engine.paths import PathResolver

    return PathResolver.from_config(config).storage_paths()


@pytest.fixture
def document_store(storage_paths):
    from inkwell.documents.store import VersionedDocumentStore

    storage_paths.documents_root.mkdir(parents=True)
    return VersionedDocumentStore(storage_paths.documents_root)


@pytest.fixture
def image_store(storage_paths):
    from inkwell.images.store import ImageStore

    storage_paths.images_root.mkdir(parents=True)
    return ImageStore(storage_paths.images_root)


@pytest.fixture
def credential_store(storage_paths):
    from inkwell.users.store import CredentialStore

    store = CredentialStore(storage_paths.credentials_file, bcrypt_rounds=4)
    store.initialize()
    return store


@pytest.fixture
def manager(document_store, image_store, credential_store):
    from inkwell.manager import ContentManager

    return ContentManager(document_store, image_store, credential_store)


@pytest.fixture
def audit_log(tmp_path):
    """Initialize the global audit logger in a temp directory."""
    from inkwell.engine.logging import init_logging, shutdown_logging

    file_logger = init_logging(str(tmp_path / "audit"))
    yield file_logger
    shutdown_logging()


@pytest.fixture
def write_version(storage_paths):
    """Place a version file directly on disk, bypassing the store."""

    def _write(name: str, version, content: str = "") -> Path:
        doc_dir = storage_paths.documents_root / name
        doc_dir.mkdir(parents=True, exist_ok=True)
        path = doc_dir / str(version)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def unreadable(monkeypatch):
    """Make listing a directory with the given name fail with EACCES."""

    def _block(dir_name: str) -> None:
        original = Path.iterdir

        def iterdir(self):
            if self.name == dir_name:
                raise PermissionError(13, "Permission denied")
            return original(self)

        monkeypatch.setattr(Path, "iterdir", iterdir)

    return _block
