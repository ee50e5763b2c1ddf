"""
Path resolution — maps a logical collection name to its on-disk root.

In test mode every collection is rooted under a dedicated ``test/``
subtree so automated tests never touch production data; nothing else in
the stores depends on the mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from inkwell.engine.config import InkwellConfig

MODES = ("normal", "test")


@dataclass(frozen=True)
class StoragePaths:
    """Explicit locations injected into each store at construction."""
    documents_root: Path
    images_root: Path
    credentials_file: Path


class PathResolver:
    """Resolve collection names (``data``, ``config``, ``public/images``) to directories."""

    def __init__(
        self,
        root: Union[str, Path],
        mode: str = "normal",
        test_dir: str = "test",
        documents_dir: str = "data",
        images_dir: str = "public/images",
        config_dir: str = "config",
        users_file: str = "users.yml",
    ):
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got '{mode}'")
        self._root = Path(root).resolve()
        self._mode = mode
        self._test_dir = test_dir
        self._documents_dir = documents_dir
        self._images_dir = images_dir
        self._config_dir = config_dir
        self._users_file = users_file

    @classmethod
    def from_config(cls, config: InkwellConfig) -> "PathResolver":
        storage = config.storage
        return cls(
            storage.root,
            mode=config.mode,
            test_dir=storage.test_dir,
            documents_dir=storage.documents_dir,
            images_dir=storage.images_dir,
            config_dir=storage.config_dir,
            users_file=storage.users_file,
        )

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, collection: str) -> Path:
        """Return the absolute directory for *collection* under the current mode."""
        if self._mode == "test":
            return self._root / self._test_dir / collection
        return self._root / collection

    def storage_paths(self) -> StoragePaths:
        return StoragePaths(
            documents_root=self.resolve(self._documents_dir),
            images_root=self.resolve(self._images_dir),
            credentials_file=self.resolve(self._config_dir) / self._users_file,
        )

    def __repr__(self) -> str:
        return f"<PathResolver root='{self._root}' mode='{self._mode}'>"
