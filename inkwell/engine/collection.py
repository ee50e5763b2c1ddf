"""
Flat collections — shared "named entries under a root directory" helpers.

The document store names directories, the image store names files; both
compose these functions rather than sharing a base class.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Union

_UNSAFE_CHARS = set('<>:"/\\|?*')


def list_names(root: Path, predicate: Optional[Callable[[Path], bool]] = None) -> List[str]:
    """
    Names of the immediate children of *root* matching *predicate*.

    Dot-entries (in-flight temp files, ``.DS_Store``) are skipped. A missing
    root is an empty collection. Order is file-system defined.
    """
    if not root.is_dir():
        return []
    return [
        entry.name
        for entry in root.iterdir()
        if not entry.name.startswith(".") and (predicate is None or predicate(entry))
    ]


def is_safe_name(name: str) -> bool:
    """True if *name* is a single path component that cannot escape its root."""
    if not name or name in (".", ".."):
        return False
    if name.startswith("."):
        return False
    if name != name.strip():
        return False
    return all(c.isprintable() and c not in _UNSAFE_CHARS for c in name)


def entry_path(root: Path, name: str) -> Optional[Path]:
    """``root / name`` for safe names, None otherwise."""
    if not is_safe_name(name):
        return None
    return root / name


def atomic_write(path: Path, data: Union[bytes, BinaryIO]) -> int:
    """
    Write *data* to *path* through a temp file in the same directory and
    ``os.replace``. Returns the number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    bytes_written = 0
    try:
        with os.fdopen(fd, "wb") as f:
            if isinstance(data, (bytes, bytearray)):
                f.write(data)
                bytes_written = len(data)
            else:
                while True:
                    chunk = data.read(8192)
                    if not chunk:
                        break
                    f.write(chunk)
                    bytes_written += len(chunk)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return bytes_written
