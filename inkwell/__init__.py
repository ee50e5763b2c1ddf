"""
Inkwell — Versioned document manager core.

File-system backed stores for a browser-based document manager:

    documents  — directory-per-document version ledger
    images     — flat image store
    users      — YAML credential registry with bcrypt hashes

The request/response layer lives outside this package and talks to it
through ``inkwell.manager.ContentManager``.
"""

__version__ = "1.0.0"
__all__ = ["engine", "documents", "images", "users", "manager", "cli"]
