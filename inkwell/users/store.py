"""
Inkwell Credential Store — flat-file user registry with bcrypt hashes.

Physical storage:
    {config_dir}/users.yml — YAML mapping, username → bcrypt hash

Every mutation reads the whole mapping, applies the change in memory and
rewrites the whole file through a temp file + ``os.replace``. A single
lock per store serialises read-modify-write cycles so concurrent
registrations cannot drop each other's entries.

Plaintext passwords are never persisted or logged.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from inkwell.engine.collection import atomic_write
from inkwell.engine.errors import InkwellStorageError, InkwellValidationError
from inkwell.engine.logging import log, log_user_event
from inkwell.engine.results import OperationResult
from inkwell.engine.security import DEFAULT_ROUNDS, hash_password, verify_password

logger = logging.getLogger("inkwell.users.store")


class CredentialStore:
    """
    Username → password-hash registry persisted as one YAML file.

    The registry file must exist before the store is used; ``initialize()``
    is the explicit bootstrap that creates an empty one.
    """

    def __init__(self, credentials_file: Union[str, Path], bcrypt_rounds: int = DEFAULT_ROUNDS):
        self._path = Path(credentials_file)
        self._rounds = bcrypt_rounds
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> bool:
        """Create an empty registry if none exists. Returns True if created."""
        with self._lock:
            if self._path.exists():
                return False
            try:
                self._write({})
            except OSError as e:
                raise _storage_error(e, "initialize", self._path)
            logger.info(f"Created empty user registry at {self._path}")
            return True

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def all(self) -> Dict[str, str]:
        """
        Load the full mapping.

        Raises:
            InkwellStorageError: registry missing, unreadable or not a mapping.
        """
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                users = yaml.safe_load(f) or {}
        except OSError as e:
            raise _storage_error(e, "read", self._path)
        except yaml.YAMLError as e:
            raise InkwellStorageError(
                f"User registry is corrupted: {e}", operation="read", path=self._path
            )
        if not isinstance(users, dict):
            raise InkwellStorageError(
                "User registry is corrupted: expected a mapping", operation="read", path=self._path
            )
        return {str(k): str(v) for k, v in users.items()}

    def exists(self, username: str) -> bool:
        return username in self.all()

    def authenticate(self, username: Optional[str], password: Optional[str]) -> bool:
        """True iff *username* is registered and *password* verifies against its hash."""
        if not username or password is None:
            return False
        password_hash = self.all().get(username)
        if password_hash is None:
            return False
        return verify_password(password, password_hash)

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------

    def registration_error(
        self,
        username: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> Optional[str]:
        """First validation failure for a new account, or None."""
        if _blank(username):
            return "A new username is required."
        if _blank(password):
            return "A new password is required."
        if _blank(confirm_password):
            return "New password must be confirmed."
        if password != confirm_password:
            return "Passwords don't match."
        if username in self.all():
            return f"User {username} already exists."
        return None

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def register(
        self,
        username: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> OperationResult[str]:
        """Validate, hash and persist a new account. Returns the username."""
        with self._lock:
            try:
                error = self.registration_error(username, password, confirm_password)
            except InkwellStorageError as e:
                return OperationResult.failure(e)
            if error:
                logger.info(f"Rejected registration for '{username}': {error}")
                log(log_user_event("register", username or "", success=False, error=error))
                return OperationResult.failure(
                    InkwellValidationError(error, resource=username, operation="register")
                )

            try:
                password_hash = hash_password(password, rounds=self._rounds)
            except ValueError as e:
                log(log_user_event("register", username, success=False, error=str(e)))
                return OperationResult.failure(
                    InkwellValidationError(str(e), resource=username, operation="register", field="password")
                )

            try:
                users = self.all()
                users[username] = password_hash
                self._write(users)
            except InkwellStorageError as e:
                return OperationResult.failure(e)
            except OSError as e:
                logger.error(f"Failed to write user registry: {e}")
                return OperationResult.failure(_storage_error(e, "register", self._path))

        logger.info(f"Registered user '{username}'")
        log(log_user_event("register", username, success=True))
        return OperationResult.success(username)

    def unregister(self, username: str) -> OperationResult[None]:
        """Remove *username*. Removing an unknown user succeeds without a write."""
        with self._lock:
            try:
                users = self.all()
                if users.pop(username, None) is None:
                    return OperationResult.success(None)
                self._write(users)
            except InkwellStorageError as e:
                return OperationResult.failure(e)
            except OSError as e:
                logger.error(f"Failed to write user registry: {e}")
                return OperationResult.failure(_storage_error(e, "unregister", self._path))

        logger.info(f"Removed user '{username}'")
        log(log_user_event("unregister", username, success=True))
        return OperationResult.success(None)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------

    def _write(self, users: Dict[str, str]) -> None:
        payload = yaml.safe_dump(users, default_flow_style=False, sort_keys=True)
        atomic_write(self._path, payload.encode("utf-8"))

    def __repr__(self) -> str:
        return f"<CredentialStore path='{self._path}'>"


def _blank(field: Optional[str]) -> bool:
    return field is None or not field.strip()


def _storage_error(error: OSError, operation: str, path: Path) -> InkwellStorageError:
    return InkwellStorageError(
        f"Storage failure during {operation}: {error.strerror or error}",
        operation=operation,
        path=path,
    )
