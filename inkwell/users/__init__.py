"""
Inkwell Users — credential registry gating mutating operations.

Physical storage: {config_dir}/users.yml
"""

from inkwell.users.store import CredentialStore

__all__ = ["CredentialStore"]
