"""
Inkwell Configuration — Load and validate inkwell.yaml at startup.

Usage:
    from inkwell.engine.config import load_config, get_config
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from inkwell.engine.errors import InkwellConfigError

CONFIG_FILENAME = "inkwell.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for inkwell.yaml
# ---------------------------------------------------------------------------

class SiteConfig(BaseModel):
    name: str = "Inkwell"
    mode: str = "normal"

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v not in ("normal", "test"):
            raise ValueError(f"mode must be normal/test, got '{v}'")
        return v


class StorageConfig(BaseModel):
    root: str = "."
    documents_dir: str = "data"
    images_dir: str = "public/images"
    config_dir: str = "config"
    users_file: str = "users.yml"
    test_dir: str = "test"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".inkwell/logs"
    audit: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{v}'")
        return v


class SecurityConfig(BaseModel):
    bcrypt_rounds: int = 12

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError(f"bcrypt_rounds must be between 4 and 31, got {v}")
        return v


class InkwellConfig(BaseModel):
    """Root model for inkwell.yaml."""
    site: SiteConfig = SiteConfig()
    storage: StorageConfig = StorageConfig()
    logging: LoggingConfig = LoggingConfig()
    security: SecurityConfig = SecurityConfig()

    @property
    def mode(self) -> str:
        return self.site.mode


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[InkwellConfig] = None


def _find_project_root() -> Path:
    """Find the project root by looking for inkwell.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILENAME).exists():
            return parent
    return current


def get_project_root() -> Path:
    """Return the project root directory."""
    return _find_project_root()


def load_config(config_path: Optional[str] = None, mode: Optional[str] = None) -> InkwellConfig:
    """
    Load and validate inkwell.yaml.

    Args:
        config_path: Explicit path to inkwell.yaml. If None, auto-discovers.
        mode: Overrides ``site.mode`` (the CLI's ``--mode`` flag).

    Returns:
        Validated InkwellConfig instance. A relative ``storage.root`` is
        resolved against the directory holding the config file.

    Raises:
        InkwellConfigError: unreadable YAML or values that fail validation.
    """
    global _config

    if config_path is None:
        config_path = str(_find_project_root() / CONFIG_FILENAME)

    path = Path(config_path)
    raw = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise InkwellConfigError(f"Could not read {path}: {e}", resource=str(path))

    if not isinstance(raw, dict):
        raise InkwellConfigError(f"{path} must contain a mapping", resource=str(path))

    # An empty section (``site:``) loads as None; treat it as absent.
    raw = {key: value for key, value in raw.items() if value is not None}

    if mode is not None:
        site = raw.get("site", {})
        if isinstance(site, dict):
            raw["site"] = {**site, "mode": mode}

    try:
        config = InkwellConfig(**raw)
    except ValidationError as e:
        raise InkwellConfigError(f"Invalid configuration in {path}: {e}", resource=str(path))

    storage_root = Path(config.storage.root)
    if not storage_root.is_absolute():
        config.storage.root = str((path.parent / storage_root).resolve())

    _config = config
    return _config


def get_config() -> InkwellConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_mode() -> str:
    """Get the current runtime mode (normal or test)."""
    return get_config().mode
