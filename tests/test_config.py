"""Unit tests for inkwell.engine.config — InkwellConfig and loading."""

from pathlib import Path

import pytest

from inkwell.engine.config import (
    InkwellConfig,
    LoggingConfig,
    SecurityConfig,
    get_config,
    load_config,
)
from inkwell.engine.errors import InkwellConfigError


class TestInkwellConfig:
    """Test InkwellConfig Pydantic model."""

    def test_defaults(self):
        cfg = InkwellConfig()
        assert cfg.site.name == "Inkwell"
        assert cfg.mode == "normal"
        assert cfg.storage.documents_dir == "data"
        assert cfg.storage.images_dir == "public/images"
        assert cfg.storage.users_file == "users.yml"
        assert cfg.logging.level == "INFO"
        assert cfg.security.bcrypt_rounds == 12

    def test_valid_modes(self):
        for mode in ("normal", "test"):
            assert InkwellConfig(site={"mode": mode}).mode == mode

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="normal/test"):
            InkwellConfig(site={"mode": "prod"})

    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(ValueError):
            LoggingConfig(level="chatty")

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(ValueError):
            SecurityConfig(bcrypt_rounds=3)


class TestLoadConfig:
    """Test load_config() from file."""

    def test_load_from_file(self, project_root):
        cfg = load_config(str(project_root / "inkwell.yaml"))
        assert cfg.site.name == "TestSite"
        assert cfg.mode == "test"
        assert cfg.security.bcrypt_rounds == 4

    def test_relative_root_resolved_against_config_dir(self, project_root):
        cfg = load_config(str(project_root / "inkwell.yaml"))
        assert Path(cfg.storage.root) == project_root.resolve()

    def test_mode_override(self, project_root):
        cfg = load_config(str(project_root / "inkwell.yaml"), mode="normal")
        assert cfg.mode == "normal"

    def test_empty_sections_use_defaults(self, tmp_path):
        path = tmp_path / "inkwell.yaml"
        path.write_text("site:\nstorage:\n")
        cfg = load_config(str(path), mode="test")
        assert cfg.mode == "test"
        assert cfg.site.name == "Inkwell"
        assert load_config(str(path)).mode == "normal"

    def test_mode_override_on_scalar_site_is_invalid(self, tmp_path):
        path = tmp_path / "inkwell.yaml"
        path.write_text("site: oops\n")
        with pytest.raises(InkwellConfigError, match="Invalid configuration"):
            load_config(str(path), mode="test")

    def test_missing_file_returns_defaults(self, tmp_path):
        cfg = load_config(str(tmp_path / "nonexistent.yaml"))
        assert cfg.site.name == "Inkwell"
        assert Path(cfg.storage.root) == tmp_path.resolve()

    def test_auto_discovery(self, project_root, monkeypatch):
        nested = project_root / "sub" / "dir"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert get_config().site.name == "TestSite"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "inkwell.yaml"
        path.write_text("site: [unclosed\n")
        with pytest.raises(InkwellConfigError):
            load_config(str(path))

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "inkwell.yaml"
        path.write_text("site:\n  mode: production\n")
        with pytest.raises(InkwellConfigError, match="Invalid configuration"):
            load_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "inkwell.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InkwellConfigError, match="mapping"):
            load_config(str(path))
