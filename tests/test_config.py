"""Unit tests for settings loading."""
from pathlib import Path

import pytest

from eventstager.config import ENV_OVERRIDES, load_settings
from eventstager.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Run each test in an empty directory without EVENTSTAGER_* variables."""
    monkeypatch.chdir(tmp_path)
    for var in list(ENV_OVERRIDES) + ["EVENTSTAGER_CONFIG"]:
        monkeypatch.delenv(var, raising=False)


class TestLoadSettings:
    """Test cases for load_settings."""

    def test_defaults(self):
        """Test the built-in defaults when no file or env is present."""
        s = load_settings()
        assert s.store_path == Path("state/events.json")
        assert s.export_dir == Path("build")
        assert s.default_category == "Sports"
        assert s.categories == ["Sports", "Home", "Social"]
        assert s.log_level == "INFO"

    def test_yaml_in_working_dir(self, tmp_path):
        """Test that ./eventstager.yaml is picked up automatically."""
        (tmp_path / "eventstager.yaml").write_text(
            "store_path: data/store.json\ncategories: [Music, Art]\nunknown_key: 1\n",
            encoding="utf-8",
        )
        s = load_settings()
        assert s.store_path == Path("data/store.json")
        assert s.categories == ["Music", "Art"]

    def test_config_env_var(self, tmp_path, monkeypatch):
        """Test that EVENTSTAGER_CONFIG points at another file."""
        cfg = tmp_path / "other.yaml"
        cfg.write_text("default_category: Home\n", encoding="utf-8")
        monkeypatch.setenv("EVENTSTAGER_CONFIG", str(cfg))
        assert load_settings().default_category == "Home"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test that env variables win over the file."""
        cfg = tmp_path / "c.yaml"
        cfg.write_text("export_dir: out\nlog_level: DEBUG\n", encoding="utf-8")
        monkeypatch.setenv("EVENTSTAGER_EXPORT_DIR", "elsewhere")
        s = load_settings(cfg)
        assert s.export_dir == Path("elsewhere")
        assert s.log_level == "DEBUG"

    def test_empty_file(self, tmp_path):
        """Test that an empty YAML document keeps the defaults."""
        cfg = tmp_path / "c.yaml"
        cfg.write_text("", encoding="utf-8")
        assert load_settings(cfg).default_category == "Sports"

    def test_non_mapping_rejected(self, tmp_path):
        """Test that a YAML list is not a valid config."""
        cfg = tmp_path / "c.yaml"
        cfg.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(cfg)

    def test_bad_categories_rejected(self, tmp_path):
        """Test that categories must be a list of strings."""
        cfg = tmp_path / "c.yaml"
        cfg.write_text("categories: Sports\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(cfg)

    def test_missing_explicit_file(self, tmp_path):
        """Test that an explicit path that cannot be read raises ConfigError."""
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "missing.yaml")
