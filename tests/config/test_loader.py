"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence and validation
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from hintscope.config.loader import GLOBAL_CONFIG_PATH, _deep_merge, _load_yaml, load_config
from hintscope.config.models import ParserConfig
from hintscope.core.errors import ConfigError


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads valid YAML content."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("parser:\n  max_retries: 3\n")

        assert _load_yaml(yaml_file) == {"parser": {"max_retries": 3}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        """Returns empty dict for empty file."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("hints:\n  max_results:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1}, {"a": 2}) == {"a": 2}

    def test_nested_merge(self) -> None:
        base = {"parser": {"max_retries": 10, "extensions": [".js"]}}
        override = {"parser": {"max_retries": 2}}

        result = _deep_merge(base, override)

        assert result == {"parser": {"max_retries": 2, "extensions": [".js"]}}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"c": 2}})

        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_default_config_when_no_files(self, tmp_path: Path) -> None:
        """Returns default config when no config files exist."""
        with patch("hintscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.logging.level == "INFO"
        assert config.parser.max_retries == 10
        assert config.hints.max_results == 100
        assert config.worker.max_workers == 1

    def test_loads_project_config(self, tmp_path: Path) -> None:
        """Loads config from the project .hintscope directory."""
        config_dir = tmp_path / ".hintscope"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("hints:\n  max_results: 20\n")

        with patch("hintscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.hints.max_results == 20

    def test_project_config_overrides_global(self, tmp_path: Path) -> None:
        """Project YAML wins over global YAML, key by key."""
        global_file = tmp_path / "global.yaml"
        global_file.write_text("parser:\n  max_retries: 4\nhints:\n  max_results: 7\n")
        config_dir = tmp_path / "proj" / ".hintscope"
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("parser:\n  max_retries: 1\n")

        with patch("hintscope.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path / "proj")

        assert config.parser.max_retries == 1
        assert config.hints.max_results == 7

    def test_env_vars_override_yaml(self, tmp_path: Path) -> None:
        """Environment variables override YAML config."""
        config_dir = tmp_path / ".hintscope"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("logging:\n  level: INFO\n")

        with (
            patch("hintscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"HINTSCOPE__LOGGING__LEVEL": "WARNING"}),
        ):
            config = load_config(tmp_path)

        assert config.logging.level == "WARNING"

    def test_kwargs_override_all(self, tmp_path: Path) -> None:
        """Keyword arguments override everything."""
        with patch("hintscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path, parser=ParserConfig(max_retries=0))

        assert config.parser.max_retries == 0

    @pytest.mark.parametrize(
        "content",
        ["parser:\n  max_retries: -1\n", "hints:\n  max_results: 0\n"],
    )
    def test_raises_config_error_for_invalid_value(self, tmp_path: Path, content: str) -> None:
        """Raises ConfigError for out-of-range values."""
        config_dir = tmp_path / ".hintscope"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(content)

        with (
            patch("hintscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError),
        ):
            load_config(tmp_path)


class TestGlobalConfigPath:
    """Tests for GLOBAL_CONFIG_PATH constant."""

    def test_is_in_user_config(self) -> None:
        assert GLOBAL_CONFIG_PATH.parts[-2:] == ("hintscope", "config.yaml")
        assert ".config" in GLOBAL_CONFIG_PATH.parts
