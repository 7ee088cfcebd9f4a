"""
tests/test_config.py

Unit tests for shrdlite_config.

Tests cover:
- Defaults, YAML file layer and environment layer
- Validation of values, keys and sections
- The process-wide configuration
"""

import pytest

from shrdlite_config import ShrdliteConfig, get_config, load_config, set_config
from shrdlite_exceptions import InvalidConfigError


def write_yaml(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml", environ={})
        assert config.search.timeout_seconds == 10.0
        assert config.search.heuristic == "max"
        assert config.interpreter.max_goal_combinations == 2000

    def test_yaml_values(self, tmp_path):
        path = write_yaml(tmp_path, "search:\n  timeout_seconds: 2.5\n  heuristic: sum\ncache:\n  heuristic_ttl: 60\n")
        config = load_config(path, environ={})
        assert config.search.timeout_seconds == 2.5
        assert config.search.heuristic == "sum"
        assert config.cache.heuristic_ttl == 60
        assert config.cache.resolution_ttl == 300

    def test_environment_wins_over_file(self, tmp_path):
        path = write_yaml(tmp_path, "search:\n  timeout_seconds: 2.5\n")
        config = load_config(
            path,
            environ={
                "SHRDLITE_SEARCH_TIMEOUT": "4",
                "SHRDLITE_MAX_GOAL_COMBINATIONS": "50",
                "SHRDLITE_FILE_LOGGING": "1",
                "SHRDLITE_LOG_LEVEL": "debug",
            },
        )
        assert config.search.timeout_seconds == 4.0
        assert config.interpreter.max_goal_combinations == 50
        assert config.logging.file_logging is True
        assert config.console_log_level == 10

    def test_config_path_from_environment(self, tmp_path):
        path = write_yaml(tmp_path, "interpreter:\n  max_goal_combinations: 7\n")
        config = load_config(environ={"SHRDLITE_CONFIG": str(path)})
        assert config.interpreter.max_goal_combinations == 7

    def test_empty_file(self, tmp_path):
        config = load_config(write_yaml(tmp_path, ""), environ={})
        assert config == ShrdliteConfig()

    def test_shipped_config_file(self):
        assert load_config(environ={}) == ShrdliteConfig()


class TestValidation:
    """Invalid configurations raise InvalidConfigError."""

    @pytest.mark.parametrize(
        "text",
        [
            "search:\n  heuristic: manhattan\n",
            "search:\n  timeout_seconds: 0\n",
            "interpreter:\n  max_goal_combinations: -1\n",
            "cache:\n  resolution_maxsize: 0\n",
            "logging:\n  console_level: LOUD\n",
            "search:\n  timeout_seconds: soon\n",
            "search:\n  depth: 3\n",
            "planner:\n  timeout: 3\n",
            "- just\n- a list\n",
            "search: [unclosed\n",
        ],
    )
    def test_invalid(self, tmp_path, text):
        with pytest.raises(InvalidConfigError):
            load_config(write_yaml(tmp_path, text), environ={})

    def test_invalid_environment_value(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path / "missing.yaml", environ={"SHRDLITE_HEURISTIC": "greedy"})


class TestProcessConfig:
    """Tests for get_config / set_config."""

    def test_set_and_get(self):
        config = ShrdliteConfig()
        config.search.timeout_seconds = 3.0
        set_config(config)
        assert get_config() is config

    def test_set_validates(self):
        config = ShrdliteConfig()
        config.search.heuristic = "greedy"
        with pytest.raises(InvalidConfigError):
            set_config(config)
