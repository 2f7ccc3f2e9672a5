"""
Unit tests for system/config.py - tradescope system configuration.

Tests the configuration sections and loading:
- AnalyticsConfig: Engine defaults (starting balance, display name, caps)
- StoreConfig: Report store backend and location
- LoggingConfig: Logging configuration and conversion to LoggerFactory config
- SystemConfig: Container with load(), _from_dict(), merge, env substitution
- Singleton functions: get_system_config(), reload_system_config()
"""

from pathlib import Path

import pytest

from tradescope.system.config import (
    CONFIG_ENV_VAR,
    AnalyticsConfig,
    LoggingConfig,
    StoreConfig,
    SystemConfig,
    _deep_merge,
    _substitute_env_vars,
    get_system_config,
    reload_system_config,
)
from tradescope.system.log_system import LoggingConfig as LoggerConfig


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run in an empty directory with no config env var set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return tmp_path


class TestSectionDefaults:
    """Test section dataclass defaults."""

    def test_analytics_defaults(self):
        """Test AnalyticsConfig defaults."""
        # Arrange & Act
        config = AnalyticsConfig()

        # Assert
        assert config.default_starting_balance == 10000.0
        assert config.default_file_name == "uploaded_data.csv"
        assert config.top_patterns_limit == 5

    def test_store_defaults(self):
        """Test StoreConfig defaults."""
        config = StoreConfig()

        assert config.backend == "file"
        assert config.root_path == "output/reports"

    def test_logging_defaults(self):
        """Test LoggingConfig defaults."""
        config = LoggingConfig()

        assert config.level == "INFO"
        assert config.format == "console"
        assert config.timestamp_format == "compact"
        assert config.enable_file is False
        assert config.file_path == "logs/tradescope.log"
        assert config.file_level == "WARNING"


class TestLoggingConfigConversion:
    """Test conversion to the LoggerFactory model."""

    def test_to_logger_config(self):
        """Test every field is carried over and file_path becomes a Path."""
        # Arrange
        config = LoggingConfig(level="DEBUG", format="json", enable_file=True, file_path="var/app.log")

        # Act
        logger_config = config.to_logger_config()

        # Assert
        assert isinstance(logger_config, LoggerConfig)
        assert logger_config.level == "DEBUG"
        assert logger_config.format == "json"
        assert logger_config.enable_file is True
        assert logger_config.file_path == Path("var/app.log")


class TestSystemConfigFromDict:
    """Test SystemConfig._from_dict()."""

    def test_complete_config(self):
        """Test every section is built from its mapping."""
        data = {
            "analytics": {"default_starting_balance": 5000.0, "default_file_name": "x.csv", "top_patterns_limit": 3},
            "store": {"backend": "memory", "root_path": "tmp/reports"},
            "logging": {"level": "ERROR"},
        }

        config = SystemConfig._from_dict(data)

        assert config.analytics.default_starting_balance == 5000.0
        assert config.analytics.top_patterns_limit == 3
        assert config.store.backend == "memory"
        assert config.logging.level == "ERROR"

    def test_empty_dict_uses_defaults(self):
        """Test missing sections fall back to defaults."""
        config = SystemConfig._from_dict({})

        assert config == SystemConfig()

    def test_unknown_key_rejected(self):
        """Test typos in a section surface as errors."""
        with pytest.raises(TypeError):
            SystemConfig._from_dict({"store": {"backnd": "memory"}})


class TestSystemConfigLoad:
    """Test SystemConfig.load()."""

    def test_missing_file_uses_defaults(self, isolated_cwd):
        """Test that no config file yields built-in defaults."""
        assert SystemConfig.load() == SystemConfig()

    def test_partial_file_merges_over_defaults(self, tmp_path):
        """Test a partial YAML only overrides what it names."""
        # Arrange
        config_file = tmp_path / "partial.yaml"
        config_file.write_text("store:\n  backend: memory\n")

        # Act
        config = SystemConfig.load(config_file)

        # Assert
        assert config.store.backend == "memory"
        assert config.store.root_path == "output/reports"
        assert config.analytics == AnalyticsConfig()

    def test_env_var_path(self, isolated_cwd, monkeypatch):
        """Test $TRADESCOPE_CONFIG selects the file."""
        config_file = isolated_cwd / "env.yaml"
        config_file.write_text("analytics:\n  top_patterns_limit: 2\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert SystemConfig.load().analytics.top_patterns_limit == 2

    def test_default_path(self, isolated_cwd):
        """Test config/system.yaml relative to the working directory."""
        (isolated_cwd / "config").mkdir()
        (isolated_cwd / "config" / "system.yaml").write_text("logging:\n  level: WARNING\n")

        assert SystemConfig.load().logging.level == "WARNING"

    def test_env_substitution(self, tmp_path, monkeypatch):
        """Test ${VAR} placeholders in string values."""
        monkeypatch.setenv("TRADESCOPE_REPORTS", "/srv/reports")
        config_file = tmp_path / "env_config.yaml"
        config_file.write_text("store:\n  root_path: ${TRADESCOPE_REPORTS}/eurusd\n")

        assert SystemConfig.load(config_file).store.root_path == "/srv/reports/eurusd"

    def test_invalid_yaml(self, tmp_path):
        """Test unparsable YAML raises ValueError."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("store: [unclosed\n")

        with pytest.raises(ValueError, match="Failed to parse YAML"):
            SystemConfig.load(config_file)

    def test_non_mapping_yaml(self, tmp_path):
        """Test a YAML list is rejected."""
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            SystemConfig.load(config_file)

    def test_empty_file(self, tmp_path):
        """Test an empty YAML file yields defaults."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert SystemConfig.load(config_file) == SystemConfig()

    def test_repository_config(self):
        """Test the shipped config/system.yaml loads."""
        repo_config = Path(__file__).parents[3] / "config" / "system.yaml"

        config = SystemConfig.load(repo_config)

        assert config.store.backend == "file"
        assert config.analytics.default_file_name == "uploaded_data.csv"


class TestDeepMerge:
    """Test _deep_merge helper."""

    def test_nested_merge(self):
        """Test nested dicts merge key by key."""
        base = {"store": {"backend": "file", "root_path": "a"}, "x": 1}
        override = {"store": {"root_path": "b"}}

        assert _deep_merge(base, override) == {"store": {"backend": "file", "root_path": "b"}, "x": 1}

    def test_base_not_mutated(self):
        """Test the base mapping is left unchanged."""
        base = {"a": {"b": 1}}

        _deep_merge(base, {"a": {"b": 2}})

        assert base == {"a": {"b": 1}}

    def test_non_dict_override_replaces(self):
        """Test a scalar override replaces a nested mapping."""
        assert _deep_merge({"a": {"b": 1}}, {"a": 5}) == {"a": 5}


class TestEnvSubstitution:
    """Test _substitute_env_vars helper."""

    def test_nested_and_lists(self, monkeypatch):
        """Test substitution recurses into dicts and lists."""
        monkeypatch.setenv("HOST", "localhost")
        monkeypatch.setenv("PORT", "8080")

        result = _substitute_env_vars({"a": ["${HOST}:${PORT}"], "b": {"c": "${HOST}"}})

        assert result == {"a": ["localhost:8080"], "b": {"c": "localhost"}}

    def test_undefined_var_keeps_placeholder(self, monkeypatch):
        """Test undefined variables are left as-is."""
        monkeypatch.delenv("TRADESCOPE_UNDEFINED", raising=False)

        assert _substitute_env_vars("${TRADESCOPE_UNDEFINED}") == "${TRADESCOPE_UNDEFINED}"

    def test_non_strings_unchanged(self):
        """Test numbers and booleans pass through."""
        assert _substitute_env_vars({"n": 5, "f": False}) == {"n": 5, "f": False}


class TestSingleton:
    """Test get_system_config() and reload_system_config()."""

    def test_cached_instance(self, isolated_cwd):
        """Test repeated calls return the same object."""
        first = reload_system_config()

        assert get_system_config() is first

    def test_explicit_path_reloads(self, tmp_path):
        """Test an explicit path always loads that file."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("store:\n  backend: memory\n")

        assert get_system_config(config_file).store.backend == "memory"
        assert get_system_config().store.backend == "memory"

    def test_reload_creates_new_instance(self, isolated_cwd):
        """Test reload replaces the cached object."""
        first = reload_system_config()

        assert reload_system_config() is not first
