"""Tests for propdesk configuration loading."""

import logging
from pathlib import Path

import pytest

from propdesk.core.config import (
    Config,
    ConfigError,
    ConfigLoader,
    GeneralConfig,
    PaginationConfig,
    SearchConfig,
    StorageConfig,
)


class TestConfigLoader:
    """Tests for ConfigLoader.load() method."""

    def test_load_basic_config(self, tmp_path):
        """Load a configuration file with every section."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('''
[general]
default_entity = "transactions"

[search]
debounce_seconds = 0.5
suggestion_limit = 5

[pagination]
page_size = 25

[storage]
saved_searches = "/tmp/saved.json"
''')

        loader = ConfigLoader()
        config = loader.load(config_file)

        assert config.general.default_entity == "transactions"
        assert config.search.debounce_seconds == 0.5
        assert config.search.suggestion_limit == 5
        assert config.pagination.page_size == 25
        assert config.storage.saved_searches == Path("/tmp/saved.json")

    def test_load_partial_config(self, tmp_path):
        """Load a config with only some sections defined."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('''
[pagination]
page_size = 50
''')

        loader = ConfigLoader()
        config = loader.load(config_file)

        assert config.pagination.page_size == 50
        # Other sections get defaults
        assert config.general.default_entity == "properties"
        assert config.search.debounce_seconds == 1.0

    def test_load_empty_config(self, tmp_path):
        """Load an empty config file returns defaults."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('')

        loader = ConfigLoader()
        config = loader.load(config_file)

        assert config == Config()

    def test_integer_debounce_accepted(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[search]\ndebounce_seconds = 2\n')

        config = ConfigLoader().load(config_file)

        assert config.search.debounce_seconds == 2.0


class TestDefaultValues:
    """Tests for default configuration values."""

    def test_default_values(self):
        """Load with None returns all defaults."""
        loader = ConfigLoader()
        config = loader.load(None)

        assert config.general.default_entity == "properties"
        assert config.search.debounce_seconds == 1.0
        assert config.search.suggestion_limit == 10
        assert config.pagination.page_size == 10
        assert config.storage.saved_searches == Path("~/.local/share/propdesk/saved_searches.json")

    def test_config_dataclass_defaults(self):
        config = Config()
        assert isinstance(config.general, GeneralConfig)
        assert isinstance(config.search, SearchConfig)
        assert isinstance(config.pagination, PaginationConfig)
        assert isinstance(config.storage, StorageConfig)


class TestConfigErrors:
    """Tests for configuration error handling."""

    def test_missing_file(self, tmp_path):
        """A path that does not exist is an error, not a silent default."""
        loader = ConfigLoader()
        with pytest.raises(FileNotFoundError):
            loader.load(tmp_path / "missing.toml")

    def test_invalid_toml_reports_line(self, tmp_path):
        """Invalid TOML raises ConfigError with path and line number."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('[general]\ndefault_entity = "x"\nbroken = \n')

        loader = ConfigLoader()
        with pytest.raises(ConfigError) as exc_info:
            loader.load(config_file)

        assert exc_info.value.line == 3
        assert exc_info.value.path == config_file
        assert str(config_file) in str(exc_info.value)

    def test_negative_debounce(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[search]\ndebounce_seconds = -1\n')

        with pytest.raises(ConfigError, match="debounce_seconds"):
            ConfigLoader().load(config_file)

    def test_zero_suggestion_limit(self):
        with pytest.raises(ConfigError, match="suggestion_limit"):
            SearchConfig.from_dict({"suggestion_limit": 0})

    def test_zero_page_size(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[pagination]\npage_size = 0\n')

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(config_file)

        assert exc_info.value.path == config_file
        assert "page_size" in str(exc_info.value)

    def test_error_message_format(self):
        error = ConfigError("bad value", line=4, path=Path("propdesk.toml"))
        assert str(error) == "Error in propdesk.toml at line 4: bad value"

    def test_error_message_without_location(self):
        assert str(ConfigError("bad value")) == "bad value"


class TestUnknownKeys:
    """Unknown tables and keys are ignored with a warning."""

    def test_unknown_section_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="propdesk.core.config"):
            config = Config.from_dict({"colours": {"accent": "red"}, "pagination": {"page_size": 5}})
        assert config.pagination.page_size == 5
        assert "[colours]" in caplog.text

    def test_unknown_key_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="propdesk.core.config"):
            config = Config.from_dict({"search": {"debounce": 2}})
        assert config.search.debounce_seconds == 1.0
        assert "search.debounce" in caplog.text

    def test_scalar_in_place_of_table_uses_defaults(self):
        config = Config.from_dict({"general": "transactions"})
        assert config.general.default_entity == "properties"
