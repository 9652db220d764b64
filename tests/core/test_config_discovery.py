"""Tests for configuration discovery and merging."""

import pytest

from propdesk.core.config import Config, ConfigError, ConfigLoader


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with HOME and cwd inside tmp_path and no git root override."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("PROPDESK_GIT_ROOT", raising=False)
    return tmp_path


def write_user_config(home, text):
    user_config_dir = home / ".config" / "propdesk"
    user_config_dir.mkdir(parents=True)
    path = user_config_dir / "config.toml"
    path.write_text(text)
    return path


class TestDiscoverConfigs:
    """Tests for ConfigLoader.discover_configs method."""

    def test_discover_no_configs(self, isolated):
        """Should return empty list when no configs exist."""
        loader = ConfigLoader()
        assert loader.discover_configs(isolated) == []

    def test_discover_local_config(self, isolated):
        """Should find local propdesk.toml."""
        (isolated / "propdesk.toml").write_text('[pagination]\npage_size = 20\n')

        configs = ConfigLoader().discover_configs(isolated)

        assert configs == [isolated / "propdesk.toml"]

    def test_discover_user_config(self, isolated):
        """Should find user config in ~/.config/propdesk/."""
        user_config = write_user_config(isolated / "home", '[search]\nsuggestion_limit = 3\n')

        configs = ConfigLoader().discover_configs(isolated)

        assert configs == [user_config]

    def test_discover_git_root_config(self, isolated):
        """Should find config at git root from a subdirectory."""
        (isolated / ".git").mkdir()
        (isolated / "propdesk.toml").write_text('[general]\ndefault_entity = "projects"\n')
        subdir = isolated / "src" / "deep"
        subdir.mkdir(parents=True)

        configs = ConfigLoader().discover_configs(subdir)

        assert configs == [isolated / "propdesk.toml"]

    def test_discover_git_root_from_env(self, isolated, monkeypatch):
        """PROPDESK_GIT_ROOT overrides the .git search."""
        root = isolated / "elsewhere"
        root.mkdir()
        (root / "propdesk.toml").write_text('[pagination]\npage_size = 5\n')
        monkeypatch.setenv("PROPDESK_GIT_ROOT", str(root))

        configs = ConfigLoader().discover_configs(isolated)

        assert configs == [root / "propdesk.toml"]

    def test_discover_precedence_order(self, isolated):
        """Should return configs in precedence order: user < git < local."""
        user_config = write_user_config(isolated / "home", '[pagination]\npage_size = 1\n')
        git_root = isolated / "project"
        git_root.mkdir()
        (git_root / ".git").mkdir()
        (git_root / "propdesk.toml").write_text('[pagination]\npage_size = 2\n')
        local_dir = git_root / "subdir"
        local_dir.mkdir()
        (local_dir / "propdesk.toml").write_text('[pagination]\npage_size = 3\n')

        configs = ConfigLoader().discover_configs(local_dir)

        assert configs == [
            user_config,
            git_root / "propdesk.toml",
            local_dir / "propdesk.toml",
        ]

    def test_discover_deduplicates_git_and_local(self, isolated):
        """Should not duplicate when local dir is git root."""
        (isolated / ".git").mkdir()
        (isolated / "propdesk.toml").write_text('[pagination]\npage_size = 20\n')

        configs = ConfigLoader().discover_configs(isolated)

        assert configs == [isolated / "propdesk.toml"]

    def test_discover_uses_cwd_when_no_start_path(self, isolated):
        """Should use current working directory when start_path is None."""
        (isolated / "propdesk.toml").write_text('[pagination]\npage_size = 20\n')

        configs = ConfigLoader().discover_configs()

        assert configs == [isolated / "propdesk.toml"]


class TestLoadMerged:
    """Tests for ConfigLoader.load_merged method."""

    def test_no_configs_returns_defaults(self, isolated):
        assert ConfigLoader().load_merged(isolated) == Config()

    def test_local_overrides_user(self, isolated):
        """Local config overrides user config; other values fall through."""
        write_user_config(
            isolated / "home",
            '[search]\ndebounce_seconds = 0.25\nsuggestion_limit = 4\n',
        )
        (isolated / "propdesk.toml").write_text('[search]\nsuggestion_limit = 8\n')

        config = ConfigLoader().load_merged(isolated)

        assert config.search.suggestion_limit == 8
        assert config.search.debounce_seconds == 0.25

    def test_three_level_merge(self, isolated):
        """Should properly merge user < git root < local."""
        write_user_config(
            isolated / "home",
            '[general]\ndefault_entity = "contacts"\n[pagination]\npage_size = 5\n',
        )
        git_root = isolated / "project"
        git_root.mkdir()
        (git_root / ".git").mkdir()
        (git_root / "propdesk.toml").write_text(
            '[general]\ndefault_entity = "transactions"\n[pagination]\npage_size = 15\n'
        )
        local_dir = git_root / "subdir"
        local_dir.mkdir()
        (local_dir / "propdesk.toml").write_text('[pagination]\npage_size = 30\n')

        config = ConfigLoader().load_merged(local_dir)

        assert config.pagination.page_size == 30
        assert config.general.default_entity == "transactions"

    def test_invalid_toml_includes_path_in_error(self, isolated):
        """ConfigError should include path to problematic file."""
        config_path = isolated / "propdesk.toml"
        config_path.write_text('invalid = [unclosed')

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load_merged(isolated)

        assert str(config_path) in str(exc_info.value)


class TestDeepMerge:
    """Tests for ConfigLoader._deep_merge method."""

    def test_deep_merge_nested(self):
        """Should recursively merge nested dictionaries."""
        loader = ConfigLoader()
        result = loader._deep_merge({"outer": {"a": 1, "b": 2}}, {"outer": {"b": 3, "c": 4}})
        assert result == {"outer": {"a": 1, "b": 3, "c": 4}}

    def test_deep_merge_replaces_lists(self):
        """Should replace lists entirely (not merge them)."""
        loader = ConfigLoader()
        assert loader._deep_merge({"items": [1, 2]}, {"items": [3]}) == {"items": [3]}

    def test_deep_merge_does_not_modify_original(self):
        """Should not modify original dictionaries."""
        loader = ConfigLoader()
        base = {"a": 1, "nested": {"x": 1}}
        override = {"b": 2, "nested": {"y": 2}}

        loader._deep_merge(base, override)

        assert base == {"a": 1, "nested": {"x": 1}}
        assert override == {"b": 2, "nested": {"y": 2}}
