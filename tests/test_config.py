"""Tests for configuration loading and validation"""
import pytest

from worktree_manager import config as config_store
from worktree_manager.config import Config, DiscoveryConfig, FzfConfig, PreviewConfig, TimeoutConfig
from worktree_manager.exceptions import ConfigError


class TestConfigDefaults:
    """Test default values."""

    def test_defaults(self):
        config = Config()
        assert config.version == "1.0.0"
        assert config.editor is None
        assert config.fzf.height == "40%"
        assert config.fzf.layout == "reverse"
        assert config.fzf.preview_window == "right:60%"
        assert config.auto_discovery.enabled is True
        assert config.auto_discovery.paths == []
        assert config.auto_discovery.max_depth == 3
        assert config.preview.commit_count == 5
        assert config.preview.max_files == 10
        assert config.timeouts.git == 30
        assert config.timeouts.preview == 5

    def test_config_path_follows_xdg(self, isolated_config):
        assert config_store.config_path() == isolated_config

    def test_missing_file_gives_defaults(self, isolated_config):
        assert config_store.load() == Config()


class TestConfigValidation:
    """Test __post_init__ validators."""

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            FzfConfig(height="")
        with pytest.raises(ValueError):
            DiscoveryConfig(max_depth=-1)
        with pytest.raises(ValueError):
            PreviewConfig(max_files=0)
        with pytest.raises(ValueError):
            TimeoutConfig(git=0)

    def test_blank_editor_is_none(self):
        assert Config(editor="  ").editor is None

    def test_effective_editor(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "nano")
        assert Config().effective_editor() == "nano"
        assert Config(editor="code --wait").effective_editor() == "code --wait"
        monkeypatch.delenv("EDITOR")
        assert Config().effective_editor() == "vi"

    def test_expanded_paths(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/tester")
        monkeypatch.setenv("PROJECTS", "/srv/projects")
        discovery = DiscoveryConfig(paths=["~/code", "$PROJECTS/team"])
        assert discovery.expanded_paths() == ["/home/tester/code", "/srv/projects/team"]


class TestConfigFile:
    """Test reading and writing the YAML file."""

    def test_save_then_load(self, isolated_config):
        config = Config(editor="nvim")
        config.auto_discovery.paths = ["~/code"]
        config.preview.commit_count = 8

        path = config_store.save(config)

        assert path == isolated_config
        assert config_store.load() == config

    def test_partial_file_keeps_defaults(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("editor: hx\nfzf:\n  height: 80%\nunknown_key: 1\n")

        config = config_store.load()

        assert config.editor == "hx"
        assert config.fzf.height == "80%"
        assert config.fzf.layout == "reverse"

    def test_empty_file(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("")
        assert config_store.load() == Config()

    def test_malformed_yaml(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("fzf: [unclosed\n")
        with pytest.raises(ConfigError):
            config_store.load()

    def test_invalid_section(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("preview:\n  max_files: 0\n")
        with pytest.raises(ConfigError):
            config_store.load()

    def test_top_level_must_be_mapping(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            config_store.load()

    def test_to_dict_layout(self):
        data = Config().to_dict()
        assert list(data) == ["version", "editor", "fzf", "auto_discovery", "preview", "timeouts"]
        assert data["auto_discovery"] == {"enabled": True, "paths": [], "max_depth": 3}
