"""Configuration handling for worktree-manager"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from worktree_manager.constants import (
    DEFAULT_COMMIT_COUNT,
    DEFAULT_GIT_TIMEOUT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILES,
    DEFAULT_PREVIEW_TIMEOUT,
)
from worktree_manager.exceptions import ConfigError
from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_VERSION = "1.0.0"


def config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME/worktree-manager`` (``~/.config`` by default)."""
    base = os.environ.get("XDG_CONFIG_HOME") or "~/.config"
    return Path(base).expanduser() / "worktree-manager"


def config_path() -> Path:
    """Return the path of the YAML config file."""
    return config_dir() / "config.yaml"


@dataclass
class FzfConfig:
    """Appearance options passed to the selector."""

    height: str = "40%"
    layout: str = "reverse"
    preview_window: str = "right:60%"

    def __post_init__(self):
        for name in ("height", "layout", "preview_window"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"fzf.{name} must be a non-empty string")


@dataclass
class DiscoveryConfig:
    """Search roots for cross-repository discovery."""

    enabled: bool = True
    paths: List[str] = field(default_factory=list)
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        if not isinstance(self.paths, list):
            raise ValueError("auto_discovery.paths must be a list")
        self.paths = [str(p) for p in self.paths]
        if self.max_depth < 0:
            raise ValueError(f"auto_discovery.max_depth must not be negative, got {self.max_depth}")

    def expanded_paths(self) -> List[str]:
        """Return the search roots with ``~`` and environment variables expanded."""
        return [os.path.expanduser(os.path.expandvars(p)) for p in self.paths]


@dataclass
class PreviewConfig:
    """Limits of the preview block."""

    commit_count: int = DEFAULT_COMMIT_COUNT
    max_files: int = DEFAULT_MAX_FILES

    def __post_init__(self):
        if self.commit_count <= 0:
            raise ValueError(f"preview.commit_count must be positive, got {self.commit_count}")
        if self.max_files <= 0:
            raise ValueError(f"preview.max_files must be positive, got {self.max_files}")


@dataclass
class TimeoutConfig:
    """Timeouts (seconds) for git invocations."""

    git: float = DEFAULT_GIT_TIMEOUT
    preview: float = DEFAULT_PREVIEW_TIMEOUT

    def __post_init__(self):
        if self.git <= 0:
            raise ValueError(f"timeouts.git must be positive, got {self.git}")
        if self.preview <= 0:
            raise ValueError(f"timeouts.preview must be positive, got {self.preview}")


_SECTIONS = {
    "fzf": FzfConfig,
    "auto_discovery": DiscoveryConfig,
    "preview": PreviewConfig,
    "timeouts": TimeoutConfig,
}


@dataclass
class Config:
    """Configuration for worktree-manager with validation."""

    version: str = CONFIG_VERSION
    editor: Optional[str] = None
    fzf: FzfConfig = field(default_factory=FzfConfig)
    auto_discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_editor()

    def _validate_editor(self):
        """Normalise an empty editor to None."""
        if self.editor is not None:
            if not isinstance(self.editor, str):
                raise ValueError("editor must be a string")
            self.editor = self.editor.strip() or None

    def effective_editor(self) -> str:
        """Return the configured editor, falling back to $VISUAL, $EDITOR, then vi."""
        return self.editor or os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary (the YAML layout)."""
        result = {"version": self.version, "editor": self.editor}
        for name in _SECTIONS:
            section = getattr(self, name)
            result[name] = {f.name: getattr(section, f.name) for f in fields(section)}
        return result

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        kwargs = {}
        for key in ("version", "editor"):
            if key in config_dict:
                kwargs[key] = config_dict[key]
        for name, section_cls in _SECTIONS.items():
            section = config_dict.get(name)
            if section is None:
                continue
            if not isinstance(section, dict):
                raise ValueError(f"{name} must be a mapping")
            known = {f.name for f in fields(section_cls)}
            kwargs[name] = section_cls(**{k: v for k, v in section.items() if k in known})
        return cls(**kwargs)


def load(path: Optional[Path] = None) -> Config:
    """Load config from disk. Returns the default config if the file doesn't exist."""
    path = path or config_path()
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return Config()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    try:
        config = Config.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid config file {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return config


def save(config: Config, path: Optional[Path] = None) -> Path:
    """Save config to disk, creating parent directories if needed."""
    path = path or config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
    except OSError as e:
        raise ConfigError(f"failed to write config file {path}: {e}") from e

    logger.info(f"Saved config to {path}")
    return path
