"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables
  2. Project config (.repobrowse/config.yaml)
  3. User config (~/.repobrowse/config.yaml)
  4. Defaults
"""

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any

from .log import get_logger

logger = get_logger("config")


# Finders sharing the fzf command-line protocol
FINDERS = ("fzf", "sk")
DEFAULT_FINDER = "fzf"

DEFAULT_FEATURED_SOURCE = "grenkoca/cheats"
DEFAULT_FEATURED_FILENAME = "featured_repos.json"


@dataclass
class FinderConfig:
    """Interactive finder configuration."""
    command: str = DEFAULT_FINDER
    overrides: Optional[str] = None  # Raw flags appended to every finder call

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.command not in FINDERS:
            return f"Unknown finder '{self.command}'. Valid: {', '.join(FINDERS)}"
        return None


@dataclass
class FeaturedConfig:
    """Where the featured repository list comes from."""
    source: str = DEFAULT_FEATURED_SOURCE
    filename: str = DEFAULT_FEATURED_FILENAME
    depth: int = 1

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not self.source:
            return "Featured source must not be empty"
        if not self.filename:
            return "Featured filename must not be empty"
        if self.depth < 1:
            return f"Clone depth must be >= 1, got {self.depth}"
        return None


@dataclass
class Config:
    """Application configuration."""
    finder: FinderConfig = field(default_factory=FinderConfig)
    featured: FeaturedConfig = field(default_factory=FeaturedConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "finder": {
                "command": self.finder.command,
                "overrides": self.finder.overrides
            },
            "featured": {
                "source": self.featured.source,
                "filename": self.featured.filename,
                "depth": self.featured.depth
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        finder_data = _section(data, "finder")
        featured_data = _section(data, "featured")

        return cls(
            finder=FinderConfig(
                command=finder_data.get("command", DEFAULT_FINDER),
                overrides=finder_data.get("overrides")
            ),
            featured=FeaturedConfig(
                source=featured_data.get("source", DEFAULT_FEATURED_SOURCE),
                filename=featured_data.get("filename", DEFAULT_FEATURED_FILENAME),
                depth=_as_int(featured_data.get("depth"), 1)
            )
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment variables
      2. Project config (.repobrowse/config.yaml)
      3. User config (~/.repobrowse/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".repobrowse"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".repobrowse"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        # Layer 3: Environment overrides
        config_data = self._merge(config_data, self._read_env())

        self._config = self._validated(Config.from_dict(config_data))
        return self._config

    def _validated(self, config: Config) -> Config:
        """Replace any section that fails validation with its defaults."""
        finder_error = config.finder.validate()
        if finder_error:
            logger.warning("Ignoring finder config: %s", finder_error)
            config.finder = FinderConfig()
        featured_error = config.featured.validate()
        if featured_error:
            logger.warning("Ignoring featured config: %s", featured_error)
            config.featured = FeaturedConfig()
        return config

    def _read_env(self) -> Dict[str, Any]:
        env: Dict[str, Any] = {}
        if os.environ.get("REPOBROWSE_FINDER"):
            env.setdefault("finder", {})["command"] = os.environ["REPOBROWSE_FINDER"]
        if os.environ.get("REPOBROWSE_FINDER_OVERRIDES"):
            env.setdefault("finder", {})["overrides"] = os.environ["REPOBROWSE_FINDER_OVERRIDES"]
        if os.environ.get("REPOBROWSE_FEATURED_SOURCE"):
            env.setdefault("featured", {})["source"] = os.environ["REPOBROWSE_FEATURED_SOURCE"]
        return env

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "finder.command")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        current = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'finder.command')"

        section, setting = parts

        # Edit a copy; the cached config only changes once validation passes
        if section == "finder":
            if setting == "command":
                finder = replace(current.finder, command=value)
            elif setting == "overrides":
                finder = replace(current.finder, overrides=value or None)
            else:
                return f"Unknown finder setting: {setting}. Valid: command, overrides"
            error = finder.validate()
            if error:
                return error
            config = replace(current, finder=finder)

        elif section == "featured":
            if setting == "source":
                featured = replace(current.featured, source=value)
            elif setting == "filename":
                featured = replace(current.featured, filename=value)
            elif setting == "depth":
                try:
                    featured = replace(current.featured, depth=int(value))
                except ValueError:
                    return f"Clone depth must be an integer, got '{value}'"
            else:
                return f"Unknown featured setting: {setting}. Valid: source, filename, depth"
            error = featured.validate()
            if error:
                return error
            config = replace(current, featured=featured)
        else:
            return f"Unknown section: {section}. Valid: finder, featured"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts

        if section == "finder":
            if setting == "command":
                return config.finder.command
            elif setting == "overrides":
                return config.finder.overrides
        elif section == "featured":
            if setting == "source":
                return config.featured.source
            elif setting == "filename":
                return config.featured.filename
            elif setting == "depth":
                return str(config.featured.depth)

        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()

        lines = [
            "Configuration:",
            "",
            "Finder:",
            f"  Command: {config.finder.command}",
            f"  Overrides: {config.finder.overrides or '(none)'}",
            "",
            "Featured:",
            f"  Source: {config.featured.source}",
            f"  Filename: {config.featured.filename}",
            f"  Depth: {config.featured.depth}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]

        return "\n".join(lines)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Mapping for a config section. Anything else falls back to defaults."""
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring config section %r: not a mapping", name)
        return {}
    return value


def _as_int(value: Any, default: int) -> int:
    """Coerce a YAML scalar to int, falling back to default."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer config value %r", value)
        return default


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
