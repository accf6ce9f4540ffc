"""
Configuration management for tabdupe.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/tabdupe/config.toml) and local (tabdupe.toml)
configurations.
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from tabdupe.constants import (
    DEFAULT_PAIR_DISPLAY_LIMIT,
    DEFAULT_THRESHOLD,
    MAX_COMPARISON_POOL,
    MAX_THRESHOLD,
    MIN_THRESHOLD,
)


@dataclass
class TabdupeConfig:
    """
    tabdupe configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (TABDUPE_*)
    3. Explicit config file (--config)
    4. Local config file (./tabdupe.toml or ./.tabduperc)
    5. User config file (~/.config/tabdupe/config.toml)
    6. System defaults
    """

    # Matching
    threshold: int = field(default=DEFAULT_THRESHOLD)
    max_comparison_pool: int = field(default=MAX_COMPARISON_POOL)

    # Display settings
    pair_display_limit: int = field(default=DEFAULT_PAIR_DISPLAY_LIMIT)  # 0 shows all pairs
    output_format: str = field(default="table")  # table, json, markdown, ids
    color_output: bool = field(default=True)

    # Advanced
    log_level: str = field(default="INFO")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "TabdupeConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (overrides search)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_config_path = cls.user_config_path()
        if user_config_path.exists():
            config._merge(cls._load_toml(user_config_path))

        # Local config, first match wins
        local_paths = [
            Path.cwd() / "tabdupe.toml",
            Path.cwd() / ".tabduperc",
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()

        return config

    @staticmethod
    def user_config_path() -> Path:
        return Path.home() / ".config" / "tabdupe" / "config.toml"

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with TABDUPE_ prefix."""
        prefix = "TABDUPE_"
        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()
                if hasattr(self, config_key):
                    setattr(self, config_key, self.coerce(config_key, value))

    def coerce(self, key: str, value: str) -> Any:
        """
        Convert a string to the type of an existing setting.

        Raises:
            KeyError: Unknown setting
            ValueError: Value cannot be converted
        """
        if not hasattr(self, key):
            raise KeyError(f"Unknown setting: {key}")
        current_value = getattr(self, key)
        # bool before int, bool is an int subclass
        if isinstance(current_value, bool):
            return value.lower() in ("true", "1", "yes")
        if isinstance(current_value, int):
            return int(value)
        return value

    def validate(self):
        """
        Check that settings are within range.

        Raises:
            ValueError: If a setting is out of range
        """
        if not MIN_THRESHOLD <= self.threshold <= MAX_THRESHOLD:
            raise ValueError(
                f"threshold must be between {MIN_THRESHOLD} and {MAX_THRESHOLD}, got {self.threshold}"
            )
        if self.max_comparison_pool < 0:
            raise ValueError(f"max_comparison_pool must not be negative, got {self.max_comparison_pool}")
        if self.pair_display_limit < 0:
            raise ValueError(f"pair_display_limit must not be negative, got {self.pair_display_limit}")

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = self.user_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            tomli_w.dump(asdict(self), f)


# Global configuration instance
_config: Optional[TabdupeConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> TabdupeConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = TabdupeConfig.load(config_file)
    return _config


def init_config(config_file: Optional[Path] = None, **kwargs) -> TabdupeConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        config_file: Config file given on the command line
        **kwargs: Other configuration overrides; None values are ignored

    Returns:
        Configured instance
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
