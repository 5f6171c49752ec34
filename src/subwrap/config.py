"""
Configuration Management for Sub Wrap

Handles loading, saving, and managing the process-wide settings that shape
how subroutines are discovered and wrapped.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class SubWrapConfig:
    """Main configuration class for Sub Wrap."""

    # Logging settings
    log_level: str = "WARNING"
    max_value_length: int = 1000

    # Discovery settings
    include_special: bool = False

    # Interception settings
    post_on_error: bool = False

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()
        if self.max_value_length < 1:
            raise ValueError("max_value_length must be positive")

    @classmethod
    def from_env(cls, **overrides) -> "SubWrapConfig":
        """Build a configuration, letting SUBWRAP_* variables override defaults."""
        values: Dict[str, Any] = {}

        level = os.environ.get("SUBWRAP_LOG_LEVEL")
        if level:
            values["log_level"] = level

        for key in ("include_special", "post_on_error"):
            raw = os.environ.get(f"SUBWRAP_{key.upper()}")
            if raw is not None:
                values[key] = raw.strip().lower() in _TRUE_VALUES

        values.update(overrides)
        return cls(**values)


class Config:
    """Global configuration singleton."""

    _instance: Optional[SubWrapConfig] = None
    _config_file: Optional[Path] = None

    @classmethod
    def initialize(cls, config_path: Optional[Path] = None, **kwargs) -> SubWrapConfig:
        """Initialize configuration from file or kwargs."""
        if config_path:
            cls._config_file = config_path
            cls._instance = cls.load_config(config_path)
        else:
            cls._instance = SubWrapConfig.from_env(**kwargs)
        return cls._instance

    @classmethod
    def get_instance(cls) -> SubWrapConfig:
        """Get the configuration instance."""
        if cls._instance is None:
            cls._instance = SubWrapConfig.from_env()
        return cls._instance

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        instance = cls.get_instance()
        return getattr(instance, key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Set a configuration value."""
        instance = cls.get_instance()
        if hasattr(instance, key):
            setattr(instance, key, value)

    @classmethod
    def reset(cls) -> None:
        """Forget the current instance so the next access rebuilds it."""
        cls._instance = None
        cls._config_file = None

    @classmethod
    def load_config(cls, config_path: Path) -> SubWrapConfig:
        """Load configuration from a JSON file, falling back to defaults."""
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = json.load(f)
                known = {f.name for f in fields(SubWrapConfig)}
                return SubWrapConfig.from_env(**{k: v for k, v in data.items() if k in known})
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Error loading config from %s: %s", config_path, e)

        return SubWrapConfig.from_env()

    @classmethod
    def save_config(cls, config_path: Optional[Path] = None) -> bool:
        """Save current configuration to file."""
        instance = cls.get_instance()
        path = config_path or cls._config_file

        if not path:
            path = Path.cwd() / ".subwrap.json"

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(asdict(instance), f, indent=2)
            return True
        except OSError as e:
            logger.warning("Error saving config to %s: %s", path, e)
            return False

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(cls.get_instance())

    @classmethod
    def update(cls, updates: Dict[str, Any]) -> None:
        """Update multiple configuration values."""
        instance = cls.get_instance()
        for key, value in updates.items():
            if hasattr(instance, key):
                setattr(instance, key, value)


def load_config(config_path: Optional[Path] = None) -> SubWrapConfig:
    """Load configuration from file or use defaults."""
    return Config.initialize(config_path)


def save_config(config: SubWrapConfig, config_path: Path) -> bool:
    """Save configuration to file."""
    Config._instance = config
    return Config.save_config(config_path)


def get_config() -> SubWrapConfig:
    """Get the current configuration."""
    return Config.get_instance()
