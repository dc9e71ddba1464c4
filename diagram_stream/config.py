"""
Configuration management for diagram-stream.

Loads the streaming session settings from a YAML file, falling back to
defaults for anything the file leaves out.
"""

import copy
import os
import yaml
from typing import Dict, Any, Optional
from dataclasses import dataclass
from pathlib import Path


CONFIG_ENV_VAR = "DIAGRAM_STREAM_CONFIG"


@dataclass
class StreamConfig:
    """Settings for a streaming render session."""
    recovery: str = "brace"
    key_path: str = "$.id"
    render_interval: float = 0.0
    debug: bool = False
    log_level: Optional[str] = None


def default_config_path() -> Path:
    """Get the config path from the environment or the user config dir."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "diagram-stream" / "config.yaml"


class ConfigLoader:
    """Loads and manages diagram-stream configuration."""

    DEFAULT_CONFIG = {
        "recovery": "brace",
        "key_path": "$.id",
        "render_interval": 0.0,
        "debug": False,
        "log_level": None,
    }

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else default_config_path()
        self._config: Optional[StreamConfig] = None

    def load(self) -> StreamConfig:
        """Load configuration from file or use defaults."""
        if self._config:
            return self._config

        config_data = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            with open(self.config_path) as f:
                file_config = yaml.safe_load(f)
            if file_config:
                if not isinstance(file_config, dict):
                    raise ValueError(
                        f"Config file {self.config_path} must contain a mapping"
                    )
                self._merge_configs(config_data, file_config)

        self._config = StreamConfig(
            recovery=str(config_data.get("recovery", "brace")),
            key_path=str(config_data.get("key_path", "$.id")),
            render_interval=float(config_data.get("render_interval") or 0.0),
            debug=bool(config_data.get("debug", False)),
            log_level=config_data.get("log_level"),
        )

        return self._config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]):
        """Merge override config into base config."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value
