"""
bracesh Configuration Loader

Configuration management for the shell core:
- JSON configuration file loading
- Default value handling
- Runtime configuration updates through dot-notation keys

Author: YSNRFD
Version: 1.0.0
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional
import threading

from bracesh.exceptions import ConfigError


@dataclass
class ShellConfig:
    """Shell configuration settings."""
    prompt: str = "$ "
    initial_path: str = "/bin:/usr/bin"
    heredoc_prompt: str = "> "


@dataclass
class ProcessConfig:
    """Process execution settings."""
    command_not_found_status: int = 127
    not_executable_status: int = 126
    detach_background: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = False


@dataclass
class Config:
    """
    Main configuration container.

    Holds all configuration settings for the shell.
    """
    shell: ShellConfig = field(default_factory=ShellConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """
    Configuration loader and manager.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('bracesh.json')
        >>> print(config.shell.initial_path)
        /bin:/usr/bin
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigError: If the file cannot be loaded or parsed
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}", path=config_path)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file: {e}", path=config_path)
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file: {e}", path=config_path)

        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be an object", path=config_path)

        self._config = self._parse_config(data)
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into a Config object."""
        config = Config()

        if 'shell' in data:
            shell_data = data['shell']
            config.shell = ShellConfig(
                prompt=shell_data.get('prompt', config.shell.prompt),
                initial_path=shell_data.get('initial_path', config.shell.initial_path),
                heredoc_prompt=shell_data.get('heredoc_prompt', config.shell.heredoc_prompt),
            )

        if 'process' in data:
            proc_data = data['process']
            config.process = ProcessConfig(
                command_not_found_status=proc_data.get(
                    'command_not_found_status', config.process.command_not_found_status),
                not_executable_status=proc_data.get(
                    'not_executable_status', config.process.not_executable_status),
                detach_background=proc_data.get(
                    'detach_background', config.process.detach_background),
            )

        if 'logging' in data:
            log_data = data['logging']
            config.logging = LoggingConfig(
                level=log_data.get('level', config.logging.level),
                log_file=log_data.get('log_file', config.logging.log_file),
                console_output=log_data.get('console_output', config.logging.console_output),
            )

        return config

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'shell.initial_path')
            default: Default value if key not found
        """
        obj: Any = self._config
        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        The change is not persisted to disk.
        """
        parts = key.split('.')
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigError(f"Invalid configuration key: {key}")

        final_key = parts[-1]
        if hasattr(obj, final_key):
            setattr(obj, final_key, value)
        else:
            raise ConfigError(f"Invalid configuration key: {key}")

    def reset(self) -> None:
        """Drop any loaded configuration and return to the defaults."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            f.name: dict(vars(getattr(self._config, f.name)))
            for f in fields(self._config)
        }


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    return ConfigLoader().config
