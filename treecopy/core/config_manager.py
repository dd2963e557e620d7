# treecopy/core/config_manager.py

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional

import yaml
from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

from treecopy import __version__
from .exceptions import ConfigError
from .interfaces.types import ConflictPolicy

logger = logging.getLogger(__name__)


class TransferConfig(BaseModel):
    """Configuration settings for treecopy using Pydantic for validation"""

    # Configuration sections for organized YAML output
    CONFIG_SECTIONS: ClassVar[Dict[str, List[str]]] = {
        "# Transfer behaviour - What happens when a destination entry exists": [
            "version", "default_policy", "max_depth"
        ],
        "# Data handling": [
            "preserve_metadata", "verify_transfers"
        ],
        "# Progress reporting": [
            "progress_byte_interval"
        ],
        "# Logging settings": [
            "log_level", "log_file_rotation", "log_file_max_size"
        ],
    }

    version: str = __version__

    # Transfer behaviour
    default_policy: ConflictPolicy = ConflictPolicy.ABORT
    max_depth: Optional[int] = None  # None copies the whole tree

    # Data handling
    preserve_metadata: bool = False
    verify_transfers: bool = False

    # Progress reporting
    progress_byte_interval: int = 0  # 0 reports after every chunk

    # Logging settings
    log_level: str = "INFO"
    log_file_rotation: int = 5  # Number of log files to keep
    log_file_max_size: int = 10  # MB

    @field_validator('default_policy', mode='before')
    def validate_default_policy(cls, v):
        """Accept policy names in any case"""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('max_depth')
    def validate_max_depth(cls, v):
        """Negative depths mean no limit"""
        if v is not None and v < 0:
            return None
        return v

    @field_validator('progress_byte_interval')
    def validate_progress_byte_interval(cls, v):
        """Ensure the interval is not negative"""
        return max(0, v)

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v = v.upper()
        if v not in valid_levels:
            return 'INFO'
        return v

    @field_validator('log_file_rotation', 'log_file_max_size')
    def validate_log_file_limits(cls, v):
        """At least one backup file and one megabyte"""
        return max(1, v)

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary for YAML saving."""
        return self.model_dump(mode='json')

    def save_to_yaml_with_sections(self, file_handle):
        """
        Save configuration to YAML file with organized sections.

        Args:
            file_handle: Open file handle to write to
        """
        config_dict = self.to_dict()

        for section_comment, field_names in self.CONFIG_SECTIONS.items():
            file_handle.write(f"\n{section_comment}\n")
            section_dict = {k: config_dict[k] for k in field_names if k in config_dict}
            yaml.dump(section_dict, file_handle, default_flow_style=False, sort_keys=False)

    def get(self, key, default=None):
        return getattr(self, key, default)


class ConfigManager:
    """Loads, migrates and saves the treecopy configuration file"""

    @staticmethod
    def get_appdata_dir() -> Path:
        """
        Get the platform-appropriate appdata/config directory for treecopy.

        Returns:
            Path: The directory path for storing user data (config, logs)
        """
        if sys.platform == "win32":
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
            return base / "treecopy"
        elif sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "treecopy"
        else:
            return Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / "treecopy"

    DEFAULT_CONFIG_PATHS = [
        get_appdata_dir.__func__() / "config.yml",
    ]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self.config: Optional[TransferConfig] = None

    def load_config(self) -> TransferConfig:
        """
        Load configuration from file or create default.

        An unreadable or invalid file is logged and replaced by defaults in
        memory; the file itself is left untouched.

        Returns:
            TransferConfig: Validated configuration object
        """
        config_file = self._find_config_file()
        try:
            if config_file.exists():
                with open(config_file, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
                if not isinstance(config_data, dict):
                    raise ConfigError(f"Configuration root must be a mapping in {config_file}",
                                      invalid_value=type(config_data).__name__,
                                      expected_type="mapping")

                file_version = config_data.get("version")
                if file_version != __version__:
                    self._backup_config(config_file)
                    logger.warning(f"Config version mismatch: file has {file_version}, "
                                   f"program is {__version__}. Migrating config.")
                    config_data = self._migrate_config(config_data)
                    self.save_config(TransferConfig.model_validate(config_data))

                self.config = TransferConfig.model_validate(config_data)
                logger.info(f"Loaded configuration from {config_file}")

                missing_fields = set(TransferConfig.model_fields.keys()) - set(config_data.keys())
                if missing_fields:
                    logger.info(f"Adding missing config fields to {config_file}: {missing_fields}")
                    self.save_config()
            else:
                self.config = TransferConfig()
                self._save_default_config(config_file)
        except (OSError, yaml.YAMLError, PydanticValidationError, ConfigError) as e:
            logger.error(f"Error loading config: {e}")
            self.config = TransferConfig()
        return self.config

    def _backup_config(self, config_file: Path):
        """Backup the existing config file before migration."""
        backup_path = config_file.with_suffix(config_file.suffix + ".bak")
        try:
            shutil.copy2(config_file, backup_path)
            logger.info(f"Backed up config to {backup_path}")
        except OSError as e:
            logger.error(f"Failed to backup config: {e}")

    def _migrate_config(self, config_data: dict) -> dict:
        """
        Migrate an old config dict to the current version.

        Unknown fields are dropped, missing ones get defaults, and user values
        are kept unless they fail validation.
        """
        defaults = TransferConfig()
        migrated = {}
        for key in TransferConfig.model_fields.keys():
            if key in config_data:
                try:
                    migrated[key] = getattr(TransferConfig(**{key: config_data[key]}), key)
                except PydanticValidationError:
                    logger.warning(f"Dropping invalid value for '{key}': {config_data[key]!r}")
                    migrated[key] = getattr(defaults, key)
            else:
                migrated[key] = getattr(defaults, key)
        migrated["version"] = __version__
        return TransferConfig.model_validate(migrated).to_dict()

    def _find_config_file(self) -> Path:
        if self.config_path:
            return self.config_path
        for path in self.DEFAULT_CONFIG_PATHS:
            if path.exists():
                return path
        return self.DEFAULT_CONFIG_PATHS[0]

    def _save_default_config(self, config_file: Path):
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w') as f:
                self.config.save_to_yaml_with_sections(f)
            logger.info(f"Created default configuration at {config_file}")
        except OSError as e:
            logger.error(f"Failed to save default config: {e}")

    def save_config(self, config: Optional[TransferConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, uses self.config if None

        Returns:
            bool: True if the file was written
        """
        if config is not None:
            self.config = config

        if self.config is None:
            logger.error("No configuration to save")
            return False

        config_file = self._find_config_file()
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w') as f:
                self.config.save_to_yaml_with_sections(f)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False

    def update_config(self, updates: Dict[str, Any]) -> TransferConfig:
        """
        Update configuration with new values and save it.

        Args:
            updates: Dictionary of key-value pairs to update

        Returns:
            TransferConfig: Updated configuration

        Raises:
            ConfigError: If an updated value does not validate
        """
        if self.config is None:
            self.config = TransferConfig()

        config_dict = self.config.model_dump()
        config_dict.update(updates)
        try:
            self.config = TransferConfig.model_validate(config_dict)
        except PydanticValidationError as e:
            key = next(iter(updates), None) if len(updates) == 1 else None
            raise ConfigError(f"Invalid configuration update: {e}", config_key=key,
                              invalid_value=updates.get(key) if key else None) from e

        self.save_config()
        return self.config
