"""
Configuration loading and management for the volume seeder.
"""

import argparse
import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import toml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from volume_seeder.constants import (
    DEFAULT_APP_ROOT,
    DEFAULT_MANAGED_DIRECTORIES,
    DEFAULT_SERVICE_COMMAND,
    DEFAULT_SNAPSHOT_ROOT,
    ENV_PREFIX,
)
from volume_seeder.directories import EmptinessTest, EmptinessTestKind, ManagedDirectory, validate_subpath

# Note: Logging is configured by the CLI or entry point
logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""
    pass


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override values taking precedence.

    Args:
        base: Base dictionary
        override: Dictionary with values that override base

    Returns:
        Merged dictionary
    """
    result = deepcopy(base)

    for key, value in override.items():
        # If both values are dictionaries, recursively merge them
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            if not value and result[key]:
                logger.warning(f"Empty config section '[{key}]' is clearing defaults. "
                              f"Remove the section from config file to use defaults, "
                              f"or add configuration values to customize.")
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def namespace_to_dict(namespace: argparse.Namespace) -> Dict[str, Any]:
    """Convert an argparse.Namespace to a nested dictionary.

    This handles nested keys specified with dots (e.g., 'service.working_dir').
    Only includes values that were explicitly set (not defaults).

    Args:
        namespace: Argparse namespace object

    Returns:
        Nested dictionary representation
    """
    result = {}

    # Set by the tracked argparse actions in volume_seeder.cli
    explicitly_set = getattr(namespace, '_explicitly_set', set())

    for key, value in vars(namespace).items():
        if value is None:
            continue
        if key not in explicitly_set:
            continue

        if '.' in key:
            parts = key.split('.')
            current = result
            for part in parts[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            result[key] = value

    return result


def load_config_with_overrides(
    override_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
    default_config: Optional[Dict[str, Any]] = None,
    args: Optional[argparse.Namespace] = None
) -> Dict[str, Any]:
    """Load configuration with flexible overrides and defaults.

    The priority order is:
    1. Command line args (from args parameter, highest priority)
    2. Provided override_config dictionary
    3. Config loaded from config_file
    4. Default config (lowest priority)

    Raises:
        ConfigError: If the config file exists but cannot be parsed
    """
    config = {} if default_config is None else deepcopy(default_config)

    if config_file is not None:
        config_path = Path(config_file)
        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    file_config = toml.load(f)
            except (OSError, toml.TomlDecodeError) as e:
                raise ConfigError(f"Error loading config from {config_file}: {e}") from e
            config = deep_merge(config, file_config)
            logger.info(f"Loaded configuration from {config_path}")
            logger.debug(config)
        else:
            logger.warning(f"Config file not found: {config_file}")

    if override_config is not None:
        config = deep_merge(config, override_config)

    if args is not None:
        config = deep_merge(config, namespace_to_dict(args))

    return config


T = TypeVar('T', bound='BaseConfig')
class BaseConfig(BaseModel):
    """Base configuration model with loading methods."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
        str_strip_whitespace=True
    )

    @classmethod
    def _extract_env_overrides(cls, env_prefix: Optional[str] = None) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables.

        Examples:
            SEEDER_DRY_RUN="1" → {"dry_run": True}
            SEEDER_SERVICE_WORKING_DIR="/srv" → {"service": {"working_dir": "/srv"}}
        """
        overrides = {}

        if not env_prefix:
            return overrides

        model_fields = getattr(cls, 'model_fields', {})

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(env_prefix + '_'):
                continue

            config_key = env_key[len(env_prefix) + 1:].lower()

            # Skip env vars that share the prefix but aren't config (log level, config path)
            if not cls._looks_like_config_override(config_key, model_fields):
                continue

            converted_value = cls._convert_env_value(env_value)
            mapped_override = cls._map_env_key_to_config(config_key, converted_value, model_fields)
            if mapped_override:
                overrides = deep_merge(overrides, mapped_override)

        return overrides

    @classmethod
    def _looks_like_config_override(cls, env_key: str, model_fields: Dict) -> bool:
        """Check if an environment variable looks like it's intended as a config override."""
        from volume_seeder.cli import CLI_ONLY_ARGS

        if env_key in CLI_ONLY_ARGS:
            return False

        if env_key in model_fields:
            return True

        key_parts = env_key.split('_')
        if len(key_parts) >= 2:
            section_name = key_parts[0]
            for field_name, field_info in model_fields.items():
                field_type = getattr(field_info, 'annotation', None)

                if field_name == section_name:
                    return True

                if field_type and hasattr(field_type, 'model_fields'):
                    nested_key = '_'.join(key_parts[1:])
                    if nested_key in field_type.model_fields:
                        return True

        return False

    @classmethod
    def _map_env_key_to_config(cls, env_key: str, value: Any, model_fields: Dict) -> Optional[Dict[str, Any]]:
        """Map an environment variable key to the config structure."""
        if env_key in model_fields:
            return {env_key: value}

        for field_name, field_info in model_fields.items():
            field_type = getattr(field_info, 'annotation', None)

            if field_type and hasattr(field_type, 'model_fields'):
                nested_fields = field_type.model_fields
                if env_key.startswith(field_name + '_'):
                    nested_key = env_key[len(field_name) + 1:]
                    if nested_key in nested_fields:
                        return {field_name: {nested_key: value}}

        logger.debug(f"Unrecognized environment variable for config: {env_key}")
        return None

    @staticmethod
    def _convert_env_value(value: str) -> Any:
        """Convert environment variable string to appropriate Python type."""
        if value.lower() in ('true', 'yes', '1', 'on'):
            return True
        elif value.lower() in ('false', 'no', '0', 'off'):
            return False

        try:
            if '.' not in value:
                return int(value)
            return float(value)
        except ValueError:
            pass

        # Lists and tables, e.g. SEEDER_SERVICE_COMMAND='["python", "main.py"]'
        if value.startswith(('[', '{')):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    @classmethod
    def from_overrides(cls: Type[T],
                     override_config: Optional[Dict[str, Any]] = None,
                     config_file: Optional[Union[str, Path]] = None,
                     default_config: Optional[Dict[str, Any]] = None,
                     args: Optional[argparse.Namespace] = None,
                     env_prefix: Optional[str] = None) -> T:
        """Create a Config instance from multiple sources with flexible overrides.

        The priority order for configuration is:
        1. Command line args (from args parameter, highest priority)
        2. Provided override_config dictionary
        3. Environment variables (with env_prefix)
        4. Config loaded from config_file
        5. Default config (lowest priority)

        Raises:
            ConfigError: If the merged configuration doesn't match the model
        """
        env_overrides = cls._extract_env_overrides(env_prefix)

        if env_overrides:
            if override_config:
                merged_overrides = deep_merge(env_overrides, override_config)
            else:
                merged_overrides = env_overrides
        else:
            merged_overrides = override_config

        merged_config = load_config_with_overrides(
            override_config=merged_overrides,
            config_file=config_file,
            default_config=default_config,
            args=args
        )

        try:
            config_instance = cls(**merged_config)
        except ValidationError as e:
            logger.error(f"Configuration validation error: {e.errors()}")
            raise ConfigError(f"Invalid configuration: {e}") from e
        return config_instance

    def __str__(self) -> str:
        return f"{self.__class__.__name__}:\n{self.model_dump_json(indent=2)}"


# =============================================================================
# SEEDER CONFIGURATION
# =============================================================================

class ManagedDirectoryConfig(BaseModel):
    """One managed directory as written in the config file."""

    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    name: str = Field(description="Name used in logs and errors")
    live_path: Path = Field(description="Mounted, mutable directory")
    default_snapshot_path: Path = Field(description="Read-only snapshot baked into the image")
    emptiness_test: EmptinessTestKind = Field(
        default=EmptinessTestKind.IS_EMPTY,
        description="How to decide the directory is unseeded"
    )
    subpath: Optional[str] = Field(
        default=None,
        description="Subpath checked by the path_missing test"
    )

    @field_validator('subpath')
    @classmethod
    def _check_subpath(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            validate_subpath(value)
        return value

    @model_validator(mode='after')
    def _check_paths(self) -> 'ManagedDirectoryConfig':
        if self.emptiness_test is EmptinessTestKind.PATH_MISSING and not self.subpath:
            raise ValueError(f"directory '{self.name}': path_missing requires a subpath")
        if self.emptiness_test is EmptinessTestKind.IS_EMPTY and self.subpath is not None:
            raise ValueError(f"directory '{self.name}': is_empty does not take a subpath")

        live = self.live_path.resolve()
        snapshot = self.default_snapshot_path.resolve()
        if live == snapshot or live in snapshot.parents or snapshot in live.parents:
            raise ValueError(
                f"directory '{self.name}': snapshot {snapshot} must live outside {live}"
            )
        return self

    def to_managed_directory(self) -> ManagedDirectory:
        return ManagedDirectory(
            name=self.name,
            live_path=self.live_path,
            default_snapshot_path=self.default_snapshot_path,
            emptiness_test=EmptinessTest(self.emptiness_test, self.subpath),
        )


class ServiceConfig(BaseModel):
    """Downstream service started after seeding."""

    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    command: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SERVICE_COMMAND),
        description="Command line of the downstream service; forwarded arguments are appended"
    )
    working_dir: Optional[Path] = Field(
        default=None,
        description="Directory to run the downstream service from (defaults to app_root)"
    )


class SeederConfig(BaseConfig):
    """Configuration for the seeder and its handoff."""

    app_root: Path = Field(
        default=DEFAULT_APP_ROOT,
        description="Root of the downstream application holding the live directories"
    )
    snapshot_root: Path = Field(
        default=DEFAULT_SNAPSHOT_ROOT,
        description="Root holding the baked-in default snapshots"
    )
    dry_run: bool = Field(
        default=False,
        description="Only report seeding decisions, write nothing"
    )
    directories: Optional[List[ManagedDirectoryConfig]] = Field(
        default=None,
        description="Explicit managed directories; defaults to the standard table under app_root"
    )
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    @model_validator(mode='after')
    def _check_unique_names(self) -> 'SeederConfig':
        names = [d.name for d in self.directory_configs()]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate managed directory names: {duplicates}")
        return self

    def directory_configs(self) -> List[ManagedDirectoryConfig]:
        if self.directories is not None:
            return self.directories
        return [
            ManagedDirectoryConfig(
                name=name,
                live_path=self.app_root / name,
                default_snapshot_path=self.snapshot_root / name,
                emptiness_test=test,
                subpath=subpath,
            )
            for name, test, subpath in DEFAULT_MANAGED_DIRECTORIES
        ]

    def managed_directories(self) -> List[ManagedDirectory]:
        return [d.to_managed_directory() for d in self.directory_configs()]

    @property
    def service_working_dir(self) -> Path:
        return self.service.working_dir or self.app_root


def load_seeder_config(
    config_file: Optional[Union[str, Path]] = None,
    args: Optional[argparse.Namespace] = None,
    override_config: Optional[Dict[str, Any]] = None,
) -> SeederConfig:
    """Load the seeder config from file, SEEDER_* environment variables and CLI args."""
    return SeederConfig.from_overrides(
        override_config=override_config,
        config_file=config_file,
        args=args,
        env_prefix=ENV_PREFIX,
    )
