"""
Command line interface utilities for the volume seeder.

Flags are generated from the pydantic config model so that every config field
can be overridden on the command line, and only flags the user actually passed
take part in the config merge.
"""
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union, get_args, get_origin

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Arguments consumed by the CLI or entry point itself, never part of the config model
CLI_ONLY_ARGS = {"config", "log_level", "log_file", "env", "env_file"}


class TrackedAction(argparse.Action):
    """Custom argparse action that tracks which arguments were explicitly provided."""

    def __call__(self, parser, namespace, values, option_string=None):
        if not hasattr(namespace, '_explicitly_set'):
            namespace._explicitly_set = set()
        namespace._explicitly_set.add(self.dest)
        setattr(namespace, self.dest, values)


class TrackedStoreTrueAction(argparse._StoreTrueAction):
    """Custom store_true action that tracks when the flag was explicitly provided."""

    def __call__(self, parser, namespace, values, option_string=None):
        if not hasattr(namespace, '_explicitly_set'):
            namespace._explicitly_set = set()
        namespace._explicitly_set.add(self.dest)
        super().__call__(parser, namespace, values, option_string)


class TrackedStoreFalseAction(argparse._StoreFalseAction):
    """Custom store_false action that tracks when the flag was explicitly provided."""

    def __call__(self, parser, namespace, values, option_string=None):
        if not hasattr(namespace, '_explicitly_set'):
            namespace._explicitly_set = set()
        namespace._explicitly_set.add(self.dest)
        super().__call__(parser, namespace, values, option_string)


def _unwrap_optional(field_type: Any) -> Any:
    """Optional[X] -> X, anything else unchanged."""
    if get_origin(field_type) is Union:
        args = [arg for arg in get_args(field_type) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return field_type


def extract_cli_args_from_config(config_class: Type[BaseModel], prefix: str = "") -> Dict[str, Dict[str, Any]]:
    """Extract CLI arguments from a Pydantic config class.

    Handles bool, int, float, str and Path fields and recurses into nested
    BaseModel fields. Lists and other complex types are left to the config file.

    Args:
        config_class: Pydantic BaseModel class to extract arguments from
        prefix: Prefix for nested field names (e.g., "service" for service.working_dir)

    Returns:
        Dictionary mapping argument names to argparse argument configurations
    """
    cli_args = {}

    for field_name, field_info in config_class.model_fields.items():
        field_type = _unwrap_optional(field_info.annotation)

        if isinstance(field_type, type) and issubclass(field_type, BaseModel):
            nested_prefix = f"{prefix}.{field_name}" if prefix else field_name
            cli_args.update(extract_cli_args_from_config(field_type, nested_prefix))
            continue

        if field_type not in (bool, int, float, str, Path):
            continue

        full_field_name = f"{prefix}.{field_name}" if prefix else field_name
        flag_name = full_field_name.replace('_', '-').replace('.', '-')
        arg_name = f"--{flag_name}"
        arg_config: Dict[str, Any] = {}

        if field_type == bool:
            if field_info.default is True:
                arg_config['action'] = TrackedStoreFalseAction
                arg_name = f"--no-{flag_name}"
            else:
                arg_config['action'] = TrackedStoreTrueAction
        else:
            arg_config['type'] = str if field_type is Path else field_type
            arg_config['action'] = TrackedAction

        help_text = field_info.description or ""
        if prefix:
            section_name = prefix.replace('_', ' ').replace('.', ' ').title()
            help_text = f"[{section_name}] {help_text or field_name}"
        if field_info.default is not None and field_info.default is not ... and field_type != bool:
            help_text = f"{help_text} (default: {field_info.default})" if help_text else f"Default: {field_info.default}"
        if help_text:
            arg_config['help'] = help_text

        # Dots in dest let namespace_to_dict rebuild the nested structure
        arg_config['dest'] = full_field_name

        if field_type == int:
            arg_config['metavar'] = 'N'
        elif field_type == float:
            arg_config['metavar'] = 'VALUE'
        elif field_type is Path:
            arg_config['metavar'] = 'PATH'
        elif field_type == str:
            arg_config['metavar'] = 'TEXT'

        cli_args[arg_name] = arg_config

    return cli_args


def create_service_parser(
    service_name: str,
    description: str,
    default_config_path: Optional[str] = None,
    config_class: Optional[Type[BaseModel]] = None
) -> argparse.ArgumentParser:
    """Create a standard argument parser.

    Args:
        service_name: Name of the service (e.g., "Volume Seeder")
        description: Description of the service
        default_config_path: Default path to config file (optional)
        config_class: Pydantic config class to auto-generate arguments from

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(description=f'{service_name} - {description}')

    parser.add_argument(
        '--log-level', '-l',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        action=TrackedAction,
        help='Set the logging level (default: INFO)'
    )
    parser.add_argument(
        '--log-file',
        default=None,
        action=TrackedAction,
        help='Also write logs to this file name in the log directory'
    )

    if default_config_path:
        parser.add_argument(
            '--config', '-c',
            default=default_config_path,
            action=TrackedAction,
            help=f'Path to configuration file (default: {default_config_path})'
        )

    if config_class:
        for arg_name, arg_config in extract_cli_args_from_config(config_class).items():
            parser.add_argument(arg_name, **arg_config)

    return parser


def pop_cli_only_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Remove CLI-only options from args so they aren't validated by the config model."""
    popped = {}
    for name in CLI_ONLY_ARGS:
        if hasattr(args, name):
            popped[name] = getattr(args, name)
            delattr(args, name)
    return popped
