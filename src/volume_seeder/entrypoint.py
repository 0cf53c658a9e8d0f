"""
Container entry point: seed managed directories, then hand off to the service.

Takes no arguments of its own; everything on the command line is passed to the
downstream service untouched. Configuration comes from the environment:

    SEEDER_CONFIG       TOML config file (default /etc/volume-seeder/seeder.toml)
    SEEDER_ENV_FILE     dotenv file loaded before anything else
    SEEDER_LOG_LEVEL    logging level (default INFO)
    SEEDER_LOG_FILE     also log to this file
    SEEDER_<FIELD>      config overrides, e.g. SEEDER_DRY_RUN=1
"""
import logging
import os
import sys
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from volume_seeder.config import ConfigError, load_seeder_config
from volume_seeder.constants import (
    DEFAULT_CONFIG_PATH,
    ENV_CONFIG_PATH,
    ENV_FILE,
    ENV_LOG_FILE,
    ENV_LOG_LEVEL,
    EXIT_CONFIG_ERROR,
    EXIT_SEED_FAILURE,
)
from volume_seeder.errors import HandoffError, SeedError
from volume_seeder.handoff import build_command, hand_off
from volume_seeder.logger import setup_logging
from volume_seeder.seeder import run_seeder

logger = logging.getLogger(__name__)


def _config_path() -> Optional[str]:
    configured = os.environ.get(ENV_CONFIG_PATH)
    if configured:
        return configured
    if DEFAULT_CONFIG_PATH.exists():
        return str(DEFAULT_CONFIG_PATH)
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Seed, then exec the downstream service.

    Returns an exit code only when seeding or the handoff fails; on success
    the process is replaced and never returns.
    """
    forwarded: List[str] = list(sys.argv[1:] if argv is None else argv)

    env_file = os.environ.get(ENV_FILE)
    if env_file:
        load_dotenv(env_file, override=False)

    try:
        setup_logging(
            level=os.environ.get(ENV_LOG_LEVEL, "INFO"),
            log_filename=os.environ.get(ENV_LOG_FILE) or None,
        )
    except ValueError as e:
        print(f"Invalid {ENV_LOG_LEVEL}: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        config = load_seeder_config(config_file=_config_path())
        command = build_command(config.service.command, forwarded)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR
    except HandoffError as e:
        logger.error(str(e))
        return e.exit_code

    try:
        run_seeder(config.managed_directories(), dry_run=config.dry_run)
    except SeedError as e:
        logger.error(f"Seeding failed, not starting the service: {e}")
        return EXIT_SEED_FAILURE

    try:
        hand_off(command, config.service_working_dir)
    except HandoffError as e:
        logger.error(str(e))
        return e.exit_code


def cli_main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
