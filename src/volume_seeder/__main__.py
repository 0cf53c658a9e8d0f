"""
Operator CLI for the volume seeder.

Seeds (or, with --dry-run, only reports on) the managed directories without
starting the downstream service:
    python -m volume_seeder [--log-level DEBUG] [--config path/to/seeder.toml] [--dry-run]
"""
import logging
import sys
from typing import Optional, Sequence

from volume_seeder.cli import create_service_parser, pop_cli_only_args
from volume_seeder.config import ConfigError, SeederConfig, load_seeder_config
from volume_seeder.constants import DEFAULT_CONFIG_PATH, EXIT_CONFIG_ERROR, EXIT_OK, EXIT_SEED_FAILURE
from volume_seeder.errors import SeedError
from volume_seeder.logger import setup_logging
from volume_seeder.seeder import run_seeder

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = create_service_parser(
        service_name="Volume Seeder",
        description="Populate persistent volumes from baked-in defaults",
        default_config_path=str(DEFAULT_CONFIG_PATH),
        config_class=SeederConfig,
    )
    args = parser.parse_args(argv)
    cli_only = pop_cli_only_args(args)

    setup_logging(level=cli_only["log_level"], log_filename=cli_only.get("log_file"))

    try:
        config = load_seeder_config(config_file=cli_only.get("config"), args=args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    logger.debug(str(config))

    try:
        report = run_seeder(config.managed_directories(), dry_run=config.dry_run)
    except SeedError as e:
        logger.error(str(e))
        return EXIT_SEED_FAILURE

    for result in report.results:
        print(f"{result.name}: {result.outcome.value}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
