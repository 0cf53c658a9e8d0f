"""
Handoff to the downstream service.

The seeder replaces its own process image with the downstream service, so
the service's exit status becomes the container's exit status unchanged and
signals from the container runtime reach it directly. There is no retry here;
restarts belong to the process supervisor.
"""
import logging
import os
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from volume_seeder.constants import EXIT_CONFIG_ERROR, EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND
from volume_seeder.errors import HandoffError

logger = logging.getLogger(__name__)


def build_command(base_command: Sequence[str], forwarded_args: Sequence[str]) -> List[str]:
    """Append forwarded arguments, uninterpreted, to the configured command.

    With no configured command the forwarded arguments are the whole command.

    Raises:
        HandoffError: if the result is empty
    """
    command = list(base_command) + list(forwarded_args)
    if not command:
        raise HandoffError("No downstream command configured and no arguments given", EXIT_CONFIG_ERROR)
    return command


def hand_off(command: Sequence[str], working_dir: Optional[Path] = None) -> NoReturn:
    """Replace the current process with the downstream service.

    Only returns by raising, when the command cannot be started.

    Raises:
        HandoffError: working directory or executable missing, or not executable
    """
    if working_dir is not None:
        try:
            os.chdir(working_dir)
        except OSError as e:
            raise HandoffError(f"Cannot enter working directory {working_dir}: {e}", EXIT_CONFIG_ERROR) from e

    logger.info(f"Handing off to: {' '.join(command)}")
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        os.execvp(command[0], list(command))
    except FileNotFoundError as e:
        raise HandoffError(f"Downstream command not found: {command[0]}", EXIT_NOT_FOUND) from e
    except PermissionError as e:
        raise HandoffError(f"Downstream command not executable: {command[0]}", EXIT_NOT_EXECUTABLE) from e
    except OSError as e:
        raise HandoffError(f"Failed to start {command[0]}: {e}", EXIT_NOT_EXECUTABLE) from e
    # execvp only returns when mocked out
    raise HandoffError(f"Handoff to {command[0]} returned unexpectedly", EXIT_NOT_EXECUTABLE)
