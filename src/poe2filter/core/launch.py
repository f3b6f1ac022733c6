"""
Command chaining after a sync.

``poe2filter neversink-lite -- %command%`` in Steam launch options updates
the filter, then replaces itself with the game. This module only does the
replacing; the sync pipeline never imports it.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence

from poe2filter.core.exceptions import LaunchError

logger = logging.getLogger(__name__)


def resolve_command(argv: Sequence[str]) -> str:
    """
    Resolve the program of a command line to an executable path.

    Programs given with a directory component are used as-is; bare names
    are looked up on PATH.

    Args:
        argv: Command and arguments

    Returns:
        Path to the executable

    Raises:
        LaunchError: If argv is empty or the program cannot be found
    """
    if not argv:
        raise LaunchError("No command to execute")

    program = argv[0]
    if os.sep in program or (os.altsep and os.altsep in program):
        if not os.access(program, os.X_OK):
            raise LaunchError(f"Command '{program}' is not executable", command=program)
        return program

    resolved = shutil.which(program)
    if resolved is None:
        raise LaunchError(f"Command '{program}' not found in PATH", command=program)
    return resolved


def exec_command(argv: Sequence[str]) -> None:
    """
    Replace the current process with ``argv``.

    Does not return on success.

    Raises:
        LaunchError: If the command cannot be resolved or exec fails
    """
    binary_path = resolve_command(argv)
    args = list(argv)
    logger.info(f"Starting {binary_path} {args}")
    try:
        os.execv(binary_path, args)
    except OSError as e:
        raise LaunchError(f"Failed to execute '{argv[0]}': {e}", command=binary_path) from e
