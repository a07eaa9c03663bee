"""
autostart/executor.py

Turns the aggregated launch set into running processes.

Every command is started through the shell in its own session and is
never waited on; once spawned, the child belongs to the OS. Failures
are logged per entry and never stop the loop.
"""
from __future__ import annotations
import os
import stat
import subprocess
from dataclasses import dataclass, field
from typing import Callable, List

from xdgstart.autostart.aggregator import AutostartAggregator
from xdgstart.core.logging import get_logger
from xdgstart.core.tokens import first_token

logger = get_logger("executor")

EXEC_PERMISSIONS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class SpawnError(Exception):
    """The OS refused to create a process for a command line."""

    def __init__(self, command: str, reason: str):
        super().__init__(f"Failed to spawn '{command}': {reason}")
        self.command = command
        self.reason = reason


@dataclass
class LaunchReport:
    launched: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def spawn_detached(command: str) -> subprocess.Popen:
    """Start `command` via /bin/sh in a new session without waiting for it."""
    try:
        return subprocess.Popen(
            command,
            shell=True,
            start_new_session=True,
            stdin=subprocess.DEVNULL,
        )
    except (OSError, ValueError) as e:
        # ValueError: embedded NUL bytes from a junk descriptor
        raise SpawnError(command, str(e)) from e


def check_executable(executable: str) -> bool:
    """
    Decide whether a launch should be attempted for `executable`.

    Only a path (something with a directory part) that does not exist is
    rejected. Bare names are left to the shell's $PATH lookup. For paths
    that exist, file type and exec bits are checked and reported but the
    launch still goes ahead.
    """
    has_dir = os.path.dirname(executable) != ""
    if has_dir and not os.path.exists(executable):
        logger.error(f"{executable} does not exist, ignoring")
        return False

    if os.path.exists(executable):
        if not os.path.isfile(executable) and not os.path.islink(executable):
            logger.error(f"{executable} not a file")

        mode = os.stat(executable).st_mode
        if not mode & EXEC_PERMISSIONS:
            logger.error(f"{executable} is not executable")

    return True


def do_exec(
    aggregator: AutostartAggregator,
    spawn: Callable[[str], object] = spawn_detached,
    dry_run: bool = False,
) -> LaunchReport:
    report = LaunchReport()

    for command in aggregator.skipped():
        logger.info(f" - Skipping disabled {command}")
        report.skipped.append(command)

    for command in aggregator.resolve():
        if not check_executable(first_token(command)):
            report.skipped.append(command)
            continue

        if dry_run:
            logger.info(f" -> Would launch {command}")
            report.launched.append(command)
            continue

        logger.info(f" -> Launching {command}")
        try:
            proc = spawn(command)
        except SpawnError as e:
            logger.error(f" ! {e}", extra={"meta": {"command": command, "error": e.reason}})
            report.failed.append(command)
            continue

        pid = getattr(proc, "pid", None)
        logger.debug(f"Spawned {command}", extra={"meta": {"pid": pid}})
        report.launched.append(command)

    return report
