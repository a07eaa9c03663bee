# __init__.py AUTOSTART
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Optional

from xdgstart.autostart.aggregator import AutostartAggregator
from xdgstart.autostart.executor import LaunchReport, do_exec, spawn_detached
from xdgstart.core.logging import LogContext, get_logger
from xdgstart.core.paths import autostart_dir, system_config_dirs, user_config_dir

logger = get_logger("autostart")


@dataclass
class RunResult:
    user_missing: bool = False
    system_missing: bool = False
    report: LaunchReport = field(default_factory=LaunchReport)

    @property
    def exit_code(self) -> int:
        return int(self.user_missing) | int(self.system_missing)


def scan_system(aggregator: AutostartAggregator) -> bool:
    """Handle every existing system autostart dir. Returns True if at least one existed."""
    candidates = system_config_dirs()
    found = False
    for base in candidates:
        path = autostart_dir(base)
        if not path.is_dir():
            continue
        with LogContext(scope="system", directory=str(path)):
            aggregator.handle_dir(path)
        found = True

    if not found:
        logger.error(" ! Failed to find system directories", extra={"meta": {"tried": candidates}})
        logger.debug("Tried: " + ", ".join(candidates))
    else:
        logger.debug("Handled system dirs")
    return found


def scan_user(aggregator: AutostartAggregator) -> bool:
    """Handle the user autostart dir. Returns False if it does not exist."""
    path = autostart_dir(user_config_dir())
    if not path.is_dir():
        logger.error(f" ! User directory {path} does not exist")
        return False

    with LogContext(scope="user", directory=str(path)):
        aggregator.handle_dir(path)
    return True


def run_autostart(
    system: bool,
    user: bool,
    dry_run: bool = False,
    spawn: Callable[[str], object] = spawn_detached,
    aggregator: Optional[AutostartAggregator] = None,
) -> RunResult:
    """
    Scan the requested scopes into one aggregator, then launch once.
    """
    aggregator = aggregator if aggregator is not None else AutostartAggregator()
    result = RunResult()

    if system:
        result.system_missing = not scan_system(aggregator)

    if user:
        result.user_missing = not scan_user(aggregator)

    result.report = do_exec(aggregator, spawn=spawn, dry_run=dry_run)
    return result
