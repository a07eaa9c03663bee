"""
cli.py

Command line entry point for xdgstart.
Parses arguments, loads configuration, sets up logging and runs the
requested scopes or maintenance action.

Exit status:
    0  everything requested was found
    1  bad invocation (usage printed to stdout), or a requested
       autostart directory was missing
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path

from xdgstart import __version__
from xdgstart.autostart import run_autostart
from xdgstart.autostart.overrides import disable_entry, enable_entry
from xdgstart.core.config import ConfigError, apply_config_to_paths, default_config, ensure_config, load_config, tomllib
from xdgstart.core.logging import DEFAULT_LOG_FILENAME, get_logger, init_logger, read_jsonl_tail
from xdgstart.core.paths import get_app_paths, system_config_dirs, user_config_dir, autostart_dir

EXIT_USAGE = 1


class _UsageParser(argparse.ArgumentParser):
    """argparse with usage errors on stdout and exit status 1."""

    def error(self, message):
        self.print_usage(sys.stdout)
        print(f"{self.prog}: error: {message}")
        self.exit(EXIT_USAGE)


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="xdgstart",
        description="Launch XDG autostart entries.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Group: Scope
    grp_scope = parser.add_argument_group("Scope")
    scope = grp_scope.add_mutually_exclusive_group()
    scope.add_argument("--system", action="store_true", help="Scan $XDG_CONFIG_DIRS/autostart only")
    scope.add_argument("--user", action="store_true", help="Scan $XDG_CONFIG_HOME/autostart only")
    scope.add_argument("--both", action="store_true", help="Scan system and user directories")

    # Group: Runtime
    grp_run = parser.add_argument_group("Runtime")
    grp_run.add_argument("-v", "--verbose", action="store_true", help="Log every skipped line and decision")
    grp_run.add_argument("--dry-run", action="store_true", help="Show what would be launched, launch nothing")
    grp_run.add_argument("--config", metavar="PATH", help="Use this config.toml instead of the default")

    # Group: Maintenance
    grp_maint = parser.add_argument_group("Maintenance")
    grp_maint.add_argument("--show-paths", action="store_true", help="Display all resolved directories")
    grp_maint.add_argument("--tail-logs", type=int, nargs="?", const=20, metavar="N", help="Show last N log entries (default: 20)")
    grp_maint.add_argument("--disable", metavar="NAME", help="Write a user override hiding system entry NAME")
    grp_maint.add_argument("--enable", metavar="NAME", help="Remove the user override for NAME")
    grp_maint.add_argument("--init-config", action="store_true", help="Write config.toml with defaults if missing")

    return parser


# ---------------------------------------------------------
# Sub-Command Handlers
# ---------------------------------------------------------
def cmd_show_paths(paths) -> int:
    """Print all resolved directories."""
    print("\n[Resolved Paths]")
    for base in system_config_dirs():
        print(f"  System Autostart : {autostart_dir(base)}")
    print(f"  User Autostart   : {autostart_dir(user_config_dir())}")
    print(f"  Config File      : {paths.config_file}")
    print(f"  Logs Dir         : {paths.logs_dir}")
    print()
    return 0


def cmd_tail_logs(paths, n=20) -> int:
    """Print the last N lines of the JSON log."""
    logger = get_logger("cmd_tail_logs")

    log_path = paths.logs_dir / DEFAULT_LOG_FILENAME
    try:
        logs = read_jsonl_tail(log_path, max_lines=n)
    except OSError as e:
        logger.error(f"Failed to read logs: {e}")
        return 1

    if not logs:
        print("(Log file is empty or missing)")
        return 0

    for item in logs:
        ts = item.get("ts", "")
        level = item.get("level", "INFO")
        msg = item.get("msg", "")
        print(f"[{ts}] {level}: {msg}")
    return 0


def cmd_disable(name: str) -> int:
    logger = get_logger("cmd_disable")
    try:
        target = disable_entry(name, system_config_dirs(), user_config_dir())
    except (FileNotFoundError, FileExistsError, ValueError) as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"Failed to write override for {name}: {e}")
        return 1
    print(f"Disabled {name}: {target}")
    return 0


def cmd_enable(name: str) -> int:
    try:
        removed = enable_entry(name, user_config_dir())
    except OSError as e:
        get_logger("cmd_enable").error(f"Failed to remove override for {name}: {e}")
        return 1
    return 0 if removed else 1


# ---------------------------------------------------------
# Main Entry Point
# ---------------------------------------------------------
def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_USAGE

    scope_given = args.system or args.user or args.both
    action_given = (
        args.show_paths or args.init_config or args.tail_logs is not None
        or args.disable is not None or args.enable is not None
    )
    if not scope_given and not action_given:
        parser.print_usage(sys.stdout)
        return EXIT_USAGE

    paths = get_app_paths(ensure=False)
    config_path = Path(args.config).expanduser() if args.config else paths.config_file

    # -------------------------------------------------
    # Phase 1: Configuration
    # -------------------------------------------------
    if args.init_config:
        try:
            ensure_config(config_path)
        except (ConfigError, tomllib.TOMLDecodeError, OSError) as e:
            print(f"Failed to prepare {config_path}: {e}")
            return 1
        print(f"Config: {config_path}")
        if not scope_given:
            return 0

    config_error = None
    try:
        cfg = load_config(config_path)
    except (ConfigError, tomllib.TOMLDecodeError, OSError) as e:
        config_error = e
        cfg = default_config()

    paths = apply_config_to_paths(paths, cfg)
    launcher_cfg = cfg["launcher"]
    log_cfg = cfg["logging"]

    # -------------------------------------------------
    # Phase 2: Logging
    # -------------------------------------------------
    logger = init_logger(
        paths.logs_dir,
        verbose=args.verbose or launcher_cfg["verbose"],
        file_logging=log_cfg["file_logging"],
        max_bytes=log_cfg["max_bytes"],
        backup_count=log_cfg["backup_count"],
    )
    if config_error is not None:
        logger.warning(
            f"Ignoring invalid config {config_path}, using defaults",
            extra={"meta": {"error": str(config_error)}},
        )

    # -------------------------------------------------
    # Phase 3: Maintenance actions
    # -------------------------------------------------
    if args.show_paths:
        return cmd_show_paths(paths)

    if args.tail_logs is not None:
        return cmd_tail_logs(paths, args.tail_logs)

    if args.disable is not None:
        return cmd_disable(args.disable)

    if args.enable is not None:
        return cmd_enable(args.enable)

    # -------------------------------------------------
    # Phase 4: Launch
    # -------------------------------------------------
    result = run_autostart(
        system=args.system or args.both,
        user=args.user or args.both,
        dry_run=args.dry_run or launcher_cfg["dry_run"],
    )
    logger.debug(
        "Run finished",
        extra={"meta": {
            "launched": len(result.report.launched),
            "skipped": len(result.report.skipped),
            "failed": len(result.report.failed),
        }},
    )
    return result.exit_code


def run() -> None:
    """Console entry: installs the crash hook, then exits with main()'s status."""
    from xdgstart.core.logging import global_exception_hook
    sys.excepthook = global_exception_hook

    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nAborted by user.")


if __name__ == "__main__":
    run()
