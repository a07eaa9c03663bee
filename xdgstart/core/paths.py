"""
core/paths.py

Directory resolution for xdgstart.

Two concerns live here:
- The XDG config directories that hold autostart descriptors
  (system_config_dirs / user_config_dir).
- The launcher's own config and log directories (get_app_paths).

Nothing here raises for a missing directory; callers decide what a
missing directory means.
"""
from __future__ import annotations
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Dict, List, Optional


DEFAULT_SYSTEM_CONFIG_DIR = "/etc/xdg"
AUTOSTART_SUBDIR = "autostart"

_APP_NAME = "xdgstart"


@dataclass
class AppPaths:
    app_name: str
    home: Path
    config_dir: Path
    logs_dir: Path

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.toml"

    def as_dict(self) -> Dict[str, str]:
        return {k: str(v) for k, v in self.__dict__.items() if isinstance(v, Path) or isinstance(v, str)}


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def expand_path(raw: str) -> str:
    """Expand ~ and environment variables."""
    return os.path.expandvars(os.path.expanduser(raw))


def _is_dir(path: str) -> bool:
    return os.path.exists(path) and os.path.isdir(path)


def _first_existing_dir(candidates: List[str]) -> Optional[str]:
    for candidate in candidates:
        if candidate and _is_dir(candidate):
            return candidate
    return None


def _same_dir(a: str, b: str) -> bool:
    return a.rstrip("/") == b.rstrip("/")


def _expand_env_override(var: str) -> Optional[Path]:
    v = os.environ.get(var)
    if not v:
        return None
    return Path(v).expanduser().resolve()


# ---------------------------------------------------------
# XDG config directories
# ---------------------------------------------------------
def system_config_dirs() -> List[str]:
    """
    Resolve the system config roots from $XDG_CONFIG_DIRS.

    A colon-separated value contributes only its first existing directory.
    A single value is taken as-is. /etc/xdg is always appended last.
    """
    raw = os.environ.get("XDG_CONFIG_DIRS")
    if not raw:
        return [DEFAULT_SYSTEM_CONFIG_DIR]

    dirs: List[str] = []
    if ":" in raw:
        found = _first_existing_dir(raw.split(":"))
        if found:
            dirs.append(found)
    else:
        dirs.append(raw)

    if not dirs:
        return [DEFAULT_SYSTEM_CONFIG_DIR]

    if not any(_same_dir(d, DEFAULT_SYSTEM_CONFIG_DIR) for d in dirs):
        dirs.append(DEFAULT_SYSTEM_CONFIG_DIR)

    return dirs


def user_config_dir() -> str:
    """
    Resolve the user config root.

    Order: $XDG_CONFIG_HOME (first existing entry if colon-separated),
    then $HOME/.config, then ~/.config.
    """
    raw = os.environ.get("XDG_CONFIG_HOME")
    if raw:
        if ":" in raw:
            found = _first_existing_dir([expand_path(p) for p in raw.split(":")])
            if found:
                return found
        else:
            candidate = expand_path(raw)
            if os.path.exists(candidate):
                return candidate

    home = os.environ.get("HOME")
    if home:
        candidate = expand_path(os.path.join(home, ".config"))
        if os.path.exists(candidate):
            return candidate

    return expand_path("~/.config")


def autostart_dir(base: str) -> Path:
    return Path(base) / AUTOSTART_SUBDIR


# ---------------------------------------------------------
# Launcher paths
# ---------------------------------------------------------
def get_app_paths(app_name: str = _APP_NAME, *, ensure: bool = False) -> AppPaths:
    """
    Resolve where xdgstart keeps its own config and logs.

    XDGSTART_CONFIG_DIR / XDGSTART_LOGS_DIR override the XDG defaults.
    """
    home = Path.home()

    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
    xdg_state = Path(os.environ.get("XDG_STATE_HOME") or home / ".local" / "state")

    # XDG_CONFIG_HOME may be a colon list here too; only the first entry is used
    if ":" in str(xdg_config):
        xdg_config = Path(str(xdg_config).split(":")[0] or home / ".config")

    config_dir = _expand_env_override("XDGSTART_CONFIG_DIR") or (xdg_config / app_name)
    logs_dir = _expand_env_override("XDGSTART_LOGS_DIR") or (xdg_state / app_name / "logs")

    config_dir = Path(config_dir).expanduser().resolve()
    logs_dir = Path(logs_dir).expanduser().resolve()

    if ensure:
        for p in (config_dir, logs_dir):
            p.mkdir(parents=True, exist_ok=True)

    return AppPaths(
        app_name=app_name,
        home=home,
        config_dir=config_dir,
        logs_dir=logs_dir,
    )


if __name__ == "__main__":
    p = get_app_paths(ensure=False)
    print("System config dirs:", system_config_dirs())
    print("User config dir:", user_config_dir())
    for k, v in p.as_dict().items():
        print(f"{k}: {v}")
