"""
autostart/overrides.py

Per-user override descriptors for system autostart entries.

Disabling a system entry for one user means dropping a descriptor with
the same file name into ~/.config/autostart/ that carries Hidden=true.
The override repeats the system entry's Exec: descriptors without Exec
are discarded by the parser, so an override without it would do nothing.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import List, Optional

from xdgstart.autostart.descriptor import parse_file
from xdgstart.core.logging import get_logger
from xdgstart.core.paths import autostart_dir
from xdgstart.core.tokens import trim

logger = get_logger("overrides")

OVERRIDE_TEMPLATE = """[Desktop Entry]
Type=Application
Name={name}
Comment=Disabled by xdgstart, overrides {source}
Exec={exec_cmd}
Hidden=true
"""


def _desktop_file(name: str, base: str) -> Path:
    if not name.endswith(".desktop"):
        name = f"{name}.desktop"
    return autostart_dir(base) / name


def _find_system_descriptor(name: str, system_dirs: List[str]) -> Optional[Path]:
    for base in system_dirs:
        candidate = _desktop_file(name, base)
        if candidate.is_file():
            return candidate
    return None


def _has_hidden_key(path: Path) -> bool:
    """True if `path` carries a Hidden key, with or without an Exec."""
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            for raw in f:
                key, sep, _ = trim(raw).partition("=")
                if sep and trim(key) == "Hidden":
                    return True
    except OSError as e:
        logger.warning(f"Failed to open {path}", extra={"meta": {"error": str(e)}})
    return False


def disable_entry(name: str, system_dirs: List[str], user_dir: str) -> Path:
    """
    Write a Hidden=true override for the system entry `name`.

    Raises FileNotFoundError if no system directory has `name`.desktop
    and ValueError if that descriptor has no Exec to copy. A user file
    with the same name that is not already an override is never replaced;
    FileExistsError is raised instead.
    """
    source = _find_system_descriptor(name, system_dirs)
    if source is None:
        raise FileNotFoundError(f"No system autostart entry named {name}")

    descriptor = parse_file(source)
    if descriptor is None:
        raise ValueError(f"{source} has no Exec key to override")

    target = _desktop_file(name, user_dir)
    if target.exists() and not _has_hidden_key(target):
        raise FileExistsError(f"{target} is a user entry, not an override")

    target.parent.mkdir(parents=True, exist_ok=True)

    content = OVERRIDE_TEMPLATE.format(
        name=descriptor.stem,
        source=source,
        exec_cmd=descriptor.exec,
    )
    with target.open("w", encoding="utf-8") as f:
        f.write(content)

    # Ensure readable
    os.chmod(target, 0o644)

    logger.info(f"Autostart entry disabled: {target}")
    return target


def enable_entry(name: str, user_dir: str) -> bool:
    """
    Remove the user override for `name`.

    Only descriptors that are hidden are removed; a regular user entry
    with the same name is left alone.
    """
    target = _desktop_file(name, user_dir)
    if not target.exists():
        logger.info(f"No override for {name}")
        return False

    if not _has_hidden_key(target):
        logger.warning(f"{target} is not a disabling override, leaving it in place")
        return False

    target.unlink()
    logger.info(f"Autostart override removed: {target}")
    return True


def is_overridden(name: str, user_dir: str) -> bool:
    target = _desktop_file(name, user_dir)
    if not target.exists():
        return False
    return _has_hidden_key(target)
