"""
autostart/descriptor.py

Reader for XDG autostart descriptors (*.desktop key=value files).

Only the keys that decide whether an entry launches are interpreted:

    Exec                        command line (last occurrence wins)
    Hidden                      entry deleted by the user, any value
    OnlyShowIn                  desktop allowlist, not evaluated
    X-KDE-autostart-condition   runtime condition, not evaluated
    TryExec                     binary to look for, not checked

Any of the last four marks the descriptor hidden. Everything else is
ignored, including localisation, icons and group names.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from xdgstart.core.logging import get_logger
from xdgstart.core.tokens import first_token, trim

logger = get_logger("descriptor")

EXEC_KEY = "Exec"
SUPPRESS_KEYS = ("Hidden", "OnlyShowIn", "X-KDE-autostart-condition", "TryExec")


@dataclass
class Descriptor:
    path: Path
    exec: str
    hidden: bool = False
    # Keys that caused hidden=True, in file order
    reasons: List[str] = field(default_factory=list)

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def executable(self) -> str:
        return first_token(self.exec)


def parse_lines(lines, path: Path) -> Optional[Descriptor]:
    """Build a Descriptor from an iterable of raw lines, or None if there is no Exec."""
    exec_value = ""
    hidden = False
    reasons: List[str] = []

    for raw in lines:
        line = trim(raw)
        if not line:
            continue

        if line.startswith("#"):
            logger.debug(f"Skipping comment '{line}' in {path}")
            continue
        if line.startswith("["):
            logger.debug(f"Skipping group '{line}' in {path}")
            continue

        name, sep, value = line.partition("=")
        if not sep:
            logger.error(f"Invalid line '{line}' in {path}")
            continue

        name = trim(name)
        value = trim(value)
        if not name or not value:
            logger.error(f"Invalid line '{line}' in {path}")
            continue

        if name == EXEC_KEY:
            exec_value = value
        elif name in SUPPRESS_KEYS:
            if name != "Hidden":
                logger.debug(f"Ignoring {path} because of {name}: {line}")
            hidden = True
            reasons.append(name)

    if not exec_value:
        logger.error(f"Unable to find Exec in {path}")
        return None

    return Descriptor(path=path, exec=exec_value, hidden=hidden, reasons=reasons)


def parse_file(path: Union[str, Path]) -> Optional[Descriptor]:
    """
    Parse one descriptor file.

    Returns None when the file cannot be read or has no Exec key; both
    cases are logged and are not errors for the caller.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            return parse_lines(f, path)
    except OSError as e:
        logger.warning(f"Failed to open {path}", extra={"meta": {"error": str(e)}})
        return None
