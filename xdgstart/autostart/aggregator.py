"""
autostart/aggregator.py

Run-wide state shared by every scanned autostart directory.

Two sets are filled while descriptors are read:
- to_launch: full command lines of enabled entries
- disabled:  executable tokens and file stems of hidden entries

They are only combined in resolve(), after every directory of every
scope has been handled, so a descriptor read late can still veto a
launch scheduled by one read earlier.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import List, Optional, Set, Union

from xdgstart.autostart.descriptor import Descriptor, parse_file
from xdgstart.core.logging import get_logger
from xdgstart.core.tokens import first_token

logger = get_logger("aggregator")


class AutostartAggregator:
    def __init__(self):
        self.to_launch: Set[str] = set()
        self.disabled: Set[str] = set()

    # -------------------------------------------------
    # Mutators
    # -------------------------------------------------
    def record_launch(self, command: str) -> None:
        self.to_launch.add(command)

    def record_disabled(self, token: str, stem: str) -> None:
        self.disabled.add(token)
        self.disabled.add(stem)

    def add(self, descriptor: Descriptor) -> None:
        if descriptor.hidden:
            logger.info(f"{descriptor.path} disabled", extra={"meta": {"reasons": descriptor.reasons}})
            self.record_disabled(descriptor.executable, descriptor.stem)
        else:
            self.record_launch(descriptor.exec)

    # -------------------------------------------------
    # Traversal
    # -------------------------------------------------
    def parse_file(self, path: Union[str, Path]) -> Optional[Descriptor]:
        descriptor = parse_file(path)
        if descriptor is not None:
            self.add(descriptor)
        return descriptor

    def handle_dir(self, directory: Union[str, Path]) -> int:
        """
        Parse every entry of `directory` (not recursive, any extension).

        Returns the number of entries visited.
        """
        directory = Path(directory)
        try:
            names = sorted(os.listdir(directory))
        except OSError as e:
            logger.error(f"Failed to list {directory}", extra={"meta": {"error": str(e)}})
            return 0

        for name in names:
            self.parse_file(directory / name)

        logger.debug(f"Handled {len(names)} entries in {directory}")
        return len(names)

    # -------------------------------------------------
    # Result
    # -------------------------------------------------
    def is_disabled(self, command: str) -> bool:
        return first_token(command) in self.disabled

    def resolve(self) -> List[str]:
        """Commands that survive the disabled set, sorted."""
        return sorted(c for c in self.to_launch if not self.is_disabled(c))

    def skipped(self) -> List[str]:
        return sorted(c for c in self.to_launch if self.is_disabled(c))
