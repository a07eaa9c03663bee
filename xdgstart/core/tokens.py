"""
core/tokens.py

Small string helpers shared by the descriptor parser and the executor.
"""
from __future__ import annotations
from typing import List


def trim(value: str) -> str:
    return value.strip()


def split(value: str, delimiter: str = " ") -> List[str]:
    """
    Split on `delimiter`, trimming every part and dropping empty ones.

    If the delimiter does not occur, or nothing but empty parts remain,
    the input is returned as the only element so callers can always
    index [0].
    """
    if delimiter not in value:
        return [value]

    parts = [trim(p) for p in value.split(delimiter)]
    parts = [p for p in parts if p]
    return parts or [value]


def first_token(command: str) -> str:
    """The executable part of a command line."""
    return split(command)[0]
