"""
Error types shared across xoxo.

Bounded searches running out of depth or iterations are normal
termination and have no exception type.
"""

from __future__ import annotations

from typing import Any


class XoxoError(Exception):
    """Base class for all xoxo errors."""


class IllegalMove(XoxoError, ValueError):
    """A move was applied that is not in the state's legal set."""

    def __init__(self, action: Any, reason: str = ""):
        self.action = action
        self.reason = reason
        message = f"Illegal move {action!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CorruptData(XoxoError):
    """A statistics file exists but cannot be decoded."""


class IncompatibleFormat(CorruptData):
    """A statistics file was written by another format version or game."""
