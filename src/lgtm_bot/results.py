"""Typed outcomes returned by bot operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Outcome(str, Enum):
    """How a bot operation ended."""

    SUCCESS = "success"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not-found"
    TRANSPORT_ERROR = "transport-error"
    INVALID_INPUT = "invalid-input"


@dataclass(frozen=True)
class Result:
    """Outcome of a bot operation plus its value or error message."""

    outcome: Outcome
    value: Any = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def success(cls, value: Any = None) -> Result:
        return cls(Outcome.SUCCESS, value=value)

    @classmethod
    def unchanged(cls, value: Any = None) -> Result:
        return cls(Outcome.UNCHANGED, value=value)

    @classmethod
    def not_found(cls, error: str) -> Result:
        return cls(Outcome.NOT_FOUND, error=error)

    @classmethod
    def transport_error(cls, error: str) -> Result:
        return cls(Outcome.TRANSPORT_ERROR, error=error)

    @classmethod
    def invalid_input(cls, error: str) -> Result:
        return cls(Outcome.INVALID_INPUT, error=error)
