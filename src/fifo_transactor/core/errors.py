# src/fifo_transactor/core/errors.py

"""
Errors synthesized by the queue/dispatcher itself.

Payload failures are never wrapped: whatever `execute()` raises is passed to the
caller and to listeners unchanged.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    FORBIDDEN = "forbidden"
    TIMEOUT = "timeout"
    ABORTED = "aborted"


_DESCRIPTIONS: dict[ErrorKind, str] = {
    ErrorKind.FORBIDDEN: "transaction is not allowed at this time",
    ErrorKind.TIMEOUT: "transaction timeout",
    ErrorKind.ABORTED: "transaction aborted",
}


class TransactionError(Exception):
    """Structured `{kind, description}` failure of a queued (or refused) transaction."""

    def __init__(self, kind: ErrorKind, description: str | None = None) -> None:
        self.kind = ErrorKind(kind)
        self.description = description or _DESCRIPTIONS[self.kind]
        super().__init__(f"{self.kind.value}: {self.description}")

    @classmethod
    def forbidden(cls) -> TransactionError:
        return cls(ErrorKind.FORBIDDEN)

    @classmethod
    def timeout(cls) -> TransactionError:
        return cls(ErrorKind.TIMEOUT)

    @classmethod
    def aborted(cls) -> TransactionError:
        return cls(ErrorKind.ABORTED)

    def to_json(self) -> dict[str, Any]:
        return {"error": self.kind.value, "error_description": self.description}

    def __repr__(self) -> str:
        return f"TransactionError(kind={self.kind.value!r}, description={self.description!r})"
