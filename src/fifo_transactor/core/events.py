# src/fifo_transactor/core/events.py

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

Listener = Callable[..., Any]

logger = logging.getLogger(__name__)


class QueueEvent(StrEnum):
    ENQUEUE = "enqueue"
    CHANGE = "change"
    TIMEOUT = "transactions-timeout"
    ABORTED = "transactions-aborted"


class DispatcherEvent(StrEnum):
    SUBMITTED = "submitted"
    CHANGE = "change"
    POLLING = "polling-transactions"
    EXECUTING = "executing-transaction"
    SUCCESS = "transaction-success"
    ERROR = "transaction-error"


class EventEmitter:
    """
    Minimal synchronous observer registry.

    Listeners run in registration order inside emit(). A listener that raises is
    logged and skipped; the remaining listeners still run.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener):
        key = str(event)
        self._listeners.setdefault(key, []).append(listener)
        return self

    def off(self, event: str, listener: Listener):
        handlers = self._listeners.get(str(event))
        if handlers and listener in handlers:
            handlers.remove(listener)
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(str(event), ()))

    def emit(self, event: str, *args: Any) -> bool:
        handlers = self._listeners.get(str(event))
        if not handlers:
            return False

        # Copy: listeners may (un)subscribe while we iterate.
        for listener in list(handlers):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %r failed", str(event))
        return True
