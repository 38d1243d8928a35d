# src/fifo_transactor/transactions/transaction_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

from ..core.ports import CompletionCallback, Transaction

DEFAULT_POLL_INTERVAL_MS = 5000
DEFAULT_ITEM_TIMEOUT_MS = 15000


@dataclass(slots=True, frozen=True)
class Options:
    """
    Dispatcher tuning.

    - poll_interval_ms: delay between two timeout sweeps
    - item_timeout_ms: max time an item may wait in the queue before it is evicted
    """

    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    item_timeout_ms: int = DEFAULT_ITEM_TIMEOUT_MS

    def merged(self, **overrides: Any) -> Options:
        """Return a copy with the non-None overrides applied."""
        clean = {k: int(v) for k, v in overrides.items() if v is not None}
        return replace(self, **clean)

    @classmethod
    def from_settings(cls, settings) -> Options:
        return cls(
            poll_interval_ms=int(getattr(settings, "poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)),
            item_timeout_ms=int(getattr(settings, "item_timeout_ms", DEFAULT_ITEM_TIMEOUT_MS)),
        )

    def to_json(self) -> dict[str, int]:
        return asdict(self)


@dataclass(slots=True)
class WorkItem:
    id: str
    enqueue_time: float
    transaction: Transaction
    on_complete: CompletionCallback | None = None

    def snapshot(self) -> ItemSnapshot:
        return ItemSnapshot(
            id=self.id,
            enqueue_time=self.enqueue_time,
            transaction=self.transaction.to_json(),
        )


@dataclass(slots=True, frozen=True)
class ItemSnapshot:
    """Read-only projection of a WorkItem (safe to hand to display code)."""

    id: str
    enqueue_time: float
    transaction: Any

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "enqueue_time": self.enqueue_time, "transaction": self.transaction}


@dataclass(slots=True, frozen=True)
class Idle:
    busy = False
    item = None


@dataclass(slots=True, frozen=True)
class Executing:
    item: WorkItem
    busy = True


ExecutionSlot = Idle | Executing

IDLE = Idle()


@dataclass(slots=True, frozen=True)
class DispatcherSnapshot:
    options: Options
    busy: bool
    open: bool
    stopped: bool
    queue_length: int
    executing: ItemSnapshot | None

    def to_json(self) -> dict[str, Any]:
        return {
            "options": self.options.to_json(),
            "busy": self.busy,
            "open": self.open,
            "stopped": self.stopped,
            "queue_length": self.queue_length,
            "executing": self.executing.to_json() if self.executing is not None else None,
        }
