# src/fifo_transactor/transactions/transaction_queue.py

from __future__ import annotations

import logging
import time
from collections import deque

from ..core.events import EventEmitter, QueueEvent
from ..core.ports import Clock, CompletionCallback, Transaction
from .transaction_models import ItemSnapshot, WorkItem

logger = logging.getLogger(__name__)


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class TransactionQueue(EventEmitter):
    """
    FIFO of pending work items.

    Events:
    - enqueue (snapshot: ItemSnapshot)
    - change ()
    - transactions-timeout (items: list[WorkItem])   one batch per sweep
    - transactions-aborted (items: list[WorkItem])   flush or targeted removal

    Every removal emits its structural event first, then `change`.
    """

    def __init__(self, *, clock: Clock = wall_clock_ms) -> None:
        super().__init__()
        self._items: deque[WorkItem] = deque()
        self._ids: set[str] = set()
        self._clock = clock

    @property
    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def enqueue(
        self,
        item_id: str,
        transaction: Transaction,
        on_complete: CompletionCallback | None = None,
    ) -> WorkItem:
        if item_id in self._ids:
            raise ValueError(f"duplicate transaction id: {item_id}")

        item = WorkItem(
            id=item_id,
            enqueue_time=self._clock(),
            transaction=transaction,
            on_complete=on_complete,
        )
        # to_json() may raise; the queue must stay untouched if it does.
        snapshot = item.snapshot()
        self._items.append(item)
        self._ids.add(item_id)

        self.emit(QueueEvent.ENQUEUE, snapshot)
        self.emit(QueueEvent.CHANGE)
        return item

    def peek_head(self) -> WorkItem | None:
        return self._items[0] if self._items else None

    def dequeue_head(self) -> WorkItem | None:
        if not self._items:
            return None
        item = self._items.popleft()
        self._ids.discard(item.id)
        self.emit(QueueEvent.CHANGE)
        return item

    def evict_expired(self, max_age_ms: float) -> list[WorkItem]:
        """Drop every item older than max_age_ms, as one batch."""
        if not self._items:
            return []

        now = self._clock()
        expired: list[WorkItem] = []
        survivors: deque[WorkItem] = deque()
        for item in self._items:
            if now - item.enqueue_time > max_age_ms:
                expired.append(item)
            else:
                survivors.append(item)

        if not expired:
            return []

        self._items = survivors
        for item in expired:
            self._ids.discard(item.id)

        logger.debug("Evicted %d expired item(s), %d left", len(expired), len(survivors))
        self.emit(QueueEvent.TIMEOUT, expired)
        self.emit(QueueEvent.CHANGE)
        return expired

    def remove_all(self) -> list[WorkItem]:
        if not self._items:
            return []

        flushed = list(self._items)
        self._items = deque()
        self._ids.clear()

        self.emit(QueueEvent.ABORTED, flushed)
        self.emit(QueueEvent.CHANGE)
        return flushed

    def remove_by_id(self, item_id: str) -> bool:
        """
        Remove one queued item.

        False means "already started, completed or removed" and is not an error.
        """
        if item_id not in self._ids:
            return False

        for item in self._items:
            if item.id == item_id:
                self._items.remove(item)
                self._ids.discard(item_id)
                self.emit(QueueEvent.ABORTED, [item])
                self.emit(QueueEvent.CHANGE)
                return True

        return False

    def snapshot(self) -> list[ItemSnapshot]:
        return [item.snapshot() for item in self._items]
