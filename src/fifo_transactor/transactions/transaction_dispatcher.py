# src/fifo_transactor/transactions/transaction_dispatcher.py

from __future__ import annotations

"""
Sequential transaction dispatcher.

Runs submitted transactions one at a time, in submission order, on the current
asyncio event loop:
- submit()/transact() append to a TransactionQueue,
- a single runner task drains the queue (execute -> settle -> next),
- a self-rescheduling timer evicts items that waited longer than item_timeout_ms.

To stop the dispatcher, call shutdown(); in-flight work is never interrupted.
"""

import asyncio
import logging
import uuid
from typing import Any

from ..core.errors import TransactionError
from ..core.events import DispatcherEvent, EventEmitter, QueueEvent
from ..core.ports import Clock, CompletionCallback, Transaction
from .transaction_models import (
    IDLE,
    DispatcherSnapshot,
    Executing,
    ExecutionSlot,
    ItemSnapshot,
    Options,
    WorkItem,
)
from .transaction_queue import TransactionQueue, wall_clock_ms

logger = logging.getLogger(__name__)


class SequentialDispatcher(EventEmitter):
    """
    Events:
    - submitted (snapshot: ItemSnapshot)
    - change ()
    - polling-transactions ()
    - executing-transaction (transaction, item_id)
    - transaction-success (transaction, result, item_id)
    - transaction-error (transaction, error, item_id | None)
    """

    def __init__(
        self,
        options: Options | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Clock = wall_clock_ms,
    ) -> None:
        super().__init__()
        self._options = options or Options()
        self._loop = loop or asyncio.get_running_loop()

        self._open = True
        self._stopped = False
        self._shut_down = False
        self._slot: ExecutionSlot = IDLE
        self._runner: asyncio.Task[None] | None = None
        self._timer: asyncio.TimerHandle | None = None

        self._queue = TransactionQueue(clock=clock)
        self._queue.on(QueueEvent.ENQUEUE, self._on_enqueue)
        self._queue.on(QueueEvent.CHANGE, self._on_queue_change)
        self._queue.on(QueueEvent.TIMEOUT, self._on_timeout)
        self._queue.on(QueueEvent.ABORTED, self._on_aborted)

        self._schedule_sweep()

    # ---- state ----

    @property
    def options(self) -> Options:
        return self._options

    @property
    def busy(self) -> bool:
        return self._slot.busy

    @property
    def open(self) -> bool:
        return self._open

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def queue_length(self) -> int:
        return self._queue.size

    @property
    def executing(self) -> ItemSnapshot | None:
        item = self._slot.item
        return item.snapshot() if item is not None else None

    def queue_snapshot(self) -> list[ItemSnapshot]:
        return self._queue.snapshot()

    def snapshot(self) -> DispatcherSnapshot:
        return DispatcherSnapshot(
            options=self._options,
            busy=self.busy,
            open=self._open,
            stopped=self._stopped,
            queue_length=self._queue.size,
            executing=self.executing,
        )

    def to_json(self) -> dict[str, Any]:
        return self.snapshot().to_json()

    def set_open(self, value: bool) -> None:
        value = bool(value)
        if self._open != value:
            self._open = value
            logger.info("Intake %s", "opened" if value else "closed")
            self.emit(DispatcherEvent.CHANGE)

    def set_stopped(self, value: bool) -> None:
        value = bool(value)
        if self._stopped == value:
            return
        self._stopped = value
        logger.info("Dispatch %s", "paused" if value else "resumed")
        self.emit(DispatcherEvent.CHANGE)
        if not value:
            self._attempt_dispatch()

    # ---- intake ----

    def submit(self, transaction: Transaction, on_complete: CompletionCallback | None = None) -> str:
        """Queue a transaction without waiting for it. Returns the item id."""
        if not self._open:
            err = TransactionError.forbidden()
            self._settle_error(transaction, None, err, None)
            raise err

        item_id = str(uuid.uuid4())
        self._queue.enqueue(item_id, transaction, on_complete)
        return item_id

    def transact(self, transaction: Transaction) -> asyncio.Future[Any]:
        """Queue a transaction and return a future for its result."""
        fut: asyncio.Future[Any] = self._loop.create_future()

        def _resolve(err: BaseException | None, result: Any) -> None:
            if fut.done():  # caller gave up on it
                return
            if err is not None:
                fut.set_exception(err)
            else:
                fut.set_result(result)

        self.submit(transaction, _resolve)
        return fut

    # ---- cancellation ----

    def abort_all(self) -> None:
        self._queue.remove_all()

    def abort(self, item_id: str) -> bool:
        return self._queue.remove_by_id(item_id)

    def shutdown(self) -> None:
        """Close intake, abort everything queued, stop sweeping. Safe to call twice."""
        if not self._shut_down:
            logger.info("Shutting down dispatcher (queued=%d busy=%s)", self._queue.size, self.busy)
        self._shut_down = True
        self.set_open(False)
        self.abort_all()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_idle(self) -> None:
        """Wait until the runner has nothing left it is allowed to run."""
        while self._runner is not None:
            # asyncio.wait never raises, even for a cancelled runner.
            await asyncio.wait({self._runner})

    # ---- timeout sweep ----

    def sweep(self) -> None:
        self.emit(DispatcherEvent.POLLING)
        self._queue.evict_expired(self._options.item_timeout_ms)

    def _schedule_sweep(self) -> None:
        if self._shut_down:
            return
        delay_s = self._options.poll_interval_ms / 1000.0
        self._timer = self._loop.call_later(delay_s, self._on_sweep_timer)

    def _on_sweep_timer(self) -> None:
        self._timer = None
        try:
            self.sweep()
        finally:
            # Rescheduled only after the sweep ran, never on a fixed rate.
            self._schedule_sweep()

    # ---- queue listeners ----

    def _on_enqueue(self, snapshot: ItemSnapshot) -> None:
        self.emit(DispatcherEvent.SUBMITTED, snapshot)
        self._attempt_dispatch()

    def _on_queue_change(self) -> None:
        self.emit(DispatcherEvent.CHANGE)

    def _on_timeout(self, items: list[WorkItem]) -> None:
        logger.warning("%d transaction(s) timed out in queue", len(items))
        for item in items:
            self._settle_error(item.transaction, item.on_complete, TransactionError.timeout(), item.id)

    def _on_aborted(self, items: list[WorkItem]) -> None:
        logger.info("%d transaction(s) aborted", len(items))
        for item in items:
            self._settle_error(item.transaction, item.on_complete, TransactionError.aborted(), item.id)

    # ---- execution ----

    def _attempt_dispatch(self) -> None:
        if self._runner is not None:
            # The running drain loop picks up whatever is queued once the slot frees.
            return
        item = self._take_next()
        if item is not None:
            runner = self._loop.create_task(self._drain(item))
            runner.add_done_callback(self._on_runner_done)
            self._runner = runner

    def _take_next(self) -> WorkItem | None:
        if self._slot.busy or self._stopped:
            return None
        head = self._queue.peek_head()
        if head is None:
            return None

        # Occupy the slot before dequeue_head() notifies anyone.
        self._slot = Executing(head)
        self._queue.dequeue_head()
        self.emit(DispatcherEvent.CHANGE)
        self.emit(DispatcherEvent.EXECUTING, head.transaction, head.id)
        return head

    async def _drain(self, item: WorkItem | None) -> None:
        try:
            while item is not None:
                await self._execute(item)
                item = self._take_next()
        finally:
            self._runner = None

    def _on_runner_done(self, runner: asyncio.Task[None]) -> None:
        if self._runner is not runner:
            return
        # Cancelled before its first step: _drain never ran, the slot is still ours.
        self._runner = None
        item = self._slot.item
        if item is not None:
            logger.warning("Runner cancelled before start, aborting item_id=%s", item.id)
            self._settle_error(item.transaction, item.on_complete, TransactionError.aborted(), item.id)
            self._set_idle()
        if not self._loop.is_closed():
            self._attempt_dispatch()

    async def _execute(self, item: WorkItem) -> None:
        try:
            result = await item.transaction.execute()
        except asyncio.CancelledError:
            self._settle_error(item.transaction, item.on_complete, TransactionError.aborted(), item.id)
            self._set_idle()
            raise
        except Exception as e:
            logger.debug("Transaction %s failed: %r", item.id, e)
            self._settle_error(item.transaction, item.on_complete, e, item.id)
        else:
            self._settle_success(item, result)
        self._set_idle()

    def _set_idle(self) -> None:
        if self._slot.busy:
            self._slot = IDLE
            self.emit(DispatcherEvent.CHANGE)

    def _settle_success(self, item: WorkItem, result: Any) -> None:
        self.emit(DispatcherEvent.SUCCESS, item.transaction, result, item.id)
        self._complete(item.on_complete, None, result, item.id)

    def _settle_error(
        self,
        transaction: Transaction,
        on_complete: CompletionCallback | None,
        err: BaseException,
        item_id: str | None,
    ) -> None:
        self.emit(DispatcherEvent.ERROR, transaction, err, item_id)
        self._complete(on_complete, err, None, item_id)

    @staticmethod
    def _complete(
        on_complete: CompletionCallback | None,
        err: BaseException | None,
        result: Any,
        item_id: str | None,
    ) -> None:
        if on_complete is None:
            return
        try:
            on_complete(err, result)
        except Exception:
            logger.exception("Completion callback failed item_id=%s", item_id)
