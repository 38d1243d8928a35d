# src/fifo_transactor/transactions/event_log.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.errors import TransactionError
from ..core.events import DispatcherEvent, EventEmitter
from .transaction_models import ItemSnapshot

logger = logging.getLogger(__name__)


def _describe(transaction: Any) -> Any:
    try:
        return transaction.to_json()
    except Exception:
        return repr(transaction)


def attach_event_logger(
    dispatcher: EventEmitter,
    *,
    log: logging.Logger | None = None,
) -> Callable[[], None]:
    """
    Log every dispatcher event.

    Returns a function that detaches the listeners again.
    """
    log = log or logger

    def on_submitted(snapshot: ItemSnapshot) -> None:
        log.debug("submitted id=%s tx=%s", snapshot.id, snapshot.transaction)

    def on_polling() -> None:
        log.debug("polling for timed out transactions")

    def on_executing(transaction: Any, item_id: str) -> None:
        log.info("executing id=%s tx=%s", item_id, _describe(transaction))

    def on_success(transaction: Any, result: Any, item_id: str) -> None:
        log.info("success id=%s result=%r", item_id, result)

    def on_error(transaction: Any, err: BaseException, item_id: str | None) -> None:
        if isinstance(err, TransactionError):
            log.warning("%s id=%s tx=%s", err.kind.value, item_id, _describe(transaction))
        else:
            log.warning("failed id=%s error=%r", item_id, err)

    handlers: list[tuple[DispatcherEvent, Callable[..., None]]] = [
        (DispatcherEvent.SUBMITTED, on_submitted),
        (DispatcherEvent.POLLING, on_polling),
        (DispatcherEvent.EXECUTING, on_executing),
        (DispatcherEvent.SUCCESS, on_success),
        (DispatcherEvent.ERROR, on_error),
    ]
    for event, handler in handlers:
        dispatcher.on(event, handler)

    def detach() -> None:
        for event, handler in handlers:
            dispatcher.off(event, handler)

    return detach
