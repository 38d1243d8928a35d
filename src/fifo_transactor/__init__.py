"""Sequential (FIFO) transaction dispatcher for asyncio."""

from .core.errors import ErrorKind, TransactionError
from .core.events import DispatcherEvent
from .core.ports import Transaction
from .transactions.transaction_api import CallableTransaction, DelayTransaction, get
from .transactions.transaction_dispatcher import SequentialDispatcher
from .transactions.transaction_models import DispatcherSnapshot, ItemSnapshot, Options

__all__ = [
    "CallableTransaction",
    "DelayTransaction",
    "DispatcherEvent",
    "DispatcherSnapshot",
    "ErrorKind",
    "ItemSnapshot",
    "Options",
    "SequentialDispatcher",
    "Transaction",
    "TransactionError",
    "get",
]
