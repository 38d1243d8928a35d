from __future__ import annotations

"""
Ports (interfaces) used by the dispatcher.

The dispatcher depends on Protocols instead of concrete payload classes.
It never looks inside a transaction beyond these two operations.
"""

from collections.abc import Callable
from typing import Any, Awaitable, Protocol, runtime_checkable

CompletionCallback = Callable[[BaseException | None, Any], None]
# Invoked exactly once per work item: (error, None) on failure, (None, result) on success.

Clock = Callable[[], float]
# Milliseconds; only differences between two readings matter to the queue.


@runtime_checkable
class Transaction(Protocol):
    """
    A caller-supplied unit of work.

    - execute(): started at most once per dispatch; its result (or exception) settles the item
    - to_json(): opaque value used for snapshots and logging
    """

    def execute(self) -> Awaitable[Any]: ...

    def to_json(self) -> Any: ...
