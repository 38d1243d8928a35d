# src/fifo_transactor/transactions/transaction_api.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from ..config import get_settings
from .transaction_dispatcher import SequentialDispatcher
from .transaction_models import Options

logger = logging.getLogger(__name__)


def get(options: Options | None = None, *, settings=None) -> SequentialDispatcher:
    """
    Convenience factory: build a dispatcher on the running event loop.

    Explicit options win; otherwise they come from settings (or get_settings()).
    """
    if options is None:
        if settings is None:
            settings = get_settings()
        options = Options.from_settings(settings)
    logger.debug(
        "Creating dispatcher poll_interval_ms=%s item_timeout_ms=%s",
        options.poll_interval_ms,
        options.item_timeout_ms,
    )
    return SequentialDispatcher(options)


@dataclass(slots=True)
class CallableTransaction:
    """Wrap any coroutine function as a transaction."""

    func: Callable[..., Awaitable[Any]]
    label: str = ""
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    async def execute(self) -> Any:
        return await self.func(*self.args, **self.kwargs)

    def to_json(self) -> Any:
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return {"label": self.label or name, "callable": name}


@dataclass(slots=True)
class DelayTransaction:
    """
    Sleeps for `seconds`, then returns a small summary.

    With fail_message set it raises RuntimeError(fail_message) after the delay.
    Used by the console CLI and handy for demos.
    """

    seconds: float
    label: str = "delay"
    fail_message: str | None = None

    async def execute(self) -> dict[str, Any]:
        await asyncio.sleep(max(0.0, float(self.seconds)))
        if self.fail_message is not None:
            raise RuntimeError(self.fail_message)
        return {"label": self.label, "slept": self.seconds}

    def to_json(self) -> Any:
        out: dict[str, Any] = {"label": self.label, "seconds": self.seconds}
        if self.fail_message is not None:
            out["fail_message"] = self.fail_message
        return out
