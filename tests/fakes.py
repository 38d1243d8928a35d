# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any


class FakeClock:
    """Manually advanced millisecond clock for eviction tests."""

    def __init__(self, now_ms: float = 0.0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


@dataclass
class RecordingTransaction:
    """
    Fake transaction used by queue/dispatcher tests.

    - Appends its name to `log` when execution starts
    - Blocks on `gate` if one is given (lets tests hold an item "in flight")
    - Returns `result` or raises `error`
    """

    name: str
    log: list[str] = field(default_factory=list)
    result: Any = None
    error: BaseException | None = None
    gate: asyncio.Event | None = None
    calls: int = 0

    async def execute(self) -> Any:
        self.calls += 1
        self.log.append(self.name)
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result if self.result is not None else f"{self.name}-done"

    def to_json(self) -> Any:
        return {"name": self.name}


class EventRecorder:
    """Subscribes to a set of events and records (event, args) tuples in order."""

    def __init__(self, emitter, events) -> None:
        self.events: list[tuple[str, tuple[Any, ...]]] = []
        for event in events:
            emitter.on(event, self._make(str(event)))

    def _make(self, name: str):
        def _record(*args: Any) -> None:
            self.events.append((name, args))

        return _record

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def of(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.events if n == name]


async def settle(rounds: int = 10) -> None:
    """Let pending callbacks/tasks on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
