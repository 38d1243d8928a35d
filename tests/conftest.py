# tests/conftest.py

from __future__ import annotations

import asyncio
from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio

from fifo_transactor.transactions.transaction_dispatcher import SequentialDispatcher
from fifo_transactor.transactions.transaction_models import Options

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the factory and CLI.

    A SimpleNamespace keeps tests independent of the process environment.
    """
    return SimpleNamespace(
        app_name="fifo-transactor-test",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        poll_interval_ms=60_000,
        item_timeout_ms=60_000,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture()
async def dispatcher(clock: FakeClock):
    """
    Dispatcher wired to a fake clock.

    The sweep interval is long enough that the timer never fires during a test;
    tests call sweep() explicitly when they need one.
    """
    d = SequentialDispatcher(Options(poll_interval_ms=60_000, item_timeout_ms=10), clock=clock)
    yield d
    d.shutdown()
    await asyncio.wait_for(d.wait_idle(), timeout=2.0)
