# src/fifo_transactor/cli/console.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..transactions.transaction_dispatcher import SequentialDispatcher
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def run_console_loop(dispatcher: SequentialDispatcher, *, prompt: str = ">>> ") -> None:
    """
    Read slash commands until /exit or EOF.

    input() runs in a worker thread so the dispatcher keeps draining while we wait.
    """
    logger.info("Console started.")
    _print_ts("[CONSOLE] Type /help for commands. Use /exit to quit.")

    while True:
        try:
            line = (await asyncio.to_thread(input, prompt)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(dispatcher, line, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Not a command. Use /help to list available commands."
        _print_ts(response)
