# src/fifo_transactor/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds a dispatcher from settings, logs its events and runs
the interactive console until /exit. On the way out intake is closed, queued work
is aborted and the in-flight transaction (if any) is awaited.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..logging_setup import setup_logging
from ..transactions.event_log import attach_event_logger
from ..transactions.transaction_api import get as get_dispatcher
from .console import run_console_loop

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    dispatcher = get_dispatcher(settings=settings)
    detach = attach_event_logger(dispatcher)
    try:
        await run_console_loop(dispatcher)
    finally:
        dispatcher.shutdown()
        await dispatcher.wait_idle()
        detach()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info(
        "Starting %s (poll_interval_ms=%s item_timeout_ms=%s log=%s)",
        settings.app_name,
        settings.poll_interval_ms,
        settings.item_timeout_ms,
        log_file,
    )

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
