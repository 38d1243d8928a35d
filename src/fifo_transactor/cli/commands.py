# src/fifo_transactor/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
import math
from collections.abc import Callable
from typing import Any, cast

from ..core.errors import TransactionError
from ..transactions.transaction_api import DelayTransaction
from ..transactions.transaction_dispatcher import SequentialDispatcher

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[SequentialDispatcher, list[str]], str]
CommandHandler3 = Callable[[SequentialDispatcher, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /status, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        dispatcher: SequentialDispatcher,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(dispatcher, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(dispatcher, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2, default=str)


def _parse_seconds(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _report_completion(item_label: str, emit: CommandEmitter | None):
    def _done(err: BaseException | None, result: Any) -> None:
        if emit is None:
            return
        if err is None:
            emit(f"[done] {item_label}: {result}")
        elif isinstance(err, TransactionError):
            emit(f"[{err.kind.value}] {item_label}: {err.description}")
        else:
            emit(f"[failed] {item_label}: {err}")

    return _done


def _submit(dispatcher: SequentialDispatcher, tx: DelayTransaction, emit: CommandEmitter | None) -> str:
    try:
        item_id = dispatcher.submit(tx, _report_completion(tx.label, emit))
    except TransactionError as e:
        return f"Rejected ({e.kind.value}): {e.description}"
    return f"Submitted {tx.label} id={item_id} (queue={dispatcher.queue_length})"


def cmd_help(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    return _dumps(dispatcher.to_json())


def cmd_queue(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    items = dispatcher.queue_snapshot()
    if not items:
        return "Queue is empty."
    return _dumps([item.to_json() for item in items])


def cmd_submit(
    dispatcher: SequentialDispatcher,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """
    /submit <seconds>          -> queue a delay transaction
    /submit <seconds> <label>  -> same, with a label
    """
    if not args:
        return "Usage: /submit <seconds> [label]"
    seconds = _parse_seconds(args[0])
    if seconds is None:
        return "Seconds must be a finite, non-negative number."
    label = " ".join(args[1:]) or f"delay-{args[0]}s"
    return _submit(dispatcher, DelayTransaction(seconds=seconds, label=label), emit)


def cmd_fail(
    dispatcher: SequentialDispatcher,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """/fail <seconds> [message] -> queue a transaction that raises after the delay"""
    if not args:
        return "Usage: /fail <seconds> [message]"
    seconds = _parse_seconds(args[0])
    if seconds is None:
        return "Seconds must be a finite, non-negative number."
    message = " ".join(args[1:]) or "simulated failure"
    tx = DelayTransaction(seconds=seconds, label=f"fail-{args[0]}s", fail_message=message)
    return _submit(dispatcher, tx, emit)


def cmd_stop(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    if dispatcher.stopped:
        return "Dispatch is already paused."
    dispatcher.set_stopped(True)
    return "Dispatch paused. Queued items wait until /resume."


def cmd_resume(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    if not dispatcher.stopped:
        return "Dispatch is already running."
    dispatcher.set_stopped(False)
    return f"Dispatch resumed (queue={dispatcher.queue_length})."


def cmd_open(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    dispatcher.set_open(True)
    return "Intake open."


def cmd_close(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    dispatcher.set_open(False)
    return "Intake closed. Queued items still run; new submissions are rejected."


def cmd_abort(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    if not args:
        return "Usage: /abort <id>"
    if dispatcher.abort(args[0]):
        return f"Aborted {args[0]}."
    return f"No queued transaction with id {args[0]} (already running, finished or removed)."


def cmd_abortall(dispatcher: SequentialDispatcher, args: list[str]) -> str:
    n = dispatcher.queue_length
    dispatcher.abort_all()
    return f"Aborted {n} queued transaction(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show dispatcher state as JSON.")
registry.register("queue", cmd_queue, help_text="List queued transactions.", aliases=["q"])
registry.register("submit", cmd_submit, help_text="Queue a delay: /submit <seconds> [label].")
registry.register("fail", cmd_fail, help_text="Queue a failing delay: /fail <seconds> [message].")
registry.register("stop", cmd_stop, help_text="Pause dispatching (queue still fills).")
registry.register("resume", cmd_resume, help_text="Resume dispatching.")
registry.register("open", cmd_open, help_text="Accept new submissions.")
registry.register("close", cmd_close, help_text="Reject new submissions.")
registry.register("abort", cmd_abort, help_text="Remove one queued transaction: /abort <id>.")
registry.register("abortall", cmd_abortall, help_text="Remove every queued transaction.")
