"""Publish/subscribe channel between the test engine and reporters."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from contractreport.types import Event

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """Ordered event channel.

    Listeners run in subscription order. Listeners returning awaitables are
    awaited together, so independent reporters proceed side by side while
    each of them still observes events one at a time. :meth:`emit` returns
    once every listener is done with the event.
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[Event, list[Listener]] = defaultdict(list)

    def on(self, event: Event | str, listener: Listener) -> None:
        self._listeners[Event(event)].append(listener)

    def off(self, event: Event | str, listener: Listener) -> None:
        listeners = self._listeners[Event(event)]
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: Event | str) -> list[Listener]:
        return list(self._listeners[Event(event)])

    async def emit(self, event: Event | str, *args: Any) -> None:
        """Deliver ``event`` to every listener and wait for all of them.

        Errors raised by a listener are logged and never reach the caller.
        """
        event = Event(event)
        pending = []
        for listener in self.listeners(event):
            try:
                result = listener(*args)
            except Exception:
                logger.exception("Listener %r failed on %r", listener, event.value)
                continue
            if inspect.isawaitable(result):
                pending.append(result)

        if not pending:
            return

        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "Listener failed on %r", event.value, exc_info=(type(result), result, result.__traceback__)
                )
