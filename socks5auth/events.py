"""
Event system for socks5auth.

Lets applications observe handshakes and authentication outcomes without
touching the negotiation code. Plain callables run inline; coroutine
functions are scheduled as tasks that the emitter keeps until they finish.
"""

import asyncio
import inspect
import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class EventEmitter:
    """Simple event emitter for SOCKS5 server events."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def on(self, event: str, callback: Callable) -> None:
        """Register an event listener."""
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callable) -> None:
        """Remove an event listener. Unknown listeners are ignored."""
        callbacks = self._listeners.get(event)
        if not callbacks or callback not in callbacks:
            return
        callbacks.remove(callback)
        if not callbacks:
            del self._listeners[event]

    def listeners(self, event: str) -> List[Callable]:
        """Return a copy of the listeners registered for an event."""
        return list(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> None:
        """Call every listener of an event with args.

        A failing listener is logged and does not stop the others.
        """
        for callback in self.listeners(event):
            if inspect.iscoroutinefunction(callback):
                task = asyncio.create_task(callback(*args))
                self._tasks.add(task)
                task.add_done_callback(partial(self._listener_done, event))
                continue
            try:
                callback(*args)
            except Exception:
                logger.exception("Error in event listener for %s", event)

    def _listener_done(self, event: str, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Error in event listener for %s", event, exc_info=exc
            )

    async def join(self) -> None:
        """Wait for the async listeners started so far to finish."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        """Remove all listeners for an event or all events."""
        if event:
            self._listeners.pop(event, None)
        else:
            self._listeners.clear()
