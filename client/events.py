"""Event dispatch owned by the client: event name -> ordered listener list."""

import asyncio
import inspect
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Set

from common.logging_config import get_logger

logger = get_logger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """
    Minimal publish/subscribe registry.

    Listeners run synchronously in registration order. A listener that
    returns an awaitable has it scheduled on the running loop. Exceptions
    raised by a listener are logged and do not reach the emitter.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._pending: Set[asyncio.Future] = set()

    def on(self, event: str, listener: Listener) -> Listener:
        """
        Register a listener.

        Args:
            event: Event name
            listener: Callable invoked with the event payload

        Returns:
            The listener, so on() can be used as a decorator
        """
        if not callable(listener):
            raise TypeError("listener must be callable")
        self._listeners[event].append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Register a listener that is removed after its first call."""
        if not callable(listener):
            raise TypeError("listener must be callable")

        def wrapper(*args):
            self.off(event, wrapper)
            return listener(*args)

        wrapper.__wrapped__ = listener
        self._listeners[event].append(wrapper)
        return listener

    def off(self, event: str, listener: Listener) -> bool:
        """
        Remove the first registration of listener for event.

        Returns:
            True if a registration was removed, False otherwise
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return False
        for i, registered in enumerate(listeners):
            if registered is listener or getattr(registered, '__wrapped__', None) is listener:
                del listeners[i]
                if not listeners:
                    del self._listeners[event]
                return True
        return False

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener registered for event with args.

        Returns:
            True if at least one listener was called
        """
        listeners = list(self._listeners.get(event, ()))
        if not listeners:
            return False

        for listener in listeners:
            try:
                result = listener(*args)
            except Exception:
                logger.exception(f"Listener {listener!r} for '{event}' raised")
                continue
            if inspect.isawaitable(result):
                future = asyncio.ensure_future(result)
                self._pending.add(future)
                future.add_done_callback(self._settle)
        return True

    def _settle(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error("Async listener raised", exc_info=future.exception())

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
