"""In-process event fan-out for permission and policy changes."""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Set

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], Any]


class PermissionsEmitter:
    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        # the loop only holds weak references to tasks
        self._pending: Set["asyncio.Future[Any]"] = set()

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def pending_count(self) -> int:
        return len(self._pending)

    def broadcast(self, event: str, payload: Dict[str, Any]) -> None:
        """Deliver ``payload`` to every listener of ``event`` without waiting on them."""
        listeners = list(self._listeners.get(event, []))
        logger.info("Broadcasting event=%s to %d listeners", event, len(listeners))
        for listener in listeners:
            try:
                result = listener(payload)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._pending.add(task)
                    task.add_done_callback(self._listener_done(event))
            except Exception:
                logger.exception("Listener for event=%s failed", event)

    def _listener_done(self, event: str):
        def _done(task: "asyncio.Future[Any]") -> None:
            self._pending.discard(task)
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                logger.error("Async listener for event=%s failed: %s", event, exc)

        return _done


permissions_emitter = PermissionsEmitter()
