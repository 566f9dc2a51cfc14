"""
Minimal synchronous event bus for aircraft lifecycle notifications.
"""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, List


class EventBus:
    """
    Publish/subscribe by event key.

    Handlers run synchronously, in subscription order, inside ``trigger``.
    """

    def __init__(self):
        self._handlers: DefaultDict[Any, List[Callable[..., None]]] = defaultdict(list)

    def on(self, event: Any, handler: Callable[..., None]) -> None:
        """Subscribe ``handler`` to ``event``."""
        self._handlers[event].append(handler)

    def off(self, event: Any, handler: Callable[..., None]) -> None:
        """Unsubscribe ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def trigger(self, event: Any, *args: Any) -> None:
        """Call every handler subscribed to ``event`` with ``args``."""
        for handler in list(self._handlers.get(event, [])):
            handler(*args)

    def handler_count(self, event: Any) -> int:
        return len(self._handlers.get(event, []))
