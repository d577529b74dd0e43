from __future__ import annotations

import logging
from typing import Any, Callable

from blinker import Namespace

log = logging.getLogger(__name__)


class EventBus:
    """In-process, synchronous event bus on top of blinker signals.

    One namespace per bus so separate containers (and tests) never share
    subscribers.
    """

    def __init__(self):
        self._signals = Namespace()

    def subscribe(self, event_name: str, handler: Callable[..., Any]) -> None:
        self._signals.signal(event_name).connect(handler, weak=False)
        log.debug("Handler %s subscribed to %s", getattr(handler, "__qualname__", handler), event_name)

    def publish(self, event_name: str, event: Any) -> list:
        """Deliver ``event`` to every subscriber in subscription order; handler errors propagate."""
        results = self._signals.signal(event_name).send(event)
        if not results:
            log.debug("Event %s published with no subscribers", event_name)
        return [value for _, value in results]
