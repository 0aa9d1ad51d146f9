"""In-process event bus.

Modules attach handlers made of a predicate and an async callback.
Every dispatched event is offered to each handler in priority order
(lower first, then attachment order); the handlers whose predicate
accepts it are awaited one after the other.
"""

from dataclasses import dataclass, field
from itertools import count
from typing import Awaitable, Callable, List

import structlog

from .events import Event

logger = structlog.get_logger("helpwire.bus")

_sequence = count()


@dataclass(eq=False)
class EventHandler:
    """A predicate-filtered event callback.

    Attributes:
        callback: Async function (event) -> None.
        predicate: Sync function (event) -> bool.
        priority: Lower numbers are offered events first (0-99).
        description: Human-readable label for logging.
    """
    callback: Callable[[Event], Awaitable[None]]
    predicate: Callable[[Event], bool]
    priority: int = 50
    description: str = ""
    _seq: int = field(default_factory=lambda: next(_sequence), repr=False)


class EventBus:
    """Delivers events to attached handlers."""

    def __init__(self):
        self._handlers: List[EventHandler] = []

    def add_handler(self, handler: EventHandler) -> EventHandler:
        """Attach a handler; returns it so it can be removed later."""
        self._handlers.append(handler)
        self._handlers.sort(key=lambda h: (h.priority, h._seq))
        logger.debug("event_handler_added", handler=handler.description)
        return handler

    def remove_handler(self, handler: EventHandler) -> None:
        """Detach a handler. Unknown handlers are ignored."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            logger.warning("event_handler_not_attached", handler=handler.description)
            return
        logger.debug("event_handler_removed", handler=handler.description)

    @property
    def handlers(self) -> List[EventHandler]:
        return list(self._handlers)

    async def dispatch(self, event: Event) -> int:
        """Offer an event to every handler.

        A handler that raises is logged and skipped; the remaining
        handlers still see the event.

        Returns:
            Number of handlers whose predicate accepted the event.
        """
        matched = 0
        # Snapshot: a callback may attach or detach handlers.
        for handler in list(self._handlers):
            try:
                if not handler.predicate(event):
                    continue
            except Exception as e:
                logger.error(
                    "event_predicate_failed",
                    handler=handler.description,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            matched += 1
            try:
                await handler.callback(event)
            except Exception as e:
                logger.error(
                    "event_handler_failed",
                    handler=handler.description,
                    event_type=type(event).__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return matched
