"""Explicit routing of decoded events to per-type handler functions."""

from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import structlog

from src.domain.entities import ProposalEvent, ProposalEventType

logger = structlog.get_logger(__name__)

EventHandler = Callable[[ProposalEvent], Awaitable[None]]


class EventDispatcher:
    """
    Maps event types to handlers.

    Handlers are registered explicitly; nothing is discovered by scanning.
    A type may have several handlers, which run in registration order.
    A fallback handler, when set, receives every event with no specific
    handler.
    """

    def __init__(self, name: str = "dispatcher"):
        self._name = name
        self._handlers: Dict[ProposalEventType, List[EventHandler]] = {}
        self._fallback: Optional[EventHandler] = None

    def register(self, event_type: ProposalEventType, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def register_many(
        self,
        event_types: Iterable[ProposalEventType],
        handler: EventHandler,
    ) -> None:
        for event_type in event_types:
            self.register(event_type, handler)

    def register_all(self, handler: EventHandler) -> None:
        """Register a handler for every known event type."""
        self.register_many(ProposalEventType, handler)

    def set_fallback(self, handler: EventHandler) -> None:
        self._fallback = handler

    def handlers_for(self, event_type: ProposalEventType) -> List[EventHandler]:
        handlers = self._handlers.get(event_type)
        if handlers:
            return list(handlers)
        return [self._fallback] if self._fallback else []

    async def dispatch(self, event: ProposalEvent) -> None:
        """
        Run every handler registered for the event's type.

        Exceptions propagate unchanged; the consumer runtime decides
        whether to retry.
        """
        handlers = self.handlers_for(event.type)
        if not handlers:
            logger.debug(
                "event_not_routed",
                dispatcher=self._name,
                event_type=event.type.value,
                event_id=event.id,
            )
            return

        for handler in handlers:
            await handler(event)
