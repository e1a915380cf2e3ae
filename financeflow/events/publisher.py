"""
Ledger Event Publisher

DESIGN DECISION: The engine does not push state into any UI framework.
It publishes LedgerEvents on an explicit channel instead:
1. Every event is written to the structured log
2. Subscribers (a UI, a notifier, a test) receive the events they asked for
3. A failing subscriber never breaks the ledger operation that triggered it

Events are fire-and-forget; nothing is persisted.
"""

import logging
from typing import Callable, Optional

import structlog

from financeflow.models.events import LedgerEvent, LedgerEventSeverity, LedgerEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


EventHandler = Callable[[LedgerEvent], None]


def configure_logging(level: str = "INFO") -> None:
    """Attach a stdlib handler so structlog output reaches stderr."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class EventPublisher:
    """
    Publish/subscribe channel for ledger events.

    Handlers subscribe to one event type, or to every event
    when event_type is None.
    """

    def __init__(self):
        self._subscribers: dict[Optional[LedgerEventType], list[EventHandler]] = {}
        self._logger = structlog.get_logger("financeflow.events")

    def subscribe(
        self,
        handler: EventHandler,
        event_type: Optional[LedgerEventType] = None,
    ) -> None:
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: Optional[LedgerEventType] = None,
    ) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: LedgerEvent) -> int:
        """
        Log an event and dispatch it to subscribers.

        Returns the number of handlers that ran without raising.
        """
        log_dict = event.to_log_dict()

        if event.severity == LedgerEventSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerEventSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerEventSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

        handlers = list(self._subscribers.get(event.event_type, []))
        handlers += [h for h in self._subscribers.get(None, []) if h not in handlers]

        delivered = 0
        for handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "event_handler_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                    handler=getattr(handler, "__name__", repr(handler)),
                )
        return delivered
