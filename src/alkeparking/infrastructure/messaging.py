# File: src/alkeparking/infrastructure/messaging.py
"""
Messaging Infrastructure for AlkeParking

In-process publish/subscribe for the domain events the parking lot records.
The application service drains events from the aggregate after each use case
and publishes them here; handlers run synchronously in subscription order.

Components:
1. EventType - The event types handlers can subscribe to
2. EventHandler - Interface for anything reacting to events
3. EventBus - Synchronous in-memory event bus
4. AuditLogEventHandler - Logs every event and keeps a bounded history
"""

from abc import ABC, abstractmethod
from collections import deque
from enum import Enum
from typing import Deque, Dict, List, Optional
import logging

from ..domain.models import DomainEvent


# ============================================================================
# EVENT TYPES
# ============================================================================

class EventType(str, Enum):
    """Domain event types"""
    VEHICLE_CHECKED_IN = "vehicle.checked_in"
    VEHICLE_CHECKED_OUT = "vehicle.checked_out"


# ============================================================================
# EVENT HANDLERS
# ============================================================================

class EventHandler(ABC):
    """Abstract base class for event handlers"""

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        """Handle a domain event"""
        pass


class AuditLogEventHandler(EventHandler):
    """Writes every event to the log and remembers the most recent ones"""

    def __init__(self, max_history: int = 100):
        self._history: Deque[DomainEvent] = deque(maxlen=max_history)
        self._logger = logging.getLogger(self.__class__.__name__)

    def handle(self, event: DomainEvent) -> None:
        self._history.append(event)
        self._logger.info(f"{event.event_type}: {event.to_dict()['data']}")

    @property
    def events(self) -> List[DomainEvent]:
        return list(self._history)


# ============================================================================
# EVENT BUS (In-memory)
# ============================================================================

class EventBus:
    """
    In-memory event bus for intra-process event publishing

    A failing handler is logged and skipped; it does not stop the remaining
    handlers or reach the publisher.
    """

    def __init__(self):
        self._subscribers: Dict[EventType, List[EventHandler]] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to events of a specific type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []

        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)
            self._logger.debug(f"Subscribed {handler.__class__.__name__} to {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe a handler to every event type"""
        for event_type in EventType:
            self.subscribe(event_type, handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe handler from events"""
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            self._logger.debug(f"Unsubscribed {handler.__class__.__name__} from {event_type.value}")

    def publish(self, event: DomainEvent) -> int:
        """
        Publish an event to all subscribers
        Returns: Number of handlers that handled the event without error
        """
        event_type = EventType(event.event_type)
        self._logger.debug(f"Publishing event: {event_type.value} (ID: {event.event_id})")

        handled = 0
        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler.handle(event)
                handled += 1
            except Exception as e:
                self._logger.error(
                    f"Error handling event {event_type.value} with "
                    f"{handler.__class__.__name__}: {e}",
                    exc_info=True
                )
        return handled

    def publish_all(self, events: List[DomainEvent]) -> int:
        """Publish events in order; returns the total number of successful deliveries"""
        return sum(self.publish(event) for event in events)

    def subscribers(self, event_type: EventType) -> List[EventHandler]:
        return list(self._subscribers.get(event_type, []))


def create_event_bus(audit_handler: Optional[AuditLogEventHandler] = None) -> EventBus:
    """Create an event bus with the audit log handler subscribed to everything"""
    bus = EventBus()
    bus.subscribe_all(audit_handler or AuditLogEventHandler())
    return bus
