"""Event bus for pub/sub communication."""

import logging
from collections import defaultdict, deque
from typing import Callable, Optional, Union

from sideline.events.types import GameFlowEvent, EventType

logger = logging.getLogger(__name__)

EventListener = Callable[[GameFlowEvent], None]

DEFAULT_HISTORY_SIZE = 100


class Subscription:
    """Handle returned by ``subscribe``; ``unsubscribe()`` removes exactly that registration."""

    def __init__(self, listeners: list[EventListener], listener: EventListener) -> None:
        self._listeners = listeners
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        # Remove only this registration; the same callable may be registered twice
        for i, registered in enumerate(self._listeners):
            if registered is self._listener:
                del self._listeners[i]
                break


class EventBus:
    """
    Simple pub/sub event bus for decoupling the flow from UI feeds.

    Components subscribe to a specific event type and are notified when
    those events occur, so the simulation engine and flow services can emit
    events without knowing who will handle them. The most recent events are
    kept in a bounded history.

    Example:
        bus = EventBus()

        def on_touchdown(event: TouchdownEvent):
            print(event.payload.play.description)

        sub = bus.subscribe(EventType.TOUCHDOWN, on_touchdown)
        bus.emit(create_play_event(play, 7, 0, 1, 540))
        sub.unsubscribe()
    """

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        """Initialize the event bus."""
        self._listeners: dict[EventType, list[EventListener]] = defaultdict(list)
        self._all_listeners: list[EventListener] = []
        self._history: deque[GameFlowEvent] = deque(maxlen=history_size)

    @staticmethod
    def _resolve_type(event_type: Union[EventType, type[GameFlowEvent]]) -> EventType:
        if isinstance(event_type, EventType):
            return event_type
        return event_type.type

    def subscribe(
        self,
        event_type: Union[EventType, type[GameFlowEvent]],
        listener: EventListener,
    ) -> Subscription:
        """
        Register a listener for one event type.

        Args:
            event_type: The event tag, or the event class carrying it
            listener: Callback that receives the event

        Returns:
            Subscription handle
        """
        listeners = self._listeners[self._resolve_type(event_type)]
        listeners.append(listener)
        return Subscription(listeners, listener)

    def subscribe_all(self, listener: EventListener) -> Subscription:
        """Register a listener for every event."""
        self._all_listeners.append(listener)
        return Subscription(self._all_listeners, listener)

    def emit(self, event: GameFlowEvent) -> None:
        """
        Record an event and deliver it to all registered listeners.

        Type listeners are called first, in registration order, then
        listeners for all events. A listener that raises is logged and
        skipped; delivery to the rest continues.
        """
        self._history.append(event)

        # Iterate over copies so a listener may unsubscribe itself
        for listener in list(self._listeners.get(event.type, ())):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Error in event listener for {event.type.value}")

        for listener in list(self._all_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Error in all-events listener")

    def get_history(self, limit: Optional[int] = None) -> list[GameFlowEvent]:
        """Most recent ``limit`` events (all if omitted), oldest first."""
        events = list(self._history)
        if limit:
            return events[-limit:]
        return events

    def get_events_by_type(
        self,
        event_type: Union[EventType, type[GameFlowEvent]],
        limit: Optional[int] = None,
    ) -> list[GameFlowEvent]:
        """Like ``get_history`` but filtered to one event type."""
        tag = self._resolve_type(event_type)
        events = [e for e in self._history if e.type == tag]
        if limit:
            return events[-limit:]
        return events

    def reset(self) -> None:
        """Remove all listeners and clear the history."""
        self._listeners.clear()
        self._all_listeners.clear()
        self._history.clear()

    def get_subscriber_count(
        self,
        event_type: Union[EventType, type[GameFlowEvent], None] = None,
    ) -> int:
        """
        Get the number of registered listeners.

        Args:
            event_type: If provided, count listeners for this type only.
                        If None, count all listeners including global ones.
        """
        if event_type is None:
            total = sum(len(listeners) for listeners in self._listeners.values())
            return total + len(self._all_listeners)
        return len(self._listeners.get(self._resolve_type(event_type), ()))
