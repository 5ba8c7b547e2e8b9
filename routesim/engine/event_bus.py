"""
Event bus for the routesim protocol simulator.

When an engine is given a bus, every protocol event leaves the engine
through it at the moment it is created, ahead of the recorded trace
that is later handed to playback. Live consumers (progress output,
counters, test probes) subscribe here.

The bus does not interpret events. It does not reorder them. It simply
delivers them to registered subscribers.
"""

from collections.abc import Callable

from routesim.engine.events import ProtocolEvent

Subscriber = Callable[[ProtocolEvent], None]


class EventBus:
    """
    Simple publish-subscribe event bus.

    Subscribers are called synchronously, in the order they were
    registered. If a subscriber raises an exception, propagation stops
    and the error is surfaced to the publishing engine.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._closed: bool = False

    def subscribe(self, handler: Subscriber) -> None:
        """
        Register a new event handler.
        """
        if self._closed:
            raise RuntimeError("Cannot subscribe to a closed event bus")

        self._subscribers.append(handler)

    def publish(self, event: ProtocolEvent) -> None:
        """
        Publish an event to all subscribers.
        """
        if self._closed:
            raise RuntimeError("Cannot publish to a closed event bus")

        for handler in self._subscribers:
            handler(event)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Close the event bus.

        After closing, no further subscriptions or publications are
        permitted. This marks the end of a simulation run.
        """
        self._closed = True
