"""
Synchronous event manager with prioritized listeners.

Listeners are callables receiving an ``Event``. Higher priorities run first;
listeners sharing a priority run in attachment order. A listener may stop
propagation, which skips the remaining listeners of that trigger.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from itertools import count
from typing import Any

from attrs import define, field

logger = logging.getLogger(__name__)

Listener = Callable[["Event"], Any]


@define
class Event:
    """An event in flight; ``params`` is mutable so listeners can pass data back."""

    name: str
    target: Any = None
    params: dict[str, Any] = field(factory=dict)
    propagation_stopped: bool = False

    def get_param(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    def set_param(self, key: str, value: Any) -> None:
        self.params[key] = value

    def stop_propagation(self, flag: bool = True) -> None:
        self.propagation_stopped = flag


@define
class _Registration:
    listener: Listener
    priority: int
    order: int


class EventManager:
    """Registry of listeners keyed by event name."""

    def __init__(self):
        self._listeners: dict[str, list[_Registration]] = {}
        self._counter = count()

    def attach(self, event_name: str, listener: Listener, priority: int = 1) -> Listener:
        """
        Attach a listener.

        Returns:
            The listener, for use with ``detach``
        """
        self._listeners.setdefault(event_name, []).append(
            _Registration(listener, priority, next(self._counter))
        )
        logger.debug("Attached listener %r to '%s' (priority %d)", listener, event_name, priority)
        return listener

    def detach(self, listener: Listener, event_name: str | None = None) -> bool:
        """
        Detach a listener from one event, or from every event.

        Returns:
            True when at least one registration was removed
        """
        names = [event_name] if event_name is not None else list(self._listeners)
        removed = False
        for name in names:
            registrations = self._listeners.get(name, [])
            kept = [r for r in registrations if r.listener != listener]
            removed = removed or len(kept) != len(registrations)
            self._listeners[name] = kept
        return removed

    def get_listeners(self, event_name: str) -> list[Listener]:
        """Listeners of an event in execution order."""
        registrations = sorted(
            self._listeners.get(event_name, []), key=lambda r: (-r.priority, r.order)
        )
        return [r.listener for r in registrations]

    def trigger(
        self, event_name: str, target: Any = None, params: dict[str, Any] | None = None
    ) -> list[Any]:
        return self.trigger_event(Event(event_name, target, dict(params or {})))

    def trigger_event(self, event: Event) -> list[Any]:
        """
        Run the listeners of an event.

        Returns:
            Listener return values in execution order
        """
        results = []
        for listener in self.get_listeners(event.name):
            results.append(listener(event))
            if event.propagation_stopped:
                break
        return results


class ListenerAggregate(ABC):
    """A group of listeners that attaches itself to an event manager."""

    @abstractmethod
    def attach(self, events: EventManager, priority: int = 1) -> None:
        pass

    @abstractmethod
    def detach(self, events: EventManager) -> None:
        pass


class AbstractListenerAggregate(ListenerAggregate):
    """Aggregate that remembers its registrations so ``detach`` can undo them."""

    def __init__(self):
        self.listeners: list[tuple[str, Listener]] = []

    def listen(self, events: EventManager, event_name: str, listener: Listener, priority: int) -> None:
        events.attach(event_name, listener, priority)
        self.listeners.append((event_name, listener))

    def detach(self, events: EventManager) -> None:
        for event_name, listener in self.listeners:
            events.detach(listener, event_name)
        self.listeners = []
