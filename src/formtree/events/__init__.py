"""
Event manager and listener aggregates used by the builders.
"""

from formtree.events.manager import (
    AbstractListenerAggregate,
    Event,
    EventManager,
    Listener,
    ListenerAggregate,
)

__all__ = [
    "Event",
    "EventManager",
    "Listener",
    "ListenerAggregate",
    "AbstractListenerAggregate",
]
