"""Change notifications for maps and worlds.

GridMap and World inherit from ``EventEmitter`` so game logic can react to
terrain changes and unit movement without polling. Handlers are called
synchronously once the state change is complete; exceptions raised by a
handler propagate to the caller of the mutator.

Bound methods are held through weak references, so observing does not keep
the observing object alive. Other callables are held strongly.
"""

from __future__ import annotations

import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from gridworld.position import Position

__all__ = ["ALL", "EventEmitter", "MapEvent", "MapEventType"]

ALL = "ALL"


class MapEventType(StrEnum):
    """Kinds of changes reported by maps and worlds."""

    UNIT_MOVED = "unit_moved"
    TERRAIN_CHANGED = "terrain_changed"
    UNIT_PLACED = "unit_placed"
    UNIT_REMOVED = "unit_removed"
    MAP_CHANGED = "map_changed"


@dataclass(frozen=True, slots=True)
class MapEvent:
    """A single change notification.

    Attributes:
        type: the kind of change
        map_id: name of the map the change happened on
        position: the affected cell, None for map wide changes
        data: extra details, depends on the event type
        source: the emitter
    """

    type: MapEventType
    map_id: str
    position: Position | None = None
    data: dict[str, Any] = field(default_factory=dict)
    source: Any = None


def create_weakref(item, callback=None):
    """Helper function to create a correct weakref for a bound method."""
    # builtin methods such as list.append have __self__ but no __func__
    if hasattr(item, "__self__") and hasattr(item, "__func__"):
        return weakref.WeakMethod(item, callback)
    return None


class _StrongRef:
    __slots__ = ("item",)

    def __init__(self, item):
        self.item = item

    def __call__(self):
        return self.item


class EventEmitter:
    """Mixin that lets objects register handlers for MapEvents."""

    def __init__(self) -> None:
        """Initialize the observer registry."""
        self._observers: dict[str, list] = {}

    def observe(self, event_type: MapEventType | str, handler: Callable) -> None:
        """Register a handler for an event type, or ``ALL`` for every event.

        Args:
            event_type: the MapEventType to observe or ALL
            handler: callable that receives the MapEvent

        Raises:
            ValueError: if event_type is not known
        """
        if event_type != ALL:
            event_type = MapEventType(event_type)
        ref = create_weakref(handler) or _StrongRef(handler)
        self._observers.setdefault(event_type, []).append(ref)

    def unobserve(self, event_type: MapEventType | str, handler: Callable) -> None:
        """Remove a previously registered handler, unknown handlers are ignored."""
        refs = self._observers.get(event_type, [])
        self._observers[event_type] = [
            ref for ref in refs if ref() is not None and ref() != handler
        ]

    def clear_observers(self) -> None:
        """Remove all handlers."""
        self._observers.clear()

    def _has_observers(self, event_type: MapEventType) -> bool:
        return bool(self._observers.get(event_type) or self._observers.get(ALL))

    def _emit(
        self,
        event_type: MapEventType,
        map_id: str,
        position: Position | None = None,
        **data: Any,
    ) -> None:
        if not self._has_observers(event_type):
            return

        event = MapEvent(event_type, map_id, position, data, self)
        for key in (event_type, ALL):
            refs = self._observers.get(key)
            if not refs:
                continue
            for ref in list(refs):
                handler = ref()
                if handler is not None:
                    handler(event)
            # drop handlers whose owner has been garbage collected
            self._observers[key] = [
                ref for ref in self._observers.get(key, []) if ref() is not None
            ]
