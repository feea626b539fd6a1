# === NAVMAP v1 ===
# {
#   "module": "PyXHR.events",
#   "purpose": "Event names, event payloads and the slot/listener dispatcher.",
#   "sections": [
#     {"id": "eventname", "name": "EventName", "anchor": "class-eventname", "kind": "class"},
#     {"id": "xhrevent", "name": "XHREvent", "anchor": "class-xhrevent", "kind": "class"},
#     {"id": "eventdispatcher", "name": "EventDispatcher", "anchor": "class-eventdispatcher", "kind": "class"},
#     {"id": "eventslot", "name": "EventSlot", "anchor": "class-eventslot", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Ordered, isolated event dispatch for request objects.

Each owner holds one :class:`EventDispatcher`. For every :class:`EventName`
the dispatcher keeps an optional single *slot* handler (what ``xhr.onload =
fn`` assigns) and an ordered list of listeners (``addEventListener``).
Dispatch calls the slot first, then a snapshot of the listener list, so a
handler that adds or removes listeners does not disturb the round in
progress. A handler that raises is logged and skipped; later handlers and
later lifecycle events still fire.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

__all__ = ["EventName", "XHREvent", "EventHandler", "EventDispatcher", "EventSlot"]


class EventName(str, Enum):
    """Events fired by a request object."""

    READYSTATECHANGE = "readystatechange"
    LOADSTART = "loadstart"
    LOAD = "load"
    LOADEND = "loadend"
    ERROR = "error"
    ABORT = "abort"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class XHREvent:
    """Payload handed to every handler."""

    type: EventName
    target: Any
    detail: Any = None


EventHandler = Callable[[XHREvent], Any]


def _coerce_name(event: Union[str, EventName]) -> EventName:
    try:
        return EventName(event)
    except ValueError:
        raise ValueError(f"Unknown event {event!r}") from None


class EventDispatcher:
    """Slot handler plus ordered listeners per event, bound to one owner."""

    def __init__(self, owner: Any) -> None:
        self._owner = owner
        self._slots: Dict[EventName, Optional[EventHandler]] = {name: None for name in EventName}
        self._listeners: Dict[EventName, List[EventHandler]] = {name: [] for name in EventName}

    def get_slot(self, event: Union[str, EventName]) -> Optional[EventHandler]:
        return self._slots[_coerce_name(event)]

    def set_slot(self, event: Union[str, EventName], handler: Optional[EventHandler]) -> None:
        if handler is not None and not callable(handler):
            raise TypeError(f"on{_coerce_name(event).value} handler must be callable or None")
        self._slots[_coerce_name(event)] = handler

    def add_listener(self, event: Union[str, EventName], callback: EventHandler) -> None:
        """Append ``callback``; duplicates are kept and each fires."""
        if not callable(callback):
            raise TypeError("event listener must be callable")
        self._listeners[_coerce_name(event)].append(callback)

    def remove_listener(self, event: Union[str, EventName], callback: EventHandler) -> None:
        """Remove every registration of ``callback`` for ``event``."""
        name = _coerce_name(event)
        self._listeners[name] = [cb for cb in self._listeners[name] if cb != callback]

    def listeners(self, event: Union[str, EventName]) -> List[EventHandler]:
        return list(self._listeners[_coerce_name(event)])

    def dispatch(self, event: Union[str, EventName], detail: Any = None) -> None:
        """Invoke the slot handler, then each listener, in registration order."""
        name = _coerce_name(event)
        payload = XHREvent(type=name, target=self._owner, detail=detail)

        handlers: List[EventHandler] = []
        slot = self._slots[name]
        if slot is not None:
            handlers.append(slot)
        handlers.extend(self._listeners[name])

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception(
                    "Event handler raised",
                    extra={"event": name.value, "handler": getattr(handler, "__qualname__", repr(handler))},
                )


class EventSlot:
    """Descriptor exposing a dispatcher slot as an ``on<event>`` attribute.

    The owner class must keep its dispatcher in ``_events``.
    """

    def __init__(self, event: EventName) -> None:
        self.event = event

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance._events.get_slot(self.event)

    def __set__(self, instance: Any, handler: Optional[EventHandler]) -> None:
        instance._events.set_slot(self.event, handler)
