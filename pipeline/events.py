"""Minimal synchronous event emitter used for settlement notifications."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

Listener = Callable[..., Any]


class EventEmitter:
    """Named-event publish/subscribe with persistent and one-shot listeners.

    ``emit`` calls listeners synchronously, in registration order, over a
    snapshot of the listeners present when it was called.  Listener
    exceptions propagate to the emitter's caller.
    """

    def __init__(self) -> None:
        # (listener, once) pairs per event
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners.setdefault(event, []).append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners.setdefault(event, []).append((listener, True))
        return self

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        """Remove the first registration of *listener* for *event*, if any.

        Listeners are compared with ``==`` so a bound method such as
        ``items.append`` matches a fresh ``items.append`` lookup.
        """
        entries = self._listeners.get(event)
        if not entries:
            return self
        for entry in entries:
            if entry[0] == listener:
                self._discard(event, entry)
                break
        return self

    def _discard(self, event: str, entry: Tuple[Listener, bool]) -> None:
        entries = self._listeners.get(event)
        if not entries:
            return
        # identity match: the same listener may be registered more than once
        for i, registered in enumerate(entries):
            if registered is entry:
                del entries[i]
                break
        if not entries:
            del self._listeners[event]

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener for *event* with *args*.

        Returns:
            *True* if at least one listener was called.
        """
        entries = list(self._listeners.get(event, ()))
        if not entries:
            return False
        for entry in entries:
            listener, once = entry
            if once:
                self._discard(event, entry)
            listener(*args)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def remove_all_listeners(self, event: Optional[str] = None) -> "EventEmitter":
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self
