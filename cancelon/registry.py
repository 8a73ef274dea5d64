"""Registry for listener management.

This module provides ListenerRegistry for storing listeners per event
name in insertion order.  A dispatcher owns two of them: one for
persistent listeners and one for once listeners.
"""

from threading import RLock

from cancelon.utils import same_listener


class ListenerRegistry[CB]:
    """Registry table for event listeners.

    Maps each event name to the ordered list of listeners registered for
    it.  A name whose list would become empty is dropped, so absence of
    a key and an empty list mean the same thing.

    Every read-then-mutate sequence runs under a re-entrant lock.  The
    lock is never held while a listener runs: callers take a
    :meth:`snapshot` and iterate over that.
    """

    def __init__(self) -> None:
        """Initialize empty registry.

        Post:
            _listeners is empty dict mapping event names to lists.
        """
        self._listeners: dict[str, list[CB]] = {}
        self._lock = RLock()

    def __contains__(self, event_name: object) -> bool:
        with self._lock:
            return event_name in self._listeners

    def add(self, event_name: str, listener: CB) -> None:
        """Append a listener to the tail of an event's list.

        Args:
            event_name: Event to register for.
            listener: Listener callback.

        Post:
            listener is the last entry for event_name.
        """
        with self._lock:
            self._listeners.setdefault(event_name, []).append(listener)

    def remove(
        self, event_name: str, listener: CB, *, exact: bool = False
    ) -> CB | None:
        """Remove the first registration of a listener.

        Args:
            event_name: Event to remove from.
            listener: Listener to remove, matched by identity (bound
                methods also by instance and function).
            exact: Match by identity only.

        Returns:
            The registered entry that was removed, or None if none matched.

        Post:
            At most one entry removed; key dropped if its list is empty.
        """
        with self._lock:
            listeners = self._listeners.get(event_name)
            if not listeners:
                return None
            for index, registered in enumerate(listeners):
                if same_listener(registered, listener, exact=exact):
                    del listeners[index]
                    break
            else:
                return None
            if not listeners:
                del self._listeners[event_name]
            return registered

    def pop(self, event_name: str) -> list[CB]:
        """Remove every listener for an event.

        Args:
            event_name: Event to clear.

        Returns:
            The removed listeners in insertion order (empty if none).
        """
        with self._lock:
            return self._listeners.pop(event_name, [])

    def snapshot(self, event_name: str) -> list[CB]:
        """Return a copy of an event's listener list.

        Args:
            event_name: Event to read.

        Returns:
            New list; mutating it does not affect the registry.
        """
        with self._lock:
            return list(self._listeners.get(event_name, ()))

    def count(self, event_name: str) -> int:
        """Return the number of registrations for an event."""
        with self._lock:
            return len(self._listeners.get(event_name, ()))

    def event_names(self) -> list[str]:
        """Return registered event names in first-registration order."""
        with self._lock:
            return list(self._listeners)
