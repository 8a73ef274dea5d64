import inspect
import warnings
from abc import ABC, abstractmethod
from collections.abc import Callable
from threading import RLock
from typing import Any, Self

from loguru import logger

from cancelon._types import Listener
from cancelon.events import EmitOutcome, MetaEvent
from cancelon.exceptions import AsyncListenerError, MaxListenersExceededWarning
from cancelon.registry import ListenerRegistry
from cancelon.settings import EmitterSettings
from cancelon.utils import callable_name

log = logger.bind(source=__name__)


class BaseDispatcher(ABC):
    """Abstract base class for event dispatchers.

    Provides everything except the awaited dispatch path:
    - Listener registration/unregistration with meta-event notifications
    - The ``max_listeners`` threshold
    - Synchronous dispatch via :meth:`emit_sync`

    Subclasses must implement:
    - emit() - Awaited dispatching logic

    Listeners live in two private registries, persistent (``on``) and
    one-shot (``once``).  Dispatch order for one emission is every once
    listener in insertion order, then every persistent listener in
    insertion order.
    """

    _settings: EmitterSettings
    _persistent: ListenerRegistry[Listener]
    _once: ListenerRegistry[Listener]
    _warned: set[str]  # Events already reported to maxListenersPassed
    _lock: RLock  # Guards _warned and the counts it is derived from

    def __init__(
        self,
        settings: EmitterSettings | None = None,
        *,
        max_listeners: int | float | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            settings: Emitter settings; a private copy is kept.
            max_listeners: Shortcut overriding ``settings.max_listeners``.

        Raises:
            SettingsValidationError: If max_listeners is invalid.
        """
        self._settings = (
            settings.model_copy() if settings is not None else EmitterSettings()
        )
        if max_listeners is not None:
            self._settings.max_listeners = max_listeners
        self._persistent = ListenerRegistry()
        self._once = ListenerRegistry()
        self._warned = set()
        self._lock = RLock()
        if self._settings.warn_on_max_listeners:
            self.on(MetaEvent.MAX_LISTENERS_PASSED, self.warn_max_listeners)

    # -- registration ---------------------------------------------------------

    def on(self, event_name: str, listener: Listener) -> Self:
        """Register a persistent listener.

        Args:
            event_name: Event to listen for.
            listener: Sync or async callable.

        Returns:
            This dispatcher, for chaining.

        Post:
            ``newListener`` fired before the listener was appended.
            ``maxListenersPassed`` fired if the threshold was just crossed.

        Raises:
            AsyncListenerError: If a meta-event listener is async.
        """
        return self._register(self._persistent, event_name, listener)

    add_listener = on

    def once(self, event_name: str, listener: Listener) -> Self:
        """Register a listener that is removed before its first invocation.

        Args:
            event_name: Event to listen for.
            listener: Sync or async callable.

        Returns:
            This dispatcher, for chaining.

        Raises:
            AsyncListenerError: If a meta-event listener is async.
        """
        return self._register(self._once, event_name, listener)

    def off(self, event_name: str, listener: Listener, *, exact: bool = False) -> Self:
        """Remove one registration of a listener.

        The first matching entry is removed from the persistent registry
        and the first matching entry from the once registry.  A listener
        that is not registered is ignored.

        Args:
            event_name: Event to remove from.
            listener: Listener to remove.  Matched by identity; a bound
                method also matches another bound method of the same
                function on the same instance.
            exact: Match by identity only, so a re-fetched bound method
                does not match.

        Returns:
            This dispatcher, for chaining.

        Post:
            ``removeListener`` fired once per removed entry, after removal.
        """
        for registry in (self._persistent, self._once):
            removed = registry.remove(event_name, listener, exact=exact)
            if removed is None:
                continue
            self._forget_warning(event_name)
            log.debug("Removed {} from {!r}", callable_name(removed), event_name)
            self.emit_sync(MetaEvent.REMOVE_LISTENER, event_name, removed)
        return self

    remove_listener = off

    def remove_all_listeners(self, event_name: str | None = None) -> Self:
        """Remove every listener for one event, or for all events.

        Args:
            event_name: Event to clear, or None for every registered event.

        Returns:
            This dispatcher, for chaining.

        Post:
            ``removeListener`` fired once per removed listener.  When
            clearing every event, ``removeListener`` listeners are removed
            last so they see the other removals.
        """
        if event_name is None:
            names = self.event_names()
            if MetaEvent.REMOVE_LISTENER in names:
                names.remove(MetaEvent.REMOVE_LISTENER)
                names.append(MetaEvent.REMOVE_LISTENER)
            for name in names:
                self.remove_all_listeners(name)
            return self

        removed = self._persistent.pop(event_name) + self._once.pop(event_name)
        self._forget_warning(event_name)
        if removed:
            log.debug("Removed {} listener(s) from {!r}", len(removed), event_name)
        for listener in removed:
            self.emit_sync(MetaEvent.REMOVE_LISTENER, event_name, listener)
        return self

    def listen[F: Callable[..., Any]](
        self, event_name: str, *, once: bool = False
    ) -> Callable[[F], F]:
        """Decorator to register a plain function as listener.

        For class methods, use :meth:`on_method` instead so the bound
        method is registered at instantiation time via
        :class:`~cancelon.aware.EmitterAware`.

        Args:
            event_name: Event to listen for.
            once: Register with :meth:`once` instead of :meth:`on`.

        Returns:
            Decorator function that returns the original function unchanged.
        """

        def decorator(func: F) -> F:
            if once:
                self.once(event_name, func)
            else:
                self.on(event_name, func)
            return func

        return decorator

    def on_method[F: Callable[..., Any]](
        self, event_name: str, *, once: bool = False
    ) -> Callable[[F], F]:
        """Decorator to mark a class method for deferred registration.

        Does **not** register anything.  Instead it stamps metadata on the
        unbound function so that :class:`~cancelon.aware.EmitterAware`
        can register the *bound* method when the owning class is
        instantiated.  Can be stacked to listen for several events.

        Args:
            event_name: Event to listen for.
            once: Register with :meth:`once` instead of :meth:`on`.

        Returns:
            Decorator function that returns the original function unchanged.
        """

        def decorator(func: F) -> F:
            marks = func.__dict__.setdefault("_cancelon_marks", [])
            marks.append((self, event_name, once))
            return func

        return decorator

    # -- introspection --------------------------------------------------------

    def set_max_listeners(self, count: int | float) -> Self:
        """Set the per-event listener threshold.

        Args:
            count: New threshold; ``0`` or ``math.inf`` disables the check.

        Returns:
            This dispatcher, for chaining.

        Raises:
            SettingsValidationError: If count is negative or not integral.
        """
        with self._lock:
            self._settings.max_listeners = count
            self._warned.clear()
        return self

    def get_max_listeners(self) -> int | float:
        """Return the per-event listener threshold."""
        return self._settings.max_listeners

    def listeners(self, event_name: str) -> list[Listener]:
        """Return persistent then once listeners for an event.

        The list is a copy; the listeners in it are not.
        """
        return self._persistent.snapshot(event_name) + self._once.snapshot(
            event_name
        )

    def listener_count(self, event_name: str) -> int:
        """Return the number of listeners registered for an event.

        Also usable unbound as ``Dispatcher.listener_count(instance, name)``.
        """
        return self._persistent.count(event_name) + self._once.count(event_name)

    def event_names(self) -> list[str]:
        """Return names of events that have at least one listener."""
        names = self._persistent.event_names()
        names.extend(n for n in self._once.event_names() if n not in names)
        return names

    # -- dispatch -------------------------------------------------------------

    def emit_sync(self, event_name: str, *args: Any, **kwargs: Any) -> EmitOutcome:
        """Synchronously dispatch an event.

        Once listeners run first, then persistent listeners, each group in
        registration order.  Every once listener is removed (and
        ``removeListener`` fired) before it is invoked.

        Warning:
            Listeners can recursively call emit_sync(). Cycles are not
            detected; an A->B->A chain ends in Python's RecursionError.

        Args:
            event_name: Event to dispatch.
            *args: Positional arguments passed to every listener.
            **kwargs: Keyword arguments passed to every listener.

        Returns:
            ``NO_LISTENERS`` if nothing is registered, ``CANCELED`` if a
            listener returned False, otherwise ``COMPLETED``.

        Raises:
            AsyncListenerError: If a listener returns an awaitable.
            Exception: Whatever a listener raises, unchanged.
        """
        plan = self._call_plan(event_name)
        if not plan:
            return EmitOutcome.NO_LISTENERS
        log.debug("Emit {!r} (sync, {} listener(s))", event_name, len(plan))
        for listener, once in plan:
            if once:
                self._consume_once(event_name, listener)
            result = listener(*args, **kwargs)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise AsyncListenerError(event_name, listener)
            if result is False:
                log.debug("{!r} canceled by {}", event_name, callable_name(listener))
                return EmitOutcome.CANCELED
        return EmitOutcome.COMPLETED

    @abstractmethod
    def emit(self, event_name: str, *args: Any, **kwargs: Any) -> Any:
        """Dispatch an event, awaiting async listeners.

        Args:
            event_name: Event to dispatch.
            *args: Positional arguments passed to every listener.
            **kwargs: Keyword arguments passed to every listener.

        Returns:
            Dispatch outcome (awaitable).
        """
        raise NotImplementedError

    def warn_max_listeners(self, event_name: str, count: int) -> None:
        """Default ``maxListenersPassed`` handler.

        Logs a warning and issues :class:`MaxListenersExceededWarning`.
        Remove it with ``remove_all_listeners("maxListenersPassed")``.
        """
        message = (
            f"The event {event_name!r} has exceeded "
            f"{self._settings.max_listeners} listeners, currently at {count}"
        )
        log.warning("{}", message)
        warnings.warn(message, MaxListenersExceededWarning, stacklevel=2)

    # -- internals ------------------------------------------------------------

    def _register(
        self,
        registry: ListenerRegistry[Listener],
        event_name: str,
        listener: Listener,
    ) -> Self:
        self.emit_sync(MetaEvent.NEW_LISTENER, event_name, listener)
        registry.add(event_name, listener)
        log.debug(
            "Registered {} for {!r}{}",
            callable_name(listener),
            event_name,
            " (once)" if registry is self._once else "",
        )
        self._check_max_listeners(event_name)
        return self

    def _check_max_listeners(self, event_name: str) -> None:
        """Fire ``maxListenersPassed`` when an event crosses the threshold."""
        with self._lock:
            if not self._settings.limited:
                return
            count = self.listener_count(event_name)
            if count <= self._settings.max_listeners:
                self._warned.discard(event_name)
                return
            if event_name in self._warned:
                return
            self._warned.add(event_name)
        # Listeners never run under the lock
        self.emit_sync(MetaEvent.MAX_LISTENERS_PASSED, event_name, count)

    def _forget_warning(self, event_name: str) -> None:
        """Re-arm the threshold check once an event drops back under it."""
        with self._lock:
            if event_name not in self._warned:
                return
            if (
                not self._settings.limited
                or self.listener_count(event_name) <= self._settings.max_listeners
            ):
                self._warned.discard(event_name)

    def _call_plan(self, event_name: str) -> list[tuple[Listener, bool]]:
        """Snapshot the listeners for one emission.

        Returns:
            ``(listener, is_once)`` pairs, once listeners first.  Empty if
            the event has no listeners.
        """
        once = self._once.snapshot(event_name)
        persistent = self._persistent.snapshot(event_name)
        return [(cb, True) for cb in once] + [(cb, False) for cb in persistent]

    def _consume_once(self, event_name: str, listener: Listener) -> None:
        """Remove a once listener ahead of its invocation.

        A listener someone else already removed is tolerated and not
        announced a second time.
        """
        removed = self._once.remove(event_name, listener, exact=True)
        if removed is None:
            return
        self._forget_warning(event_name)
        self.emit_sync(MetaEvent.REMOVE_LISTENER, event_name, removed)
