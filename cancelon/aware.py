"""Object-scoped listeners.

A class deriving from ``EmitterAware`` declares its listeners with
``@dispatcher.on_method()``.  Each instance registers its own bound
methods when it is built and can drop exactly those registrations again,
so a listener lives no longer than the object that owns it.
"""

from types import TracebackType
from typing import Any, Self

from loguru import logger

log = logger.bind(source=__name__)


class EmitterAwareMeta(type):
    """Runs listener binding once construction has finished.

    Binding happens from ``__call__`` rather than ``__init__`` so that
    subclasses which skip ``super().__init__()`` still get their
    listeners, and so that a listener never sees a half-built instance.
    """

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        instance = super().__call__(*args, **kwargs)
        instance._bind_listener_methods()
        return instance


class EmitterAware(metaclass=EmitterAwareMeta):
    """Base class whose instances own their event listeners.

    ``@dispatcher.on_method()`` leaves the function untouched apart from
    a mark, so nothing is registered while the class body runs.  Every
    new instance then registers its bound methods with the dispatchers
    named by those marks, in method-resolution order.

    The instance remembers each registration and :meth:`unregister`
    removes exactly those entries.  A bound method of the same function
    that was registered by hand is left alone.  Using the instance as a
    context manager scopes its listeners to the ``with`` block::

        class Quota(EmitterAware):
            def __init__(self, limit: int) -> None:
                self.left = limit

            @dispatcher.on_method("upload")
            def spend(self, size: int) -> bool:
                self.left -= size
                return self.left >= 0

        with Quota(limit=100):
            dispatcher.emit_sync("upload", 60)   # COMPLETED
            dispatcher.emit_sync("upload", 60)   # CANCELED
        dispatcher.emit_sync("upload", 60)       # NO_LISTENERS

    Marks under ``@staticmethod`` or ``@classmethod`` are honored; the
    descriptor has to be the outermost decorator.
    """

    # (dispatcher, event_name, registered bound method)
    _listener_registrations: list[tuple[Any, str, Any]]

    def _bind_listener_methods(self) -> None:
        """Register every marked method of this instance."""
        self._listener_registrations = []

        seen: set[str] = set()
        for klass in type(self).__mro__:
            for name, attr in vars(klass).items():
                if name in seen:
                    continue
                inner = attr
                if isinstance(attr, (staticmethod, classmethod)):
                    inner = attr.__func__
                if not callable(inner):
                    continue
                marks = getattr(inner, "_cancelon_marks", None)
                if not marks:
                    continue
                # Overridden in a subclass: only the most derived one counts
                seen.add(name)
                bound = getattr(self, name)
                for dispatcher, event_name, once in marks:
                    if once:
                        dispatcher.once(event_name, bound)
                    else:
                        dispatcher.on(event_name, bound)
                    self._listener_registrations.append((dispatcher, event_name, bound))

        if self._listener_registrations:
            log.debug(
                "Bound {} listener method(s) on {}",
                len(self._listener_registrations),
                type(self).__qualname__,
            )

    def unregister(self) -> None:
        """Remove the registrations this instance made.

        Entries are matched by identity, so a once listener that has
        already fired is simply not found.  Calling it again is a no-op.
        """
        for dispatcher, event_name, listener in self._listener_registrations:
            dispatcher.off(event_name, listener, exact=True)
        self._listener_registrations.clear()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.unregister()
