"""Event dispatcher with cancelable, awaited dispatch."""

import inspect
from typing import Any

from loguru import logger

from cancelon.base_dispatcher import BaseDispatcher
from cancelon.events import EmitOutcome
from cancelon.utils import callable_name

log = logger.bind(source=__name__)


class Dispatcher(BaseDispatcher):
    """Cancelable event dispatcher.

    Listeners run one at a time in a fixed order: once listeners first,
    then persistent listeners.  Any listener can stop the emission by
    returning ``False`` (or an awaitable resolving to ``False``).

    :meth:`emit` awaits async listeners; :meth:`emit_sync` refuses them.
    Meta-events (``newListener``, ``removeListener``,
    ``maxListenersPassed``) always go through :meth:`emit_sync`.
    Recursive emit() calls execute directly (no queue).
    """

    async def emit(self, event_name: str, *args: Any, **kwargs: Any) -> EmitOutcome:
        """Dispatch an event, awaiting each async listener in turn.

        Listeners never run concurrently with each other: an awaitable
        result is awaited to completion before the next listener is
        called.  Synchronous listeners run without yielding.  There is no
        timeout; wrap the call in ``asyncio.wait_for`` if one is needed.

        Warning:
            Listeners can recursively call emit(). Framework does not detect cycles.
            Users must avoid infinite recursion chains (e.g., A→B→A), otherwise
            Python's RecursionError will be raised.

        Args:
            event_name: Event to dispatch.
            *args: Positional arguments passed to every listener.
            **kwargs: Keyword arguments passed to every listener.

        Returns:
            ``NO_LISTENERS`` if nothing is registered, ``CANCELED`` if a
            listener returned or resolved to False, otherwise ``COMPLETED``.

        Post:
            Every once listener that was invoked has been removed.

        Raises:
            AsyncListenerError: If a ``removeListener`` listener is async.
            Exception: Whatever a listener raises, unchanged.
        """
        plan = self._call_plan(event_name)
        if not plan:
            return EmitOutcome.NO_LISTENERS
        log.debug("Emit {!r} ({} listener(s))", event_name, len(plan))
        for listener, once in plan:
            if once:
                self._consume_once(event_name, listener)
            result = listener(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            if result is False:
                log.debug("{!r} canceled by {}", event_name, callable_name(listener))
                return EmitOutcome.CANCELED
        return EmitOutcome.COMPLETED

    emit_async = emit
