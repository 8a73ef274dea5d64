"""Exception hierarchy for cancelon.

All custom exceptions inherit from CancelonError base class.
"""

from typing import Any


class CancelonError(Exception):
    """Base exception for all cancelon errors.

    All custom exceptions in cancelon inherit from this class, allowing
    users to catch all framework-specific errors with a single except clause.
    """


class AsyncListenerError(CancelonError, TypeError):
    """A listener returned an awaitable on the synchronous dispatch path.

    Raised by :meth:`BaseDispatcher.emit_sync` (and therefore by every
    meta-event notification) when a listener's result is awaitable.
    Dispatch stops at the offending listener.

    Attributes:
        event_name: Name of the event being dispatched.
        listener: The listener that returned an awaitable.
    """

    def __init__(self, event_name: str, listener: Any = None) -> None:
        super().__init__(f'async listeners not allowed for "{event_name}"')
        self.event_name = event_name
        self.listener = listener


class SettingsValidationError(CancelonError, ValueError):
    """Emitter settings validation failed.

    Raised when ``max_listeners`` or another setting fails pydantic
    validation.

    This wraps pydantic.ValidationError to provide a framework-specific exception type.
    """


# -- Warnings -----------------------------------------------------------------


class CancelonWarning(Warning):
    """Base class for warnings issued by cancelon."""


class MaxListenersExceededWarning(CancelonWarning, RuntimeWarning):
    """More listeners were registered for one event than allowed.

    Issued by the default ``maxListenersPassed`` handler.  Usually a sign
    of a listener leak.
    """
