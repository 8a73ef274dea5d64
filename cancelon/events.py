"""Event names and dispatch outcomes for cancelon."""

from enum import Enum, StrEnum


class MetaEvent(StrEnum):
    """Bookkeeping events fired by the dispatcher itself.

    Members are plain strings, so ``dispatcher.on("newListener", ...)``
    and ``dispatcher.on(MetaEvent.NEW_LISTENER, ...)`` are equivalent.
    Meta-events are always dispatched synchronously and their outcome is
    ignored.
    """

    NEW_LISTENER = "newListener"
    """Fired with ``(event_name, listener)`` before a listener is added."""

    REMOVE_LISTENER = "removeListener"
    """Fired with ``(event_name, listener)`` after a listener is removed."""

    MAX_LISTENERS_PASSED = "maxListenersPassed"
    """Fired with ``(event_name, count)`` when the threshold is crossed."""


class EmitOutcome(Enum):
    """Result of one emission.

    ``bool(outcome)`` is False only for :attr:`CANCELED`, so callers that
    only care whether the event went through can write
    ``if not dispatcher.emit_sync(...)``.
    """

    NO_LISTENERS = "no_listeners"
    CANCELED = "canceled"
    COMPLETED = "completed"

    def __bool__(self) -> bool:
        return self is not EmitOutcome.CANCELED

    @property
    def canceled(self) -> bool:
        return self is EmitOutcome.CANCELED
