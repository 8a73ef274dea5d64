"""Shared type definitions for cancelon.

All type aliases use PEP 695 ``type`` statement syntax.
``SyncListener`` and ``AsyncListener`` are the two listener variants;
the dispatcher tells them apart by the value a call returns, not by
the alias they were declared with.
"""

from collections.abc import Awaitable, Callable
from typing import Any

type ListenerResult = bool | None | Any
"""Value a listener may return.

Only ``False`` has meaning to the dispatcher: it cancels the emission.
Every other value is ignored.
"""

type SyncListener = Callable[..., ListenerResult]
"""Listener that returns its result directly."""

type AsyncListener = Callable[..., Awaitable[ListenerResult]]
"""Listener that returns an awaitable resolving to its result."""

type Listener = SyncListener | AsyncListener
"""Any listener accepted by :meth:`BaseDispatcher.on`."""
