"""cancelon - Cancelable, ordered event dispatch for Python.

This package provides an event emitter whose listeners run one at a time
in registration order, may be synchronous or asynchronous, and may cancel
the rest of an emission by returning ``False``.
"""

__version__ = "0.1.0"

from loguru import logger

# Disable all cancelon logging by default.  Users opt in with:
#     from loguru import logger
#     logger.enable("cancelon")
logger.disable("cancelon")

from cancelon.aware import EmitterAware
from cancelon.base_dispatcher import BaseDispatcher
from cancelon.dispatcher import Dispatcher
from cancelon.events import EmitOutcome, MetaEvent
from cancelon.exceptions import (
    AsyncListenerError,
    CancelonError,
    CancelonWarning,
    MaxListenersExceededWarning,
    SettingsValidationError,
)
from cancelon.settings import DEFAULT_MAX_LISTENERS, EmitterSettings

# Module-level default dispatcher instance
default_dispatcher = Dispatcher()

__all__ = [
    # Version
    "__version__",
    # Dispatcher classes
    "BaseDispatcher",
    "Dispatcher",
    "EmitterAware",
    "default_dispatcher",
    # Events and outcomes
    "EmitOutcome",
    "MetaEvent",
    # Configuration
    "DEFAULT_MAX_LISTENERS",
    "EmitterSettings",
    # Exception classes
    "CancelonError",
    "AsyncListenerError",
    "SettingsValidationError",
    # Warnings
    "CancelonWarning",
    "MaxListenersExceededWarning",
]
