"""Emitter configuration model.

Settings are validated with pydantic on construction and on every
assignment; validation failures surface as
:class:`~cancelon.exceptions.SettingsValidationError`.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cancelon.exceptions import SettingsValidationError

DEFAULT_MAX_LISTENERS = 10


class EmitterSettings(BaseModel):
    """Tunable behaviour of a dispatcher.

    Attributes:
        max_listeners: Per-event listener count above which
            ``maxListenersPassed`` fires.  ``0`` or ``math.inf`` disables
            the check.
        warn_on_max_listeners: Install the default ``maxListenersPassed``
            handler that issues a :class:`MaxListenersExceededWarning`.

    Raises:
        SettingsValidationError: If a field fails validation.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid", strict=True)

    max_listeners: int | float = DEFAULT_MAX_LISTENERS
    warn_on_max_listeners: bool = True

    def __init__(self, **data: Any) -> None:
        """Wrap pydantic ValidationError into SettingsValidationError."""
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise SettingsValidationError(str(exc)) from exc

    def __setattr__(self, name: str, value: Any) -> None:
        try:
            super().__setattr__(name, value)
        except ValidationError as exc:
            raise SettingsValidationError(str(exc)) from exc

    @field_validator("max_listeners")
    @classmethod
    def _check_max_listeners(cls, value: int | float) -> int | float:
        if isinstance(value, float) and value != math.inf:
            raise ValueError("max_listeners must be an integer or math.inf")
        if value < 0:
            raise ValueError("max_listeners must be non-negative")
        return value

    @property
    def limited(self) -> bool:
        """True when the listener threshold is enforced."""
        return self.max_listeners != 0 and self.max_listeners != math.inf
