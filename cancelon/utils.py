import inspect
from typing import Any


def callable_name(cb: Any) -> str:
    """Return a human-readable name for a callable, safe for logging.

    Falls back through ``__qualname__``, ``__name__``, and ``repr()``
    so that ``functools.partial``, callable instances, and other exotic
    callables never raise ``AttributeError``.

    Args:
        cb: Any callable object.

    Returns:
        Display name string.
    """
    return (
        getattr(cb, "__qualname__", None) or getattr(cb, "__name__", None) or repr(cb)
    )


def same_listener(registered: Any, candidate: Any, *, exact: bool = False) -> bool:
    """Return True if *candidate* designates the *registered* listener.

    Listeners are matched by identity.  ``obj.method`` builds a new bound
    method object on every access, so two bound methods also match when
    they wrap the same function on the same instance.  Plain ``==`` is
    never used: distinct callables that merely compare equal stay
    distinct.

    Args:
        registered: Listener stored in a registry.
        candidate: Listener passed by the caller.
        exact: Match by identity only, bound methods included.

    Returns:
        Whether the two refer to the same listener.
    """
    if registered is candidate:
        return True
    if exact or not (inspect.ismethod(registered) and inspect.ismethod(candidate)):
        return False
    return (
        registered.__self__ is candidate.__self__
        and registered.__func__ is candidate.__func__
    )
