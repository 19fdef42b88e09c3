"""
Thread-scoped "current registry" support.

`run` and `registry_context` make an `IdRegistry` available to
everything called on the same thread via `current_registry`, so that
collaborating code can share one registry without passing it around.
Both are reentrant: nested calls on the same thread reuse the
registry created by the outermost call.
"""

import threading
from contextlib import contextmanager

from .exceptions import NoCurrentRegistryError, ScopeError
from .registry import IdRegistry

__all__ = ["ThreadLocalHolder", "current_registry", "registry_context", "run"]


class _HolderLocal(threading.local):
    def __init__(self):
        self.value = None


class ThreadLocalHolder:
    """
    Holds a thread-local value whose lifetime matches an outermost
    call to `invoke` (or an outermost `holding` block).

    Nested invocations on the same thread must pass the very same
    value; the value is removed, and `destroy` is called, when the
    outermost invocation exits, whether or not it raised.
    """

    missing_error = ScopeError
    missing_message = "No value is held for the current thread"

    def __init__(self):
        self._local = _HolderLocal()

    @contextmanager
    def holding(self, value):
        if value is None:
            msg = "value must not be None"
            raise ValueError(msg)
        previous = self._local.value
        top_level = previous is None
        if not top_level and previous is not value:
            msg = "Already holding a different value on this thread"
            raise ScopeError(msg)
        if top_level:
            self._local.value = value
        try:
            yield value
        finally:
            if top_level:
                self._local.value = None
                self.destroy(value)

    def invoke(self, value, action, *args, **kwargs):
        if action is None:
            msg = "action must not be None"
            raise ValueError(msg)
        with self.holding(value):
            return action(*args, **kwargs)

    def get(self):
        """
        Return the value held for the current thread, or `None`.
        """
        return self._local.value

    def require(self):
        """
        Return the value held for the current thread; there must be one.
        """
        value = self._local.value
        if value is None:
            raise self.missing_error(self.missing_message)
        return value

    def destroy(self, value):
        """
        Clean up a value once its outermost scope has exited.
        Does nothing by default.
        """


class _RegistryHolder(ThreadLocalHolder):
    missing_error = NoCurrentRegistryError
    missing_message = (
        "There is no current IdRegistry on this thread; "
        "are we running within weakid.run() or weakid.registry_context()?"
    )


_current = _RegistryHolder()


@contextmanager
def registry_context():
    """
    Context manager that makes an `IdRegistry` current for the
    duration of the block.  The outermost block on a thread creates
    the registry; nested blocks yield the same one.

    Yields
    ------
    weakid.IdRegistry
    """
    registry = _current.get()
    if registry is None:
        registry = IdRegistry()
    with _current.holding(registry):
        yield registry


def run(work, *args, **kwargs):
    """
    Call ``work(*args, **kwargs)`` with an `IdRegistry` available
    through `current_registry`.

    Reentrant: nested calls on the same thread reuse the registry
    created by the outermost call.

    Returns
    -------
    object
        Whatever ``work`` returns.
    """
    if work is None:
        msg = "work must not be None"
        raise ValueError(msg)
    with registry_context():
        return work(*args, **kwargs)


def current_registry():
    """
    Get the registry created by the outermost still running `run`
    (or `registry_context`) on this thread.

    Returns
    -------
    weakid.IdRegistry

    Raises
    ------
    weakid.exceptions.NoCurrentRegistryError
        If the current thread is not running inside `run` or
        `registry_context`.
    """
    return _current.require()
