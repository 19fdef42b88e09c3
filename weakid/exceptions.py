__all__ = [
    "IdCollisionWarning",
    "IdConflictError",
    "IdExhaustedError",
    "NoCurrentRegistryError",
    "ReferenceFormatError",
    "ScopeError",
    "UnresolvedReferenceError",
    "WeakIdError",
    "WeakIdWarning",
]


class WeakIdWarning(Warning):
    """
    The base warning class from which all weakid warnings should inherit.
    """


class IdCollisionWarning(WeakIdWarning):
    """
    Issued when sequential id allocation steps over an id that was
    bound explicitly with `weakid.IdRegistry.set_id`.
    """


class WeakIdError(Exception):
    """
    The base class for errors raised by weakid.
    """


class IdExhaustedError(WeakIdError, RuntimeError):
    """
    Indicates that a registry has no ids left to issue.  Bindings
    made before the counter ran out remain valid.
    """


class IdConflictError(WeakIdError, ValueError):
    """
    Indicates an attempt to bind an id that already belongs to a
    different live object, or to re-bind an object that already
    has a different id.
    """


class ScopeError(WeakIdError, RuntimeError):
    """
    A thread-scoped value was used incorrectly.
    """


class NoCurrentRegistryError(ScopeError):
    """
    Indicates that `weakid.current_registry` was called on a thread
    that is not running inside `weakid.run` or `weakid.registry_context`.
    """


class ReferenceFormatError(WeakIdError, ValueError):
    """
    A string could not be parsed as an object reference.
    """


class UnresolvedReferenceError(WeakIdError, LookupError):
    """
    A reference names an id that is not bound to any live object.
    This usually means a forward reference, or that the object
    was garbage collected.
    """
