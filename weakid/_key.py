"""
A hashable key that identifies an object by identity while only
holding a weak reference to it.

Using ``id(obj)`` directly as a dictionary key is not safe: once the
object is deallocated a new object may occupy the same memory and
receive the same id, silently inheriting whatever was associated
with the first object.  `WeakIdentityKey` keeps the ``id(obj)`` value
only as a hash and decides equality by checking that both keys still
refer to the very same live object.

A key becomes "dead" when its referent is garbage collected.  Dead
keys are never equal to anything (not even themselves) and exist only
so that they can be found and purged.  Python dictionaries check
``is`` before ``==`` so a dead key can still be removed from a dict
when the caller holds the key instance itself.
"""

import weakref

__all__ = ["WeakIdentityKey"]


class WeakIdentityKey(weakref.ref):
    """
    A weak reference that hashes and compares by object identity.

    Parameters
    ----------
    obj : object
        The object to reference.  It must support weak references.

    callback : callable, optional
        Called with this key as its only argument after ``obj``
        has been garbage collected.  Keys without a callback are
        intended as transient lookup keys.
    """

    __slots__ = ("_hash",)

    def __new__(cls, obj, callback=None):
        if obj is None:
            msg = "Cannot create a key for None"
            raise ValueError(msg)
        return super().__new__(cls, obj, callback)

    def __init__(self, obj, callback=None):
        super().__init__(obj, callback)
        # id(obj) is only unique while obj is alive; keep it as the
        # hash so the key stays hashable after obj is collected
        self._hash = id(obj)

    def is_alive(self):
        return self() is not None

    def __hash__(self):
        return self._hash

    def __eq__(self, other):
        if not isinstance(other, WeakIdentityKey):
            return NotImplemented
        obj = self()
        if obj is None:
            return False
        return obj is other()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        obj = self()
        if obj is None:
            return f"<{type(self).__name__} dead at {self._hash:#x}>"
        return f"<{type(self).__name__} to {type(obj).__name__} at {self._hash:#x}>"
