"""
A thread-safe registry of unique integer ids for objects.

Ids are assigned by object identity, not equality: two equal but
distinct objects receive different ids.  The registry only holds weak
references so registered objects are garbage collected normally; the
entries of collected objects are purged the next time the registry
is used.

New ids are issued sequentially starting at 1 and are never reused,
even after the object they were issued for is gone.  The id ``0``
is never assigned and is used to mean "not registered".
"""

import queue
import threading
import warnings

from ._key import WeakIdentityKey
from .config import get_config
from .exceptions import IdCollisionWarning, IdConflictError, IdExhaustedError

__all__ = ["IdRegistry"]


def _validate_obj(obj):
    if obj is None:
        msg = "obj must not be None"
        raise ValueError(msg)


def _validate_id_type(obj_id):
    if isinstance(obj_id, bool) or not isinstance(obj_id, int):
        msg = f"id must be an int, got {type(obj_id).__name__}"
        raise TypeError(msg)


class IdRegistry:
    """
    Registry of unique ids for objects.

    Instances are thread safe.  Every operation holds a single
    registry-wide lock, and every operation except `next_id`
    first purges the entries of objects that have been garbage
    collected.

    Parameters
    ----------
    max_id : int, optional
        The largest id this registry will issue.  Defaults to
        ``weakid.get_config().max_id``.
    """

    def __init__(self, max_id=None):
        cfg = get_config()
        if max_id is None:
            max_id = cfg.max_id
        if isinstance(max_id, bool) or not isinstance(max_id, int) or max_id < 1:
            msg = f"max_id must be a positive integer, got {max_id!r}"
            raise ValueError(msg)
        self._max_id = max_id
        self._warn_on_id_skip = cfg.warn_on_id_skip

        self._forward = {}
        self._reverse = {}
        self._next = 1
        self._lock = threading.Lock()
        # SimpleQueue.put is safe to call from weakref callbacks, which
        # may run in any thread, including one that holds self._lock
        self._dead = queue.SimpleQueue()

    @property
    def max_id(self):
        return self._max_id

    def _track(self, obj):
        return WeakIdentityKey(obj, self._dead.put)

    def _bind(self, key, obj_id):
        self._forward[key] = obj_id
        self._reverse[obj_id] = key

    def _flush(self):
        while True:
            try:
                key = self._dead.get_nowait()
            except queue.Empty:
                break
            obj_id = self._forward.pop(key, None)
            if obj_id is not None and self._reverse.get(obj_id) is key:
                del self._reverse[obj_id]

    def _lookup(self, obj):
        # a transient key: if obj turns out to be unregistered there
        # is nothing to purge when it dies
        return self._forward.get(WeakIdentityKey(obj))

    def get_id(self, obj):
        """
        Get the unique id for an object, assigning a new one if
        the object has not been seen before.

        Parameters
        ----------
        obj : object
            Object to identify.  It must support weak references.

        Returns
        -------
        int
            A non-zero id, the same one for every call with the
            same object.

        Raises
        ------
        ValueError
            If ``obj`` is `None`.
        TypeError
            If ``obj`` cannot be weakly referenced.
        weakid.exceptions.IdExhaustedError
            If every id up to ``max_id`` has been issued.
        """
        _validate_obj(obj)
        with self._lock:
            self._flush()
            obj_id = self._lookup(obj)
            if obj_id is not None:
                return obj_id

            obj_id = self._next
            while obj_id in self._reverse:
                if self._warn_on_id_skip:
                    warnings.warn(
                        f"id {obj_id} was already assigned with set_id; skipping it",
                        IdCollisionWarning,
                    )
                obj_id += 1
            if obj_id > self._max_id:
                msg = f"No more ids left to issue (max_id={self._max_id})"
                raise IdExhaustedError(msg)

            self._bind(self._track(obj), obj_id)
            self._next = obj_id + 1
            return obj_id

    def next_id(self):
        """
        Get the id that the next new registration via `get_id`
        would start from.  Does not assign it.

        Returns
        -------
        int
        """
        with self._lock:
            return self._next

    def check_id(self, obj):
        """
        Get the id of an object if it is already registered.

        Parameters
        ----------
        obj : object

        Returns
        -------
        int
            The object's id, or ``0`` if it is not registered.
        """
        _validate_obj(obj)
        with self._lock:
            self._flush()
            obj_id = self._lookup(obj)
            return 0 if obj_id is None else obj_id

    def set_id(self, obj, obj_id):
        """
        Bind an object to a specific id.  Does nothing if the
        object is already bound to that id.

        This does not advance the sequential counter used by
        `get_id`; if the counter later reaches an id bound here
        while its object is still alive, that id is skipped.

        Parameters
        ----------
        obj : object
            Object to bind.  It must support weak references.
        obj_id : int
            The id, between 1 and ``max_id``.

        Raises
        ------
        ValueError
            If ``obj`` is `None` or ``obj_id`` is out of range.
        weakid.exceptions.IdConflictError
            If ``obj_id`` is bound to a different live object, or
            ``obj`` is already bound to a different id.
        """
        _validate_obj(obj)
        _validate_id_type(obj_id)
        if not 1 <= obj_id <= self._max_id:
            msg = f"id {obj_id} is out of range [1, {self._max_id}]"
            raise ValueError(msg)

        with self._lock:
            self._flush()
            key = self._reverse.get(obj_id)
            if key is not None:
                current = key()
                if current is obj:
                    return
                # a referent that died after the flush above frees the id;
                # its queued key is purged by a later flush
                if current is not None:
                    msg = f"id {obj_id} is already assigned to another object"
                    raise IdConflictError(msg)
            existing = self._lookup(obj)
            if existing is not None:
                msg = f"object is already assigned id {existing}, cannot assign {obj_id}"
                raise IdConflictError(msg)
            self._bind(self._track(obj), obj_id)

    def get_object(self, obj_id):
        """
        Get the object bound to an id.

        Parameters
        ----------
        obj_id : int

        Returns
        -------
        object or None
            The object, or `None` if no live object has that id.

        Raises
        ------
        ValueError
            If ``obj_id`` is `None`.
        TypeError
            If ``obj_id`` is not an int.
        """
        if obj_id is None:
            msg = "id must not be None"
            raise ValueError(msg)
        _validate_id_type(obj_id)

        with self._lock:
            self._flush()
            key = self._reverse.get(obj_id)
            return None if key is None else key()

    def flush(self):
        """
        Purge the entries of objects that have been garbage collected.

        This happens automatically at the start of every other
        operation, so calling it is only useful to release memory
        held by the entries of many collected objects.
        """
        with self._lock:
            self._flush()

    def __len__(self):
        with self._lock:
            self._flush()
            return len(self._reverse)

    def __contains__(self, obj):
        if obj is None:
            return False
        return self.check_id(obj) != 0

    def __repr__(self):
        with self._lock:
            return f"<{type(self).__name__} entries={len(self._reverse)} next={self._next}>"
