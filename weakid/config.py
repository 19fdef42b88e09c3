"""
Methods for getting and setting weakid global configuration
options.
"""

import copy
import threading
from contextlib import contextmanager

__all__ = ["WeakIdConfig", "config_context", "get_config"]


# largest value of an unsigned 64-bit counter
DEFAULT_MAX_ID = 2**64 - 1
DEFAULT_ID_PREFIX = "N"
DEFAULT_WARN_ON_ID_SKIP = True


class WeakIdConfig:
    """
    Container for weakid configuration options.  Users are not intended to
    construct this object directly; instead, use the `weakid.get_config` and
    `weakid.config_context` module methods.
    """

    def __init__(self):
        self._max_id = DEFAULT_MAX_ID
        self._id_prefix = DEFAULT_ID_PREFIX
        self._warn_on_id_skip = DEFAULT_WARN_ON_ID_SKIP
        self._lock = threading.RLock()

    @property
    def max_id(self):
        """
        Get the largest id that newly created registries will issue.

        Returns
        -------
        int
        """
        return self._max_id

    @max_id.setter
    def max_id(self, value):
        """
        Set the largest id that newly created registries will issue.
        Registries that already exist keep the limit they were
        created with.

        Parameters
        ----------
        value : int
        """
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            msg = f"max_id must be a positive integer, got {value!r}"
            raise ValueError(msg)
        with self._lock:
            self._max_id = value

    @property
    def id_prefix(self):
        """
        Get the prefix used when formatting ids as reference strings.

        Returns
        -------
        str
        """
        return self._id_prefix

    @id_prefix.setter
    def id_prefix(self, value):
        """
        Set the prefix used when formatting ids as reference strings.

        Parameters
        ----------
        value : str
            Non-empty, and must not contain digits.
        """
        if not isinstance(value, str) or not value or any(c.isdigit() for c in value):
            msg = f"id_prefix must be a non-empty string without digits, got {value!r}"
            raise ValueError(msg)
        with self._lock:
            self._id_prefix = value

    @property
    def warn_on_id_skip(self):
        """
        Get configuration that controls whether sequential allocation
        warns when it steps over an id that was bound with ``set_id``.

        Returns
        -------
        bool
        """
        return self._warn_on_id_skip

    @warn_on_id_skip.setter
    def warn_on_id_skip(self, value):
        """
        Set configuration that controls whether sequential allocation
        warns when it steps over an id that was bound with ``set_id``.

        Parameters
        ----------
        value : bool
        """
        self._warn_on_id_skip = value

    def reset(self):
        """
        Reset all configuration options to their defaults.
        """
        with self._lock:
            self._max_id = DEFAULT_MAX_ID
            self._id_prefix = DEFAULT_ID_PREFIX
            self._warn_on_id_skip = DEFAULT_WARN_ON_ID_SKIP

    def __copy__(self):
        result = WeakIdConfig()
        result._max_id = self._max_id
        result._id_prefix = self._id_prefix
        result._warn_on_id_skip = self._warn_on_id_skip
        return result

    def __repr__(self):
        return (
            "<WeakIdConfig\n"
            f"  max_id: {self.max_id}\n"
            f"  id_prefix: {self.id_prefix}\n"
            f"  warn_on_id_skip: {self.warn_on_id_skip}\n"
            ">"
        )


class _ConfigLocal(threading.local):
    def __init__(self):
        self.config_stack = []


_global_config = WeakIdConfig()
_local = _ConfigLocal()


def get_config():
    """
    Get the current config, which may have been altered by
    one or more surrounding calls to `weakid.config_context`.

    Returns
    -------
    weakid.config.WeakIdConfig
    """
    if len(_local.config_stack) == 0:
        return _global_config

    return _local.config_stack[-1]


@contextmanager
def config_context():
    """
    Context manager that temporarily overrides weakid configuration.
    The context yields a `weakid.config.WeakIdConfig` instance that can be
    modified without affecting code outside of the context.
    """
    base_config = _global_config if len(_local.config_stack) == 0 else _local.config_stack[-1]

    config = copy.copy(base_config)
    _local.config_stack.append(config)

    try:
        yield config
    finally:
        _local.config_stack.pop()
