"""
weakid: thread-safe registry of unique integer ids for objects,
keyed by object identity and cleaned up by garbage collection
"""

__all__ = [
    "IdRegistry",
    "WeakIdentityKey",
    "__version__",
    "config_context",
    "current_registry",
    "get_config",
    "registry_context",
    "run",
]


from ._key import WeakIdentityKey
from ._version import version as __version__
from .config import config_context, get_config
from .context import current_registry, registry_context, run
from .registry import IdRegistry
