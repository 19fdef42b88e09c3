"""
A dict-like container with a YAML tag attached.

When `weakid.yamlutil.load` meets a tagged mapping whose tag has no
class registered with `weakid.yamlutil.add_type`, it builds a
`TaggedDict` instead.  `TaggedDict` instances can be weakly referenced,
so they take part in id assignment like any registered object, and
they are written back out under the same tag.  This lets reference
documents be loaded and re-written without the classes that
produced them.
"""

from collections import UserDict
from copy import copy, deepcopy
from reprlib import recursive_repr

__all__ = ["Tagged", "TaggedDict", "get_tag"]


class Tagged:
    """
    Base class of classes that wrap a given object and store a tag
    with it.
    """


class TaggedDict(Tagged, UserDict, dict):
    """
    A Python dict with a tag attached.
    """

    def __init__(self, data=None, tag=None):
        if data is None:
            data = {}
        self.data = data
        self._tag = tag

    def __eq__(self, other):
        return isinstance(other, TaggedDict) and self.data == other.data and self._tag == other._tag

    # dict.__ne__ would otherwise compare the (always empty) dict base
    def __ne__(self, other):
        return not self == other

    def __deepcopy__(self, memo):
        data_copy = deepcopy(self.data, memo)
        return TaggedDict(data_copy, self._tag)

    def __copy__(self):
        data_copy = copy(self.data)
        return TaggedDict(data_copy, self._tag)

    @recursive_repr()
    def __repr__(self):
        return f"TaggedDict({self.data!r}, tag={self._tag!r})"


def get_tag(instance):
    """
    Get the tag associated with the instance, if there is one.
    """
    return getattr(instance, "_tag", None)
