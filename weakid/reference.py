"""
Textual object references.

An id is written as the configured prefix followed by the decimal
id, for example ``N12``.  `serialize_reference` and
`deserialize_reference` translate between objects and such strings
through the registry returned by `weakid.current_registry`, so they
must be called inside `weakid.run` or `weakid.registry_context`.
"""

import re

from .config import get_config
from .context import current_registry
from .exceptions import ReferenceFormatError, UnresolvedReferenceError

__all__ = ["deserialize_reference", "format_id", "parse_id", "serialize_reference"]


_DIGITS = re.compile(r"[1-9][0-9]*")


def format_id(obj_id):
    """
    Format an id as a reference string.

    Parameters
    ----------
    obj_id : int
        A positive id.

    Returns
    -------
    str
    """
    if isinstance(obj_id, bool) or not isinstance(obj_id, int):
        msg = f"id must be an int, got {type(obj_id).__name__}"
        raise TypeError(msg)
    if obj_id < 1:
        msg = f"id must be positive, got {obj_id}"
        raise ValueError(msg)
    return f"{get_config().id_prefix}{obj_id}"


def parse_id(text):
    """
    Parse a reference string created by `format_id`.

    Parameters
    ----------
    text : str

    Returns
    -------
    int

    Raises
    ------
    weakid.exceptions.ReferenceFormatError
        If ``text`` is not a valid reference.
    """
    prefix = get_config().id_prefix
    if not isinstance(text, str) or not text.startswith(prefix):
        msg = f"Invalid object reference {text!r}: expected {prefix!r} followed by a positive integer"
        raise ReferenceFormatError(msg)
    digits = text[len(prefix) :]
    if _DIGITS.fullmatch(digits) is None:
        msg = f"Invalid object reference {text!r}: expected {prefix!r} followed by a positive integer"
        raise ReferenceFormatError(msg)
    return int(digits)


def serialize_reference(obj):
    """
    Encode an already registered object as a reference string.

    Parameters
    ----------
    obj : object or None

    Returns
    -------
    str or None
        `None` if ``obj`` is `None`.

    Raises
    ------
    ValueError
        If ``obj`` has no id in the current registry (for example a
        forward reference to an object not yet written).
    """
    if obj is None:
        return None
    obj_id = current_registry().check_id(obj)
    if obj_id == 0:
        msg = f"Unregistered object; possible forward reference to {obj!r}"
        raise ValueError(msg)
    return format_id(obj_id)


def deserialize_reference(text, type_=object):
    """
    Decode a reference string into the object it refers to.

    Parameters
    ----------
    text : str or None
        A reference created by `serialize_reference`.
    type_ : type, optional
        The expected type of the referenced object.

    Returns
    -------
    object or None
        `None` if ``text`` is `None`.

    Raises
    ------
    weakid.exceptions.ReferenceFormatError
        If ``text`` cannot be parsed.
    weakid.exceptions.UnresolvedReferenceError
        If no live object has the referenced id.
    TypeError
        If the referenced object is not an instance of ``type_``.
    """
    if text is None:
        return None
    obj_id = parse_id(text)
    obj = current_registry().get_object(obj_id)
    if obj is None:
        msg = f"Unregistered object reference {text!r}; possible forward reference"
        raise UnresolvedReferenceError(msg)
    if not isinstance(obj, type_):
        msg = (
            f"Object reference {text!r} is assigned to an instance of "
            f"{type(obj).__name__} which is not an instance of {type_.__name__}"
        )
        raise TypeError(msg)
    return obj
