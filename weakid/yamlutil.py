"""
Reading and writing object graphs as YAML with explicit ids.

Instances of classes registered with `add_type` (and `TaggedDict`
instances) are written as tagged mappings whose ``id`` key carries the
object's id from the current registry::

    !employee
    id: N2
    name: Appleby, Arnold
    manager: !ref N1

The first occurrence of an object in a stream holds its full
definition; every later occurrence, including references back to an
enclosing object, is a ``!ref`` node.  On load the ids read from the
stream are bound with `weakid.IdRegistry.set_id` and ``!ref`` nodes are
resolved with `weakid.IdRegistry.get_object`.

Dumping and loading run inside `weakid.registry_context`, so calls made
within an enclosing `weakid.run` share that registry and its ids.
"""

import yaml

from .context import current_registry, registry_context
from .exceptions import ReferenceFormatError, UnresolvedReferenceError
from .reference import format_id, parse_id
from .tagged import TaggedDict
from .util import get_class_name

__all__ = ["IdDumper", "IdLoader", "add_type", "dump", "dump_all", "load", "load_all", "remove_type"]


_yaml_base_dumper = yaml.CSafeDumper if getattr(yaml, "__with_libyaml__", None) else yaml.SafeDumper
_yaml_base_loader = yaml.CSafeLoader if getattr(yaml, "__with_libyaml__", None) else yaml.SafeLoader


REF_TAG = "!ref"
ID_KEY = "id"

# class -> tag for types registered with add_type
_tag_by_type = {}


# ----------------------------------------------------------------------
# Custom loader/dumpers


class IdDumper(_yaml_base_dumper):
    """
    A specialized YAML dumper that writes registered objects once,
    with an id, and every further occurrence as a ``!ref`` node.
    """

    def __init__(self, *args, **kwargs):
        kwargs["default_flow_style"] = None
        super().__init__(*args, **kwargs)
        # ids whose definition has already been written to this stream
        self._written_ids = set()

    def ignore_aliases(self, data):
        if _is_identified(data):
            return True
        return super().ignore_aliases(data)


def _is_identified(data):
    return type(data) in _tag_by_type or isinstance(data, TaggedDict)


def represent_identified(dumper, data):
    if isinstance(data, TaggedDict):
        tag = data._tag
        state = data.data
        if tag is None:
            msg = "Cannot write a TaggedDict that has no tag"
            raise yaml.representer.RepresenterError(msg, data)
    else:
        tag = _tag_by_type[type(data)]
        state = vars(data)

    obj_id = current_registry().get_id(data)
    if obj_id in dumper._written_ids:
        return dumper.represent_scalar(REF_TAG, format_id(obj_id))
    dumper._written_ids.add(obj_id)

    if ID_KEY in state:
        msg = f"Cannot write {get_class_name(data)}: its state already has a key named {ID_KEY!r}"
        raise yaml.representer.RepresenterError(msg, data)

    mapping = {ID_KEY: format_id(obj_id)}
    mapping.update(state)
    return dumper.represent_mapping(tag, mapping)


IdDumper.add_representer(TaggedDict, represent_identified)


class IdLoader(_yaml_base_loader):
    """
    A specialized YAML loader that binds the ids found in a stream
    and resolves ``!ref`` nodes.

    Objects are constructed depth first, in stream order, so that a
    reference always finds its definition when the stream was
    written by `IdDumper`.
    """

    def construct_document(self, node):
        # pyyaml clears deep_construct after every document
        self.deep_construct = True
        return super().construct_document(node)

    def construct_ref(self, node):
        text = self.construct_scalar(node)
        obj_id = parse_id(text)
        obj = current_registry().get_object(obj_id)
        if obj is None:
            msg = f"Unresolved reference {text!r} at {node.start_mark}; possible forward reference"
            raise UnresolvedReferenceError(msg)
        return obj

    def construct_undefined(self, node):
        if isinstance(node, yaml.MappingNode):
            return self._construct_identified(node, None)
        return super().construct_undefined(node)

    def _construct_identified(self, node, cls):
        if not isinstance(node, yaml.MappingNode):
            msg = f"while constructing {node.tag}"
            raise yaml.constructor.ConstructorError(
                msg,
                node.start_mark,
                f"expected a mapping, but found {node.id}",
                node.start_mark,
            )

        obj = TaggedDict(tag=node.tag) if cls is None else cls.__new__(cls)

        # bind the id before constructing any children so that
        # references back to this object resolve
        for key_node, value_node in node.value:
            if isinstance(key_node, yaml.ScalarNode) and key_node.value == ID_KEY:
                registry = current_registry()
                text = self.construct_scalar(value_node)
                obj_id = parse_id(text)
                if obj_id > registry.max_id:
                    msg = (
                        f"Object reference {text!r} at {value_node.start_mark} "
                        f"exceeds the largest id {registry.max_id}"
                    )
                    raise ReferenceFormatError(msg)
                registry.set_id(obj, obj_id)
                break

        yield obj

        state = self.construct_mapping(node, deep=True)
        state.pop(ID_KEY, None)
        if cls is None:
            obj.data.update(state)
        else:
            obj.__dict__.update(state)


# pyyaml will invoke the constructor associated with None when a node's
# tag is not explicitly handled by another constructor.
IdLoader.add_constructor(None, IdLoader.construct_undefined)
IdLoader.add_constructor(REF_TAG, IdLoader.construct_ref)


def add_type(cls, tag):
    """
    Register a class so that its instances are written with ids.

    Instances are written as a mapping of ``vars(obj)`` under ``tag``
    and are re-created on load without calling ``__init__``.

    Parameters
    ----------
    cls : type
        A class whose instances have a ``__dict__`` and support weak
        references.
    tag : str
        The YAML tag, for example ``"!employee"``.
    """
    if not isinstance(cls, type):
        msg = f"Expected a class, got {cls!r}"
        raise TypeError(msg)
    if not isinstance(tag, str) or not tag or tag == REF_TAG:
        msg = f"Invalid tag {tag!r}"
        raise ValueError(msg)

    def construct(loader, node):
        return loader._construct_identified(node, cls)

    _tag_by_type[cls] = tag
    IdDumper.add_representer(cls, represent_identified)
    IdLoader.add_constructor(tag, construct)


def remove_type(cls):
    """
    Undo `add_type`.  Documents using the class's tag will load as
    `TaggedDict` instances afterwards.

    Raises
    ------
    ValueError
        If ``cls`` was not registered with `add_type`.
    """
    if cls not in _tag_by_type:
        msg = f"{get_class_name(cls, instance=False)} is not registered"
        raise ValueError(msg)
    tag = _tag_by_type.pop(cls)
    IdDumper.yaml_representers.pop(cls, None)
    IdLoader.yaml_constructors.pop(tag, None)


def dump(tree, stream=None, **kwargs):
    """
    Dump a tree of objects to YAML.

    Parameters
    ----------
    tree : object
        Tree of basic YAML types and registered objects.
    stream : writable file-like object, optional
        If not given the YAML is returned as a string.
    **kwargs
        Passed to `yaml.dump`.
    """
    kwargs.setdefault("sort_keys", False)
    with registry_context():
        return yaml.dump(tree, stream, Dumper=IdDumper, **kwargs)


def dump_all(documents, stream=None, **kwargs):
    """
    Dump several trees as a multi-document YAML stream.  An object
    shared between documents is defined in the first one and
    referenced from the rest.
    """
    kwargs.setdefault("sort_keys", False)
    with registry_context():
        return yaml.dump_all(documents, stream, Dumper=IdDumper, **kwargs)


def load(stream):
    """
    Load a YAML document written by `dump`.

    Parameters
    ----------
    stream : str or readable file-like object
    """
    with registry_context():
        # The following call to yaml.load is safe because we're
        # using a loader that inherits from pyyaml's SafeLoader.
        return yaml.load(stream, Loader=IdLoader)  # noqa: S506


def load_all(stream):
    """
    Load every document of a YAML stream written by `dump_all`.

    Returns
    -------
    list
    """
    with registry_context():
        return list(yaml.load_all(stream, Loader=IdLoader))  # noqa: S506
