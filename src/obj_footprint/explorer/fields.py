"""
Field enumeration: the introspection capability behind the explorer.

The engine never inspects objects itself. It asks a FieldEnumerator for the
outgoing edges of a value and wraps each edge in a Chain. The default
AttributeEnumerator covers ordinary Python objects:
- Instance __dict__ attributes and __slots__ (declared types from type hints)
- Builtin containers (dict, list, tuple, set, frozenset, deque), with named
  tuple elements typed by the class annotations
- Closure cells of functions that capture state
- NumPy arrays (object arrays as references, numeric arrays as primitives)
"""

import collections
import functools
import logging
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Protocol

import numpy as np

from .base import dtype_primitive

logger = logging.getLogger(__name__)

# Values that belong to every graph that mentions them, never to one graph
SHARED_VALUE_TYPES = (
    type,
    types.ModuleType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
)

# Values with no outgoing edges
OPAQUE_TYPES = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    memoryview,
    range,
    np.generic,
)

SEQUENCE_TYPES = (list, tuple, set, frozenset, collections.deque)

_MISSING = object()

# Classes whose hints and slots stay memoized at once
CLASS_CACHE_SIZE = 128


@dataclass(frozen=True)
class Edge:
    """One outgoing edge of an object, as reported by a FieldEnumerator."""

    name: str  # Attribute name or container position
    declared_type: Any  # Static type at the point of reference
    value: Any
    shared: bool = False  # Originates from a static, type-level, or enum-owned slot


class FieldEnumerator(Protocol):
    """Capability that lists the outgoing edges of any value."""

    def enumerate_edges(self, obj: Any) -> Iterable[Edge]:
        ...


@dataclass
class EnumeratorConfig:
    """Configuration for AttributeEnumerator."""

    include_slots: bool = True  # Read __slots__ declared anywhere in the MRO
    expand_arrays: bool = True  # Enumerate NumPy array elements as edges
    shared_types: tuple[type, ...] = field(default_factory=tuple)  # Extra types to flag as shared


def is_shared_value(value: Any) -> bool:
    """
    True for classes, modules, plain functions, and enum members.

    A closure is not shared: its cells hold state captured for one owner.
    """
    if isinstance(value, types.FunctionType):
        return not value.__closure__
    return isinstance(value, SHARED_VALUE_TYPES) or isinstance(value, Enum)


def _is_hashable(cls: type) -> bool:
    try:
        hash(cls)
    except TypeError:
        # Metaclass defines __eq__ without __hash__
        return False
    return True


def declared_types(cls: type) -> dict[str, Any]:
    """
    Resolve the type hints of a class.

    Returns an empty mapping when the hints cannot be resolved (for example a
    forward reference to a name that does not exist), in which case every
    attribute is classified by its runtime value type.
    """
    if _is_hashable(cls):
        return _cached_type_hints(cls)
    return _resolve_type_hints(cls)


def slot_names(cls: type) -> tuple[str, ...]:
    """All instance slot names declared across the MRO, mangled where needed."""
    if _is_hashable(cls):
        return _cached_slot_names(cls)
    return _resolve_slot_names(cls)


def _resolve_type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, SyntaxError, TypeError, AttributeError):
        return {}


def _resolve_slot_names(cls: type) -> tuple[str, ...]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            if name not in names:
                names.append(name)
    return tuple(names)


# Each cache keeps at most CLASS_CACHE_SIZE classes alive
_cached_type_hints = functools.lru_cache(maxsize=CLASS_CACHE_SIZE)(_resolve_type_hints)
_cached_slot_names = functools.lru_cache(maxsize=CLASS_CACHE_SIZE)(_resolve_slot_names)


def _is_classvar(hint: Any) -> bool:
    return hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar


class AttributeEnumerator:
    """
    Default FieldEnumerator built on Python runtime introspection.

    Safe to call on any value: opaque values (numbers, strings, bytes,
    classes, modules, plain functions) simply have no edges.
    """

    def __init__(self, config: EnumeratorConfig | None = None):
        self.config = config or EnumeratorConfig()

    def enumerate_edges(self, obj: Any) -> Iterator[Edge]:
        if isinstance(obj, types.FunctionType) and obj.__closure__:
            yield from self._closure_edges(obj)
            return

        if obj is None or isinstance(obj, OPAQUE_TYPES + SHARED_VALUE_TYPES):
            return

        if isinstance(obj, np.ndarray):
            yield from self._array_edges(obj)
            return

        if isinstance(obj, dict):
            yield from self._mapping_edges(obj)
        elif isinstance(obj, tuple) and hasattr(type(obj), "_fields"):
            yield from self._named_tuple_edges(obj)
        elif isinstance(obj, SEQUENCE_TYPES):
            yield from self._sequence_edges(obj)

        # Builtin containers have no attributes; subclasses may add some
        yield from self._attribute_edges(obj)

    def _mapping_edges(self, obj: dict) -> Iterator[Edge]:
        for i, (key, value) in enumerate(list(obj.items())):
            yield self._edge(f"keys[{i}]", type(key), key)
            yield self._edge(f"values[{i}]", type(value), value)

    def _sequence_edges(self, obj: Iterable[Any]) -> Iterator[Edge]:
        for i, value in enumerate(list(obj)):
            yield self._edge(f"[{i}]", type(value), value)

    def _named_tuple_edges(self, obj: tuple) -> Iterator[Edge]:
        """Elements of a named tuple, typed by the class annotations where present."""
        hints = declared_types(type(obj))
        for name, value in zip(type(obj)._fields, obj):
            yield self._attribute_edge(hints, name, value, owned_by_enum=False)

    def _closure_edges(self, func: types.FunctionType) -> Iterator[Edge]:
        for name, cell in zip(func.__code__.co_freevars, func.__closure__):
            try:
                value = cell.cell_contents
            except ValueError:
                continue  # Free variable not yet bound
            yield self._edge(name, type(value), value)

    def _array_edges(self, arr: np.ndarray) -> Iterator[Edge]:
        if not self.config.expand_arrays:
            return
        if arr.dtype == np.dtype(object):
            for i, value in enumerate(arr.flat):
                yield self._edge(f"[{i}]", object, value)
        elif dtype_primitive(arr.dtype) is not None:
            scalar_type = arr.dtype.type
            for i, value in enumerate(arr.flat):
                yield Edge(f"[{i}]", scalar_type, value)
        # Strings, complex, datetimes and records stay opaque

    def _attribute_edges(self, obj: Any) -> Iterator[Edge]:
        cls = type(obj)
        hints = declared_types(cls)
        owned_by_enum = isinstance(obj, Enum)

        try:
            instance_dict = getattr(obj, "__dict__", None)
        except Exception as e:
            # Lazy proxies raise their own errors when unbound
            logger.debug("No attributes read from %s: %r", cls.__name__, e)
            instance_dict = None
        if isinstance(instance_dict, dict):
            for name, value in list(instance_dict.items()):
                yield self._attribute_edge(hints, name, value, owned_by_enum)

        if self.config.include_slots:
            for name in slot_names(cls):
                value = getattr(obj, name, _MISSING)
                if value is _MISSING:
                    continue  # Unset slot
                yield self._attribute_edge(hints, name, value, owned_by_enum)

    def _attribute_edge(self, hints: dict[str, Any], name: str, value: Any, owned_by_enum: bool) -> Edge:
        hint = hints.get(name)
        shared = owned_by_enum
        if _is_classvar(hint):
            shared = True
            args = typing.get_args(hint)
            hint = args[0] if args else None
        declared = hint if hint is not None else type(value)
        return self._edge(name, declared, value, shared)

    def _edge(self, name: str, declared_type: Any, value: Any, shared: bool = False) -> Edge:
        if self.config.shared_types and isinstance(value, self.config.shared_types):
            shared = True
        return Edge(name, declared_type, value, shared)
