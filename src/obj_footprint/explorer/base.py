"""
Core exploration types shared by the traversal engine and its visitors.

This module provides the foundation for walking an object graph:
- Chain: one visited edge plus the value it reaches
- Traversal / Feature enums controlling the walk
- The closed set of primitive types and declared-type classification
- Exceptions raised by the explorer and the measurer
"""

import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, TypeVar

import numpy as np

R = TypeVar("R", covariant=True)


# === ENUMS ===


class Traversal(Enum):
    """Decision returned by a visitor for each Chain."""

    EXPLORE = "explore"  # Enumerate the value's own edges
    SKIP = "skip"  # Do not look inside the value


class Feature(Enum):
    """Optional behaviours of the exploration engine."""

    VISIT_PRIMITIVES = "visit_primitives"  # Dispatch primitive-valued edges to the visitor
    VISIT_NULL = "visit_null"  # Dispatch None-valued edges to the visitor


class PrimitiveType(Enum):
    """Closed set of primitive kinds a footprint can tally."""

    BOOLEAN = "boolean"
    BYTE = "byte"
    CHAR = "char"
    SHORT = "short"
    INT = "int"
    FLOAT = "float"
    LONG = "long"
    DOUBLE = "double"

    def __str__(self):
        return self.value


# === EXCEPTIONS ===


class FootprintError(Exception):
    """Base class for errors raised by obj_footprint."""

    pass


class InvalidArgument(FootprintError, ValueError):
    """Raised when a required argument is missing or unusable."""

    pass


class InvalidFootprint(FootprintError, ValueError):
    """Raised when a Footprint would hold a negative count or an unknown primitive type."""

    pass


# === PRIMITIVE CLASSIFICATION ===

_BUILTIN_PRIMITIVES: dict[type, PrimitiveType] = {
    bool: PrimitiveType.BOOLEAN,
    int: PrimitiveType.INT,
    float: PrimitiveType.DOUBLE,
}

# (dtype kind, itemsize) -> primitive
_DTYPE_PRIMITIVES: dict[tuple[str, int], PrimitiveType] = {
    ("b", 1): PrimitiveType.BOOLEAN,
    ("i", 1): PrimitiveType.BYTE,
    ("i", 2): PrimitiveType.SHORT,
    ("i", 4): PrimitiveType.INT,
    ("i", 8): PrimitiveType.LONG,
    ("u", 1): PrimitiveType.BYTE,
    ("u", 2): PrimitiveType.CHAR,
    ("u", 4): PrimitiveType.INT,
    ("u", 8): PrimitiveType.LONG,
    ("f", 4): PrimitiveType.FLOAT,
    ("f", 8): PrimitiveType.DOUBLE,
}

# Runtime types a primitive-declared value must actually have
PRIMITIVE_RUNTIME_TYPES = (bool, int, float, np.bool_, np.number)


def dtype_primitive(dtype: np.dtype) -> PrimitiveType | None:
    """Map a NumPy dtype to its primitive kind, or None if it has no equivalent."""
    return _DTYPE_PRIMITIVES.get((dtype.kind, dtype.itemsize))


def primitive_type_of(declared_type: Any) -> PrimitiveType | None:
    """
    Classify a declared type as a primitive kind.

    Accepts builtin number types, NumPy scalar types, NumPy dtypes, and the
    wrappers handled by unwrap_hint (``Optional``, ``Final``, ``Annotated``
    and ``NewType``).

    Args:
        declared_type: Static type of an edge (annotation or runtime type)

    Returns:
        The PrimitiveType, or None if the type is not primitive
    """
    declared_type = unwrap_hint(declared_type)

    if isinstance(declared_type, np.dtype):
        return dtype_primitive(declared_type)
    if typing.get_origin(declared_type) is not None or not isinstance(declared_type, type):
        return None
    # Identity lookup; a class whose metaclass defines __eq__ may be unhashable
    for builtin, kind in _BUILTIN_PRIMITIVES.items():
        if declared_type is builtin:
            return kind
    if issubclass(declared_type, (np.bool_, np.number)):
        try:
            dtype = np.dtype(declared_type)
        except TypeError:
            # Abstract scalar classes such as np.integer have no dtype
            return None
        return dtype_primitive(dtype)
    return None


def unwrap_hint(hint: Any) -> Any:
    """
    Strip the wrappers that do not change what a hint stores.

    ``Optional[X]`` / ``X | None``, ``Final[X]`` and ``Annotated[X, ...]``
    reduce to ``X``, and a ``NewType`` reduces to its supertype. Wrappers may
    nest. Other hints are returned unchanged.
    """
    while True:
        supertype = getattr(hint, "__supertype__", None)
        if supertype is not None:
            hint = supertype
            continue

        origin = typing.get_origin(hint)
        args = typing.get_args(hint)
        if origin in (typing.Final, typing.Annotated) and args:
            hint = args[0]
            continue
        if args and type(None) in args:
            remaining = [a for a in args if a is not type(None)]
            if len(remaining) == 1:
                hint = remaining[0]
                continue
        return hint


# === CHAIN ===


@dataclass(frozen=True, eq=False)
class Chain:
    """
    One step of a traversal: the edge just followed and the value it reached.

    The root chain has no parent and no name. The chain holds a transient
    reference to ``value``; it never copies it.
    """

    value: Any
    declared_type: Any
    parent: "Chain | None" = None
    name: str | None = None
    shared: bool = False  # Edge flagged as shared infrastructure by the enumerator

    @classmethod
    def root(cls, value: Any) -> "Chain":
        """Build the synthetic chain for a traversal root."""
        return cls(value=value, declared_type=type(value))

    def append(self, name: str, declared_type: Any, value: Any, shared: bool = False) -> "Chain":
        """Build the chain for an edge leaving this chain's value."""
        return Chain(value=value, declared_type=declared_type, parent=self, name=name, shared=shared)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_null(self) -> bool:
        return self.value is None

    @property
    def primitive_type(self) -> PrimitiveType | None:
        """Primitive kind of this edge, following its declared type."""
        if self.is_root or self.value is None:
            return None
        if not isinstance(self.value, PRIMITIVE_RUNTIME_TYPES):
            return None
        return primitive_type_of(self.declared_type)

    @property
    def is_primitive(self) -> bool:
        return self.primitive_type is not None

    @property
    def value_type(self) -> type:
        return type(self.value)

    @property
    def depth(self) -> int:
        """Number of edges between the root and this chain."""
        depth = 0
        link = self.parent
        while link is not None:
            depth += 1
            link = link.parent
        return depth

    @property
    def path(self) -> tuple[str, ...]:
        """Edge names from the root to this chain."""
        names: list[str] = []
        link: Chain | None = self
        while link is not None and link.parent is not None:
            names.append(link.name or "?")
            link = link.parent
        return tuple(reversed(names))

    def __repr__(self):
        where = ".".join(self.path) or "<root>"
        return f"Chain({where}: {self.value_type.__name__})"


# === VISITOR PROTOCOL ===


class ObjectVisitor(Protocol[R]):
    """Visitor driven by explore(); decides per chain whether to go deeper."""

    def visit(self, chain: Chain) -> Traversal:
        ...

    def result(self) -> R:
        ...
