"""
Footprint measurement of object graphs.

Counts the distinct objects, the references between them, and the
primitive values reachable from a root object. Static slots, classes,
modules, plain functions and enum members are shared values and do not
contribute to the footprint of any single graph. A closure belongs to its
graph, and its captured cells are measured.
"""

import logging
from collections import Counter
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .explorer import (
    Chain,
    Feature,
    FieldEnumerator,
    InvalidFootprint,
    PrimitiveType,
    Traversal,
    always_true,
    explore,
    graph_predicate,
    not_shared_values,
)

logger = logging.getLogger(__name__)

MEASURE_FEATURES = frozenset({Feature.VISIT_PRIMITIVES, Feature.VISIT_NULL})


class Footprint:
    """
    The footprint of an object graph: objects, references and primitives.

    Immutable. ``primitives`` maps each PrimitiveType present in the graph to
    the number of primitive values of that kind.
    """

    __slots__ = ("_objects", "_references", "_primitives")

    def __init__(self, objects: int, references: int, primitives: Mapping[PrimitiveType, int] | None = None):
        """
        Args:
            objects: Number of distinct objects
            references: Number of references between objects
            primitives: Primitive tally keyed by PrimitiveType

        Raises:
            InvalidFootprint: On a negative count or an unknown primitive type
        """
        if objects < 0:
            raise InvalidFootprint(f"Negative number of objects: {objects}")
        if references < 0:
            raise InvalidFootprint(f"Negative number of references: {references}")

        tally: dict[PrimitiveType, int] = {}
        for kind, count in dict(primitives or {}).items():
            if not isinstance(kind, PrimitiveType):
                raise InvalidFootprint(f"Unexpected primitive type: {kind!r}")
            if count < 0:
                raise InvalidFootprint(f"Negative count {count} for primitive type {kind}")
            if count:
                tally[kind] = count

        self._objects = objects
        self._references = references
        # Declaration order, so rendering is stable
        self._primitives = MappingProxyType({kind: tally[kind] for kind in PrimitiveType if kind in tally})

    @property
    def objects(self) -> int:
        return self._objects

    @property
    def references(self) -> int:
        return self._references

    @property
    def primitives(self) -> Mapping[PrimitiveType, int]:
        return self._primitives

    def __eq__(self, other):
        if not isinstance(other, Footprint):
            return NotImplemented
        return (
            self._objects == other._objects
            and self._references == other._references
            and dict(self._primitives) == dict(other._primitives)
        )

    def __hash__(self):
        return hash((self._objects, self._references, frozenset(self._primitives.items())))

    def __repr__(self):
        return (
            f"Footprint(objects={self._objects}, references={self._references}, "
            f"primitives={dict(self._primitives)!r})"
        )

    def __str__(self):
        kinds = ", ".join(
            str(kind) if count == 1 else f"{kind} x {count}" for kind, count in self._primitives.items()
        )
        return f"Footprint{{Objects={self._objects}, References={self._references}, Primitives=[{kinds}]}}"


class ObjectGraphVisitor:
    """Accumulates a Footprint while explore() walks the graph."""

    def __init__(self, predicate: Callable[[Chain], bool]):
        self.predicate = predicate
        self.primitives: Counter[PrimitiveType] = Counter()
        self.objects = 0
        # -1 offsets the root, which no reference leads to
        self.references = -1

    def visit(self, chain: Chain) -> Traversal:
        if not chain.is_root and not not_shared_values(chain):
            # Shared infrastructure is not part of this graph, not even by reference
            return Traversal.SKIP

        kind = chain.primitive_type
        if kind is not None:
            self.primitives[kind] += 1
            return Traversal.SKIP

        self.references += 1
        if chain.is_null:
            return Traversal.SKIP
        if self.predicate(chain):
            self.objects += 1
            return Traversal.EXPLORE
        return Traversal.SKIP

    def result(self) -> Footprint:
        """Snapshot the counters. Only meaningful once the traversal has finished."""
        return Footprint(self.objects, self.references, self.primitives)


def measure(
    root: Any,
    acceptor: Callable[[Any], bool] = always_true,
    *,
    enumerator: FieldEnumerator | None = None,
) -> Footprint:
    """
    Measure the footprint of the object graph reachable from ``root``.

    The graph excludes shared values (classes, modules, functions without a
    closure, enum members, ClassVar slots) and anything below an object the acceptor
    rejects. A rejected object is still reached by a reference, so the edge
    is counted but the object is not.

    Args:
        root: Root of the object graph (any value, including None)
        acceptor: Returns True for objects to explore and count; never applied
                  to the root
        enumerator: Field enumerator (default AttributeEnumerator())

    Returns:
        Footprint of the graph

    Raises:
        InvalidArgument: If acceptor is None or not callable

    Example:
        >>> fp = measure({"a": [1, 2.0]})
        >>> print(fp)
        Footprint{Objects=3, References=2, Primitives=[int, double]}
    """
    predicate = graph_predicate(acceptor)
    footprint = explore(root, ObjectGraphVisitor(predicate), MEASURE_FEATURES, enumerator)
    logger.debug("Measured %s root: %s", type(root).__name__, footprint)
    return footprint
