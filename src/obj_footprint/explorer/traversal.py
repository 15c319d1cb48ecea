"""
Depth-first object graph exploration.

Knows nothing about footprints: it walks edges reported by a FieldEnumerator,
wraps each in a Chain, and lets a visitor decide whether to go deeper.
The walk uses an explicit stack, so graph depth is bounded by memory rather
than by the interpreter's recursion limit.
"""

from typing import Any, Iterable

from .base import Chain, Feature, InvalidArgument, ObjectVisitor, R, Traversal
from .fields import AttributeEnumerator, FieldEnumerator

_DEFAULT_ENUMERATOR = AttributeEnumerator()


def explore(
    root: Any,
    visitor: ObjectVisitor[R],
    features: Iterable[Feature] = (),
    enumerator: FieldEnumerator | None = None,
) -> R:
    """
    Walk the object graph reachable from ``root`` and return the visitor's result.

    The root is always visited, even when it is None. Every other edge is
    classified first: primitive edges are dropped unless VISIT_PRIMITIVES is
    set, None edges are dropped unless VISIT_NULL is set, and the rest are
    dispatched to the visitor. Values the visitor marks EXPLORE have their own
    edges enumerated, in the same pre-order a recursive walk would produce.

    Args:
        root: Value the graph is reached from (any value, including None)
        visitor: Object implementing visit(chain) and result()
        features: Optional Feature flags
        enumerator: Field enumerator (default AttributeEnumerator())

    Returns:
        Whatever ``visitor.result()`` returns

    Raises:
        InvalidArgument: If the visitor does not implement visit()/result()

    Example:
        >>> result = explore(config, MyVisitor(), {Feature.VISIT_NULL})
    """
    if not callable(getattr(visitor, "visit", None)) or not callable(getattr(visitor, "result", None)):
        raise InvalidArgument("visitor must implement visit(chain) and result()")

    features = frozenset(features)
    visit_primitives = Feature.VISIT_PRIMITIVES in features
    visit_null = Feature.VISIT_NULL in features
    enumerator = enumerator if enumerator is not None else _DEFAULT_ENUMERATOR

    stack: list[Chain] = [Chain.root(root)]
    while stack:
        chain = stack.pop()
        if visitor.visit(chain) is not Traversal.EXPLORE:
            continue
        if chain.is_null or chain.is_primitive:
            continue

        children: list[Chain] = []
        for edge in enumerator.enumerate_edges(chain.value):
            child = chain.append(edge.name, edge.declared_type, edge.value, edge.shared)
            if child.is_primitive:
                if not visit_primitives:
                    continue
            elif child.is_null and not visit_null:
                continue
            children.append(child)

        # Reversed so the first edge is visited first
        stack.extend(reversed(children))

    return visitor.result()
