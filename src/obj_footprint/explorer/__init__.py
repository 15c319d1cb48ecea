"""
Object graph explorer: the traversal engine behind footprint measurement.

This package provides:
- Chain, Traversal and Feature types for the visitor protocol
- Field enumeration over Python objects, containers and NumPy arrays
- Composable chain predicates with identity-based cycle detection
- The depth-first explore() driver
"""

from .base import (
    Chain,
    Feature,
    FootprintError,
    InvalidArgument,
    InvalidFootprint,
    ObjectVisitor,
    PrimitiveType,
    Traversal,
    primitive_type_of,
)
from .fields import (
    AttributeEnumerator,
    Edge,
    EnumeratorConfig,
    FieldEnumerator,
    is_shared_value,
)
from .predicates import (
    AtMostOncePredicate,
    all_of,
    always_true,
    chain_to_value,
    compose,
    graph_predicate,
    not_root,
    not_shared_values,
)
from .traversal import explore

__all__ = [
    # Types
    "Chain",
    "Feature",
    "ObjectVisitor",
    "PrimitiveType",
    "Traversal",
    "primitive_type_of",
    # Exceptions
    "FootprintError",
    "InvalidArgument",
    "InvalidFootprint",
    # Enumeration
    "AttributeEnumerator",
    "Edge",
    "EnumeratorConfig",
    "FieldEnumerator",
    "is_shared_value",
    # Predicates
    "AtMostOncePredicate",
    "all_of",
    "always_true",
    "chain_to_value",
    "compose",
    "not_root",
    "not_shared_values",
    "graph_predicate",
    # Engine
    "explore",
]
