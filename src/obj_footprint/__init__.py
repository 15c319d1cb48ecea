"""
Object Footprint - structural measurement of in-memory object graphs.

Counts the objects, references and primitive values reachable from a root
object, with identity-based cycle detection and pluggable traversal
policies.
"""

from .explorer import (
    AttributeEnumerator,
    EnumeratorConfig,
    Feature,
    FootprintError,
    InvalidArgument,
    InvalidFootprint,
    PrimitiveType,
    Traversal,
    explore,
)
from .measurer import Footprint, ObjectGraphVisitor, measure
from .network import GraphBuildingVisitor, object_graph

__version__ = "0.1.0"

__all__ = [
    "measure",
    "Footprint",
    "ObjectGraphVisitor",
    "object_graph",
    "GraphBuildingVisitor",
    "explore",
    "Feature",
    "Traversal",
    "PrimitiveType",
    "AttributeEnumerator",
    "EnumeratorConfig",
    "FootprintError",
    "InvalidArgument",
    "InvalidFootprint",
]
