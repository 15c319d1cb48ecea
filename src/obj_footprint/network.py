"""
NetworkX export of an explored object graph.

Uses the same traversal and predicates as measure(), but records the graph
itself instead of counting it, so standard NetworkX analytics (components,
degree, cycles) can be run over an object structure.
"""

import logging
from typing import Any, Callable

import networkx as nx

from .explorer import (
    Chain,
    FieldEnumerator,
    Traversal,
    always_true,
    explore,
    graph_predicate,
)

logger = logging.getLogger(__name__)


def _type_name(value: Any) -> str:
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}"


class GraphBuildingVisitor:
    """
    Builds a MultiDiGraph of explored objects.

    Nodes are keyed by ``id(value)`` and carry ``type`` and ``path`` (the
    edge path where the object was first reached). Edges carry ``name``.
    Primitive and None values never become nodes.
    """

    def __init__(self, predicate: Callable[[Chain], bool]):
        self.predicate = predicate
        self.graph = nx.MultiDiGraph()

    def visit(self, chain: Chain) -> Traversal:
        if chain.is_primitive or chain.is_null:
            return Traversal.SKIP

        node = id(chain.value)
        if self.predicate(chain):
            self.graph.add_node(node, type=_type_name(chain.value), path=".".join(chain.path))
            self._add_edge(chain, node)
            return Traversal.EXPLORE

        # Second path to an object that is already in the graph
        if node in self.graph:
            self._add_edge(chain, node)
        return Traversal.SKIP

    def _add_edge(self, chain: Chain, node: int) -> None:
        if chain.parent is not None:
            self.graph.add_edge(id(chain.parent.value), node, name=chain.name)

    def result(self) -> nx.MultiDiGraph:
        return self.graph


def object_graph(
    root: Any,
    acceptor: Callable[[Any], bool] = always_true,
    *,
    enumerator: FieldEnumerator | None = None,
) -> nx.MultiDiGraph:
    """
    Build the NetworkX graph of objects reachable from ``root``.

    Same reachability rules as measure(): shared values are excluded and the
    acceptor prunes everything except the root.

    Args:
        root: Root of the object graph
        acceptor: Returns True for objects to include
        enumerator: Field enumerator (default AttributeEnumerator())

    Returns:
        MultiDiGraph with one node per explored object

    Raises:
        InvalidArgument: If acceptor is None or not callable

    Example:
        >>> graph = object_graph(config)
        >>> list(nx.simple_cycles(graph))
    """
    graph = explore(root, GraphBuildingVisitor(graph_predicate(acceptor)), (), enumerator)
    logger.debug(
        "Built object graph for %s root: %d nodes, %d edges",
        type(root).__name__,
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph
