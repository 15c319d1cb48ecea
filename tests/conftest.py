"""
Shared fixtures for explorer and measurer tests.
"""

import pytest


class Node:
    """Singly linked node; the building block for graph fixtures."""

    def __init__(self, next=None):
        self.next = next


@pytest.fixture
def node_cls():
    return Node


@pytest.fixture
def cycle():
    """Two nodes referencing each other: a -> b -> a."""
    a = Node()
    b = Node(a)
    a.next = b
    return a, b


@pytest.fixture
def linked_list():
    """Factory for a list of ``n`` nodes ending in None."""

    def build(n: int) -> Node:
        head = None
        for _ in range(n):
            head = Node(head)
        return head

    return build
