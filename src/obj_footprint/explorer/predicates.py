"""
Chain predicates that decide which edges a traversal may follow.

Predicates are plain callables ``Chain -> bool`` combined with all_of().
AtMostOncePredicate is the only stateful one: it remembers which object
identities it has already accepted during a single traversal.
"""

from typing import Any, Callable, Iterable

from .base import Chain, InvalidArgument
from .fields import is_shared_value

ChainPredicate = Callable[[Chain], bool]


def always_true(value: Any) -> bool:
    """Default acceptor: every object is part of the footprint."""
    return True


def chain_to_value(chain: Chain) -> Any:
    return chain.value


def compose(predicate: Callable[[Any], bool], function: Callable[[Chain], Any]) -> ChainPredicate:
    """Lift a predicate over values into a predicate over chains."""

    def composed(chain: Chain) -> bool:
        return bool(predicate(function(chain)))

    return composed


def all_of(predicates: Iterable[ChainPredicate]) -> ChainPredicate:
    """
    AND predicates left to right, stopping at the first rejection.

    Later predicates never see a chain an earlier one rejected, so a
    stateful predicate placed last only records chains that passed the rest.
    """
    predicates = tuple(predicates)

    def combined(chain: Chain) -> bool:
        return all(predicate(chain) for predicate in predicates)

    return combined


def not_shared_values(chain: Chain) -> bool:
    """
    Reject shared infrastructure.

    Classes, modules, plain functions, enum members, and any edge the enumerator
    flagged as static or enum-owned are shared by every graph that
    references them.
    """
    return not (chain.shared or is_shared_value(chain.value))


def not_root(predicate: ChainPredicate) -> ChainPredicate:
    """Apply ``predicate`` to every chain except the traversal root."""

    def guarded(chain: Chain) -> bool:
        return chain.is_root or predicate(chain)

    return guarded


class AtMostOncePredicate:
    """
    Accept each object identity once per traversal.

    Identity, not equality: two equal but distinct objects are both
    accepted, one object reached along two paths is accepted once. Seen
    objects are kept alive until the predicate is discarded so their id()
    cannot be reused by another object mid-traversal.
    """

    def __init__(self):
        self._seen: dict[int, Any] = {}

    def __call__(self, chain: Chain) -> bool:
        key = id(chain.value)
        if key in self._seen:
            return False
        self._seen[key] = chain.value
        return True

    def __len__(self):
        return len(self._seen)


def graph_predicate(acceptor: Callable[[Any], bool]) -> ChainPredicate:
    """
    Build the standard predicate for one traversal.

    Shared values are rejected first, then the caller's acceptor is applied
    to every value except the root, then the cycle guard. A fresh guard is
    created per call, so the returned predicate must not be reused across
    traversals.

    Args:
        acceptor: Returns True for objects that belong to the graph

    Raises:
        InvalidArgument: If acceptor is None or not callable
    """
    if acceptor is None:
        raise InvalidArgument("acceptor must not be None")
    if not callable(acceptor):
        raise InvalidArgument(f"acceptor must be callable, got {type(acceptor).__name__}")

    return all_of([
        not_shared_values,
        not_root(compose(acceptor, chain_to_value)),
        AtMostOncePredicate(),
    ])
