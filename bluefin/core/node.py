"""Search-graph vertex holding the statistics for one position.

Nodes live in the TranspositionTable and are shared by every parent edge
that reaches the same position hash, so a node's ``value_sum`` and
``visits`` aggregate all the paths through it. Mutation is plain
attribute assignment: the search is single threaded and two
backpropagation passes never interleave.
"""

from __future__ import annotations

from typing import AbstractSet, Any, List, Optional, Tuple

from bluefin.core.errors import InvariantViolation
from bluefin.core.ucb import EXPLORATION_CONSTANT, ucb1

Move = Any
Edge = Tuple[Move, "Node"]


class Node:
    __slots__ = ("prior", "value_sum", "visits", "_children")

    def __init__(self, prior: float = 1.0, value_sum: float = 0.0, visits: int = 0,
                 children: Optional[List[Edge]] = None):
        if not 0.0 < prior <= 1.0:
            raise ValueError(f"prior must be in (0, 1], got {prior}")
        self.prior = prior
        self.value_sum = value_sum
        self.visits = visits
        self._children: Optional[Tuple[Edge, ...]] = (
            tuple(children) if children is not None else None
        )

    @property
    def children(self) -> Optional[Tuple[Edge, ...]]:
        return self._children

    def set_children(self, children: List[Edge]) -> None:
        """Assign the child edges. Nodes are never re-expanded."""
        if self._children is not None:
            raise InvariantViolation("node already has children")
        self._children = tuple(children)

    def is_expanded(self) -> bool:
        return self._children is not None

    def mean_value(self) -> float:
        return self.value_sum / self.visits if self.visits else 0.0

    def update(self, value: float) -> None:
        self.value_sum += value
        self.visits += 1

    def has_unvisited_children(self) -> bool:
        if self._children is None:
            return False
        return any(child.visits == 0 for _, child in self._children)

    def select_best_child(self, c: float = EXPLORATION_CONSTANT,
                          exclude: Optional[AbstractSet[int]] = None) -> Optional[Edge]:
        """Return the (move, child) edge to descend into.

        Unvisited children come first, highest prior winning; once every
        child has a visit the highest UCB1 score wins. Ties go to the
        earliest edge in either case. Children whose ``id`` is in
        ``exclude`` are skipped; None is returned when all of them are.
        """
        if not self._children:
            raise InvariantViolation("select_best_child on a node without children")
        if exclude:
            edges = [e for e in self._children if id(e[1]) not in exclude]
        else:
            edges = self._children

        best_edge = None
        best_prior = 0.0
        for edge in edges:
            child = edge[1]
            if child.visits == 0 and child.prior > best_prior:
                best_prior = child.prior
                best_edge = edge
        if best_edge is not None:
            return best_edge

        # A fresh node can inherit fully visited children through transpositions.
        parent_visits = self.visits if self.visits > 0 else 1
        best_score = -float("inf")
        for edge in edges:
            child = edge[1]
            score = ucb1(child.visits, child.value_sum, parent_visits, c)
            if best_edge is None or score > best_score:
                best_score = score
                best_edge = edge
        return best_edge

    def best_move(self) -> Move:
        """Move of the most visited child, earliest edge on ties."""
        if not self._children:
            raise InvariantViolation("best_move on a node without children")
        best_move, best_child = self._children[0]
        for move, child in self._children[1:]:
            if child.visits > best_child.visits:
                best_move, best_child = move, child
        return best_move

    def __repr__(self) -> str:
        n_children = len(self._children) if self._children is not None else None
        return (f"Node(prior={self.prior:.4f}, value_sum={self.value_sum:.3f}, "
                f"visits={self.visits}, children={n_children})")
