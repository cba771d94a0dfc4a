"""Anytime Monte Carlo Tree Search over a transposition DAG.

One iteration clones the root position into a scratch copy and runs:

  selection        descend from the root by UCB1 while the current node is
                   visited and still has unvisited children
  expansion        give the frontier node its children (priors from
                   ``Evaluator.evaluate_move``, nodes shared through the
                   transposition table) and step into the best one
  backpropagation  score the leaf and add the value to every node on the
                   path, flipping sign each ply

The wall-clock budget is checked only between iterations, so an iteration
in flight always completes. The root node is kept out of the table and out
of the path: its visit count is seeded to 1 and never updated.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import chess

from bluefin.config import CONFIG, SearchConfig
from bluefin.core.errors import NoResultError
from bluefin.core.evaluator import Evaluator, MaterialEvaluator
from bluefin.core.node import Edge, Node
from bluefin.core.rules import ChessRules, RulesEngine
from bluefin.core.timer import Timer
from bluefin.core.transposition import TranspositionTable

logger = logging.getLogger(__name__)

Position = Any
Move = Any

CHECKMATE_VALUE = 1.0
DRAW_VALUE = 0.0


@dataclass
class SearchStats:
    iterations: int = 0
    elapsed: float = 0.0
    table_size: int = 0
    max_depth: int = 0


class SearchEngine:
    def __init__(self, rules: Optional[RulesEngine] = None,
                 evaluator: Optional[Evaluator] = None,
                 position: Optional[Position] = None,
                 table: Optional[TranspositionTable] = None,
                 config: Optional[SearchConfig] = None):
        self.rules = rules or ChessRules()
        self.evaluator = evaluator or MaterialEvaluator()
        self.position = position if position is not None else chess.Board()
        self.tt = table if table is not None else TranspositionTable()
        self.cfg = config or CONFIG.search
        self.stats = SearchStats()

    @staticmethod
    def new_root() -> Node:
        # UCB1 takes log2 of the parent's visits, so the root starts at 1.
        return Node(prior=1.0, visits=1)

    # -------------------------
    # Expansion
    # -------------------------
    def expand(self, position: Position, moves: Optional[Sequence[Move]] = None) -> List[Edge]:
        """Build the child edges of ``position``, sharing nodes through the table.

        Raw move scores are shifted so the lowest one becomes
        ``prior_epsilon`` and then normalised, which keeps every prior strictly
        positive even when all scores are equal.
        """
        if moves is None:
            moves = self.rules.legal_moves(position)
        if not moves:
            return []

        raw = [self.evaluator.evaluate_move(position, m) for m in moves]
        floor = min(raw) - self.cfg.prior_epsilon
        shifted = [r - floor for r in raw]
        total = sum(shifted)

        edges: List[Edge] = []
        hits = self.tt.hits
        for move, s in zip(moves, shifted):
            child_pos = self.rules.apply(self.rules.clone(position), move)
            key = self.rules.hash(child_pos)
            prior = s / total
            node = self.tt.get_or_insert(key, lambda: Node(prior=prior))
            edges.append((move, node))
        logger.debug("expanded %d moves: %d transpositions, table size %d",
                     len(edges), self.tt.hits - hits, len(self.tt))
        return edges

    # -------------------------
    # Selection
    # -------------------------
    def _should_descend(self, node: Node) -> bool:
        if self.cfg.descend_to_leaf:
            return bool(node.children)
        return node.has_unvisited_children()

    def select(self, node: Node, position: Position, path: List[Edge]) -> Tuple[Node, Position]:
        """Walk down from ``node``, appending each traversed edge to ``path``.

        A node appears at most once on a path: children already on it are
        skipped, and the walk stops when every child is.
        """
        on_path = {id(n) for _, n in path}
        while node.visits > 0 and self._should_descend(node):
            if len(on_path) >= self.cfg.max_selection_depth:
                break
            edge = node.select_best_child(self.cfg.exploration, exclude=on_path)
            if edge is None:
                break
            move, node = edge
            position = self.rules.apply(position, move)
            path.append(edge)
            on_path.add(id(node))
        return node, position

    def expansion_step(self, node: Node, position: Position,
                       path: List[Edge]) -> Tuple[Position, Sequence[Move]]:
        """Expand the frontier node and step into its best child.

        Returns the new scratch position and its legal moves. Terminal
        positions are returned unchanged, as are positions whose children
        are all already on the path.
        """
        moves = self.rules.legal_moves(position)
        if not moves:
            return position, moves
        if not node.is_expanded():
            node.set_children(self.expand(position, moves))
        edge = node.select_best_child(self.cfg.exploration, exclude={id(n) for _, n in path})
        if edge is None:
            return position, moves
        move, child = edge
        position = self.rules.apply(position, move)
        path.append(edge)
        return position, self.rules.legal_moves(position)

    # -------------------------
    # Backpropagation
    # -------------------------
    def leaf_value(self, position: Position, moves: Optional[Sequence[Move]] = None) -> float:
        if moves is None:
            moves = self.rules.legal_moves(position)
        if not moves:
            return CHECKMATE_VALUE if self.rules.is_checkmate(position) else DRAW_VALUE
        return self.evaluator.evaluate(position)

    @staticmethod
    def backpropagate(path: Sequence[Edge], value: float) -> None:
        """Add ``value`` to the deepest node, then alternate sign up to the root's child."""
        for _, node in reversed(path):
            node.update(value)
            value = -value

    # -------------------------
    # Main loop
    # -------------------------
    def run_iteration(self, root: Node) -> int:
        """One select/expand/backpropagate cycle. Returns the path length."""
        path: List[Edge] = []
        scratch = self.rules.clone(self.position)
        node, scratch = self.select(root, scratch, path)
        scratch, moves = self.expansion_step(node, scratch, path)
        self.backpropagate(path, self.leaf_value(scratch, moves))
        return len(path)

    def search(self, root: Node, timer: Timer) -> Move:
        """Run iterations until the budget is spent, then return the most visited root move."""
        if root.visits < 1:
            root.visits = 1
        if not root.is_expanded() and not self.rules.legal_moves(self.position):
            raise NoResultError("root position has no legal moves")

        iterations = 0
        max_depth = 0
        while iterations < self.cfg.min_iterations or timer.is_time_remaining(self.cfg.stop_reserve):
            depth = self.run_iteration(root)
            iterations += 1
            if depth > max_depth:
                max_depth = depth

        self.stats = SearchStats(iterations, timer.elapsed(), len(self.tt), max_depth)
        if not root.children:
            raise NoResultError(
                f"budget of {timer.duration:.3f}s expired before the root was expanded"
            )

        best = root.best_move()
        logger.info(
            "search done: best=%s iterations=%d depth=%d nodes=%d elapsed=%.3fs",
            best, iterations, max_depth, len(self.tt), self.stats.elapsed,
        )
        return best

    def search_best_move(self, time_ms: Optional[int] = None) -> Move:
        """Search the current position from a fresh root with a new timer."""
        budget = self.cfg.time_limit_ms if time_ms is None else time_ms
        return self.search(self.new_root(), Timer.from_ms(budget))

    def advance(self, move: Move) -> None:
        """Make ``move`` the new root position after it has been played."""
        self.position = self.rules.apply(self.rules.clone(self.position), move)
        if not self.cfg.reuse_table:
            self.tt.clear()
        logger.debug("advanced by %s, table size %d", move, len(self.tt))
