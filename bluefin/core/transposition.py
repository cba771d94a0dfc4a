"""Transposition table: position hash -> shared search Node.

Positions reached by different move orders hash to the same key and
therefore to one Node, turning the search tree into a DAG. The table is
the owner of every non-root node. Entries are created on demand during
expansion and are never evicted; memory grows with the number of distinct
positions for as long as the table lives. ``SearchEngine.advance`` clears
it between played moves unless ``reuse_table`` is configured.

Keys are trusted as-is. Unlike a depth-first search table there is no
stored FEN to verify against, so a 64-bit collision makes two positions
share statistics. That risk is accepted, not handled.

Usage (example):

    from bluefin.core.transposition import TranspositionTable

    tt = TranspositionTable()
    node = tt.get_or_insert(key, lambda: Node(prior=0.25))
    assert tt.get(key) is node
"""
from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional

from bluefin.core.node import Node


class TranspositionTable:
    """Unbounded dict keyed by position hash.

    Methods:
      - get(key) -> Optional[Node]
      - get_or_insert(key, factory) -> Node
      - clear()
    """

    def __init__(self):
        self._table: Dict[int, Node] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: int) -> Optional[Node]:
        return self._table.get(key)

    def get_or_insert(self, key: int, factory: Callable[[], Node]) -> Node:
        node = self._table.get(key)
        if node is not None:
            self.hits += 1
            return node
        self.misses += 1
        node = factory()
        self._table[key] = node
        return node

    def clear(self):
        self._table.clear()
        self.hits = 0
        self.misses = 0

    def nodes(self) -> Iterator[Node]:
        return iter(self._table.values())

    def __contains__(self, key: int) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"TranspositionTable(size={len(self)}, hits={self.hits}, misses={self.misses})"
