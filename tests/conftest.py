"""Shared fakes for deterministic search tests.

TokenRules is a tiny game: a position is the tuple of tokens played so
far, each token can be played once, and the game ends after ``depth``
plies. Its key depends only on the set of tokens played, so ("a", "b")
and ("b", "a") transpose into the same node.
"""

import pytest

from bluefin.config import SearchConfig


class TokenRules:
    def __init__(self, tokens="abc", depth=2, mates=()):
        self.tokens = tokens
        self.depth = depth
        self.mates = {frozenset(m) for m in mates}

    def legal_moves(self, pos):
        if len(pos) >= self.depth:
            return []
        return [t for t in self.tokens if t not in pos]

    def apply(self, pos, move):
        return pos + (move,)

    def is_checkmate(self, pos):
        return frozenset(pos) in self.mates

    def hash(self, pos):
        return sum(1 << self.tokens.index(t) for t in pos)

    def clone(self, pos):
        return pos


class TokenEvaluator:
    def __init__(self, values=None, move_scores=None):
        self.values = values or {}
        self.move_scores = move_scores or {}

    def evaluate(self, pos):
        return self.values.get(frozenset(pos), 0.0)

    def evaluate_move(self, pos, move):
        return self.move_scores.get(move, 0.0)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def token_rules():
    return TokenRules()


@pytest.fixture
def token_evaluator():
    return TokenEvaluator()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def search_cfg():
    return SearchConfig()
