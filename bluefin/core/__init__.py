"""Core search components: timer, UCB1, nodes, transposition table, rules/evaluator adapters and the MCTS loop."""

from .errors import InvariantViolation, NoResultError, SearchError
from .evaluator import CaptureMoveScorer, Evaluator, MaterialEvaluator, UniformMoveScorer
from .node import Node
from .rules import ChessRules, RulesEngine
from .search import SearchEngine, SearchStats
from .timer import Timer
from .transposition import TranspositionTable
from .ucb import floor_log2, ucb1
