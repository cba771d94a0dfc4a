"""Static evaluation used at search leaves and for expansion priors.

The search only needs the ``Evaluator`` protocol below. The shipped
implementation scores material, and delegates per-move scoring to a
pluggable ``MoveScorer`` strategy so priors can be changed without touching
the position evaluation.
"""

from typing import Any, Dict, Optional, Protocol

import chess

from bluefin.config import CONFIG, EvalConfig

Position = Any
Move = Any

PIECE_NAMES = {
    chess.PAWN: "PAWN",
    chess.KNIGHT: "KNIGHT",
    chess.BISHOP: "BISHOP",
    chess.ROOK: "ROOK",
    chess.QUEEN: "QUEEN",
}


class Evaluator(Protocol):
    def evaluate(self, position: Position) -> float:
        """Score from the point of view of the side to move."""
        ...

    def evaluate_move(self, position: Position, move: Move) -> float:
        """Raw heuristic score of ``move``; only relative values matter."""
        ...


class MoveScorer(Protocol):
    def __call__(self, board: chess.Board, move: chess.Move) -> float:
        ...


class UniformMoveScorer:
    """Every move scores the same, so expansion priors come out uniform."""

    def __call__(self, board: chess.Board, move: chess.Move) -> float:
        return 0.0


class CaptureMoveScorer:
    """MVV-LVA for captures plus a flat bonus for promotions; quiet moves score 0."""

    def __init__(self, promotion_bonus: float = 8.0):
        self.promotion_bonus = promotion_bonus

    def __call__(self, board: chess.Board, move: chess.Move) -> float:
        score = 0.0
        if board.is_capture(move):
            attacker = board.piece_at(move.from_square)
            if board.is_en_passant(move):
                victim_type = chess.PAWN
            else:
                victim_type = board.piece_type_at(move.to_square)
            score += victim_type * 10 - attacker.piece_type
        if move.promotion:
            score += self.promotion_bonus
        return score


def make_move_scorer(name: str, cfg: Optional[EvalConfig] = None) -> MoveScorer:
    cfg = cfg or CONFIG.eval
    if name == "uniform":
        return UniformMoveScorer()
    if name == "capture":
        return CaptureMoveScorer(cfg.promotion_bonus)
    raise ValueError(f"Unknown move scorer: {name!r}")


class MaterialEvaluator:
    """Material balance in pawn units, positive when the side to move is ahead."""

    def __init__(self, move_scorer: Optional[MoveScorer] = None,
                 cfg: Optional[EvalConfig] = None):
        self.cfg = cfg or CONFIG.eval
        self.move_scorer = move_scorer or make_move_scorer(self.cfg.move_scorer, self.cfg)
        self._values: Dict[int, float] = {
            pt: float(self.cfg.piece_values.get(name, 0.0)) for pt, name in PIECE_NAMES.items()
        }

    def count_material(self, board: chess.Board) -> float:
        """White material minus black material."""
        score = 0.0
        for pt, value in self._values.items():
            white = chess.popcount(board.pieces_mask(pt, chess.WHITE))
            black = chess.popcount(board.pieces_mask(pt, chess.BLACK))
            score += (white - black) * value
        return score

    def evaluate(self, board: chess.Board) -> float:
        score = self.count_material(board)
        return score if board.turn == chess.WHITE else -score

    def evaluate_move(self, board: chess.Board, move: chess.Move) -> float:
        return self.move_scorer(board, move)
