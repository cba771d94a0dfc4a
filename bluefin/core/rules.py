"""Game-rules interface consumed by the search, and its python-chess adapter."""

from typing import Any, Protocol, Sequence, runtime_checkable

import chess
from chess import polyglot

Position = Any
Move = Any


@runtime_checkable
class RulesEngine(Protocol):
    def legal_moves(self, position: Position) -> Sequence[Move]:
        """Ordered legal moves; empty iff the position is terminal."""
        ...

    def apply(self, position: Position, move: Move) -> Position:
        """Play ``move`` and return the resulting position.

        The input may be modified in place; callers clone first when they need
        to keep it. The move is not re-validated.
        """
        ...

    def is_checkmate(self, position: Position) -> bool:
        ...

    def hash(self, position: Position) -> int:
        """Fixed-width key, equal for positions reached by different move orders."""
        ...

    def clone(self, position: Position) -> Position:
        ...


class ChessRules:
    """RulesEngine over ``chess.Board``.

    ``apply`` pushes onto the board it is given. Copies are taken with
    ``stack=False``: the search never pops moves.
    """

    def legal_moves(self, board: chess.Board) -> Sequence[chess.Move]:
        return list(board.legal_moves)

    def apply(self, board: chess.Board, move: chess.Move) -> chess.Board:
        board.push(move)
        return board

    def is_checkmate(self, board: chess.Board) -> bool:
        return board.is_checkmate()

    def hash(self, board: chess.Board) -> int:
        # Polyglot keys include en passant only when a legal capture exists.
        return polyglot.zobrist_hash(board)

    def clone(self, board: chess.Board) -> chess.Board:
        return board.copy(stack=False)
