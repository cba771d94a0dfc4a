import logging
from typing import Optional, Tuple

import chess

from bluefin.config import CONFIG, SearchConfig
from bluefin.core.evaluator import MaterialEvaluator
from bluefin.core.rules import ChessRules
from bluefin.core.search import SearchEngine

logger = logging.getLogger(__name__)


class Engine:
    """A board plus a search session that follows the moves played on it."""

    def __init__(self, fen: Optional[str] = None, config: Optional[SearchConfig] = None):
        self.board = chess.Board(fen) if fen else chess.Board()
        self.cfg = config or CONFIG.search
        self.search = SearchEngine(ChessRules(), MaterialEvaluator(),
                                   self.board.copy(stack=False), config=self.cfg)

    def get_best_move(self, time_ms: Optional[int] = None) -> Tuple[str, int]:
        """Return the recommended move in UCI notation and the iteration count."""
        move = self.search.search_best_move(time_ms)
        return move.uci(), self.search.stats.iterations

    def make_move(self, move_uci: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        try:
            move = chess.Move.from_uci(move_uci)
        except ValueError:
            return False
        if move not in self.board.legal_moves:
            return False
        self.board.push(move)
        self.search.advance(move)
        return True

    def set_fen(self, fen: str):
        """Set the position from a FEN string and start a fresh table."""
        self.board.set_fen(fen)
        self.search.position = self.board.copy(stack=False)
        self.search.tt.clear()

    def reset(self):
        self.board.reset()
        self.search.position = self.board.copy(stack=False)
        self.search.tt.clear()
        logger.debug("engine reset to the starting position")
