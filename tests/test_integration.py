"""
Integration test suite for the Bluefin search engine.

Tests components working together on real chess positions:
- Full searches from the starting position and from FENs
- Budget handling with real wall-clock timers
- Transposition sharing across an actual search
- Engine wrapper (board + session) over a short game
"""

import logging
import time

import chess
import pytest

from bluefin.config import Config, SearchConfig, configure_logging
from bluefin.core.errors import NoResultError
from bluefin.core.evaluator import CaptureMoveScorer, MaterialEvaluator
from bluefin.core.rules import ChessRules
from bluefin.core.search import SearchEngine
from bluefin.core.timer import Timer
from bluefin.main import Engine

ONLY_MOVE_FEN = "7k/8/8/8/8/8/6q1/7K w - - 0 1"  # Kxg2 is forced
FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"


def chess_engine(board=None, **cfg):
    return SearchEngine(ChessRules(), MaterialEvaluator(), board or chess.Board(),
                        config=SearchConfig(**cfg))


# ════════════════════════════════════════════════════════════════════════════
#  END-TO-END SEARCH
# ════════════════════════════════════════════════════════════════════════════

class TestSearchEndToEnd:
    def test_starting_position_returns_legal_move(self):
        engine = chess_engine(min_iterations=50)
        move = engine.search(engine.new_root(), Timer(0.2))
        assert move in chess.Board().legal_moves
        assert engine.stats.iterations >= 50

    def test_only_move_with_expired_timer(self):
        board = chess.Board(ONLY_MOVE_FEN)
        assert board.legal_moves.count() == 1
        engine = chess_engine(board)
        move = engine.search(engine.new_root(), Timer(0.0))
        assert move == chess.Move.from_uci("h1g2")

    @pytest.mark.parametrize("budget", [0.0, 0.01, 0.1])
    def test_only_move_for_any_budget(self, budget):
        engine = chess_engine(chess.Board(ONLY_MOVE_FEN))
        assert engine.search(engine.new_root(), Timer(budget)).uci() == "h1g2"

    def test_expired_timer_strict_mode_has_no_result(self):
        engine = chess_engine(min_iterations=0)
        with pytest.raises(NoResultError):
            engine.search(engine.new_root(), Timer(0.0))

    def test_checkmated_root_has_no_result(self):
        engine = chess_engine(chess.Board(FOOLS_MATE_FEN))
        with pytest.raises(NoResultError):
            engine.search(engine.new_root(), Timer(0.05))

    def test_stalemated_root_has_no_result(self):
        engine = chess_engine(chess.Board(STALEMATE_FEN))
        with pytest.raises(NoResultError):
            engine.search(engine.new_root(), Timer(0.05))

    def test_search_respects_budget(self):
        engine = chess_engine()
        start = time.monotonic()
        engine.search(engine.new_root(), Timer(0.1))
        # one iteration may run past the deadline, but not by much
        assert time.monotonic() - start < 1.0

    def test_root_position_unchanged(self):
        board = chess.Board()
        engine = chess_engine(board, min_iterations=20)
        engine.search(engine.new_root(), Timer(0.0))
        assert engine.position.fen() == chess.STARTING_FEN

    def test_root_children_cover_legal_moves(self):
        engine = chess_engine(min_iterations=25)
        root = engine.new_root()
        engine.search(root, Timer(0.0))
        assert {m for m, _ in root.children} == set(chess.Board().legal_moves)
        assert sum(c.visits for _, c in root.children) == 25
        assert root.visits == 1

    def test_capture_priors_in_search(self):
        board = chess.Board("4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1")
        engine = SearchEngine(ChessRules(), MaterialEvaluator(move_scorer=CaptureMoveScorer()),
                              board, config=SearchConfig(min_iterations=1))
        root = engine.new_root()
        engine.search(root, Timer(0.0))
        first_move, first_child = max(root.children, key=lambda e: e[1].visits)
        assert first_move == chess.Move.from_uci("e4d5")
        assert first_child.visits == 1

    def test_descend_to_leaf_reaches_deeper(self):
        engine = chess_engine(min_iterations=80, descend_to_leaf=True)
        engine.search(engine.new_root(), Timer(0.0))
        assert engine.stats.max_depth > 2


# ════════════════════════════════════════════════════════════════════════════
#  TRANSPOSITIONS IN A REAL SEARCH
# ════════════════════════════════════════════════════════════════════════════

class TestTranspositions:
    def test_move_orders_share_node(self):
        engine = chess_engine()
        a = chess.Board()
        for uci in ("g1f3", "g8f6"):
            a.push_uci(uci)
        b = chess.Board()
        for uci in ("b1c3", "g8f6"):
            b.push_uci(uci)
        via_nf3 = dict(engine.expand(a))[chess.Move.from_uci("b1c3")]
        via_nc3 = dict(engine.expand(b))[chess.Move.from_uci("g1f3")]
        assert via_nf3 is via_nc3

        engine.backpropagate([(chess.Move.from_uci("b1c3"), via_nf3)], 0.5)
        assert via_nc3.visits == 1
        assert via_nc3.value_sum == 0.5

    def test_table_grows_during_search(self):
        engine = chess_engine(min_iterations=30)
        engine.search(engine.new_root(), Timer(0.0))
        assert len(engine.tt) >= 20

    def test_reused_table_carries_statistics(self):
        engine = chess_engine(min_iterations=40, reuse_table=True)
        engine.search(engine.new_root(), Timer(0.0))
        before = len(engine.tt)
        engine.advance(chess.Move.from_uci("e2e4"))
        assert len(engine.tt) == before
        engine.search(engine.new_root(), Timer(0.0))
        assert len(engine.tt) >= before


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE WRAPPER
# ════════════════════════════════════════════════════════════════════════════

class TestEngineWrapper:
    def test_get_best_move(self):
        engine = Engine(config=SearchConfig(min_iterations=10))
        uci, iterations = engine.get_best_move(time_ms=20)
        assert chess.Move.from_uci(uci) in engine.board.legal_moves
        assert iterations >= 10

    def test_make_move(self):
        engine = Engine()
        assert engine.make_move("e2e4") is True
        assert engine.board.turn == chess.BLACK
        assert engine.search.position.fen() == engine.board.fen()

    def test_make_illegal_move(self):
        engine = Engine()
        assert engine.make_move("e2e5") is False
        assert engine.board.fen() == chess.STARTING_FEN

    def test_make_garbage_input(self):
        engine = Engine()
        assert engine.make_move("zzzz") is False
        assert engine.make_move("") is False

    def test_make_move_clears_table(self):
        engine = Engine(config=SearchConfig(min_iterations=10))
        engine.get_best_move(time_ms=0)
        assert len(engine.search.tt) > 0
        engine.make_move("e2e4")
        assert len(engine.search.tt) == 0

    def test_set_fen_and_reset(self):
        engine = Engine(config=SearchConfig(min_iterations=1))
        engine.set_fen(ONLY_MOVE_FEN)
        assert engine.get_best_move(time_ms=0)[0] == "h1g2"
        engine.reset()
        assert engine.search.position.fen() == chess.STARTING_FEN
        assert len(engine.search.tt) == 0

    def test_invalid_fen_raises(self):
        with pytest.raises(ValueError):
            Engine(fen="not a fen")

    def test_plays_short_game(self):
        engine = Engine(config=SearchConfig(min_iterations=15))
        for _ in range(8):
            if engine.board.is_game_over():
                break
            uci, _ = engine.get_best_move(time_ms=5)
            assert engine.make_move(uci)
        assert len(engine.board.move_stack) > 0


# ════════════════════════════════════════════════════════════════════════════
#  LOGGING
# ════════════════════════════════════════════════════════════════════════════

class TestLogging:
    def test_search_logs_summary(self, caplog):
        configure_logging(Config(log_level="INFO"))
        engine = chess_engine(min_iterations=3)
        with caplog.at_level(logging.INFO, logger="bluefin.core.search"):
            move = engine.search(engine.new_root(), Timer(0.0))
        assert "search done" in caplog.text
        assert f"best={move}" in caplog.text
        assert "iterations=3" in caplog.text

    def test_expansion_logs_detail_at_debug(self, caplog):
        engine = chess_engine()
        with caplog.at_level(logging.DEBUG, logger="bluefin.core.search"):
            engine.expand(chess.Board())
        assert "expanded 20 moves: 0 transpositions, table size 20" in caplog.text

    def test_unknown_toml_key_warns(self, tmp_path, caplog):
        path = tmp_path / "bluefin.toml"
        path.write_text("[search]\nnot_a_setting = 3\n")
        with caplog.at_level(logging.WARNING, logger="bluefin.config"):
            Config.load_from_toml(str(path))
        assert "search.not_a_setting" in caplog.text
