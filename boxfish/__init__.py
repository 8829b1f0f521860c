"""Public package interface for the BoxFish dots-and-boxes engine."""

from .board import (
    GameState,
    Move,
    Orientation,
    Player,
    apply_move,
    available_moves,
    new_game,
)
from .chains import best_endgame_move, chains, estimate_final_score_diff, is_endgame
from .engine import BoxEngine
from .errors import BoxFishError, InvalidMoveError, SessionBusyError
from .evaluation import count_third_sides, evaluate
from .search import AlphaBetaSearcher, SearchInfo, SearchLimits, choose_move, minimax
from .session import GameMode, GameSession

__all__ = [
    "AlphaBetaSearcher",
    "BoxEngine",
    "BoxFishError",
    "GameMode",
    "GameSession",
    "GameState",
    "InvalidMoveError",
    "Move",
    "Orientation",
    "Player",
    "SearchInfo",
    "SearchLimits",
    "SessionBusyError",
    "apply_move",
    "available_moves",
    "best_endgame_move",
    "chains",
    "choose_move",
    "count_third_sides",
    "estimate_final_score_diff",
    "evaluate",
    "is_endgame",
    "minimax",
    "new_game",
]
