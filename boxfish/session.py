"""Game sessions: the mutable context around the pure engine core.

A :class:`GameSession` owns the current state, the play mode and the busy
flag the front ends use while the AI is thinking. The core functions never
see the session; they are handed immutable states.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Tuple

from .board import (
    DEFAULT_BOARD_SIZE,
    GameState,
    Move,
    Player,
    apply_move,
    new_game,
    winner,
)
from .errors import SessionBusyError
from .search import DEFAULT_TIME_BUDGET_MS, AlphaBetaSearcher, SearchLimits


class GameMode(Enum):
    HUMAN_FIRST = "human_first"
    AI_FIRST = "ai_first"
    AI_VS_AI = "ai_vs_ai"

    @property
    def starting_player(self) -> Player:
        return Player.OPPONENT if self is GameMode.HUMAN_FIRST else Player.AI


MoveRecord = Tuple[Player, Move]


class GameSession:
    """One game between a human (or a second engine) and the AI."""

    def __init__(
        self,
        size: int = DEFAULT_BOARD_SIZE,
        mode: GameMode = GameMode.HUMAN_FIRST,
        *,
        limits: Optional[SearchLimits] = None,
        time_budget_ms: Optional[float] = DEFAULT_TIME_BUDGET_MS,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.size = size
        self.mode = mode
        self.limits = limits or SearchLimits()
        self.time_budget_ms = time_budget_ms
        self._logger = logger or (lambda *_: None)
        self.blocking = False
        self.history: List[MoveRecord] = []
        self.state: GameState = new_game(size, mode.starting_player)

    @classmethod
    def new(cls, size: int = DEFAULT_BOARD_SIZE, mode: GameMode = GameMode.HUMAN_FIRST, **kwargs) -> "GameSession":
        return cls(size, mode, **kwargs)

    def reset(self, mode: Optional[GameMode] = None, size: Optional[int] = None) -> GameState:
        if self.blocking:
            raise SessionBusyError("cannot reset while the AI is moving")
        if mode is not None:
            self.mode = mode
        if size is not None:
            self.size = size
        self.history = []
        self.state = new_game(self.size, self.mode.starting_player)
        self._logger(f"new game size={self.size} mode={self.mode.value}")
        return self.state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_over(self) -> bool:
        return self.state.is_terminal()

    def winner(self) -> Optional[Player]:
        return winner(self.state)

    @property
    def human_to_move(self) -> bool:
        return (
            self.mode is not GameMode.AI_VS_AI
            and not self.is_over
            and self.state.current_player is Player.OPPONENT
        )

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------
    def _play(self, move: Move) -> GameState:
        mover = self.state.current_player
        self.state = apply_move(self.state, move)
        self.history.append((mover, move))
        return self.state

    def play_human_move(self, move: Move) -> GameState:
        if self.blocking:
            raise SessionBusyError("the AI is still moving")
        if not self.human_to_move:
            raise SessionBusyError("it is not the human player's turn")
        return self._play(move)

    def choose_ai_move(self, state: Optional[GameState] = None) -> Optional[Move]:
        """Ask the engine for the side to move in ``state`` (AI by default)."""

        state = self.state if state is None else state
        if state.current_player is not Player.AI:
            state = state.mirrored()
        searcher = AlphaBetaSearcher(self.limits, logger=self._logger)
        info = searcher.search(state, SearchLimits.deadline_after(self.time_budget_ms))
        return info.move

    def play_ai_turn(self) -> List[Move]:
        """Let the AI move until it loses the turn or the game ends.

        Completing a box keeps the turn, so one call can play several moves.
        """

        if self.blocking:
            raise SessionBusyError("the AI is already moving")
        played: List[Move] = []
        self.blocking = True
        try:
            while self.state.current_player is Player.AI:
                move = self._play_engine_move()
                if move is None:
                    break
                played.append(move)
        finally:
            self.blocking = False
        return played

    def _play_engine_move(self) -> Optional[Move]:
        if self.is_over:
            return None
        move = self.choose_ai_move()
        if move is None:
            return None
        mover = self.state.current_player
        self._play(move)
        self._logger(
            f"{mover.name.lower()} played {move} score ai={self.state.score_ai} "
            f"opponent={self.state.score_opponent}"
        )
        return move

    def play_engine_move(self) -> Optional[Move]:
        """Play a single engine move for whichever side is to move.

        Front ends that animate self-play call this once per tick.
        """

        if self.blocking:
            raise SessionBusyError("the AI is already moving")
        self.blocking = True
        try:
            return self._play_engine_move()
        finally:
            self.blocking = False

    def play_self_game(self, max_moves: Optional[int] = None) -> GameState:
        """Play both sides with the engine until the game ends."""

        if self.blocking:
            raise SessionBusyError("the AI is already moving")
        limit = self.state.edge_count() if max_moves is None else max_moves
        self.blocking = True
        try:
            for _ in range(limit):
                if self._play_engine_move() is None:
                    break
        finally:
            self.blocking = False
        return self.state


__all__ = ["GameMode", "GameSession"]
