"""Search algorithms for the BoxFish engine.

This module provides an :class:`AlphaBetaSearcher` implementing plain
minimax with alpha-beta pruning, driven by iterative deepening under a soft
wall-clock deadline. Positions classified as endgames are answered directly by
the chain heuristic in :mod:`boxfish.chains` before any search happens.

Deadlines are absolute :func:`time.monotonic` readings handed down the
recursion. They are checked when a node is entered and after each child has
been scored, never in the middle of an evaluation, so running out of time
yields the best move found so far rather than an exception.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .board import GameState, Move, Player, apply_move, available_moves
from .chains import ENDGAME_MOVE_THRESHOLD, best_endgame_move, is_endgame
from .evaluation import evaluate


MAX_DEPTH = 6
MIN_DEPTH = 2
DEFAULT_TIME_BUDGET_MS = 175.0

INFINITY = float("inf")


def deadline_passed(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() >= deadline


@dataclass
class SearchLimits:
    """Tunable search parameters.

    Parameters
    ----------
    max_depth:
        Deepest iteration of the iterative deepening loop.
    min_depth:
        First iteration; clamped so it never exceeds ``max_depth``.
    time_budget_ms:
        Default wall-clock budget per decision. ``None`` searches without a
        deadline.
    endgame_move_threshold:
        Positions with at most this many legal moves and at least one chain
        are treated as endgames.
    """

    max_depth: int = MAX_DEPTH
    min_depth: int = MIN_DEPTH
    time_budget_ms: Optional[float] = DEFAULT_TIME_BUDGET_MS
    endgame_move_threshold: int = ENDGAME_MOVE_THRESHOLD

    def __post_init__(self) -> None:
        self.max_depth = max(1, int(self.max_depth))
        self.min_depth = max(1, min(int(self.min_depth), self.max_depth))

    def resolve_budget(self, time_controls: Optional[Dict[str, int]] = None) -> Optional[float]:
        """Return the budget in milliseconds implied by ``go`` time controls."""

        tc = time_controls or {}
        if tc.get("infinite"):
            return None
        if "movetime" in tc:
            return float(max(0, tc["movetime"]))
        if "depth" in tc:
            return None
        return self.time_budget_ms

    def with_depth(self, depth: Optional[int]) -> "SearchLimits":
        if not depth:
            return self
        return SearchLimits(
            max_depth=depth,
            min_depth=self.min_depth,
            time_budget_ms=self.time_budget_ms,
            endgame_move_threshold=self.endgame_move_threshold,
        )

    @staticmethod
    def deadline_after(budget_ms: Optional[float], now: Optional[float] = None) -> Optional[float]:
        if budget_ms is None:
            return None
        start = time.monotonic() if now is None else now
        return start + budget_ms / 1000.0


@dataclass
class SearchInfo:
    """Outcome of a single decision."""

    move: Optional[Move]
    value: Optional[float] = None
    depth: int = 0
    nodes: int = 0
    elapsed: float = 0.0
    source: str = "search"
    interrupted: bool = False


class AlphaBetaSearcher:
    """Iterative-deepening alpha-beta searcher.

    The searcher keeps per-call counters only; every call works from the
    state it is given and never remembers positions between decisions.
    """

    def __init__(
        self,
        limits: Optional[SearchLimits] = None,
        *,
        logger: Optional[Callable[[str], None]] = None,
        log_tag: str = "AB",
    ) -> None:
        self.limits = limits or SearchLimits()
        self.log_tag = log_tag
        self._logger = logger or (lambda *_: None)
        self.nodes = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def search(self, state: GameState, deadline: Optional[float] = None) -> SearchInfo:
        """Pick a move for the AI: endgame heuristic first, then deepening search."""

        start = time.monotonic()
        if not available_moves(state):
            return SearchInfo(move=None, source="none")

        if is_endgame(state, self.limits.endgame_move_threshold):
            move = best_endgame_move(state)
            if move is not None:
                self._logger(f"{self.log_tag}: endgame heuristic chose {move}")
                return SearchInfo(move=move, elapsed=time.monotonic() - start, source="endgame")

        return self.iterative_deepening(state, deadline)

    def iterative_deepening(self, state: GameState, deadline: Optional[float] = None) -> SearchInfo:
        self.nodes = 0
        start = time.monotonic()
        moves = available_moves(state)
        if not moves:
            return SearchInfo(move=None, source="none")

        self._logger(
            f"{self.log_tag}: start search depth={self.limits.min_depth}..{self.limits.max_depth} "
            f"time_budget={'infinite' if deadline is None else f'{max(0.0, deadline - start):.3f}s'} "
            f"legal_moves={len(moves)}"
        )

        best_move: Optional[Move] = None
        best_value = -INFINITY
        completed_depth = 0
        interrupted = False

        for depth in range(self.limits.min_depth, self.limits.max_depth + 1):
            for move in moves:
                value = self.minimax(apply_move(state, move), depth, -INFINITY, INFINITY, deadline)
                if best_move is None or value > best_value:
                    best_move = move
                    best_value = value
                if deadline_passed(deadline):
                    interrupted = True
                    break

            if interrupted:
                self._logger(
                    f"{self.log_tag}: deadline reached at depth={depth} nodes={self.nodes}"
                )
                break

            completed_depth = depth
            self._logger(
                f"{self.log_tag}: depth={depth} value={best_value} best={best_move} "
                f"nodes={self.nodes} time={time.monotonic() - start:.3f}s"
            )

        elapsed = time.monotonic() - start
        self._logger(
            f"{self.log_tag}: completed depth={completed_depth} value={best_value} "
            f"best={best_move} nodes={self.nodes} time={elapsed:.3f}s interrupted={interrupted}"
        )
        return SearchInfo(
            move=best_move,
            value=best_value,
            depth=completed_depth,
            nodes=self.nodes,
            elapsed=elapsed,
            interrupted=interrupted,
        )

    # ------------------------------------------------------------------
    # Core search
    # ------------------------------------------------------------------
    def minimax(
        self,
        state: GameState,
        depth: int,
        alpha: float,
        beta: float,
        deadline: Optional[float] = None,
    ) -> float:
        self.nodes += 1

        if depth <= 0:
            return evaluate(state)
        moves = available_moves(state)
        if not moves or deadline_passed(deadline):
            return evaluate(state)
        # The endgame cut-off scores with the plain evaluator, not the chain
        # projection used at the root.
        if is_endgame(state, self.limits.endgame_move_threshold, move_count=len(moves)):
            return evaluate(state)

        if state.current_player is Player.AI:
            best = -INFINITY
            for move in moves:
                value = self.minimax(apply_move(state, move), depth - 1, alpha, beta, deadline)
                if value > best:
                    best = value
                if value > alpha:
                    alpha = value
                if beta <= alpha or deadline_passed(deadline):
                    break
            return best

        best = INFINITY
        for move in moves:
            value = self.minimax(apply_move(state, move), depth - 1, alpha, beta, deadline)
            if value < best:
                best = value
            if value < beta:
                beta = value
            if beta <= alpha or deadline_passed(deadline):
                break
        return best


def minimax(
    state: GameState,
    depth: int,
    alpha: float = -INFINITY,
    beta: float = INFINITY,
    deadline: Optional[float] = None,
    *,
    limits: Optional[SearchLimits] = None,
) -> float:
    return AlphaBetaSearcher(limits).minimax(state, depth, alpha, beta, deadline)


def choose_move(
    state: GameState,
    deadline_ms: Optional[float] = DEFAULT_TIME_BUDGET_MS,
    *,
    limits: Optional[SearchLimits] = None,
    logger: Optional[Callable[[str], None]] = None,
) -> Optional[Move]:
    """Best move for the AI within ``deadline_ms`` milliseconds from now.

    ``None`` is returned only for terminal positions. An already expired
    budget still produces a legal move.
    """

    searcher = AlphaBetaSearcher(limits, logger=logger)
    deadline = SearchLimits.deadline_after(deadline_ms)
    return searcher.search(state, deadline).move


__all__ = [
    "AlphaBetaSearcher",
    "DEFAULT_TIME_BUDGET_MS",
    "MAX_DEPTH",
    "MIN_DEPTH",
    "SearchInfo",
    "SearchLimits",
    "choose_move",
    "deadline_passed",
    "minimax",
]
