"""Static evaluation of a position from the AI's point of view."""
from __future__ import annotations

from .board import GameState

SCORE_WEIGHT = 10
THIRD_SIDE_PENALTY = 2


def count_third_sides(state: GameState) -> int:
    """Number of boxes with exactly three sides drawn (free captures on offer)."""

    return sum(1 for row, col in state.boxes() if state.side_count(row, col) == 3)


def evaluate(state: GameState) -> int:
    return state.score_diff() * SCORE_WEIGHT - count_third_sides(state) * THIRD_SIDE_PENALTY


__all__ = ["SCORE_WEIGHT", "THIRD_SIDE_PENALTY", "count_third_sides", "evaluate"]
