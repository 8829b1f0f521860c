"""Chain analysis and the chain-based endgame heuristic.

A chain here is a maximal group of 4-adjacent boxes that each have exactly two
sides drawn. Adjacency is purely structural: two such boxes belong to the same
chain even if the edge between them is already drawn. The long-chain rule
used by :func:`estimate_final_score_diff` assumes whoever is forced to open a
chain gives it away, while the taker keeps ``length - 4`` extra boxes after
double-dealing.
"""
from __future__ import annotations

from typing import List, Optional, Set, Tuple

from .board import GameState, Move, apply_move, available_moves
from .evaluation import SCORE_WEIGHT, count_third_sides

ENDGAME_MOVE_THRESHOLD = 30
DOUBLE_DEAL_COST = 4
ENDGAME_THIRD_SIDE_PENALTY = 3


def chains(state: GameState) -> List[int]:
    """Lengths of every chain, discovered in row-major order of their first box."""

    last = state.size - 2
    visited: Set[Tuple[int, int]] = set()
    lengths: List[int] = []
    for start in state.boxes():
        if start in visited or state.side_count(*start) != 2:
            continue
        visited.add(start)
        stack = [start]
        length = 0
        while stack:
            row, col = stack.pop()
            length += 1
            for neighbour in ((row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)):
                n_row, n_col = neighbour
                if not (0 <= n_row <= last and 0 <= n_col <= last):
                    continue
                if neighbour in visited or state.side_count(n_row, n_col) != 2:
                    continue
                visited.add(neighbour)
                stack.append(neighbour)
        lengths.append(length)
    return lengths


def is_endgame(
    state: GameState,
    move_threshold: int = ENDGAME_MOVE_THRESHOLD,
    *,
    move_count: Optional[int] = None,
) -> bool:
    """Few moves left and at least one chain on the board.

    ``move_count`` lets callers that already enumerated the legal moves skip
    a second enumeration.
    """

    if move_count is None:
        move_count = len(available_moves(state))
    if move_count > move_threshold:
        return False
    return any(length >= 1 for length in chains(state))


def estimate_final_score_diff(state: GameState) -> int:
    lengths = chains(state)
    if not lengths:
        return state.score_diff()
    return state.score_diff() + sum(length - DOUBLE_DEAL_COST for length in lengths)


def endgame_score(state: GameState) -> int:
    """One-ply score used to rank endgame candidates."""

    return (
        estimate_final_score_diff(state) * SCORE_WEIGHT
        - count_third_sides(state) * ENDGAME_THIRD_SIDE_PENALTY
        - sum(chains(state))
    )


def best_endgame_move(state: GameState) -> Optional[Move]:
    """Greedy one-ply pick by :func:`endgame_score`; earliest move wins ties."""

    best_move: Optional[Move] = None
    best_score = 0
    for move in available_moves(state):
        score = endgame_score(apply_move(state, move))
        if best_move is None or score > best_score:
            best_move = move
            best_score = score
    return best_move


__all__ = [
    "DOUBLE_DEAL_COST",
    "ENDGAME_MOVE_THRESHOLD",
    "best_endgame_move",
    "chains",
    "endgame_score",
    "estimate_final_score_diff",
    "is_endgame",
]
