"""Board model for dots and boxes.

A :class:`GameState` is an immutable snapshot of the edges drawn so far, both
scores and the side to move. New states are only ever produced by
:func:`new_game` and :func:`apply_move`; edge grids are tuples so sibling
branches of a search tree can never observe each other's moves.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Iterator, List, NamedTuple, Optional, Tuple

from .errors import InvalidMoveError


EdgeGrid = Tuple[Tuple[bool, ...], ...]

DEFAULT_BOARD_SIZE = 5

_NOTATION_PATTERN = re.compile(r"^\s*([HVhv])\s*(\d+)\s*[,:]\s*(\d+)\s*$")


class Player(IntEnum):
    OPPONENT = -1
    AI = 1

    def other(self) -> "Player":
        return Player.AI if self is Player.OPPONENT else Player.OPPONENT


class Orientation(Enum):
    HORIZONTAL = "H"
    VERTICAL = "V"


class Move(NamedTuple):
    """A single undrawn edge, named by orientation and its top/left point."""

    orientation: Orientation
    row: int
    col: int

    def notation(self) -> str:
        return f"{self.orientation.value}{self.row},{self.col}"

    def __str__(self) -> str:
        return self.notation()

    @classmethod
    def parse(cls, text: str) -> "Move":
        """Parse ``H<row>,<col>`` / ``V<row>,<col>`` notation."""

        match = _NOTATION_PATTERN.match(text or "")
        if match is None:
            raise InvalidMoveError(f"cannot parse move notation {text!r}")
        orientation = Orientation(match.group(1).upper())
        return cls(orientation, int(match.group(2)), int(match.group(3)))


def _empty_grid(rows: int, cols: int) -> EdgeGrid:
    return tuple(tuple(False for _ in range(cols)) for _ in range(rows))


@dataclass(frozen=True)
class GameState:
    size: int
    horizontal: EdgeGrid
    vertical: EdgeGrid
    score_ai: int = 0
    score_opponent: int = 0
    current_player: Player = Player.OPPONENT

    # ------------------------------------------------------------------
    # Box queries
    # ------------------------------------------------------------------
    @property
    def box_count(self) -> int:
        return (self.size - 1) * (self.size - 1)

    def side_count(self, row: int, col: int) -> int:
        return (
            self.horizontal[row][col]
            + self.horizontal[row + 1][col]
            + self.vertical[row][col]
            + self.vertical[row][col + 1]
        )

    def is_box_full(self, row: int, col: int) -> bool:
        return (
            self.horizontal[row][col]
            and self.horizontal[row + 1][col]
            and self.vertical[row][col]
            and self.vertical[row][col + 1]
        )

    def boxes(self) -> Iterator[Tuple[int, int]]:
        """Yield every box coordinate in row-major order."""

        for row in range(self.size - 1):
            for col in range(self.size - 1):
                yield row, col

    # ------------------------------------------------------------------
    # Game queries
    # ------------------------------------------------------------------
    def is_drawn(self, move: Move) -> bool:
        grid = self.horizontal if move.orientation is Orientation.HORIZONTAL else self.vertical
        return grid[move.row][move.col]

    def edges_drawn(self) -> int:
        return sum(map(sum, self.horizontal)) + sum(map(sum, self.vertical))

    def edge_count(self) -> int:
        return 2 * self.size * (self.size - 1)

    def is_terminal(self) -> bool:
        return self.edges_drawn() == self.edge_count()

    def score_diff(self) -> int:
        return self.score_ai - self.score_opponent

    def score_of(self, player: Player) -> int:
        return self.score_ai if player is Player.AI else self.score_opponent

    def mirrored(self) -> "GameState":
        """Return the same position with the AI and opponent roles swapped."""

        return replace(
            self,
            score_ai=self.score_opponent,
            score_opponent=self.score_ai,
            current_player=self.current_player.other(),
        )

    def render(self) -> str:
        """ASCII diagram of the grid, completed boxes marked ``#``."""

        lines: List[str] = []
        for row in range(self.size):
            top = []
            for col in range(self.size - 1):
                top.append("+")
                top.append("---" if self.horizontal[row][col] else "   ")
            top.append("+")
            lines.append("".join(top))
            if row == self.size - 1:
                break
            middle = []
            for col in range(self.size):
                middle.append("|" if self.vertical[row][col] else " ")
                if col < self.size - 1:
                    middle.append(" # " if self.is_box_full(row, col) else "   ")
            lines.append("".join(middle))
        return "\n".join(lines)


def new_game(size: int = DEFAULT_BOARD_SIZE, starting_player: Player = Player.OPPONENT) -> GameState:
    """Create the all-empty state for a board with ``size`` points per side."""

    if size < 2:
        raise ValueError(f"board needs at least 2 points per side, got {size}")
    return GameState(
        size=size,
        horizontal=_empty_grid(size, size - 1),
        vertical=_empty_grid(size - 1, size),
        current_player=Player(starting_player),
    )


def available_moves(state: GameState) -> List[Move]:
    """Every undrawn edge: horizontals row-major, then verticals row-major."""

    moves: List[Move] = []
    for row, edges in enumerate(state.horizontal):
        for col, drawn in enumerate(edges):
            if not drawn:
                moves.append(Move(Orientation.HORIZONTAL, row, col))
    for row, edges in enumerate(state.vertical):
        for col, drawn in enumerate(edges):
            if not drawn:
                moves.append(Move(Orientation.VERTICAL, row, col))
    return moves


def validate_move(state: GameState, move: Move) -> None:
    if not isinstance(move.orientation, Orientation):
        raise InvalidMoveError(f"unknown orientation {move.orientation!r}")
    grid = state.horizontal if move.orientation is Orientation.HORIZONTAL else state.vertical
    if not (0 <= move.row < len(grid) and 0 <= move.col < len(grid[0])):
        raise InvalidMoveError(f"move {move} is outside a {state.size}x{state.size} grid")
    if grid[move.row][move.col]:
        raise InvalidMoveError(f"edge {move} is already drawn")


def _set_edge(grid: EdgeGrid, row: int, col: int) -> EdgeGrid:
    edges = grid[row]
    updated = edges[:col] + (True,) + edges[col + 1:]
    return grid[:row] + (updated,) + grid[row + 1:]


def _completed_boxes(state: GameState, move: Move) -> int:
    completed = 0
    last = state.size - 1
    if move.orientation is Orientation.HORIZONTAL:
        if move.row > 0 and state.is_box_full(move.row - 1, move.col):
            completed += 1
        if move.row < last and state.is_box_full(move.row, move.col):
            completed += 1
    else:
        if move.col > 0 and state.is_box_full(move.row, move.col - 1):
            completed += 1
        if move.col < last and state.is_box_full(move.row, move.col):
            completed += 1
    return completed


def apply_move(state: GameState, move: Move) -> GameState:
    """Draw ``move`` and return the resulting state.

    Completing one or two boxes credits the mover and keeps the turn with
    them (a single continued turn regardless of the count); otherwise the
    turn passes. ``state`` itself is left untouched.
    """

    validate_move(state, move)
    if move.orientation is Orientation.HORIZONTAL:
        drawn = replace(state, horizontal=_set_edge(state.horizontal, move.row, move.col))
    else:
        drawn = replace(state, vertical=_set_edge(state.vertical, move.row, move.col))

    completed = _completed_boxes(drawn, move)
    if completed == 0:
        return replace(drawn, current_player=state.current_player.other())
    if state.current_player is Player.AI:
        return replace(drawn, score_ai=state.score_ai + completed)
    return replace(drawn, score_opponent=state.score_opponent + completed)


def winner(state: GameState) -> Optional[Player]:
    """Leader of the position, ``None`` on level scores."""

    if state.score_ai > state.score_opponent:
        return Player.AI
    if state.score_opponent > state.score_ai:
        return Player.OPPONENT
    return None


__all__ = [
    "DEFAULT_BOARD_SIZE",
    "GameState",
    "Move",
    "Orientation",
    "Player",
    "apply_move",
    "available_moves",
    "new_game",
    "validate_move",
    "winner",
]
