"""Pixel geometry for drawing the board and mapping clicks to edges."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from .board import GameState, Move, Orientation, available_moves

Point = Tuple[float, float]

CLICK_TOLERANCE = 12.0


def point_to_segment_distance(point: Point, start: Point, end: Point) -> float:
    px, py = point
    x1, y1 = start
    x2, y2 = end
    dx, dy = x2 - x1, y2 - y1
    length_sq = dx * dx + dy * dy
    t = -1.0
    if length_sq:
        t = ((px - x1) * dx + (py - y1) * dy) / length_sq
    if t < 0:
        nearest = (x1, y1)
    elif t > 1:
        nearest = (x2, y2)
    else:
        nearest = (x1 + t * dx, y1 + t * dy)
    return math.hypot(px - nearest[0], py - nearest[1])


class BoardGeometry:
    """Square board of ``size`` points laid out in a ``pixels`` wide canvas."""

    def __init__(self, size: int, pixels: float = 400.0, margin: float = 40.0) -> None:
        self.size = size
        self.pixels = pixels
        self.margin = margin
        self.step = (pixels - 2 * margin) / (size - 1)

    def point(self, row: int, col: int) -> Point:
        return self.margin + col * self.step, self.margin + row * self.step

    def segment(self, move: Move) -> Tuple[Point, Point]:
        start = self.point(move.row, move.col)
        if move.orientation is Orientation.HORIZONTAL:
            return start, self.point(move.row, move.col + 1)
        return start, self.point(move.row + 1, move.col)

    def box_origin(self, row: int, col: int) -> Point:
        return self.point(row, col)

    def edge_at(self, state: GameState, x: float, y: float, tolerance: float = CLICK_TOLERANCE) -> Optional[Move]:
        """Closest undrawn edge strictly within ``tolerance`` pixels of ``(x, y)``."""

        best: Optional[Move] = None
        best_distance = tolerance
        for move in available_moves(state):
            distance = point_to_segment_distance((x, y), *self.segment(move))
            if distance < best_distance:
                best_distance = distance
                best = move
        return best


__all__ = ["BoardGeometry", "CLICK_TOLERANCE", "point_to_segment_distance"]
