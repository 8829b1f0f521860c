import pytest

from boxfish.board import Move, Orientation, apply_move, new_game
from boxfish.geometry import CLICK_TOLERANCE, BoardGeometry, point_to_segment_distance

H = Orientation.HORIZONTAL
V = Orientation.VERTICAL


@pytest.mark.parametrize(
    "point, expected",
    [
        ((5, 5), 5.0),
        ((13, 4), 5.0),
        ((-3, -4), 5.0),
        ((4, 0), 0.0),
    ],
)
def test_point_to_segment_distance(point, expected):
    assert point_to_segment_distance(point, (0, 0), (10, 0)) == pytest.approx(expected)


def test_degenerate_segment_measures_to_its_point():
    assert point_to_segment_distance((3, 4), (0, 0), (0, 0)) == pytest.approx(5.0)


def test_layout_of_points_and_segments():
    geometry = BoardGeometry(2, pixels=400, margin=40)
    assert geometry.step == 320
    assert geometry.point(0, 1) == (360, 40)
    assert geometry.segment(Move(H, 1, 0)) == ((40, 360), (360, 360))
    assert geometry.segment(Move(V, 0, 1)) == ((360, 40), (360, 360))


def test_click_maps_to_nearest_undrawn_edge():
    geometry = BoardGeometry(2, pixels=400, margin=40)
    state = new_game(2)
    assert geometry.edge_at(state, 200, 45) == Move(H, 0, 0)
    assert geometry.edge_at(state, 42, 45) == Move(V, 0, 0)
    assert geometry.edge_at(state, 200, 200) is None


def test_click_ignores_drawn_edges_and_respects_tolerance():
    geometry = BoardGeometry(2, pixels=400, margin=40)
    state = apply_move(new_game(2), Move(H, 0, 0))
    assert geometry.edge_at(state, 200, 45) is None
    assert geometry.edge_at(new_game(2), 200, 40 + CLICK_TOLERANCE) is None
    assert geometry.edge_at(new_game(2), 200, 40 + CLICK_TOLERANCE - 1) == Move(H, 0, 0)
