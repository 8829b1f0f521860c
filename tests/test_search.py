import time

import pytest

from boxfish import search as search_module
from boxfish.board import Move, Orientation, Player, apply_move, available_moves, new_game
from boxfish.chains import best_endgame_move
from boxfish.evaluation import evaluate
from boxfish.search import (
    INFINITY,
    AlphaBetaSearcher,
    SearchLimits,
    choose_move,
    deadline_passed,
    minimax,
)

from board_helpers import build_state, free_box_state, random_playout, six_chain_state

H = Orientation.HORIZONTAL
V = Orientation.VERTICAL


def test_search_limits_clamp_min_depth():
    limits = SearchLimits(max_depth=3, min_depth=5)
    assert limits.min_depth == 3
    assert SearchLimits(max_depth=0).max_depth == 1


def test_resolve_budget_from_time_controls():
    limits = SearchLimits(time_budget_ms=200)
    assert limits.resolve_budget() == 200
    assert limits.resolve_budget({"movetime": 40}) == 40.0
    assert limits.resolve_budget({"movetime": -5}) == 0.0
    assert limits.resolve_budget({"depth": 3}) is None
    assert limits.resolve_budget({"infinite": True, "movetime": 40}) is None


def test_with_depth_overrides_only_max_depth():
    limits = SearchLimits(max_depth=6, min_depth=2, time_budget_ms=90)
    deeper = limits.with_depth(3)
    assert (deeper.max_depth, deeper.min_depth, deeper.time_budget_ms) == (3, 2, 90)
    assert limits.with_depth(None) is limits


def test_deadline_helpers():
    assert SearchLimits.deadline_after(None) is None
    assert SearchLimits.deadline_after(250, now=10.0) == pytest.approx(10.25)
    assert not deadline_passed(None)
    assert deadline_passed(time.monotonic() - 1)
    assert not deadline_passed(time.monotonic() + 60)


def test_minimax_at_depth_zero_is_static_evaluation():
    state = random_playout(4, 9, seed=8)
    assert minimax(state, 0) == evaluate(state)


def test_minimax_opponent_takes_last_box():
    state = build_state(2, horizontal=[(0, 0), (1, 0)], vertical=[(0, 0)], player=Player.OPPONENT)
    assert minimax(state, 1) == -10


def test_minimax_ai_takes_last_box():
    state = build_state(2, horizontal=[(0, 0), (1, 0)], vertical=[(0, 0)], player=Player.AI)
    assert minimax(state, 3) == 10


def test_minimax_on_terminal_state_is_evaluation():
    state = build_state(
        2, horizontal=[(0, 0), (1, 0)], vertical=[(0, 0), (0, 1)], score_opponent=1
    )
    assert minimax(state, 4) == evaluate(state) == -10


def test_minimax_endgame_nodes_use_plain_evaluation():
    # Interior endgame nodes are scored with evaluate(), not the chain estimate.
    state = six_chain_state()
    assert minimax(state, 3) == evaluate(state) == 0


def test_choose_move_returns_none_only_when_terminal():
    full = build_state(
        2, horizontal=[(0, 0), (1, 0)], vertical=[(0, 0), (0, 1)], score_ai=1
    )
    assert choose_move(full) is None
    assert choose_move(new_game(2, Player.AI)) in available_moves(new_game(2))


def test_expired_deadline_still_returns_first_move():
    state = new_game(5, Player.AI)
    assert choose_move(state, deadline_ms=0) == Move(H, 0, 0)


def test_endgame_positions_use_chain_heuristic():
    state = six_chain_state()
    info = AlphaBetaSearcher().search(state, None)
    assert info.source == "endgame"
    assert info.move == best_endgame_move(state)
    assert choose_move(state) == best_endgame_move(state)


def test_search_grabs_free_box():
    searcher = AlphaBetaSearcher(SearchLimits(max_depth=2))
    info = searcher.search(free_box_state(Player.AI), None)
    assert info.move == Move(V, 0, 1)
    assert info.source == "search"
    assert info.depth == 2
    assert not info.interrupted
    assert info.nodes > 0


def test_search_without_moves_reports_none():
    full = build_state(
        2, horizontal=[(0, 0), (1, 0)], vertical=[(0, 0), (0, 1)], score_ai=1
    )
    info = AlphaBetaSearcher().search(full)
    assert info.move is None
    assert info.source == "none"


def test_iterative_deepening_logs_each_depth():
    messages = []
    searcher = AlphaBetaSearcher(SearchLimits(max_depth=3, min_depth=1), logger=messages.append, log_tag="T")
    info = searcher.iterative_deepening(new_game(3, Player.AI), None)
    assert info.depth == 3
    assert messages[0].startswith("T: start search depth=1..3")
    assert any(message.startswith("T: depth=2 ") for message in messages)
    assert messages[-1].startswith("T: completed depth=3")


def test_search_does_not_mutate_state():
    state = random_playout(4, 6, seed=2, starting_player=Player.AI)
    if state.current_player is not Player.AI:
        state = state.mirrored()
    before = (state.horizontal, state.vertical, state.score_ai, state.score_opponent)
    choose_move(state, deadline_ms=None, limits=SearchLimits(max_depth=2))
    assert (state.horizontal, state.vertical, state.score_ai, state.score_opponent) == before


def test_chosen_move_is_legal_on_random_positions():
    for seed in range(5):
        state = random_playout(4, 8, seed=seed, starting_player=Player.AI)
        if state.current_player is not Player.AI:
            state = state.mirrored()
        move = choose_move(state, deadline_ms=50, limits=SearchLimits(max_depth=3))
        assert move in available_moves(state)
        apply_move(state, move)


@pytest.mark.search_slow
def test_default_budget_is_respected_on_full_board():
    state = new_game(5, Player.AI)
    start = time.monotonic()
    move = choose_move(state)
    elapsed = time.monotonic() - start
    assert move in available_moves(state)
    # One root child may finish after the deadline is crossed
    assert elapsed < 2.0


@pytest.mark.parametrize("drawn", [0, 1, 2, 3])
def test_best_value_does_not_drop_with_depth_on_small_board(drawn):
    state = random_playout(2, drawn, seed=drawn, starting_player=Player.AI)
    if state.current_player is not Player.AI:
        state = state.mirrored()
    values = []
    for depth in range(2, 6):
        searcher = AlphaBetaSearcher(SearchLimits(max_depth=depth, min_depth=depth))
        values.append(searcher.iterative_deepening(state, None).value)
    assert values == sorted(values)


def test_expired_deadline_makes_every_node_a_leaf():
    state = new_game(4, Player.AI)
    searcher = AlphaBetaSearcher()
    value = searcher.minimax(state, 5, -INFINITY, INFINITY, time.monotonic() - 1)
    assert value == evaluate(state)
    assert searcher.nodes == 1


@pytest.mark.parametrize("player", [Player.AI, Player.OPPONENT])
def test_deadline_after_first_child_stops_siblings(monkeypatch, player):
    calls = []

    def deadline_after_one_check(deadline):
        calls.append(deadline)
        return len(calls) >= 2

    monkeypatch.setattr(search_module, "deadline_passed", deadline_after_one_check)
    state = new_game(4, player)
    searcher = AlphaBetaSearcher()
    value = searcher.minimax(state, 1, -INFINITY, INFINITY, 0.0)

    # Node entry check, then one check after the first child.
    assert len(calls) == 2
    assert searcher.nodes == 2
    first_child = apply_move(state, available_moves(state)[0])
    assert value == evaluate(first_child)


class ScriptedSearcher(AlphaBetaSearcher):
    """Root children get fixed values per depth instead of being searched."""

    def __init__(self, root, script, limits):
        super().__init__(limits)
        self.children = [apply_move(root, move) for move in available_moves(root)]
        self.script = script

    def minimax(self, state, depth, alpha, beta, deadline=None):
        self.nodes += 1
        return self.script[depth][self.children.index(state)]


def test_running_best_survives_equal_values_at_deeper_depths():
    root = new_game(2, Player.AI)
    moves = available_moves(root)
    script = {2: [0, 5, 0, 0], 3: [5, 5, 5, 5]}
    searcher = ScriptedSearcher(root, script, SearchLimits(max_depth=3, min_depth=2))
    info = searcher.iterative_deepening(root, None)
    assert info.move == moves[1]
    assert info.value == 5
    assert info.depth == 3


def test_strictly_better_value_at_deeper_depth_replaces_best():
    root = new_game(2, Player.AI)
    moves = available_moves(root)
    script = {2: [0, 5, 0, 0], 3: [1, 2, 3, 7]}
    searcher = ScriptedSearcher(root, script, SearchLimits(max_depth=3, min_depth=2))
    info = searcher.iterative_deepening(root, None)
    assert info.move == moves[3]
    assert info.value == 7
