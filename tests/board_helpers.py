import random
from typing import Iterable, Optional, Tuple

from boxfish.board import GameState, Player, apply_move, available_moves, new_game


def build_state(
    size: int,
    horizontal: Iterable[Tuple[int, int]] = (),
    vertical: Iterable[Tuple[int, int]] = (),
    *,
    score_ai: int = 0,
    score_opponent: int = 0,
    player: Player = Player.AI,
) -> GameState:
    """Build a position directly from lists of drawn edges."""

    h_set = set(horizontal)
    v_set = set(vertical)
    return GameState(
        size=size,
        horizontal=tuple(
            tuple((row, col) in h_set for col in range(size - 1)) for row in range(size)
        ),
        vertical=tuple(
            tuple((row, col) in v_set for col in range(size)) for row in range(size - 1)
        ),
        score_ai=score_ai,
        score_opponent=score_opponent,
        current_player=player,
    )


def transpose(state: GameState) -> GameState:
    """Mirror the board along its main diagonal."""

    size = state.size
    return GameState(
        size=size,
        horizontal=tuple(
            tuple(state.vertical[col][row] for col in range(size - 1)) for row in range(size)
        ),
        vertical=tuple(
            tuple(state.horizontal[col][row] for col in range(size)) for row in range(size - 1)
        ),
        score_ai=state.score_ai,
        score_opponent=state.score_opponent,
        current_player=state.current_player,
    )


def random_playout(size: int, moves: int, seed: int, starting_player: Player = Player.OPPONENT) -> GameState:
    rng = random.Random(seed)
    state = new_game(size, starting_player)
    for _ in range(moves):
        legal = available_moves(state)
        if not legal:
            break
        state = apply_move(state, rng.choice(legal))
    return state


def six_chain_state(player: Optional[Player] = None) -> GameState:
    """4x4 points: the top two box rows form one chain of six."""

    return build_state(
        4,
        horizontal=[(row, col) for row in range(3) for col in range(3)],
        player=player or Player.AI,
    )


def free_box_state(player: Player = Player.AI) -> GameState:
    """3x3 points with box (0, 0) missing only its right edge ``V0,1``."""

    return build_state(3, horizontal=[(0, 0), (1, 0)], vertical=[(0, 0)], player=player)
