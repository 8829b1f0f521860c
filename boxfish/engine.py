import io
import sys
import threading
import time
from typing import Any, Callable, Dict, Optional

from .board import DEFAULT_BOARD_SIZE, GameState, Move, Player, apply_move, new_game
from .errors import InvalidMoveError
from .search import SearchLimits
from .strategies import (
    MoveStrategy,
    StrategyContext,
    StrategyResult,
    StrategySelector,
    create_strategy_context,
    default_strategies,
)


def _ensure_line_buffered_stdout() -> None:
    """Wrap ``sys.stdout`` with line buffering if possible."""

    stdout = sys.stdout
    if isinstance(stdout, io.TextIOBase) and getattr(stdout, "line_buffering", False):
        return
    buffer = getattr(stdout, "buffer", None)
    if buffer is None:
        return
    sys.stdout = io.TextIOWrapper(buffer, line_buffering=True)


def _parse_player(token: str) -> Player:
    token = token.strip().lower()
    if token in {"ai", "engine"}:
        return Player.AI
    if token in {"opponent", "human"}:
        return Player.OPPONENT
    raise ValueError(f"unknown player {token!r}")


class BoxEngine:
    """
    A dots-and-boxes engine that communicates using a UCI-like line protocol.
    It keeps the current game, answers ``go`` with a best move and reports
    diagnostics as ``info string`` lines.
    """

    def __init__(self, limits: Optional[SearchLimits] = None) -> None:
        self.engine_name = "BoxFish"
        self.engine_author = "BoxFish developers"

        self.limits = limits or SearchLimits()
        self.state: GameState = new_game(DEFAULT_BOARD_SIZE, Player.OPPONENT)
        self.debug = True
        self.move_calculating = False
        self.running = True

        # Guards state and move_calculating across the search thread
        self.state_lock = threading.Lock()

        self.strategy_selector = StrategySelector(logger=self._log_debug)
        for strategy in default_strategies(self.limits, logger=self._log_debug):
            self.strategy_selector.register_strategy(strategy)

        self.dispatch_table = {
            "quit": self.handle_quit,
            "debug": self.handle_debug,
            "isready": self.handle_isready,
            "newgame": self.handle_newgame,
            "move": self.handle_move,
            "board": self.handle_board,
            "go": self.handle_go,
            "dbi": self.handle_dbi,
        }

    def _log_debug(self, message: str) -> None:
        if not self.debug:
            return
        for line in message.splitlines():
            print(f"info string {line}")

    def register_strategy(self, strategy: MoveStrategy) -> None:
        self.strategy_selector.register_strategy(strategy)

    def set_selection_policy(
        self,
        policy: Optional[Callable[..., Optional[StrategyResult]]],
    ) -> None:
        self.strategy_selector.set_selection_policy(policy)

    def create_strategy_context(
        self, state: GameState, time_controls: Optional[Dict[str, int]] = None
    ) -> StrategyContext:
        return create_strategy_context(
            state,
            time_controls,
            endgame_move_threshold=self.limits.endgame_move_threshold,
        )

    def start(self):
        _ensure_line_buffered_stdout()
        self.handle_dbi()
        self.command_processor()

    def handle_dbi(self, args=None):
        print(f"id name {self.engine_name}")
        print(f"id author {self.engine_author}")
        print("dbiok")

    def command_processor(self):
        """
        Continuously read and process commands from stdin.
        Commands are dispatched to handler methods through the dispatch table.
        """
        while self.running:
            try:
                command = sys.stdin.readline()
                if not command:
                    break  # EOF
                command = command.strip()
                if not command:
                    continue

                parts = command.split(" ", 1)
                cmd = parts[0].lower()
                args = parts[1] if len(parts) > 1 else ""

                handler = self.dispatch_table.get(cmd)
                if handler is None:
                    self.handle_unknown(cmd)
                else:
                    handler(args)
            except Exception as e:
                print(f"info string Error processing command: {e}")
            finally:
                sys.stdout.flush()

    def handle_unknown(self, args):
        print(f"unknown command received: '{args}'")

    def handle_quit(self, args):
        print("info string Engine shutting down")
        self.running = False

    def handle_debug(self, args):
        setting = args.strip().lower()
        if setting == "on":
            self.debug = True
        elif setting == "off":
            self.debug = False
        else:
            print("info string Invalid debug setting. Use 'on' or 'off'.")
            return
        print(f"info string Debug:{self.debug}")

    def handle_isready(self, args):
        with self.state_lock:
            if not self.move_calculating:
                print("readyok")
            else:
                print("info string Engine is busy processing a move")

    def handle_newgame(self, args):
        tokens = args.split()
        size = DEFAULT_BOARD_SIZE
        starting_player = Player.OPPONENT
        try:
            if tokens:
                size = int(tokens[0])
            if len(tokens) > 1:
                starting_player = _parse_player(tokens[1])
            state = new_game(size, starting_player)
        except ValueError as exc:
            print(f"info string Invalid newgame arguments: {exc}")
            return
        with self.state_lock:
            if self.move_calculating:
                print("info string Please wait for computer move")
                return
            self.state = state
        print(f"info string New game size={size} first={starting_player.name.lower()}")

    def handle_move(self, args):
        with self.state_lock:
            if self.move_calculating:
                print("info string Please wait for computer move")
                return
            try:
                move = Move.parse(args)
                self.state = apply_move(self.state, move)
            except InvalidMoveError as exc:
                print(f"info string Illegal move: {exc}")
                return
            if self.debug:
                print(
                    f"info string played {move} score ai={self.state.score_ai} "
                    f"opponent={self.state.score_opponent} "
                    f"to_move={self.state.current_player.name.lower()}"
                )

    def handle_board(self, args):
        with self.state_lock:
            state = self.state
        for line in state.render().splitlines():
            print(f"info string {line}")
        print(
            f"info string score ai={state.score_ai} opponent={state.score_opponent} "
            f"to_move={state.current_player.name.lower()}"
        )

    def _parse_go_args(self, args: str) -> Dict[str, int]:
        tokens = args.split()
        if not tokens:
            return {}

        parsed: Dict[str, int] = {}
        iterator = iter(tokens)
        for token in iterator:
            key = token.lower()
            if key in {"movetime", "depth"}:
                try:
                    parsed[key] = int(next(iterator))
                except (StopIteration, ValueError):
                    continue
            elif key == "infinite":
                parsed[key] = True
        return parsed

    def handle_go(self, args):
        time_controls = self._parse_go_args(args)
        with self.state_lock:
            if self.move_calculating:
                print("info string Please wait for computer move")
                return
            self.move_calculating = True

        move_thread = threading.Thread(
            target=self.process_go_command, args=(time_controls,)
        )
        move_thread.start()
        return move_thread

    def select_move(
        self, state: GameState, time_controls: Optional[Dict[str, int]] = None
    ) -> Optional[StrategyResult]:
        """Run the strategies for the side to move in ``state``.

        Strategies always maximise for :attr:`Player.AI`, so a position with
        the opponent to move is searched from its mirror image.
        """

        if state.current_player is not Player.AI:
            state = state.mirrored()
        context = self.create_strategy_context(state, time_controls)
        return self.strategy_selector.select_move(state, context)

    def process_go_command(self, time_controls: Optional[Dict[str, int]] = None):
        try:
            with self.state_lock:
                state = self.state

            selection_start = time.perf_counter()
            result = self.select_move(state, time_controls)
            selection_elapsed = time.perf_counter() - selection_start

            metadata: Dict[str, Any] = result.metadata if result and result.metadata else {}
            move = result.move if result else None
            if move is not None:
                display_name = metadata.get("label") or result.strategy_name
                print(f"info string strategy {display_name} selected move {move}")
            elif self.debug:
                self._log_debug("no strategy produced a move")

            nodes = metadata.get("nodes")
            depth = metadata.get("depth")
            if nodes is not None:
                nps = int(nodes / selection_elapsed) if selection_elapsed else 0
                print(
                    f"info string perf depth={depth if depth else '-'} nodes={nodes} "
                    f"time={selection_elapsed:.3f}s nps={nps}"
                )
            else:
                print(f"info string perf select={selection_elapsed:.3f}s")

            with self.state_lock:
                print(f"bestmove {move}" if move is not None else "bestmove (none)")
                print("readyok")
                self.move_calculating = False
        except Exception as exc:
            print(f"info string Error generating move: {exc}")
            with self.state_lock:
                print("bestmove (none)")
                print("readyok")
                self.move_calculating = False


if __name__ == "__main__":
    engine = BoxEngine()
    engine.start()
