import argparse
import sys

from .board import DEFAULT_BOARD_SIZE
from .engine import BoxEngine
from .search import DEFAULT_TIME_BUDGET_MS, MAX_DEPTH, SearchLimits
from .session import GameMode, GameSession
from .utils import debug_text, info_text, score_line


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="boxfish")
    parser.add_argument(
        "--engine",
        action="store_true",
        help="Run the line-protocol engine on stdin/stdout instead of the GUI",
    )
    parser.add_argument(
        "--self-play",
        action="store_true",
        help="Run a headless AI-versus-AI game, print the result and exit",
    )
    parser.add_argument(
        "--size", type=int, default=DEFAULT_BOARD_SIZE, help="Points per side of the board"
    )
    parser.add_argument(
        "--movetime",
        type=float,
        default=DEFAULT_TIME_BUDGET_MS,
        help="Search budget per decision in milliseconds",
    )
    parser.add_argument(
        "--max-depth", type=int, default=MAX_DEPTH, help="Deepest iterative deepening ply"
    )
    parser.add_argument("-dev", action="store_true", help="Enable debug mode")
    return parser.parse_args(argv)


def build_limits(args) -> SearchLimits:
    return SearchLimits(max_depth=args.max_depth, time_budget_ms=args.movetime)


def run_headless_self_play(args) -> GameSession:
    logger = (lambda message: print(debug_text(message))) if args.dev else None
    session = GameSession(
        args.size,
        GameMode.AI_VS_AI,
        limits=build_limits(args),
        time_budget_ms=args.movetime,
        logger=logger,
    )
    print(info_text(f"Self-play on a {args.size}x{args.size} grid"))
    session.play_self_game()
    print(session.state.render())
    print(info_text(score_line(session.state)))
    print(info_text(f"{len(session.history)} moves played"))
    return session


def main(argv=None):
    args = parse_args(argv)

    if args.engine:
        engine = BoxEngine(build_limits(args))
        engine.debug = args.dev
        engine.start()
        return

    if args.self_play:
        run_headless_self_play(args)
        return

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError as exc:
        raise ImportError(
            "PySide6 is required for GUI mode; install boxfish[gui] or use --engine/--self-play."
        ) from exc

    from .gui import BoxFishWindow, center_on_screen  # Local import keeps headless use free of Qt

    app = QApplication(sys.argv)
    session = GameSession(args.size, limits=build_limits(args), time_budget_ms=args.movetime)
    window = BoxFishWindow(session, dev=args.dev)
    window.show()
    center_on_screen(window)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
