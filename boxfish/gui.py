# GUI
from typing import Callable, Optional

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from . import utils
from .board import Move, Player
from .errors import BoxFishError
from .geometry import BoardGeometry
from .session import GameMode, GameSession

BOARD_PIXELS = 420
EDGE_COLOR = QColor("#3a6ff7")
DOT_COLOR = QColor("#1f2430")
AI_BOX_COLOR = QColor(255, 0, 0, 64)
OPPONENT_BOX_COLOR = QColor(0, 0, 255, 64)
SELF_PLAY_DELAY_MS = 200


def center_on_screen(window):
    screen = QApplication.primaryScreen()
    screen_geometry = screen.geometry()
    window_size = window.size()
    x = (screen_geometry.width() - window_size.width()) / 2 + screen_geometry.left()
    y = (screen_geometry.height() - window_size.height()) / 2 + screen_geometry.top()
    window.move(int(x), int(y))


class BoardWidget(QWidget):
    """Paints the grid of a :class:`GameSession` and reports clicked edges."""

    def __init__(self, session: GameSession, on_edge_clicked: Callable[[Move], None], parent=None):
        super().__init__(parent)
        self.session = session
        self.on_edge_clicked = on_edge_clicked
        self.setFixedSize(BOARD_PIXELS, BOARD_PIXELS)
        self.setCursor(Qt.PointingHandCursor)

    @property
    def geometry_model(self) -> BoardGeometry:
        return BoardGeometry(self.session.state.size, pixels=BOARD_PIXELS)

    def edge_at(self, x: float, y: float) -> Optional[Move]:
        return self.geometry_model.edge_at(self.session.state, x, y)

    def mousePressEvent(self, event):
        position = event.position()
        move = self.edge_at(position.x(), position.y())
        if move is not None:
            self.on_edge_clicked(move)

    def paintEvent(self, event):
        state = self.session.state
        geometry = self.geometry_model
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), QColor("#ffffff"))

        # Ownership is not tracked per box, so completed boxes take the leader's colour
        box_color = AI_BOX_COLOR if state.score_ai > state.score_opponent else OPPONENT_BOX_COLOR
        for row, col in state.boxes():
            if state.is_box_full(row, col):
                x, y = geometry.box_origin(row, col)
                painter.fillRect(QRectF(x, y, geometry.step, geometry.step), box_color)

        painter.setPen(QPen(EDGE_COLOR, 6))
        for row, edges in enumerate(state.horizontal):
            for col, drawn in enumerate(edges):
                if drawn:
                    start, end = geometry.point(row, col), geometry.point(row, col + 1)
                    painter.drawLine(QPointF(*start), QPointF(*end))
        for row, edges in enumerate(state.vertical):
            for col, drawn in enumerate(edges):
                if drawn:
                    start, end = geometry.point(row, col), geometry.point(row + 1, col)
                    painter.drawLine(QPointF(*start), QPointF(*end))

        painter.setPen(Qt.NoPen)
        painter.setBrush(DOT_COLOR)
        for row in range(state.size):
            for col in range(state.size):
                painter.drawEllipse(QPointF(*geometry.point(row, col)), 5, 5)
        painter.end()


class BoxFishWindow(QMainWindow):
    def __init__(self, session: GameSession, dev: bool = False):
        super().__init__()
        self.session = session
        self.dev = dev
        # Bumped on every new game so timers from an older game do nothing
        self._game_id = 0
        self.init_ui()
        self.update_board()

    def init_ui(self):
        self.setWindowTitle("BoxFish")
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(8, 8, 8, 8)
        main_layout.setSpacing(6)

        self.turn_indicator = QLabel("")
        self.turn_indicator.setAlignment(Qt.AlignCenter)
        self.turn_indicator.setFont(QFont("Segoe UI Semibold", 18))
        main_layout.addWidget(self.turn_indicator)

        self.info_indicator = QLabel("Game Started")
        self.info_indicator.setAlignment(Qt.AlignCenter)
        self.info_indicator.setFont(QFont("Segoe UI", 11))
        main_layout.addWidget(self.info_indicator)

        self.board_widget = BoardWidget(self.session, self.on_edge_clicked)
        main_layout.addWidget(self.board_widget, alignment=Qt.AlignCenter)

        button_layout = QHBoxLayout()
        button_layout.setSpacing(10)
        main_layout.addLayout(button_layout)
        for label, mode in (
            ("You start", GameMode.HUMAN_FIRST),
            ("AI starts", GameMode.AI_FIRST),
            ("AI vs AI", GameMode.AI_VS_AI),
        ):
            button = QPushButton(label)
            button.clicked.connect(lambda _=False, m=mode: self.start_game(m))
            button_layout.addWidget(button)

    def set_info_message(self, message: str) -> None:
        self.info_indicator.setText(message)

    def update_board(self, info_text=None):
        state = self.session.state
        self.turn_indicator.setText(
            f"You {state.score_opponent} - {state.score_ai} AI"
            + ("" if self.session.is_over else f"  ({'your' if state.current_player is Player.OPPONENT else 'AI'} turn)")
        )
        if info_text:
            self.set_info_message(info_text)
        self.board_widget.update()

        if self.session.is_over:
            message = self._build_game_over_message()
            if self.dev:
                print(utils.info_text(f"Game Over: {message}"))
            self.set_info_message(message)

    def _build_game_over_message(self) -> str:
        leader = self.session.winner()
        if leader is None:
            return "Draw"
        return "AI wins" if leader is Player.AI else "You win"

    def start_game(self, mode: GameMode) -> None:
        if self.session.blocking:
            return
        self.session.reset(mode)
        self._game_id += 1
        self.update_board("Game Started")
        if mode is GameMode.AI_VS_AI:
            self._schedule_self_play_step(0)
        elif mode is GameMode.AI_FIRST:
            QTimer.singleShot(0, self.run_ai)

    def on_edge_clicked(self, move: Move) -> None:
        try:
            self.session.play_human_move(move)
        except BoxFishError as exc:
            self.set_info_message(str(exc))
            return
        self.update_board(f"You played {move}")
        if self.session.state.current_player is Player.AI and not self.session.is_over:
            QTimer.singleShot(0, self.run_ai)

    def _schedule_self_play_step(self, delay_ms: int) -> None:
        game_id = self._game_id
        QTimer.singleShot(delay_ms, lambda: self.self_play_step(game_id))

    def self_play_step(self, game_id: int) -> None:
        """Play one engine move of an AI vs AI game and queue the next one."""

        if game_id != self._game_id or self.session.is_over or self.session.blocking:
            return
        mover = self.session.state.current_player
        move = self.session.play_engine_move()
        if move is None:
            return
        side = "AI" if mover is Player.AI else "Opponent engine"
        self.update_board(f"{side} played {move}")
        if not self.session.is_over:
            self._schedule_self_play_step(SELF_PLAY_DELAY_MS)

    def run_ai(self) -> None:
        if self.session.mode is GameMode.AI_VS_AI:
            return
        played = self.session.play_ai_turn()
        if played:
            self.update_board("AI played " + " ".join(str(move) for move in played))

