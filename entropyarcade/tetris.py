"""Classic falling-block puzzle: pieces, board, scoring and timing."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

_MASK64 = (1 << 64) - 1

Clock = Callable[[], float]
Shape = list[list[bool]]

BOARD_WIDTH = 10
BOARD_HEIGHT = 20
BASE_DROP_INTERVAL = 1.0
MIN_DROP_INTERVAL = 0.05
LINE_SCORES = {1: 100, 2: 300, 3: 500, 4: 800}
WALL_KICKS = ((-1, 0), (1, 0), (0, -1), (-1, -1), (1, -1))


class GameState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"
    MENU = "menu"


class TetrominoType(Enum):
    I = "I"  # noqa: E741
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


class Color(Enum):
    CYAN = "cyan"
    YELLOW = "yellow"
    PURPLE = "purple"
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    ORANGE = "orange"
    GRAY = "gray"
    BLACK = "black"


def _rows(*lines: str) -> Shape:
    return [[ch == "#" for ch in line] for line in lines]


_SHAPES: dict[TetrominoType, tuple[Shape, Color]] = {
    TetrominoType.I: (_rows("....", "####", "....", "...."), Color.CYAN),
    TetrominoType.O: (_rows("##", "##"), Color.YELLOW),
    TetrominoType.T: (_rows(".#.", "###", "..."), Color.PURPLE),
    TetrominoType.S: (_rows(".##", "##.", "..."), Color.GREEN),
    TetrominoType.Z: (_rows("##.", ".##", "..."), Color.RED),
    TetrominoType.J: (_rows("#..", "###", "..."), Color.BLUE),
    TetrominoType.L: (_rows("..#", "###", "..."), Color.ORANGE),
}


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _sip_hash13_u64(value: int) -> int:
    """SipHash-1-3 with zero keys over the eight little-endian bytes of ``value``."""
    v0 = 0x736F6D6570736575
    v1 = 0x646F72616E646F6D
    v2 = 0x6C7967656E657261
    v3 = 0x7465646279746573

    def sip_round() -> None:
        nonlocal v0, v1, v2, v3
        v0 = (v0 + v1) & _MASK64
        v1 = _rotl(v1, 13) ^ v0
        v0 = _rotl(v0, 32)
        v2 = (v2 + v3) & _MASK64
        v3 = _rotl(v3, 16) ^ v2
        v0 = (v0 + v3) & _MASK64
        v3 = _rotl(v3, 21) ^ v0
        v2 = (v2 + v1) & _MASK64
        v1 = _rotl(v1, 17) ^ v2
        v2 = _rotl(v2, 32)

    m = value & _MASK64
    v3 ^= m
    sip_round()
    v0 ^= m
    tail = 8 << 56
    v3 ^= tail
    sip_round()
    v0 ^= tail
    v2 ^= 0xFF
    for _ in range(3):
        sip_round()
    return v0 ^ v1 ^ v2 ^ v3


def _bag_order() -> tuple[TetrominoType, ...]:
    pieces = list(TetrominoType)
    for i in range(len(pieces)):
        j = _sip_hash13_u64(i) % len(pieces)
        pieces[i], pieces[j] = pieces[j], pieces[i]
    return tuple(pieces)


_BAG_ORDER = _bag_order()


def _rotate_clockwise(shape: Shape) -> Shape:
    return [list(row) for row in zip(*reversed(shape))]


class Tetromino:
    """A falling piece: its kind, colour, square shape matrix and board position."""

    def __init__(self, tetromino_type: TetrominoType) -> None:
        shape, color = _SHAPES[tetromino_type]
        self.tetromino_type = tetromino_type
        self.color = color
        self.shape: Shape = [row[:] for row in shape]
        self.x = 3
        self.y = 0
        self.rotation = 0

    def clone(self) -> Tetromino:
        other = Tetromino(self.tetromino_type)
        other.color = self.color
        other.shape = [row[:] for row in self.shape]
        other.x, other.y, other.rotation = self.x, self.y, self.rotation
        return other

    def cells(self) -> list[tuple[int, int]]:
        """Board coordinates ``(x, y)`` of the piece's filled cells."""
        return [
            (self.x + px, self.y + py)
            for py, row in enumerate(self.shape)
            for px, filled in enumerate(row)
            if filled
        ]

    def rotate(self) -> None:
        self.shape = _rotate_clockwise(self.shape)
        self.rotation = (self.rotation + 1) % 4

    def rotated_shape(self) -> Shape:
        return _rotate_clockwise(self.shape)

    def bounds(self) -> tuple[int, int, int, int]:
        """``(min_x, min_y, max_x, max_y)`` of the filled cells within the shape matrix."""
        size = len(self.shape)
        min_x, max_x, min_y, max_y = size, 0, size, 0
        for y, row in enumerate(self.shape):
            for x, filled in enumerate(row):
                if filled:
                    min_x, max_x = min(min_x, x), max(max_x, x)
                    min_y, max_y = min(min_y, y), max(max_y, y)
        return min_x, min_y, max_x, max_y

    def __repr__(self) -> str:
        return (
            f"Tetromino({self.tetromino_type.name}, x={self.x}, y={self.y}, "
            f"rotation={self.rotation})"
        )


class GameBoard:
    """The playfield; ``grid[y][x]`` holds a colour, BLACK meaning empty."""

    def __init__(self, width: int = BOARD_WIDTH, height: int = BOARD_HEIGHT) -> None:
        self.width = width
        self.height = height
        self.grid: list[list[Color]] = [[Color.BLACK] * width for _ in range(height)]

    def is_valid_position(self, piece: Tetromino, dx: int, dy: int) -> bool:
        for x, y in piece.cells():
            bx, by = x + dx, y + dy
            if not (0 <= bx < self.width and 0 <= by < self.height):
                return False
            if self.grid[by][bx] is not Color.BLACK:
                return False
        return True

    def place_piece(self, piece: Tetromino) -> None:
        for x, y in piece.cells():
            if 0 <= x < self.width and 0 <= y < self.height:
                self.grid[y][x] = piece.color

    def clear_lines(self) -> int:
        """Remove full rows, shift the rest down, and return how many were removed."""
        kept = [row for row in self.grid if any(c is Color.BLACK for c in row)]
        cleared = self.height - len(kept)
        self.grid = [[Color.BLACK] * self.width for _ in range(cleared)] + kept
        return cleared

    def is_game_over(self) -> bool:
        return any(c is not Color.BLACK for c in self.grid[0])


@dataclass
class GameStats:
    score: int = 0
    lines_cleared: int = 0
    level: int = 1
    tetris_count: int = 0
    total_pieces: int = 0
    start_time: float = 0.0
    play_time: float = 0.0


class TetrisGame:
    """Game logic: spawning from a bag, movement, rotation with wall kicks, gravity and scoring."""

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self.board = GameBoard()
        self.current_piece: Tetromino | None = None
        self.next_piece: Tetromino | None = None
        self.state = GameState.MENU
        self.stats = GameStats(start_time=clock())
        self.drop_timer = clock()
        self.drop_interval = BASE_DROP_INTERVAL
        self.piece_bag: deque[TetrominoType] = deque()
        self.ghost_piece: Tetromino | None = None

        self._fill_piece_bag()
        self._spawn_next_piece()
        self.state = GameState.PLAYING

    def _fill_piece_bag(self) -> None:
        self.piece_bag.extend(_BAG_ORDER)

    def _spawn_next_piece(self) -> None:
        if not self.piece_bag:
            self._fill_piece_bag()
        piece = Tetromino(self.piece_bag.popleft())
        if not self.board.is_valid_position(piece, 0, 0):
            self.state = GameState.GAME_OVER
            return
        self.current_piece = piece
        self._update_ghost_piece()

    def _update_ghost_piece(self) -> None:
        if self.current_piece is None:
            return
        ghost = self.current_piece.clone()
        while self.board.is_valid_position(ghost, 0, 1):
            ghost.y += 1
        self.ghost_piece = ghost

    def move_piece(self, dx: int, dy: int) -> bool:
        piece = self.current_piece
        if piece is None or not self.board.is_valid_position(piece, dx, dy):
            return False
        piece.x += dx
        piece.y += dy
        self._update_ghost_piece()
        return True

    def rotate_piece(self) -> bool:
        piece = self.current_piece
        if piece is None:
            return False
        original_shape, original_rotation = piece.shape, piece.rotation
        piece.rotate()
        if self.board.is_valid_position(piece, 0, 0):
            self._update_ghost_piece()
            return True
        for kx, ky in WALL_KICKS:
            if self.board.is_valid_position(piece, kx, ky):
                piece.x += kx
                piece.y += ky
                self._update_ghost_piece()
                return True
        piece.shape, piece.rotation = original_shape, original_rotation
        return False

    def hard_drop(self) -> None:
        piece = self.current_piece
        if piece is None:
            return
        while self.board.is_valid_position(piece, 0, 1):
            piece.y += 1
        self._place_current_piece()

    def _place_current_piece(self) -> None:
        piece, self.current_piece = self.current_piece, None
        if piece is None:
            return
        self.board.place_piece(piece)
        self.stats.total_pieces += 1

        lines = self.board.clear_lines()
        if lines > 0:
            self.stats.lines_cleared += lines
            self.stats.score += LINE_SCORES.get(lines, 0) * self.stats.level
            if lines == 4:
                self.stats.tetris_count += 1
            self.stats.level = self.stats.lines_cleared // 10 + 1
            millis = int(max(1000.0 / (1.0 + self.stats.level * 0.1), MIN_DROP_INTERVAL * 1000))
            self.drop_interval = millis / 1000.0

        if self.board.is_game_over():
            self.state = GameState.GAME_OVER
        else:
            self._spawn_next_piece()

    def update(self) -> None:
        """Apply gravity once the drop interval has elapsed and refresh the play time."""
        if self.state is not GameState.PLAYING:
            return
        now = self._clock()
        if now - self.drop_timer >= self.drop_interval:
            if not self.move_piece(0, 1):
                self._place_current_piece()
            self.drop_timer = self._clock()
        self.stats.play_time = self._clock() - self.stats.start_time

    def toggle_pause(self) -> None:
        if self.state is GameState.PLAYING:
            self.state = GameState.PAUSED
        elif self.state is GameState.PAUSED:
            self.state = GameState.PLAYING

    def reset(self) -> None:
        self.board = GameBoard()
        self.current_piece = None
        self.next_piece = None
        self.state = GameState.PLAYING
        self.stats = GameStats(start_time=self._clock())
        self.drop_timer = self._clock()
        self.drop_interval = BASE_DROP_INTERVAL
        self.piece_bag.clear()
        self.ghost_piece = None
        self._fill_piece_bag()
        self._spawn_next_piece()