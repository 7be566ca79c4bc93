import pytest

from entropyarcade.tetris import (
    Color,
    GameBoard,
    GameState,
    TetrisGame,
    Tetromino,
    TetrominoType,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _fresh_game(clock=None) -> TetrisGame:
    return TetrisGame(clock=clock) if clock is not None else TetrisGame()


def test_new_piece_spawns_at_origin_with_colour():
    piece = Tetromino(TetrominoType.I)
    assert piece.color is Color.CYAN
    assert (piece.x, piece.y, piece.rotation) == (3, 0, 0)
    assert piece.shape[1] == [True, True, True, True]


@pytest.mark.parametrize("kind", list(TetrominoType))
def test_four_rotations_restore_shape(kind):
    piece = Tetromino(kind)
    original = [row[:] for row in piece.shape]
    for _ in range(4):
        piece.rotate()
    assert piece.shape == original
    assert piece.rotation == 0


@pytest.mark.parametrize("kind", list(TetrominoType))
def test_rotated_shape_matches_rotate_without_mutating(kind):
    piece = Tetromino(kind)
    before = [row[:] for row in piece.shape]
    preview = piece.rotated_shape()
    assert piece.shape == before
    piece.rotate()
    assert piece.shape == preview
    assert sum(map(sum, preview)) == 4


def test_bounds_of_t_piece():
    assert Tetromino(TetrominoType.T).bounds() == (0, 0, 2, 1)


def test_board_rejects_out_of_bounds_and_overlap():
    board = GameBoard(10, 20)
    piece = Tetromino(TetrominoType.O)
    assert board.is_valid_position(piece, 0, 0)
    assert not board.is_valid_position(piece, -4, 0)
    assert not board.is_valid_position(piece, 0, -1)
    board.grid[1][4] = Color.GRAY
    assert not board.is_valid_position(piece, 0, 0)


def test_place_and_clear_full_row():
    board = GameBoard(10, 20)
    board.grid[19] = [Color.GRAY] * 10
    board.grid[18][0] = Color.RED
    assert board.clear_lines() == 1
    assert len(board.grid) == 20
    assert board.grid[19][0] is Color.RED
    assert all(c is Color.BLACK for c in board.grid[0])


def test_place_piece_colours_cells():
    board = GameBoard(10, 20)
    piece = Tetromino(TetrominoType.O)
    board.place_piece(piece)
    filled = {(x, y) for y, row in enumerate(board.grid) for x, c in enumerate(row) if c is Color.YELLOW}
    assert filled == set(piece.cells())


def test_game_over_when_top_row_filled():
    board = GameBoard(10, 20)
    assert not board.is_game_over()
    board.grid[0][5] = Color.GRAY
    assert board.is_game_over()


def test_new_game_is_playing_with_piece_and_ghost():
    game = _fresh_game()
    assert game.state is GameState.PLAYING
    assert game.current_piece is not None
    assert len(game.piece_bag) == 6
    ghost = game.ghost_piece
    assert ghost.y >= game.current_piece.y
    assert not game.board.is_valid_position(ghost, 0, 1)


def test_bag_contains_every_piece_once():
    game = _fresh_game()
    kinds = {game.current_piece.tetromino_type, *game.piece_bag}
    assert kinds == set(TetrominoType)


def test_move_left_stops_at_wall():
    game = _fresh_game()
    moves = 0
    while game.move_piece(-1, 0):
        moves += 1
    assert moves > 0
    assert min(x for x, _ in game.current_piece.cells()) == 0


def test_rotate_piece_in_open_space():
    game = _fresh_game()
    game.current_piece = Tetromino(TetrominoType.T)
    game.current_piece.y = 5
    assert game.rotate_piece()
    assert game.current_piece.rotation == 1


def test_hard_drop_single_line_scores():
    game = _fresh_game()
    for x in (0, 1, 2, 7, 8, 9):
        game.board.grid[19][x] = Color.GRAY
    game.current_piece = Tetromino(TetrominoType.I)
    game.hard_drop()
    assert game.stats.lines_cleared == 1
    assert game.stats.score == 100
    assert game.stats.total_pieces == 1
    assert all(c is Color.BLACK for c in game.board.grid[19])
    assert game.current_piece is not None


def test_hard_drop_four_lines_is_tetris():
    game = _fresh_game()
    for y in range(16, 20):
        for x in range(1, 10):
            game.board.grid[y][x] = Color.GRAY
    piece = Tetromino(TetrominoType.I)
    piece.rotate()
    piece.x = -2
    game.current_piece = piece
    game.hard_drop()
    assert game.stats.lines_cleared == 4
    assert game.stats.tetris_count == 1
    assert game.stats.score == 800
    assert game.stats.level == 1


def test_level_up_speeds_gravity():
    game = _fresh_game()
    game.stats.lines_cleared = 9
    for x in (0, 1, 2, 7, 8, 9):
        game.board.grid[19][x] = Color.GRAY
    game.current_piece = Tetromino(TetrominoType.I)
    game.hard_drop()
    assert game.stats.level == 2
    assert game.drop_interval < 1.0


def test_game_over_after_placing_with_top_row_blocked():
    game = _fresh_game()
    game.board.grid[0][0] = Color.GRAY
    game.hard_drop()
    assert game.state is GameState.GAME_OVER
    assert game.current_piece is None


def test_update_applies_gravity_after_interval():
    clock = FakeClock()
    game = _fresh_game(clock)
    start_y = game.current_piece.y
    game.update()
    assert game.current_piece.y == start_y
    clock.now += game.drop_interval
    game.update()
    assert game.current_piece.y == start_y + 1
    assert game.stats.play_time == pytest.approx(game.drop_interval)


def test_pause_blocks_updates():
    clock = FakeClock()
    game = _fresh_game(clock)
    game.toggle_pause()
    assert game.state is GameState.PAUSED
    start_y = game.current_piece.y
    clock.now += 10
    game.update()
    assert game.current_piece.y == start_y
    game.toggle_pause()
    assert game.state is GameState.PLAYING


def test_reset_restores_fresh_state():
    game = _fresh_game()
    game.board.grid[0][0] = Color.GRAY
    game.hard_drop()
    assert game.state is GameState.GAME_OVER
    game.reset()
    assert game.state is GameState.PLAYING
    assert game.stats.total_pieces == 0
    assert game.stats.score == 0
    assert game.current_piece is not None
    assert all(c is Color.BLACK for row in game.board.grid for c in row)