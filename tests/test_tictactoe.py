import io
import os
import subprocess

import pytest

from entropyarcade.errors import InsufficientEntropyError
from entropyarcade.manager import EntropyManager
from entropyarcade.pool import EntropyPool, PooledEntropy
from entropyarcade.tictactoe import (
    AI,
    BoardState,
    Difficulty,
    GameSystem,
    InvalidMoveError,
    LaunchError,
    LifeGameInfo,
    LifeGameManager,
    Player,
    SessionStats,
    TicTacToeBoard,
)

DRAW_MOVES = [(0, 0), (0, 1), (0, 2), (1, 1), (1, 0), (1, 2), (2, 1), (2, 0), (2, 2)]


def _pool():
    return PooledEntropy(8, EntropyPool(clock=lambda: 123456789))


def _ai(difficulty):
    return AI(difficulty, entropy_pool=_pool())


def _board(*moves):
    board = TicTacToeBoard()
    for row, col in moves:
        board.make_move(row, col)
    return board


def _manager(tmp_path, **kwargs):
    return LifeGameManager(
        entropy_manager=EntropyManager(),
        search_path=str(tmp_path),
        output=io.StringIO(),
        sleep=lambda seconds: None,
        **kwargs,
    )


def _system(inputs, tmp_path):
    feed = iter(inputs)

    def reader(prompt=""):
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    out = io.StringIO()
    system = GameSystem(
        ai_factory=_ai,
        life_manager=_manager(tmp_path),
        entropy_manager=EntropyManager(),
        input_fn=reader,
        output=out,
        sleep=lambda seconds: None,
    )
    return system, out


def test_moves_alternate_players():
    board = _board((0, 0))
    assert board.cells[0][0] is Player.X
    assert board.current_player is Player.O
    assert board.move_count == 1
    assert (0, 0) not in board.available_moves()
    assert len(board.available_moves()) == 8


def test_row_win_keeps_winner_as_current_player():
    board = _board((0, 0), (1, 0), (0, 1), (1, 1), (0, 2))
    assert board.state is BoardState.WIN
    assert board.winner is Player.X
    assert board.current_player is Player.X
    assert board.check_win(0, 2)


def test_full_board_without_line_is_draw():
    board = _board(*DRAW_MOVES)
    assert board.state is BoardState.DRAW
    assert board.winner is None
    assert board.available_moves() == []
    assert "🤝 平局！" in board.render()


@pytest.mark.parametrize("move", [(3, 0), (0, 3), (-1, 1)])
def test_out_of_range_rejected(move):
    with pytest.raises(InvalidMoveError, match="位置超出范围"):
        TicTacToeBoard().make_move(*move)


def test_occupied_cell_rejected():
    board = _board((1, 1))
    with pytest.raises(InvalidMoveError, match="该位置已被占用"):
        board.make_move(1, 1)
    assert board.move_count == 1


def test_move_after_win_rejected():
    board = _board((0, 0), (1, 0), (0, 1), (1, 1), (0, 2))
    with pytest.raises(InvalidMoveError, match="游戏已结束"):
        board.make_move(2, 2)


def test_check_win_on_empty_cell_raises():
    with pytest.raises(ValueError):
        TicTacToeBoard().check_win(0, 0)


def test_render_shows_marks_and_status():
    board = _board((0, 0), (1, 1))
    text = board.render()
    assert text.startswith("🎮 井字棋游戏")
    assert "当前玩家: ❌" in text
    assert "│ ❌ │   │   │" in text
    assert "游戏进行中..." in text


def test_render_announces_winner():
    board = _board((0, 0), (1, 0), (0, 1), (1, 1), (0, 2))
    assert "🎉 玩家 X 获胜！" in board.render()


def test_copy_is_independent():
    board = _board((0, 0))
    clone = board.copy()
    clone.make_move(2, 2)
    assert board.cells[2][2] is None
    assert clone.cells[2][2] is Player.O


def test_medium_prefers_center_then_corner():
    ai = _ai(Difficulty.MEDIUM)
    assert ai.get_move(TicTacToeBoard()) == (1, 1)
    assert ai.get_move(_board((1, 1))) == (0, 0)


def test_easy_picks_available_move():
    ai = _ai(Difficulty.EASY)
    board = _board((0, 0), (1, 1), (2, 2))
    for _ in range(5):
        assert ai.get_move(board) in board.available_moves()


def test_hard_takes_winning_move():
    board = _board((0, 0), (1, 0), (0, 1), (1, 1), (2, 2))
    assert _ai(Difficulty.HARD).get_move(board) == (1, 2)


def test_hard_blocks_threat():
    board = _board((0, 0), (1, 1), (0, 1))
    assert _ai(Difficulty.HARD).get_move(board) == (0, 2)


def test_full_board_raises_insufficient_entropy():
    with pytest.raises(InsufficientEntropyError):
        _ai(Difficulty.MEDIUM).get_move(_board(*DRAW_MOVES))


def test_session_stats_win_rate():
    stats = SessionStats()
    assert stats.win_rate is None
    stats.games_played = 2
    stats.player_wins = 1
    assert stats.win_rate == pytest.approx(50.0)


def test_run_game_invalid_index(tmp_path):
    manager = _manager(tmp_path)
    with pytest.raises(LaunchError, match="无效的游戏索引"):
        manager.run_game(len(manager.games))
    with pytest.raises(LaunchError):
        manager.run_game(-1)


def test_run_game_missing_executable(tmp_path):
    manager = _manager(tmp_path)
    with pytest.raises(LaunchError, match="可执行文件不存在"):
        manager.run_game(0)
    assert manager.games[0].is_active is False


def test_run_game_with_runner(tmp_path):
    program = tmp_path / "new-life-game"
    program.write_text("#!/bin/sh\n")
    os.chmod(program, 0o755)
    calls = []

    def runner(args):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, b"hello", b"")

    out = io.StringIO()
    manager = LifeGameManager(
        entropy_manager=EntropyManager(),
        runner=runner,
        search_path=str(tmp_path),
        output=out,
        sleep=lambda seconds: None,
    )
    result = manager.run_game(0)
    assert result.stdout == b"hello"
    assert calls[0][0].endswith("new-life-game")
    assert manager.games[0].is_active
    assert manager.games[0].last_run is not None
    assert "输出:\nhello" in out.getvalue()
    assert "最后运行" in manager.list_games()


def test_run_all_games_reports_failures(tmp_path):
    manager = _manager(tmp_path)
    assert manager.run_all_games() == []
    assert not any(game.is_active for game in manager.games)
    assert "启动失败" in manager._output.getvalue()


def test_list_games_and_entropy_stats(tmp_path):
    games = [LifeGameInfo("alpha", "alpha-bin", "first")]
    manager = LifeGameManager(
        games,
        entropy_manager=EntropyManager(),
        search_path=str(tmp_path),
        output=io.StringIO(),
    )
    listing = manager.list_games()
    assert "1. alpha - ⚪ 未运行" in listing
    assert "   描述: first" in listing
    assert manager.entropy_stats().startswith("熵源数量: 5,")


def test_system_starts_with_hard_ai(tmp_path):
    system, _ = _system([], tmp_path)
    assert system.ai.difficulty is Difficulty.HARD


def test_player_wins_against_medium_ai(tmp_path):
    inputs = ["1", "2", "9 9", "x", "2 1", "2 0", "2 2", "n", "0"]
    system, out = _system(inputs, tmp_path)
    system.show_menu()
    text = out.getvalue()
    assert system.ai.difficulty is Difficulty.MEDIUM
    assert system.stats.games_played == 1
    assert system.stats.player_wins == 1
    assert system.stats.ai_wins == 0
    assert system.stats.total_moves == 5
    assert "❌ 位置超出范围" in text
    assert "❌ 请输入两个数字，用空格分隔" in text
    assert "🤖 AI选择了位置 (1, 1)" in text
    assert "🎉 恭喜！你赢了！" in text
    assert "👋 再见！" in text
    assert system.tic_tac_toe.winner is Player.X


def test_replay_resets_board_and_stats_shown(tmp_path):
    inputs = ["1", "2", "2 1", "2 0", "2 2", "y", "5", "0"]
    system, out = _system(inputs, tmp_path)
    system.show_menu()
    assert system.tic_tac_toe.move_count == 0
    assert system.tic_tac_toe.state is BoardState.PLAYING
    assert "总游戏数: 1" in out.getvalue()
    assert "玩家胜率: 100.0%" in out.getvalue()


def test_invalid_row_aborts(tmp_path):
    system, _ = _system(["1", "2", "a b"], tmp_path)
    with pytest.raises(ValueError, match="无效的行"):
        system.show_menu()


def test_unknown_difficulty_defaults_to_medium(tmp_path):
    system, _ = _system(["1", "7"], tmp_path)
    with pytest.raises(EOFError):
        system.show_menu()
    assert system.ai.difficulty is Difficulty.MEDIUM


def test_menu_invalid_choice_and_eof(tmp_path):
    system, out = _system(["x"], tmp_path)
    system.show_menu()
    text = out.getvalue()
    assert "❌ 无效选择" in text
    assert text.count("🎮 游戏系统主菜单") == 2


def test_menu_entropy_info(tmp_path):
    system, out = _system(["6", "0"], tmp_path)
    system.show_menu()
    assert "熵源数量: 5" in out.getvalue()


def test_menu_run_game_zero_is_invalid(tmp_path):
    system, _ = _system(["4", "0"], tmp_path)
    with pytest.raises(LaunchError):
        system.show_menu()


def test_menu_run_game_bad_number(tmp_path):
    system, _ = _system(["4", "abc"], tmp_path)
    with pytest.raises(ValueError, match="无效编号"):
        system.show_menu()