"""Noughts and crosses against an entropy-driven AI, with a launcher for the Life games."""

from __future__ import annotations

import argparse
import builtins
import shutil
import subprocess
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, TextIO

from .errors import EntropyError, InsufficientEntropyError
from .manager import EntropyManager
from .pool import PooledEntropy

SIZE = 3
_SEPARATOR = "=" * 50
_MENU_RULE = "=" * 30
_SCORE_FLOOR = -(2**31)
_SCORE_CEILING = 2**31 - 1

Move = tuple[int, int]
Reader = Callable[[str], str]
Runner = Callable[[list[str]], "subprocess.CompletedProcess"]


class Player(Enum):
    """A side in the game; the value is the symbol drawn on the board."""

    X = "❌"
    O = "⭕"  # noqa: E741

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def opponent(self) -> Player:
        return Player.O if self is Player.X else Player.X


class BoardState(Enum):
    PLAYING = "playing"
    WIN = "win"
    DRAW = "draw"


class InvalidMoveError(ValueError):
    """A move that the rules do not allow."""


class LaunchError(RuntimeError):
    """A Life game could not be started."""


class TicTacToeBoard:
    """A 3x3 board; ``cells[row][col]`` holds the player occupying it, or None."""

    def __init__(self) -> None:
        self.cells: list[list[Player | None]] = [[None] * SIZE for _ in range(SIZE)]
        self.current_player = Player.X
        self.state = BoardState.PLAYING
        self.winner: Player | None = None
        self.move_count = 0

    def copy(self) -> TicTacToeBoard:
        other = TicTacToeBoard()
        other.cells = [row[:] for row in self.cells]
        other.current_player = self.current_player
        other.state = self.state
        other.winner = self.winner
        other.move_count = self.move_count
        return other

    def make_move(self, row: int, col: int) -> None:
        """Place the current player's mark; raise InvalidMoveError if the move is illegal."""
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise InvalidMoveError("位置超出范围")
        if self.cells[row][col] is not None:
            raise InvalidMoveError("该位置已被占用")
        if self.state is not BoardState.PLAYING:
            raise InvalidMoveError("游戏已结束")

        self.cells[row][col] = self.current_player
        self.move_count += 1
        if self.check_win(row, col):
            self.state = BoardState.WIN
            self.winner = self.current_player
        elif self.move_count == SIZE * SIZE:
            self.state = BoardState.DRAW
        else:
            self.current_player = self.current_player.opponent

    def check_win(self, row: int, col: int) -> bool:
        """Whether the mark at ``(row, col)`` completes a line."""
        player = self.cells[row][col]
        if player is None:
            raise ValueError("cell is empty")
        lines = [
            [(row, c) for c in range(SIZE)],
            [(r, col) for r in range(SIZE)],
        ]
        if row == col:
            lines.append([(i, i) for i in range(SIZE)])
        if row + col == SIZE - 1:
            lines.append([(i, SIZE - 1 - i) for i in range(SIZE)])
        return any(all(self.cells[r][c] is player for r, c in line) for line in lines)

    def available_moves(self) -> list[Move]:
        return [
            (r, c)
            for r, cells in enumerate(self.cells)
            for c, cell in enumerate(cells)
            if cell is None
        ]

    def render(self) -> str:
        lines = [
            "🎮 井字棋游戏",
            f"当前玩家: {self.current_player.symbol}",
            "┌───┬───┬───┐",
        ]
        for i, cells in enumerate(self.cells):
            lines.append(
                "│" + "".join(f" {cell.symbol} │" if cell else "   │" for cell in cells)
            )
            if i < SIZE - 1:
                lines.append("├───┼───┼───┤")
        lines.append("└───┴───┴───┘")
        if self.state is BoardState.PLAYING:
            lines.append("游戏进行中...")
        elif self.state is BoardState.WIN and self.winner is not None:
            lines.append(f"🎉 玩家 {self.winner.name} 获胜！")
        else:
            lines.append("🤝 平局！")
        return "\n".join(lines)


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


_CENTER: Move = (1, 1)
_CORNERS: tuple[Move, ...] = ((0, 0), (0, 2), (2, 0), (2, 2))
_EDGES: tuple[Move, ...] = ((0, 1), (1, 0), (1, 2), (2, 1))


def _minimax(board: TicTacToeBoard, maximizing: bool, depth: int) -> int:
    if board.state is BoardState.WIN:
        return 10 - depth if board.winner is Player.O else -10 + depth
    if board.state is BoardState.DRAW:
        return 0
    if depth >= SIZE * SIZE:
        return 0
    scores = []
    for row, col in board.available_moves():
        child = board.copy()
        child.make_move(row, col)
        scores.append(_minimax(child, not maximizing, depth + 1))
    if maximizing:
        return max(scores, default=_SCORE_FLOOR)
    return min(scores, default=_SCORE_CEILING)


class AI:
    """The computer opponent, playing O; randomness comes from pooled entropy."""

    def __init__(
        self,
        difficulty: Difficulty,
        entropy_pool: PooledEntropy | None = None,
        entropy_manager: EntropyManager | None = None,
    ) -> None:
        self.difficulty = difficulty
        if entropy_pool is None:
            entropy_pool = PooledEntropy(1024)
            manager = entropy_manager if entropy_manager is not None else EntropyManager()
            try:
                manager.collect_and_optimize()
            except EntropyError:
                pass
            entropy_pool.add_entropy_source(manager.generate_random(256))
        self.entropy_pool = entropy_pool

    def _random_choice(self, moves: list[Move]) -> Move:
        return moves[self.entropy_pool.random_range(0, len(moves))]

    def get_move(self, board: TicTacToeBoard) -> Move:
        """Choose a move; raise InsufficientEntropyError when the board is full."""
        moves = board.available_moves()
        if not moves:
            raise InsufficientEntropyError()
        if self.difficulty is Difficulty.EASY:
            return self._random_choice(moves)
        if self.difficulty is Difficulty.MEDIUM:
            if _CENTER in moves:
                return _CENTER
            for group in (_CORNERS, _EDGES):
                for move in group:
                    if move in moves:
                        return move
            return self._random_choice(moves)
        return self._minimax_move(board, moves)

    @staticmethod
    def _minimax_move(board: TicTacToeBoard, moves: list[Move]) -> Move:
        best_move = moves[0]
        best_score = _SCORE_FLOOR
        for row, col in moves:
            child = board.copy()
            child.make_move(row, col)
            score = _minimax(child, False, 0)
            if score > best_score:
                best_score = score
                best_move = (row, col)
        return best_move


@dataclass
class LifeGameInfo:
    name: str
    executable: str
    description: str
    is_active: bool = False
    last_run: float | None = None


def _default_games() -> list[LifeGameInfo]:
    return [
        LifeGameInfo("全新的生命游戏", "new-life-game", "基于外部熵源的细胞自动机模拟"),
        LifeGameInfo("甜甜的生命游戏", "sweet-life-game", "凸优化版本的生命游戏"),
        LifeGameInfo("优化的生命游戏", "sweet-life-optimized", "性能优化版本的生命游戏"),
    ]


def _run_captured(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True, check=False)


def _decode(data: bytes | str) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _status(game: LifeGameInfo) -> str:
    return "🟢 运行中" if game.is_active else "⚪ 未运行"


class LifeGameManager:
    """Keeps the list of Life game programs and starts them."""

    def __init__(
        self,
        games: list[LifeGameInfo] | None = None,
        *,
        entropy_manager: EntropyManager | None = None,
        runner: Runner = _run_captured,
        search_path: str | None = None,
        output: TextIO | None = None,
        delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.games = games if games is not None else _default_games()
        self.entropy_manager = entropy_manager if entropy_manager is not None else EntropyManager()
        try:
            self.entropy_manager.collect_and_optimize()
        except EntropyError:
            pass
        self._runner = runner
        self.search_path = search_path
        self._output = output
        self.delay = delay
        self._sleep = sleep
        self._clock = clock

    def _print(self, text: str = "") -> None:
        print(text, file=self._output if self._output is not None else sys.stdout)

    def list_games(self) -> str:
        """A listing of every game with its status and when it last ran."""
        lines = ["🎮 可用的生命游戏:", _SEPARATOR]
        for i, game in enumerate(self.games, start=1):
            lines.append(f"{i}. {game.name} - {_status(game)}")
            lines.append(f"   描述: {game.description}")
            if game.last_run is not None:
                lines.append(f"   最后运行: {self._clock() - game.last_run:.1f}秒前")
            lines.append("")
        return "\n".join(lines)

    def run_game(self, index: int) -> subprocess.CompletedProcess:
        """Run the game at ``index`` to completion and echo its output."""
        if not 0 <= index < len(self.games):
            raise LaunchError("无效的游戏索引")
        game = self.games[index]
        self._print(f"🚀 启动 {game.name}...")
        path = shutil.which(game.executable, path=self.search_path)
        if path is None:
            raise LaunchError(f"可执行文件不存在: {game.executable}")
        try:
            result = self._runner([path])
        except OSError as err:
            raise LaunchError(f"运行失败: {err}") from err

        game.is_active = True
        game.last_run = self._clock()
        self._print(f"✅ {game.name} 运行完成")
        if result.stdout:
            self._print(f"输出:\n{_decode(result.stdout)}")
        if result.stderr:
            self._print(f"错误:\n{_decode(result.stderr)}")
        return result

    def run_all_games(self) -> list[str]:
        """Run every game in turn; return the names of those that ran."""
        self._print("🌟 启动所有生命游戏，让它们充满活力！")
        self._print(_SEPARATOR)
        started = []
        for index, game in enumerate(self.games):
            try:
                self.run_game(index)
            except LaunchError as err:
                self._print(f"❌ {game.name} 启动失败: {err}")
                continue
            self._print(f"✅ {game.name} 成功启动")
            started.append(game.name)
            self._sleep(self.delay)
        self._print("\n🎉 所有生命游戏已启动！")
        return started

    def entropy_stats(self) -> str:
        stats = self.entropy_manager.entropy_stats()
        return (
            f"熵源数量: {stats.source_count}, 池大小: {stats.pool_size} 字节, "
            f"分布质量: {stats.optimizer_stats.distribution_quality:.3f}, "
            f"量子强度: {stats.quantum_stats.post_quantum_strength:.3f}"
        )


@dataclass
class SessionStats:
    games_played: int = 0
    ai_wins: int = 0
    player_wins: int = 0
    draws: int = 0
    total_moves: int = 0
    start_time: float = field(default_factory=time.monotonic)

    @property
    def win_rate(self) -> float | None:
        """The player's win percentage, or None before any game has been played."""
        if self.games_played == 0:
            return None
        return self.player_wins / self.games_played * 100.0


def _parse_index(text: str, message: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise ValueError(message) from None
    if value < 0:
        raise ValueError(message)
    return value


class GameSystem:
    """The interactive menu tying noughts and crosses and the Life launcher together."""

    def __init__(
        self,
        *,
        ai_factory: Callable[[Difficulty], AI] = AI,
        life_manager: LifeGameManager | None = None,
        entropy_manager: EntropyManager | None = None,
        input_fn: Reader | None = None,
        output: TextIO | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._ai_factory = ai_factory
        self._input_fn = input_fn
        self._output = output
        self._sleep = sleep
        self.tic_tac_toe = TicTacToeBoard()
        self.ai = ai_factory(Difficulty.HARD)
        self.life_manager = (
            life_manager if life_manager is not None else LifeGameManager(output=output)
        )
        self.entropy_manager = entropy_manager if entropy_manager is not None else EntropyManager()
        self.stats = SessionStats()

    def _print(self, text: str = "") -> None:
        print(text, file=self._output if self._output is not None else sys.stdout)

    def _read(self) -> str:
        reader = self._input_fn if self._input_fn is not None else builtins.input
        return reader("")

    def play_tic_tac_toe(self) -> None:
        """Play one game against the AI, asking first for the difficulty."""
        self._print("🎮 欢迎来到井字棋游戏！")
        self._print("选择难度:")
        self._print("1. 简单 (随机移动)")
        self._print("2. 中等 (简单策略)")
        self._print("3. 困难 (高级AI)")
        choices = {"1": Difficulty.EASY, "2": Difficulty.MEDIUM, "3": Difficulty.HARD}
        difficulty = choices.get(self._read().strip(), Difficulty.MEDIUM)
        self.ai = self._ai_factory(difficulty)
        self._print(f"✅ 难度设置为: {difficulty.value}")

        while True:
            board = self.tic_tac_toe
            self._print(board.render())
            if board.state is not BoardState.PLAYING:
                self._handle_game_end()
                break

            if board.current_player is Player.X:
                self._print("请输入位置 (行 列，例如: 1 1):")
                parts = self._read().split()
                if len(parts) != 2:
                    self._print("❌ 请输入两个数字，用空格分隔")
                    continue
                row = _parse_index(parts[0], "无效的行")
                col = _parse_index(parts[1], "无效的列")
                try:
                    board.make_move(row, col)
                except InvalidMoveError as err:
                    self._print(f"❌ {err}")
                    continue
                self.stats.total_moves += 1
                self._print("✅ 移动成功")
            else:
                self._print("🤖 AI正在思考...")
                self._sleep(1.0)
                try:
                    row, col = self.ai.get_move(board)
                except EntropyError as err:
                    self._print(f"❌ AI错误: {err}")
                    break
                board.make_move(row, col)
                self.stats.total_moves += 1
                self._print(f"🤖 AI选择了位置 ({row}, {col})")

            self._sleep(0.5)

    def _handle_game_end(self) -> None:
        self.stats.games_played += 1
        board = self.tic_tac_toe
        if board.state is BoardState.WIN and board.winner is Player.X:
            self.stats.player_wins += 1
            self._print("🎉 恭喜！你赢了！")
        elif board.state is BoardState.WIN:
            self.stats.ai_wins += 1
            self._print("🤖 AI获胜！")
        elif board.state is BoardState.DRAW:
            self.stats.draws += 1
            self._print("🤝 平局！")

        self._print("是否再玩一局？(y/n)")
        if self._read().strip().lower() == "y":
            self.tic_tac_toe = TicTacToeBoard()

    def show_menu(self) -> None:
        """Run the main menu until the user leaves it or input ends."""
        while True:
            self._print("\n🎮 游戏系统主菜单")
            self._print(_MENU_RULE)
            self._print("1. 玩井字棋")
            self._print("2. 查看生命游戏")
            self._print("3. 运行所有生命游戏")
            self._print("4. 运行特定生命游戏")
            self._print("5. 查看统计信息")
            self._print("6. 查看熵源信息")
            self._print("0. 退出")
            self._print(_MENU_RULE)

            try:
                choice = self._read().strip()
            except EOFError:
                break

            if choice == "1":
                self.play_tic_tac_toe()
            elif choice == "2":
                self._print(self.life_manager.list_games())
            elif choice == "3":
                self.life_manager.run_all_games()
            elif choice == "4":
                self._print(self.life_manager.list_games())
                self._print("请输入游戏编号:")
                number = _parse_index(self._read().strip(), "无效编号")
                self.life_manager.run_game(number - 1)
            elif choice == "5":
                self.show_stats()
            elif choice == "6":
                self._print("🔬 熵源系统信息:")
                self._print(self.life_manager.entropy_stats())
            elif choice == "0":
                self._print("👋 再见！")
                break
            else:
                self._print("❌ 无效选择")

    def show_stats(self) -> str:
        """Print the session statistics and return the text printed."""
        stats = self.stats
        lines = [
            "\n📊 游戏统计信息",
            _MENU_RULE,
            "井字棋游戏:",
            f"  总游戏数: {stats.games_played}",
            f"  玩家获胜: {stats.player_wins}",
            f"  AI获胜: {stats.ai_wins}",
            f"  平局: {stats.draws}",
            f"  总移动数: {stats.total_moves}",
        ]
        if stats.win_rate is not None:
            lines.append(f"  玩家胜率: {stats.win_rate:.1f}%")
        lines.append("\n生命游戏:")
        lines += [f"  {game.name}: {_status(game)}" for game in self.life_manager.games]
        lines.append(f"\n系统运行时间: {time.monotonic() - stats.start_time:.1f}秒")
        text = "\n".join(lines)
        self._print(text)
        return text


def main(argv: list[str] | None = None) -> int:
    """Start the interactive game system; returns a process exit status."""
    parser = argparse.ArgumentParser(prog="tic-tac-toe", description="井字棋游戏系统")
    parser.parse_args(argv)

    print("🎮 Tic-Tac-Toe 井字棋游戏系统")
    print("集成所有生命游戏的活力运行")
    print(_SEPARATOR)
    try:
        system = GameSystem()
        print("🌟 系统初始化完成！")
        print("🔬 熵源系统已激活")
        print("🎮 所有生命游戏已准备就绪")
        print()
        system.show_menu()
    except EOFError:
        return 0
    except (EntropyError, LaunchError, ValueError) as err:
        print(f"错误: {err}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())