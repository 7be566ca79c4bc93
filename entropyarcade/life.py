"""Conway's Game of Life seeded and perturbed by the external entropy subsystem."""

from __future__ import annotations

import argparse
import builtins
import math
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, TextIO

from .errors import EntropyError
from .manager import EntropyManager
from .pool import PooledEntropy

_CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"
_SEPARATOR = "=" * 50

Cells = list[list[bool]]


class LifeGrid:
    """A bounded (non-wrapping) Life grid; ``cells[x][y]`` is True for a live cell."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("grid dimensions must be positive")
        self.width = width
        self.height = height
        self.cells: Cells = [[False] * height for _ in range(width)]
        self.generation = 0

    def snapshot(self) -> Cells:
        """An independent copy of the current cells."""
        return [column[:] for column in self.cells]

    def random_init(self, entropy_pool: PooledEntropy, density: float) -> None:
        """Make each cell live with probability ``density``, drawing from the pool."""
        for column in self.cells:
            for y in range(self.height):
                column[y] = entropy_pool.random_range(0, 1000) / 1000.0 < density

    def set_pattern(self, pattern: list[str] | tuple[str, ...], start_x: int, start_y: int) -> None:
        """Stamp a pattern whose 'X' marks live cells; other characters clear cells."""
        for dy, row in enumerate(pattern):
            y = start_y + dy
            for dx, ch in enumerate(row):
                x = start_x + dx
                if 0 <= x < self.width and 0 <= y < self.height:
                    self.cells[x][y] = ch == "X"

    def count_live_neighbors(self, x: int, y: int) -> int:
        count = 0
        for nx in range(x - 1, x + 2):
            if not 0 <= nx < self.width:
                continue
            for ny in range(y - 1, y + 2):
                if (nx, ny) != (x, y) and 0 <= ny < self.height and self.cells[nx][ny]:
                    count += 1
        return count

    def next_generation(self) -> None:
        new_cells = [
            [
                self.count_live_neighbors(x, y) == 3
                or (alive and self.count_live_neighbors(x, y) == 2)
                for y, alive in enumerate(column)
            ]
            for x, column in enumerate(self.cells)
        ]
        self.cells = new_cells
        self.generation += 1

    def count_live_cells(self) -> int:
        return sum(sum(column) for column in self.cells)

    def entropy(self) -> float:
        """Shannon entropy of the distribution of neighbour counts over all cells."""
        histogram = Counter(
            self.count_live_neighbors(x, y)
            for x in range(self.width)
            for y in range(self.height)
        )
        total = self.width * self.height
        return sum(-(c / total) * math.log2(c / total) for c in histogram.values())

    def render(self) -> str:
        border = "─" * (self.width + 2)
        lines = [
            f"🔄 第{self.generation}代生命游戏 | 活细胞: {self.count_live_cells()} | "
            f"熵值: {self.entropy():.3f}",
            border,
        ]
        for y in range(self.height):
            row = "".join("●" if self.cells[x][y] else " " for x in range(self.width))
            lines.append(f"│{row}│")
        lines.append(border)
        return "\n".join(lines)

    def is_stable(self, prev_cells: Cells) -> bool:
        return self.cells == prev_cells


@dataclass(frozen=True)
class Pattern:
    name: str
    rows: tuple[str, ...]
    description: str

    @property
    def width(self) -> int:
        return len(self.rows[0])

    @property
    def height(self) -> int:
        return len(self.rows)


@dataclass
class SimulationStats:
    total_generations: int = 0
    max_population: int = 0
    min_population: int | None = None
    avg_entropy: float = 0.0
    stability_count: int = 0
    start_time: float = field(default_factory=time.monotonic)

    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    def observe(self, population: int) -> None:
        self.max_population = max(self.max_population, population)
        if self.min_population is None or population < self.min_population:
            self.min_population = population


def create_patterns() -> list[Pattern]:
    """The library of classic patterns that can be dropped into a running grid."""
    return [
        Pattern("滑翔机", (" X ", "X X", " XX"), "会移动的简单模式"),
        Pattern(
            "脉冲星",
            (
                "  XXX   XXX  ",
                " X   X X   X ",
                "X     X     X",
                "X     X     X",
                "X     X     X",
                " X   X X   X ",
                "  XXX   XXX  ",
            ),
            "周期性振荡模式",
        ),
        Pattern("信标", ("XX  ", "XX  ", "  XX", "  XX"), "周期性闪烁模式"),
        Pattern("蟾蜍", (" XXX", "XXX "), "周期性振荡模式"),
    ]


class LifeGameSimulator:
    """Runs a Life grid interactively, using pooled entropy for seeding and new patterns."""

    STABLE_LIMIT = 5

    def __init__(
        self,
        width: int,
        height: int,
        *,
        entropy_manager: EntropyManager | None = None,
        entropy_pool: PooledEntropy | None = None,
        input_fn: Callable[[str], str] | None = None,
        output: TextIO | None = None,
        delay: float = 0.1,
        density: float = 0.3,
    ) -> None:
        self.entropy_manager = entropy_manager if entropy_manager is not None else EntropyManager()
        self.entropy_pool = entropy_pool if entropy_pool is not None else PooledEntropy(2048)
        self._input_fn = input_fn
        self._output = output
        self.delay = delay

        try:
            self.entropy_manager.collect_and_optimize()
        except EntropyError:
            pass
        self.entropy_pool.add_entropy_source(self.entropy_manager.generate_random(512))

        self.grid = LifeGrid(width, height)
        self.grid.random_init(self.entropy_pool, density)
        self.patterns = create_patterns()
        self.stats = SimulationStats()

    def _print(self, text: str = "", end: str = "\n") -> None:
        print(text, end=end, file=self._output if self._output is not None else sys.stdout)

    def _read(self, prompt: str) -> str:
        reader = self._input_fn if self._input_fn is not None else builtins.input
        try:
            return reader(prompt)
        except EOFError:
            return ""

    def add_random_pattern(self) -> tuple[Pattern, int, int]:
        """Place a randomly chosen pattern at a random position; return it and its origin."""
        pattern = self.patterns[self.entropy_pool.random_range(0, len(self.patterns))]
        free_x = self.grid.width - pattern.width
        free_y = self.grid.height - pattern.height
        if free_x < 0 or free_y < 0:
            raise ValueError(f"pattern {pattern.name} does not fit in the grid")
        x = self.entropy_pool.random_range(0, free_x)
        y = self.entropy_pool.random_range(0, free_y)
        self.grid.set_pattern(pattern.rows, x, y)
        self._print(f"🎯 添加模式: {pattern.name} 在位置 ({x}, {y})")
        return pattern, x, y

    def _show(self, generation: int, population: int, entropy_sum: float) -> None:
        self._print(_CLEAR_SCREEN, end="")
        self._print(self.grid.render())
        self._print("📊 统计信息:")
        self._print(f"  总代数: {generation}")
        self._print(f"  当前种群: {population}")
        self._print(f"  最大种群: {self.stats.max_population}")
        self._print(f"  最小种群: {self.stats.min_population}")
        self._print(f"  平均熵值: {entropy_sum / (generation + 1):.3f}")
        self._print(f"  运行时间: {self.stats.elapsed():.2f}秒")
        entropy_stats = self.entropy_manager.entropy_stats()
        self._print("🔬 熵源统计:")
        self._print(f"  熵源数量: {entropy_stats.source_count}")
        self._print(f"  池大小: {entropy_stats.pool_size} 字节")
        self._print(f"  分布质量: {entropy_stats.optimizer_stats.distribution_quality:.3f}")
        self._print(f"  量子强度: {entropy_stats.quantum_stats.post_quantum_strength:.3f}")
        self._print()

    def run(self, max_generations: int, display_interval: int) -> SimulationStats:
        """Advance the grid, showing it every ``display_interval`` generations."""
        if display_interval <= 0:
            raise ValueError("display_interval must be positive")
        self._print("🌱 全新的生命游戏开始！")
        self._print("使用外部熵源优化概率空间分布")
        self._print(f"网格大小: {self.grid.width}x{self.grid.height}")
        self._print(f"最大代数: {max_generations}")
        self._print()

        prev_cells = self.grid.snapshot()
        entropy_sum = 0.0
        for generation in range(max_generations):
            population = self.grid.count_live_cells()
            self.stats.observe(population)
            entropy_sum += self.grid.entropy()

            if self.grid.is_stable(prev_cells):
                self.stats.stability_count += 1
                if self.stats.stability_count >= self.STABLE_LIMIT:
                    self._print(f"🔒 系统达到稳定状态，在第{generation}代")
                    break
            else:
                self.stats.stability_count = 0

            if generation % display_interval == 0:
                self._show(generation, population, entropy_sum)
                command = self._read("按回车键继续，或输入 'q' 退出，'p' 添加模式...\n").strip()
                if command == "q":
                    self._print("👋 游戏结束！")
                    break
                if command == "p":
                    self.add_random_pattern()

            prev_cells = self.grid.snapshot()
            self.grid.next_generation()
            if self.delay > 0:
                time.sleep(self.delay)

        self.stats.total_generations = self.grid.generation
        self.stats.avg_entropy = (
            entropy_sum / self.grid.generation if self.grid.generation else math.nan
        )
        return self.stats

    def final_report(self) -> str:
        stats = self.stats
        elapsed = stats.elapsed()
        per_generation = (
            elapsed * 1000.0 / stats.total_generations if stats.total_generations else math.nan
        )
        entropy_stats = self.entropy_manager.entropy_stats()
        lines = [
            "",
            "🎉 生命游戏模拟完成！",
            _SEPARATOR,
            "📈 最终统计:",
            f"  总代数: {stats.total_generations}",
            f"  最大种群: {stats.max_population}",
            f"  最小种群: {stats.min_population}",
            f"  平均熵值: {stats.avg_entropy:.3f}",
            f"  总运行时间: {elapsed:.2f}秒",
            f"  平均每代时间: {per_generation:.3f}毫秒",
            "",
            "🔬 熵源系统统计:",
            f"  熵源数量: {entropy_stats.source_count}",
            f"  池大小: {entropy_stats.pool_size} 字节",
            f"  分布质量: {entropy_stats.optimizer_stats.distribution_quality:.3f}",
            f"  量子强度: {entropy_stats.quantum_stats.post_quantum_strength:.3f}",
            f"  处理时间: {entropy_stats.quantum_stats.processing_time_ns} 纳秒",
            f"  熵放大: {entropy_stats.quantum_stats.entropy_amplification:.3f}",
            "",
            "🎯 模式库:",
        ]
        lines += [
            f"  {i}. {pattern.name} - {pattern.description}"
            for i, pattern in enumerate(self.patterns, start=1)
        ]
        return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Run the interactive Life simulation; returns a process exit status."""
    parser = argparse.ArgumentParser(prog="new-life-game", description="基于外部熵源的细胞自动机模拟")
    parser.add_argument("--width", type=int, default=40)
    parser.add_argument("--height", type=int, default=20)
    parser.add_argument("--generations", type=int, default=1000)
    parser.add_argument("--interval", type=int, default=5)
    args = parser.parse_args(argv)

    print("🌱 全新的生命游戏")
    print("基于外部熵源的细胞自动机模拟")
    print("优化概率空间分布，生成更真实的生命模式")
    print()
    try:
        simulator = LifeGameSimulator(args.width, args.height)
        simulator.run(args.generations, args.interval)
    except (EntropyError, ValueError) as err:
        print(f"错误: {err}")
        return 1
    print(simulator.final_report())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())