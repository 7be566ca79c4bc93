# entropyarcade

A small collection of terminal games driven by a home-grown entropy system.

The entropy side gathers bytes from several sources (system time, a simulated
hardware LFSR, simulated network timing, process details and memory patterns),
mixes them in a pool, reshapes their byte distribution and passes the result
through a further mixing stage. The games use that pool for their randomness.

The entropy here is meant for games and experiments. It is not a
cryptographically secure random number generator; use `secrets` for that.

## Installation

```
pip install .
```

Python 3.10 or newer is required. There are no runtime dependencies.

## Commands

```
entropy-demo     # collect, optimise and analyse entropy; print statistics
new-life-game    # Conway's Game of Life seeded from the entropy pool
tic-tac-toe      # menu-driven tic-tac-toe against an AI, plus a life-game launcher
```

### new-life-game

Options: `--width` (default 40), `--height` (default 20), `--generations`
(default 1000) and `--interval` (default 5, how many generations pass between
screens). The grid does not wrap at its edges.

At each screen press Enter to go on, `p` to drop a random classic pattern
(glider, pulsar, beacon, toad) onto the grid, or `q` to quit. The run also
stops by itself once the grid has stayed unchanged for five generations in a
row. A summary of the run and of the entropy system is printed at the end.

### tic-tac-toe

The menu offers: play tic-tac-toe, list the life games, run all of them, run
one of them, show session statistics, and show entropy statistics. `0` leaves.

For a game, pick a difficulty (1 easy: random moves; 2 medium: centre, then
corners, then edges; 3 hard: minimax; anything else means medium), then enter
moves as `row col` with zero-based indices, for example `1 1` for the centre.
You play X and move first; the AI plays O.

The launcher runs programs named `new-life-game`, `sweet-life-game` and
`sweet-life-optimized`, looked up on `PATH`, waits for each to finish and
prints what it wrote. Only `new-life-game` is provided by this package; the
other two are reported as missing unless something else installs them.

## Library use

```python
from entropyarcade.manager import EntropyManager
from entropyarcade.pool import PooledEntropy

manager = EntropyManager()
data = manager.generate_random(64)

pool = PooledEntropy(1024)
pool.add_entropy_source(data)
roll = pool.random_range(1, 7)   # 1..6
```

Modules:

- `entropyarcade.sources`: `SystemTimeEntropy`, `HardwareEntropy`,
  `NetworkEntropy`, `ProcessEntropy`, `MemoryEntropy`, each with
  `collect_entropy()`, and `EntropyCollector` to gather from several.
- `entropyarcade.pool`: `EntropyPool` (`add_entropy`, `extract_entropy`,
  `needs_refill`, `stats`), `PooledEntropy` (`random_bytes`, `random_byte`,
  `random_u32`, `random_range`, `pool_stats`) and `EntropyQualityAssessor`.
- `entropyarcade.optimizer`: `shannon_entropy`, `chi_square`,
  `DistributionOptimizer` and `ProbabilitySpace`.
- `entropyarcade.quantum`: `QuantumResistantRNG` (`process_entropy`) and
  `PostQuantumEntropy` (`generate_entropy`).
- `entropyarcade.manager`: `EntropyManager` (`collect_and_optimize`,
  `generate_random`, `entropy_stats`).
- `entropyarcade.demo`: `analyze_distribution` and the `entropy-demo` command.
- `entropyarcade.life`: `LifeGrid`, `LifeGameSimulator`, `create_patterns`.
- `entropyarcade.tictactoe`: `TicTacToeBoard`, `AI`, `LifeGameManager`,
  `GameSystem`.
- `entropyarcade.tetris`: Tetris rules, below.

Errors are raised as subclasses of `entropyarcade.errors.EntropyError`:
`SourceUnavailableError`, `InsufficientEntropyError`, `DistributionError` and
`QuantumProcessingError`.

## Tetris rules

`entropyarcade.tetris.TetrisGame` plays on a 10x20 `GameBoard` and offers
`move_piece`, `rotate_piece` (with wall kicks), `hard_drop`, `update`
(gravity on a timer), `toggle_pause` and `reset`. Clearing 1, 2, 3 or 4 lines
scores 100, 300, 500 or 800 times the level; the level rises every ten lines
and the drop interval shortens with it. Pieces come from a seven-piece bag in
a fixed order.

## What is not included

There is no Tetris command and no screen to play it on: the package holds the
game rules only, for use from your own code. Nothing is saved between runs;
statistics live only as long as the program does.

## Tests

```
pip install .[test]
pytest
```