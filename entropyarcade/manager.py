"""Top-level entropy manager tying sources, pool, optimiser and post-quantum stage together."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterable

from .errors import EntropyError
from .optimizer import DistributionOptimizer, OptimizerStats
from .pool import EntropyPool
from .quantum import QuantumResistantRNG, QuantumStats
from .sources import (
    EntropySource,
    HardwareEntropy,
    MemoryEntropy,
    NetworkEntropy,
    ProcessEntropy,
    SystemTimeEntropy,
)


@dataclass(frozen=True)
class EntropyStats:
    source_count: int
    pool_size: int
    optimizer_stats: OptimizerStats
    quantum_stats: QuantumStats


def _default_sources() -> list[EntropySource]:
    return [
        SystemTimeEntropy(),
        HardwareEntropy(),
        NetworkEntropy(),
        ProcessEntropy(),
        MemoryEntropy(),
    ]


class EntropyManager:
    """Collects entropy from several sources and turns it into high-quality random bytes."""

    def __init__(
        self,
        sources: Iterable[EntropySource] | None = None,
        *,
        optimizer: DistributionOptimizer | None = None,
        pool: EntropyPool | None = None,
        quantum_rng: QuantumResistantRNG | None = None,
    ) -> None:
        self.sources: list[EntropySource] = (
            list(sources) if sources is not None else _default_sources()
        )
        self.optimizer = optimizer if optimizer is not None else DistributionOptimizer()
        self.pool = pool if pool is not None else EntropyPool()
        self.quantum_rng = quantum_rng if quantum_rng is not None else QuantumResistantRNG()

    def _collect(self) -> bytes:
        collected = bytearray()
        for source in self.sources:
            try:
                collected += source.collect_entropy()
            except EntropyError as err:
                print(f"熵源错误: {err}", file=sys.stderr)
        return bytes(collected)

    def collect_and_optimize(self) -> bytes:
        """Gather entropy from every source, feed it to the pool, and return its optimised form.

        Raises DistributionError when the optimised distribution is of too low quality.
        """
        collected = self._collect()
        self.pool.add_entropy(collected)
        return self.optimizer.optimize_distribution(collected)

    def generate_random(self, size: int) -> bytes:
        """Refresh the pool, draw ``size`` bytes from it and pass them through the post-quantum stage."""
        try:
            self.collect_and_optimize()
        except EntropyError:
            pass
        pool_entropy = self.pool.extract_entropy(size)
        return self.quantum_rng.process_entropy(pool_entropy)

    def entropy_stats(self) -> EntropyStats:
        return EntropyStats(
            source_count=len(self.sources),
            pool_size=self.pool.size,
            optimizer_stats=self.optimizer.stats(),
            quantum_stats=self.quantum_rng.stats(),
        )