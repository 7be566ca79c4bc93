"""Byte-distribution analysis and optimisation."""

from __future__ import annotations

import math
import operator
from collections import Counter
from dataclasses import dataclass
from itertools import accumulate
from typing import Iterable

from .errors import DistributionError

_ALPHABET = 256


def _histogram(data: Iterable[int]) -> list[int]:
    counts = Counter(data)
    return [counts[value] for value in range(_ALPHABET)]


def _entropy_of_counts(counts: list[int]) -> float:
    total = sum(counts)
    if total == 0:
        return 0.0
    return sum(-(c / total) * math.log2(c / total) for c in counts if c > 0)


def shannon_entropy(data: bytes) -> float:
    """Shannon entropy of the byte distribution, in bits per byte."""
    return _entropy_of_counts(_histogram(data))


def chi_square(data: bytes) -> float:
    """Chi-square statistic of the bytes against a uniform distribution."""
    n = len(data)
    if n == 0:
        return math.nan
    expected = n / _ALPHABET
    return sum((c - expected) ** 2 / expected for c in _histogram(data))


@dataclass(frozen=True)
class _DistributionStats:
    mean: float
    variance: float
    std_dev: float
    chi_square: float
    entropy: float


def _analyze(data: bytes) -> _DistributionStats:
    n = len(data)
    if n == 0:
        nan = math.nan
        return _DistributionStats(nan, nan, nan, nan, 0.0)
    mean = sum(data) / n
    variance = sum(b * b for b in data) / n - mean * mean
    std_dev = math.sqrt(variance) if variance >= 0 else math.nan
    return _DistributionStats(mean, variance, std_dev, chi_square(data), shannon_entropy(data))


def _feistel(value: int, round_no: int) -> int:
    r = (value + round_no) & 0xFF
    r = (r * 3) & 0xFF
    r = ((r << 2) | (r >> 6)) & 0xFF
    return r ^ 0xAA


def _whiten(data: bytes) -> list[int]:
    keys = accumulate(data, lambda k, b: (k + b) & 0xFF)
    xored = [b ^ k for b, k in zip(data, keys)]
    return list(accumulate(xored, operator.xor))


def _enhance(data: list[int]) -> list[int]:
    enhanced: list[int] = []
    for start in range(0, len(data), 2):
        left = data[start]
        right = data[start + 1] if start + 1 < len(data) else 0
        for round_no in range(4):
            left, right = right, left ^ _feistel(right, round_no)
        enhanced += (left, right)
    return enhanced


def _balance(data: list[int]) -> list[int]:
    balanced = list(data)
    hist = _histogram(balanced)
    max_count = max(hist)
    min_count = min((c for c in hist if c > 0), default=0)
    if max_count <= min_count + 1:
        return balanced
    for i, value in enumerate(balanced):
        if hist[value] > min_count + 1:
            try:
                target = hist.index(min_count)
            except ValueError:
                target = value
            balanced[i] = target
            hist[value] -= 1
            hist[target] += 1
    return balanced


def _quality_score(stats: _DistributionStats) -> float:
    entropy_score = stats.entropy / 8.0
    chi_square_score = 1.0 if stats.chi_square < 255.0 else 0.0
    variance_score = 1.0 if 50.0 < stats.std_dev < 100.0 else 0.5
    return (entropy_score + chi_square_score + variance_score) / 3.0


@dataclass(frozen=True)
class OptimizerStats:
    distribution_quality: float
    optimization_cycles: int
    entropy_density: float


class DistributionOptimizer:
    """Whitens, expands and balances raw entropy toward a uniform distribution."""

    QUALITY_FLOOR = 0.5

    def __init__(self) -> None:
        self.optimization_cycles = 0
        self.distribution_quality = 0.0
        self.entropy_density = 0.0
        self.chi_square_threshold = 0.05

    def optimize_distribution(self, entropy: bytes) -> bytes:
        """Return the optimised bytes; raise DistributionError if quality is too low."""
        self.optimization_cycles += 1
        optimized = bytes(_balance(_enhance(_whiten(bytes(entropy)))))
        self.distribution_quality = _quality_score(_analyze(optimized))
        self.entropy_density = shannon_entropy(optimized)
        if self.distribution_quality < self.QUALITY_FLOOR:
            raise DistributionError(f"分布质量不足: {self.distribution_quality:.3f}")
        return optimized

    def stats(self) -> OptimizerStats:
        return OptimizerStats(
            distribution_quality=self.distribution_quality,
            optimization_cycles=self.optimization_cycles,
            entropy_density=self.entropy_density,
        )


class ProbabilitySpace:
    """A set of fixed-width samples with associated probabilities."""

    def __init__(self, dimensions: int) -> None:
        self.dimensions = dimensions
        self.distribution: dict[bytes, float] = {}
        self.entropy_field = [0.0] * dimensions

    def update_distribution(self, sample: bytes, probability: float) -> None:
        """Record a sample; samples of the wrong width are ignored."""
        if len(sample) == self.dimensions:
            self.distribution[bytes(sample)] = probability

    def space_entropy(self) -> float:
        total = sum(self.distribution.values())
        if total == 0.0:
            return 0.0
        result = 0.0
        for prob in self.distribution.values():
            p = prob / total
            if p > 0.0:
                result -= p * math.log2(p)
        return result

    def optimize_space_distribution(self) -> None:
        """Spread the entropy evenly over the field and make the samples equiprobable."""
        entropy = self.space_entropy()
        self.entropy_field = [entropy / self.dimensions for _ in range(self.dimensions)]
        if self.distribution:
            uniform = 1.0 / len(self.distribution)
            self.distribution = dict.fromkeys(self.distribution, uniform)