"""Entropy pooling: a mixed byte reservoir and random values drawn from it."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from .optimizer import chi_square, shannon_entropy

_MASK64 = (1 << 64) - 1

Clock = Callable[[], int]


def _feistel(value: int, round_no: int) -> int:
    r = (value + round_no) & 0xFF
    r = (r * 3) & 0xFF
    r = ((r << 2) | (r >> 6)) & 0xFF
    return r ^ 0x55


_FEISTEL_TABLES = tuple(bytes(_feistel(v, r) for v in range(256)) for r in range(8))


def _xor_bytes(a: bytes, b: bytes) -> bytes:
    return (int.from_bytes(a, "little") ^ int.from_bytes(b, "little")).to_bytes(len(a), "little")


@dataclass(frozen=True)
class PoolStats:
    current_size: int
    max_size: int
    min_size: int
    refill_count: int
    last_refill: int


class EntropyPool:
    """A bounded, thread-safe reservoir of entropy bytes that is remixed on every change."""

    def __init__(
        self,
        max_size: int = 1024 * 1024,
        min_size: int = 1024,
        clock: Clock = time.time_ns,
    ) -> None:
        self.max_size = max_size
        self.min_size = min_size
        self.last_refill = 0
        self.refill_count = 0
        self._clock = clock
        self._pool = bytearray()
        self._lock = threading.Lock()

    def _now(self) -> int:
        now = self._clock()
        return now & _MASK64 if now >= 0 else 0

    def add_entropy(self, entropy: bytes) -> None:
        """Append entropy, drop the oldest bytes beyond the size limit, and remix."""
        with self._lock:
            self._pool += entropy
            excess = len(self._pool) - self.max_size
            if excess > 0:
                del self._pool[:excess]
            self._mix()
            self.refill_count += 1
            self.last_refill = self._now()

    def extract_entropy(self, size: int) -> bytes:
        """Remove and return ``size`` bytes, topping up from the clock if the pool runs short."""
        if size < 0:
            raise ValueError("size must not be negative")
        with self._lock:
            shortfall = size - len(self._pool)
            if shortfall > 0:
                self._pool += self._temporary_entropy(shortfall)
            extracted = bytes(self._pool[:size])
            del self._pool[:size]
            self._mix()
            return extracted

    def _temporary_entropy(self, size: int) -> bytes:
        now = self._now()
        return bytes(((now + i) ^ self.refill_count) & 0xFF for i in range(size))

    def _mix(self) -> None:
        pool = self._pool
        n = len(pool)
        if n < 2:
            return
        for i in range(n - 1, 0, -1):
            j = (i * 7 + 13) % n
            pool[i], pool[j] = pool[j], pool[i]
        if n >= 4:
            self._feistel_mix()

    def _feistel_mix(self) -> None:
        pool = self._pool
        end = (len(pool) // 2) * 2
        for table in _FEISTEL_TABLES:
            lefts = bytes(pool[0:end:2])
            rights = bytes(pool[1:end:2])
            pool[0:end:2] = rights
            pool[1:end:2] = _xor_bytes(lefts, rights.translate(table))

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._pool)

    def __len__(self) -> int:
        return self.size

    def needs_refill(self) -> bool:
        return self.size < self.min_size

    def stats(self) -> PoolStats:
        return PoolStats(
            current_size=self.size,
            max_size=self.max_size,
            min_size=self.min_size,
            refill_count=self.refill_count,
            last_refill=self.last_refill,
        )


class PooledEntropy:
    """Random values served from a buffer that is refilled from an entropy pool."""

    def __init__(self, buffer_size: int, pool: EntropyPool | None = None) -> None:
        self.pool = pool if pool is not None else EntropyPool()
        self.buffer_size = buffer_size
        self._buffer = bytearray()

    def add_entropy_source(self, entropy: bytes) -> None:
        self.pool.add_entropy(entropy)

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def random_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("count must not be negative")
        if len(self._buffer) < count:
            needed = count - len(self._buffer)
            self._buffer += self.pool.extract_entropy(max(needed, self.buffer_size))
        result = bytes(self._buffer[:count])
        del self._buffer[:count]
        return result

    def random_byte(self) -> int:
        return self.random_bytes(1)[0]

    def random_u32(self) -> int:
        return int.from_bytes(self.random_bytes(4), "little")

    def random_range(self, low: int, high: int) -> int:
        """A value in ``[low, high)``; ``low`` itself when the range is empty."""
        if low >= high:
            return low
        return low + self.random_u32() % (high - low)

    def pool_stats(self) -> PoolStats:
        return self.pool.stats()


class EntropyQualityAssessor:
    """Scores entropy samples by chi-square uniformity and Shannon entropy."""

    def __init__(self) -> None:
        self.sample_count = 0
        self.chi_square_sum = 0.0
        self.entropy_sum = 0.0

    @staticmethod
    def _score(chi: float, entropy: float) -> float:
        chi_square_score = 1.0 if chi < 255.0 else 0.0
        return (chi_square_score + entropy / 8.0) / 2.0

    def assess_quality(self, entropy: bytes) -> float:
        self.sample_count += 1
        chi = chi_square(entropy)
        value = shannon_entropy(entropy)
        self.chi_square_sum += chi
        self.entropy_sum += value
        return self._score(chi, value)

    def average_quality(self) -> float:
        if self.sample_count == 0:
            return 0.0
        return self._score(
            self.chi_square_sum / self.sample_count,
            self.entropy_sum / self.sample_count,
        )