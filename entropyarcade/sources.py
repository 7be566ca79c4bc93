"""Entropy sources drawn from the clock, a simulated LFSR, and process state."""

from __future__ import annotations

import os
import struct
import sys
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, ClassVar

from .errors import EntropyError, InsufficientEntropyError, SourceUnavailableError

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1

Clock = Callable[[], int]


class EntropySourceType(Enum):
    """Kind of an entropy source; the value is its display name."""

    SYSTEM_TIME = "系统时间"
    HARDWARE = "硬件"
    NETWORK = "网络"
    PROCESS = "进程"
    MEMORY = "内存"
    QUANTUM = "量子"
    CUSTOM = "自定义"


def _now_ns(clock: Clock, failure: str) -> int:
    now = clock()
    if now < 0:
        raise SourceUnavailableError(f"{failure}: 时间早于纪元")
    return now & _MASK64


class EntropySource(ABC):
    """A producer of raw entropy bytes."""

    source_type: ClassVar[EntropySourceType] = EntropySourceType.CUSTOM
    quality: ClassVar[float] = 0.0

    @property
    def name(self) -> str:
        return self.source_type.value

    @abstractmethod
    def collect_entropy(self) -> bytes:
        """Gather a fresh block of entropy."""

    def is_available(self) -> bool:
        return True


class SystemTimeEntropy(EntropySource):
    """Entropy from clock readings, their differences and a call counter."""

    source_type = EntropySourceType.SYSTEM_TIME
    quality = 0.7

    def __init__(self, clock: Clock = time.time_ns) -> None:
        self._clock = clock
        self.last_collection = 0
        self.counter = 0

    def collect_entropy(self) -> bytes:
        now = _now_ns(self._clock, "时间获取失败")
        self.counter = (self.counter + 1) & _MASK64
        time_diff = (now - self.last_collection) & _MASK64
        self.last_collection = now
        micros = now % 1_000_000
        return struct.pack("<QQQI", time_diff, self.counter, now, micros)


class HardwareEntropy(EntropySource):
    """Simulated hardware noise from a 32-bit linear feedback shift register."""

    source_type = EntropySourceType.HARDWARE
    quality = 0.9

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            now = time.time_ns()
            seed = now if now >= 0 else 0
        self.seed = seed & _MASK64
        self._lfsr_state = self.seed & _MASK32

    def _lfsr_next(self) -> int:
        s = self._lfsr_state
        bit = (s ^ (s >> 2) ^ (s >> 3) ^ (s >> 5)) & 1
        self._lfsr_state = (s >> 1) | (bit << 31)
        return bit

    def _next_byte(self) -> int:
        return sum(self._lfsr_next() << pos for pos in range(8))

    def collect_entropy(self) -> bytes:
        noise = bytes(self._next_byte() for _ in range(32))
        return noise + self.seed.to_bytes(8, "little")


class NetworkEntropy(EntropySource):
    """Simulated network timing: packet counts and inter-arrival delays."""

    source_type = EntropySourceType.NETWORK
    quality = 0.8

    def __init__(self, clock: Clock = time.time_ns) -> None:
        self._clock = clock
        self.packet_counter = 0
        self.last_packet_time = 0

    def collect_entropy(self) -> bytes:
        now = _now_ns(self._clock, "网络时间获取失败")
        self.packet_counter = (self.packet_counter + 1) & _MASK64
        delay = (now - self.last_packet_time) & _MASK64 if self.last_packet_time > 0 else 0
        self.last_packet_time = now
        return struct.pack(
            "<QQQHHH",
            self.packet_counter,
            delay,
            now,
            self.packet_counter % 1000,
            delay % 10000,
            now % 65536,
        )


class ProcessEntropy(EntropySource):
    """Entropy from the process id and a simulated memory-usage counter."""

    source_type = EntropySourceType.PROCESS
    quality = 0.6

    def __init__(self, clock: Clock = time.time_ns) -> None:
        self._clock = clock
        self.pid = os.getpid() & _MASK32
        self.thread_id = 0
        self.memory_usage = 0

    def collect_entropy(self) -> bytes:
        self.memory_usage = (self.memory_usage + 1) & _MASK64
        now = _now_ns(self._clock, "进程时间获取失败")
        return struct.pack(
            "<IQQQHHH",
            self.pid,
            self.thread_id,
            self.memory_usage,
            now,
            self.pid & 0xFFFF,
            self.thread_id % 65536,
            self.memory_usage % 65536,
        )


class MemoryEntropy(EntropySource):
    """Simulated memory access pattern over a fixed set of addresses."""

    source_type = EntropySourceType.MEMORY
    quality = 0.5
    _PATTERN_LIMIT = 16

    def __init__(self) -> None:
        self.memory_addresses = [0x1000, 0x2000, 0x3000, 0x4000]
        self.access_pattern: list[int] = []

    def collect_entropy(self) -> bytes:
        entropy = bytearray()
        for addr in self.memory_addresses:
            value = addr & _MASK64
            entropy += struct.pack("<QI", value, (value ^ 0xDEADBEEF) & _MASK32)
        self.access_pattern.append(len(entropy) % 256)
        if len(self.access_pattern) > self._PATTERN_LIMIT:
            del self.access_pattern[0]
        entropy += bytes(self.access_pattern)
        return bytes(entropy)


class EntropyCollector:
    """Gathers entropy from a list of sources, skipping those that fail."""

    def __init__(self) -> None:
        self.sources: list[EntropySource] = []

    def add_source(self, source: EntropySource) -> None:
        self.sources.append(source)

    def collect_all(self) -> bytes:
        total = bytearray()
        for source in self.sources:
            if not source.is_available():
                continue
            try:
                total += source.collect_entropy()
            except EntropyError as err:
                print(f"熵源 {source.name} 收集失败: {err}", file=sys.stderr)
        if not total:
            raise InsufficientEntropyError()
        return bytes(total)