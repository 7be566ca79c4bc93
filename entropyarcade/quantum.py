"""Post-quantum flavoured entropy processing and generation."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from functools import reduce
from operator import xor

from .optimizer import shannon_entropy

_MASK64 = (1 << 64) - 1
_GOLDEN = 0x9E3779B9


def _rotl64(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _chunks(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


def _padded(chunk: bytes, size: int) -> bytes:
    return chunk + bytes(size - len(chunk))


@dataclass(frozen=True)
class QuantumStats:
    post_quantum_strength: float
    processing_time_ns: int
    entropy_amplification: float


class QuantumResistantRNG:
    """Runs entropy through a fixed chain of mixing, hashing and polynomial transforms."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            now = time.time_ns()
            seed = now if now >= 0 else 0
        seed &= _MASK64
        self.state = (
            seed,
            (seed * 0x9E3779B9) & _MASK64,
            (seed * 0x85EBCA6B) & _MASK64,
            (seed * 0xC2B2AE35) & _MASK64,
        )
        self.counter = 0
        self.processing_time_ns = 0
        self.entropy_amplification = 1.0

    def process_entropy(self, entropy: bytes) -> bytes:
        start = time.perf_counter_ns()
        data = self._quantum_state_mixing(bytes(entropy))
        data = b"".join(self._sphincs_hash(c) for c in _chunks(data, 32))
        data = b"".join(self._ntru_transform(c) for c in _chunks(data, 16))
        data = b"".join(self._rainbow_transform(c) for c in _chunks(data, 8))
        data = b"".join(self._bgv_transform(c) for c in _chunks(data, 4))
        self.processing_time_ns = max(time.perf_counter_ns() - start, 0)
        self.entropy_amplification = shannon_entropy(data) / 8.0
        return data

    def _quantum_state_mixing(self, entropy: bytes) -> bytes:
        mixed = bytearray(self._quantum_state(b, i) for i, b in enumerate(entropy))
        n = len(mixed)
        if n < 2:
            return bytes(mixed)
        for i in range(0, n - 1, 2):
            value = mixed[i] ^ mixed[i + 1]
            mixed[i] = mixed[i + 1] = value
        if n >= 4:
            overall = reduce(xor, mixed, 0)
            mixed = bytearray(b ^ overall for b in mixed)
        return bytes(mixed)

    def _quantum_state(self, value: int, position: int) -> int:
        state = value
        for _ in range(8):
            if self._coin_flip(state, position):
                state = (state * 3 + 1) & _MASK64
            else:
                state >>= 1
        return state & 0xFF

    def _coin_flip(self, state: int, position: int) -> bool:
        bit = bin((state ^ position ^ self.counter) & _MASK64).count("1") % 2
        self.counter = (self.counter + 1) & _MASK64
        return bit == 1

    def _sphincs_hash(self, chunk: bytes) -> bytes:
        state = list(self.state)
        for i, byte in enumerate(chunk):
            idx = i % 4
            value = ((state[idx] + byte) * _GOLDEN) & _MASK64
            state[idx] = _rotl64(value, 13)
        return b"".join(word.to_bytes(8, "little") for word in state)

    @staticmethod
    def _ntru_transform(chunk: bytes) -> bytes:
        coeffs = _padded(chunk, 16)
        return bytes(
            reduce(xor, (((c * ((i * j) % 16)) & 0xFF) for j, c in enumerate(coeffs)), 0)
            for i in range(16)
        )

    @staticmethod
    def _rainbow_transform(chunk: bytes) -> bytes:
        coeffs = _padded(chunk, 8)
        total = 0
        for j in range(8):
            for k in range(j, 8):
                total ^= (coeffs[j] * coeffs[k]) & 0xFF
        return bytes([total] * 8)

    @staticmethod
    def _bgv_transform(chunk: bytes) -> bytes:
        plain = _padded(chunk, 4)
        return bytes(
            reduce(xor, (((p + i * j) & 0xFF) for j, p in enumerate(plain)), 0)
            for i in range(4)
        )

    def stats(self) -> QuantumStats:
        return QuantumStats(
            post_quantum_strength=self.entropy_amplification,
            processing_time_ns=self.processing_time_ns,
            entropy_amplification=self.entropy_amplification,
        )


@dataclass(frozen=True)
class _QuantumState:
    amplitude_real: float
    amplitude_imag: float
    phase: float

    def to_byte(self) -> int:
        probability = self.amplitude_real**2 + self.amplitude_imag**2
        scaled = probability * 255.0
        if math.isnan(scaled):
            return 0
        return min(max(int(scaled), 0), 255)


def _saturating_byte(value: float) -> int:
    if math.isnan(value):
        return 0
    return min(max(int(value), 0), 255)


class PostQuantumEntropy:
    """Deterministic byte stream from simulated quantum amplitudes and entanglement."""

    def generate_entropy(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("size must not be negative")
        data = [self._create_state(i).to_byte() for i in range(size)]
        return bytes(self._entangle(data))

    @staticmethod
    def _create_state(index: int) -> _QuantumState:
        angle = index * 0.618033988749
        return _QuantumState(
            amplitude_real=math.sin(angle),
            amplitude_imag=math.cos(angle),
            phase=index * 0.314159265359,
        )

    @staticmethod
    def _entangle(data: list[int]) -> list[int]:
        n = len(data)
        if n < 2:
            return data
        weights = {d: (math.sin(d * 0.1) if d else 1.0) for d in range(-(n - 1), n)}
        return [
            _saturating_byte(abs(sum(v * weights[i - j] for j, v in enumerate(data)))) % 255
            for i in range(n)
        ]