"""Command-line demonstration of the external-entropy random number generator."""

from __future__ import annotations

import argparse
import math
from collections import Counter
from dataclasses import dataclass

from .errors import EntropyError
from .manager import EntropyManager
from .optimizer import chi_square, shannon_entropy
from .pool import EntropyQualityAssessor, PooledEntropy
from .sources import (
    HardwareEntropy,
    MemoryEntropy,
    NetworkEntropy,
    ProcessEntropy,
    SystemTimeEntropy,
)

_SEPARATOR = "=" * 50


@dataclass(frozen=True)
class DistributionReport:
    length: int
    mean: float
    std_dev: float
    entropy: float
    chi_square: float
    chi_square_verdict: str
    entropy_verdict: str
    most_common: tuple[int, int]
    least_common: tuple[int, int]

    def lines(self) -> list[str]:
        most_byte, most_count = self.most_common
        least_byte, least_count = self.least_common
        return [
            f"  数据长度: {self.length} 字节",
            f"  平均值: {self.mean:.2f}",
            f"  标准差: {self.std_dev:.2f}",
            f"  香农熵: {self.entropy:.3f} bits",
            f"  卡方统计量: {self.chi_square:.2f}",
            f"  卡方测试: {self.chi_square_verdict}",
            f"  熵质量: {self.entropy_verdict}",
            f"  最频繁值: 0x{most_byte:02X} (出现 {most_count} 次)",
            f"  最不频繁值: 0x{least_byte:02X} (出现 {least_count} 次)",
        ]


def analyze_distribution(data: bytes) -> DistributionReport:
    """Summarise the byte distribution of ``data``; it must not be empty."""
    if not data:
        raise ValueError("cannot analyse an empty sample")
    n = len(data)
    mean = sum(data) / n
    variance = sum((b - mean) ** 2 for b in data) / n
    chi = chi_square(data)
    entropy = shannon_entropy(data)

    counts = Counter(data)
    ordered = sorted(counts)
    max_count = max(counts.values())
    min_count = min(counts.values())
    most_byte = next(b for b in ordered if counts[b] == max_count)
    least_byte = next(b for b in ordered if counts[b] == min_count)

    if entropy > 7.5:
        entropy_verdict = "优秀"
    elif entropy > 7.0:
        entropy_verdict = "良好"
    else:
        entropy_verdict = "需要改进"

    return DistributionReport(
        length=n,
        mean=mean,
        std_dev=math.sqrt(variance),
        entropy=entropy,
        chi_square=chi,
        chi_square_verdict="优秀" if chi < 255.0 else "需要改进",
        entropy_verdict=entropy_verdict,
        most_common=(most_byte, max_count),
        least_common=(least_byte, min_count),
    )


def _hex_sample(data: bytes) -> list[str]:
    sample = data[:16]
    rows = [
        "  " + "".join(f"{b:02X} " for b in sample[i : i + 8])
        for i in range(0, len(sample), 8)
    ]
    if len(data) > 16:
        rows.append(f"  ... (还有 {len(data) - 16} 字节)")
    return rows


def _run() -> None:
    print("🎲 外部熵源随机数发生器演示")
    print(_SEPARATOR)

    manager = EntropyManager()
    initial = manager.entropy_stats()
    print("📊 初始熵源统计:")
    print(f"  熵源数量: {initial.source_count}")
    print(f"  池大小: {initial.pool_size} 字节")
    print(f"  分布质量: {initial.optimizer_stats.distribution_quality:.3f}")
    print(f"  量子强度: {initial.quantum_stats.post_quantum_strength:.3f}")
    print()

    print("🔄 收集和优化熵...")
    optimized = manager.collect_and_optimize()
    print(f"✅ 成功收集 {len(optimized)} 字节的优化熵")

    assessor = EntropyQualityAssessor()
    print(f"📈 熵质量评分: {assessor.assess_quality(optimized):.3f}")
    print()

    print("🎯 生成高质量随机数...")
    random_data = manager.generate_random(64)
    print(f"✅ 成功生成 {len(random_data)} 字节的随机数据")
    print("📋 随机数据样本 (前16字节):")
    for row in _hex_sample(random_data):
        print(row)
    print()

    print("🏊 演示池化熵系统...")
    pooled = PooledEntropy(1024)
    labelled_sources = [
        ("系统时间熵", SystemTimeEntropy()),
        ("硬件熵", HardwareEntropy()),
        ("网络熵", NetworkEntropy()),
        ("进程熵", ProcessEntropy()),
        ("内存熵", MemoryEntropy()),
    ]
    for label, source in labelled_sources:
        try:
            entropy = source.collect_entropy()
        except EntropyError:
            continue
        pooled.add_entropy_source(entropy)
        print(f"✅ 添加{label}: {len(entropy)} 字节")

    pool_stats = pooled.pool_stats()
    print("📊 池统计信息:")
    print(f"  当前大小: {pool_stats.current_size} 字节")
    print(f"  最大大小: {pool_stats.max_size} 字节")
    print(f"  最小大小: {pool_stats.min_size} 字节")
    print(f"  补充次数: {pool_stats.refill_count}")
    print()

    print("🎲 生成各种类型的随机数:")
    print(f"  随机字节: 0x{pooled.random_byte():02X}")
    print(f"  随机32位整数: {pooled.random_u32()}")
    print(f"  随机范围整数 (1-100): {pooled.random_range(1, 100)}")
    print(f"  随机字节数组: {list(pooled.random_bytes(8))}")
    print()

    print("📊 概率分布分析:")
    for line in analyze_distribution(random_data).lines():
        print(line)
    print()

    final = manager.entropy_stats()
    print("📈 最终统计信息:")
    print(f"  优化周期: {final.optimizer_stats.optimization_cycles}")
    print(f"  分布质量: {final.optimizer_stats.distribution_quality:.3f}")
    print(f"  熵密度: {final.optimizer_stats.entropy_density:.3f}")
    print(f"  量子强度: {final.quantum_stats.post_quantum_strength:.3f}")
    print(f"  处理时间: {final.quantum_stats.processing_time_ns} 纳秒")
    print(f"  熵放大: {final.quantum_stats.entropy_amplification:.3f}")
    print()

    print("🎉 外部熵源随机数发生器演示完成！")
    print("✨ 系统已成功优化概率空间分布，提供高质量的随机数生成能力")


def main(argv: list[str] | None = None) -> int:
    """Run the demonstration; returns a process exit status."""
    parser = argparse.ArgumentParser(
        prog="entropy-demo",
        description="外部熵源随机数发生器演示",
    )
    parser.parse_args(argv)
    try:
        _run()
    except EntropyError as err:
        print(f"错误: {err}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())