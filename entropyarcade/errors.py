"""Errors raised by the entropy subsystem."""


class EntropyError(Exception):
    """Base class for every failure of an entropy source or processing stage."""

    label = "熵错误"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{self.label}: {detail}" if detail else self.label)


class SourceUnavailableError(EntropyError):
    """An entropy source could not deliver data."""

    label = "熵源不可用"


class InsufficientEntropyError(EntropyError):
    """Not enough entropy was gathered to satisfy a request."""

    label = "熵不足"

    def __init__(self) -> None:
        super().__init__()


class DistributionError(EntropyError):
    """The optimised distribution did not reach the required quality."""

    label = "分布错误"


class QuantumProcessingError(EntropyError):
    """The post-quantum processing stage failed."""

    label = "量子处理错误"