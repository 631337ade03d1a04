from typing import Protocol

import numpy as np

from config import QUALITY_SIGNAL_MIN, QUALITY_SIGNAL_MAX


class QualitySignalProvider(Protocol):
    """Per-frame texture/consistency estimate in [0, 1].

    Stand-in slot for a real anti-spoofing analyzer; the aggregator only sees
    the number it returns.
    """

    def measure(self, observation) -> float: ...


class RandomQualitySignal:
    """Uniform draw in [low, high). Simulates texture analysis, offers no protection."""

    def __init__(self, low: float = QUALITY_SIGNAL_MIN, high: float = QUALITY_SIGNAL_MAX, seed: int | None = None):
        if not 0.0 <= low <= high <= 1.0:
            raise ValueError(f"quality range must satisfy 0 <= low <= high <= 1, got {low}..{high}")
        self.low = low
        self.high = high
        self._rng = np.random.default_rng(seed)

    def measure(self, observation) -> float:
        return float(self._rng.uniform(self.low, self.high))


class ConstantQualitySignal:
    def __init__(self, value: float = 1.0):
        self.value = value

    def measure(self, observation) -> float:
        return self.value


def clamp_unit(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)
