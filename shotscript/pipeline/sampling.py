import math
from abc import ABC, abstractmethod
from shotscript.config import SamplingConfig

MIN_INTERVAL_SECONDS = 2


def plan_interval(duration: float, target_frame_count: int, min_interval: int = MIN_INTERVAL_SECONDS) -> int:
    """
    Seconds between sampled frames so that roughly ``target_frame_count``
    frames cover ``duration``, never denser than one every ``min_interval``.
    """
    if target_frame_count <= 0:
        raise ValueError(f"target_frame_count must be positive, got {target_frame_count}")
    if duration <= 0:
        return min_interval
    return max(min_interval, math.ceil(duration / target_frame_count))


class SamplingStrategy(ABC):
    """Abstract base class for frame sampling policies."""

    @abstractmethod
    def interval_for(self, duration: float) -> float:
        """Return the frame interval in seconds for a video of ``duration``."""
        pass


class ProportionalSampling(SamplingStrategy):
    """Spread a fixed frame budget over the whole video."""

    def __init__(self, target_frame_count: int = 20, min_interval: int = MIN_INTERVAL_SECONDS):
        if target_frame_count <= 0:
            raise ValueError(f"target_frame_count must be positive, got {target_frame_count}")
        self.target_frame_count = target_frame_count
        self.min_interval = min_interval

    def interval_for(self, duration: float) -> float:
        return plan_interval(duration, self.target_frame_count, self.min_interval)

    def __repr__(self):
        return f"ProportionalSampling(target_frame_count={self.target_frame_count}, min_interval={self.min_interval})"


class FixedIntervalSampling(SamplingStrategy):
    """One frame every ``interval`` seconds regardless of duration."""

    def __init__(self, interval: float):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval

    def interval_for(self, duration: float) -> float:
        return self.interval

    def __repr__(self):
        return f"FixedIntervalSampling(interval={self.interval})"


def build_sampling_strategy(config: SamplingConfig) -> SamplingStrategy:
    if config.fixed_interval is not None:
        return FixedIntervalSampling(config.fixed_interval)
    return ProportionalSampling(config.target_frame_count, config.min_interval)
