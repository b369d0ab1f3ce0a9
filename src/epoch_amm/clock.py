from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from .core.constants import EPOCH_DURATION
from .core.datatypes import EpochTransition


class TimeSource(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall-clock seconds (floored)."""

    def now(self) -> int:
        return int(time.time())


@dataclass
class ManualClock:
    """Controllable time source for tests and scenario replay.

    Time only moves forward; `advance()` and `set()` reject going backwards so
    the epoch derived from it can never decrease.
    """

    timestamp: int = 0

    def now(self) -> int:
        return self.timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self.timestamp += seconds
        return self.timestamp

    def set(self, timestamp: int) -> int:
        if timestamp < self.timestamp:
            raise ValueError(f"ManualClock cannot move backwards: {timestamp} < {self.timestamp}")
        self.timestamp = timestamp
        return self.timestamp


@dataclass
class EpochClock:
    """
    Derive epoch indices from a time source and a fixed epoch length.

    Semantics:
      - epoch(now) = (now - epoch_start) // epoch_duration, 0 before epoch_start.
      - The clock itself holds no pool state; pools keep their own
        `current_epoch` and ask `observe()` for the epoch implied by now.
    """

    epoch_duration: int = EPOCH_DURATION
    epoch_start: int = 0
    source: TimeSource = field(default_factory=SystemClock)

    def __post_init__(self) -> None:
        if self.epoch_duration <= 0:
            raise ValueError("epoch_duration must be > 0")
        if self.epoch_start < 0:
            raise ValueError("epoch_start must be >= 0")

    def now(self) -> int:
        return self.source.now()

    def epoch_at(self, timestamp: int) -> int:
        if timestamp <= self.epoch_start:
            return 0
        return (timestamp - self.epoch_start) // self.epoch_duration

    def observe(self) -> int:
        """Epoch implied by the time source right now."""
        return self.epoch_at(self.now())

    def next_boundary(self, timestamp: Optional[int] = None) -> int:
        """Timestamp at which the epoch after `timestamp` begins."""
        ts = self.now() if timestamp is None else timestamp
        return self.epoch_start + (self.epoch_at(ts) + 1) * self.epoch_duration


def epoch_transition(observed_epoch: int, current_epoch: int) -> Optional[EpochTransition]:
    """Pure epoch-advance check.

    Returns the single transition to apply, or None when the observed epoch is
    not ahead of the pool. However many epochs elapsed, exactly one transition
    (current -> observed) is produced.
    """
    if observed_epoch > current_epoch:
        return EpochTransition(previous=current_epoch, new=observed_epoch)
    return None


__all__ = ["TimeSource", "SystemClock", "ManualClock", "EpochClock", "epoch_transition"]
