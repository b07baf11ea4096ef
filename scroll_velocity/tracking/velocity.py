"""Smoothed velocity estimation for a scalar position signal.

Samples arrive as (position, in_range) pairs and are timestamped with the
estimator's own monotonic clock. Successive accepted samples give a raw rate
of change which is folded into an exponential moving average:

    smoothed = smoothed * (1 - alpha) + raw * alpha

Each call to ``observe`` returns one VelocityResult:
- INSUFFICIENT_DATA: no estimate yet (first accepted sample)
- ZERO: sample ignored by the out-of-range policy
- Value(v): smoothed velocity in position units per second
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Union

from scroll_velocity.tracking.clock import MICROS_PER_SECOND, Clock, Stopwatch

DEFAULT_ALPHA = 0.15


class InvalidConfiguration(ValueError):
    """Raised when an estimator or gate is built with unusable parameters."""


@dataclass(frozen=True)
class InsufficientData:
    """No velocity estimate yet."""

    @property
    def velocity(self) -> float:
        return 0.0


@dataclass(frozen=True)
class Zero:
    """Sample ignored because it was out of range."""

    @property
    def velocity(self) -> float:
        return 0.0


@dataclass(frozen=True)
class Value:
    """A smoothed velocity estimate. Positive means increasing position."""

    velocity: float


INSUFFICIENT_DATA = InsufficientData()
ZERO = Zero()

VelocityResult = Union[InsufficientData, Zero, Value]


class VelocityEstimator:
    """EMA velocity filter over timestamped position samples.

    Not safe for concurrent use: call ``observe`` from one source of samples.
    """

    def __init__(
        self,
        alpha: float = DEFAULT_ALPHA,
        include_out_of_range: bool = False,  # noqa: FBT001, FBT002
        clock: Clock | None = None,
    ) -> None:
        """Initialize the estimator."""
        if isinstance(alpha, bool) or not isinstance(alpha, numbers.Real):
            msg = f"alpha must be a real number, got {alpha!r}"
            raise InvalidConfiguration(msg)
        if not math.isfinite(alpha) or not 0.0 < alpha <= 1.0:
            msg = f"alpha must be in (0, 1], got {alpha}"
            raise InvalidConfiguration(msg)
        self._alpha = float(alpha)
        self._include_out_of_range = bool(include_out_of_range)
        self._clock: Clock = clock if clock is not None else Stopwatch()

        self._last_us: int | None = None
        self._last_position: float | None = None
        # 0.0 doubles as "no fold yet" when seeding the average
        self._smoothed = 0.0
        self._folded = False

    @classmethod
    def create(
        cls,
        alpha: float = DEFAULT_ALPHA,
        include_out_of_range: bool = False,  # noqa: FBT001, FBT002
        clock: Clock | None = None,
    ) -> VelocityEstimator:
        """Build an estimator, validating its configuration."""
        return cls(alpha=alpha, include_out_of_range=include_out_of_range, clock=clock)

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def include_out_of_range(self) -> bool:
        return self._include_out_of_range

    @property
    def smoothed_velocity(self) -> float:
        return self._smoothed

    @property
    def has_sample(self) -> bool:
        return self._last_us is not None

    def observe(self, position: float, in_range: bool) -> VelocityResult:  # noqa: FBT001
        """Fold one position sample into the estimate and return the result."""
        now_us = self._clock()

        if not self._include_out_of_range and not in_range:
            return ZERO

        if self._last_us is None or self._last_position is None:
            self._last_us = now_us
            self._last_position = float(position)
            return INSUFFICIENT_DATA

        elapsed = (now_us - self._last_us) / MICROS_PER_SECOND
        if elapsed <= 0:
            # Duplicate or non-advancing timestamp: keep the previous estimate
            return self._current()

        raw = (float(position) - self._last_position) / elapsed
        if self._smoothed == 0:
            self._smoothed = raw
        else:
            self._smoothed = self._smoothed * (1 - self._alpha) + raw * self._alpha

        self._folded = True
        self._last_us = now_us
        self._last_position = float(position)
        return Value(self._smoothed)

    def _current(self) -> VelocityResult:
        if not self._folded:
            return INSUFFICIENT_DATA
        return Value(self._smoothed)
