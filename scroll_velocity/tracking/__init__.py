"""Velocity tracking: clocks, the EMA estimator and velocity gates."""
from scroll_velocity.tracking.clock import ManualClock, Stopwatch
from scroll_velocity.tracking.gate import ChromeGate, GateConfig
from scroll_velocity.tracking.velocity import (
    INSUFFICIENT_DATA,
    ZERO,
    InsufficientData,
    InvalidConfiguration,
    Value,
    VelocityEstimator,
    VelocityResult,
    Zero,
)

__all__ = [
    "INSUFFICIENT_DATA",
    "ZERO",
    "ChromeGate",
    "GateConfig",
    "InsufficientData",
    "InvalidConfiguration",
    "ManualClock",
    "Stopwatch",
    "Value",
    "VelocityEstimator",
    "VelocityResult",
    "Zero",
]
