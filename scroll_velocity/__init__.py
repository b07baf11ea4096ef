"""Smoothed velocity estimation for scroll-like position signals."""
from scroll_velocity.notifier import (
    NotificationKind,
    ScrollMetrics,
    ScrollNotification,
    ScrollStreamNotification,
    ScrollVelocityNotifier,
    VelocityBroadcast,
)
from scroll_velocity.tracking import (
    INSUFFICIENT_DATA,
    ZERO,
    ChromeGate,
    GateConfig,
    InsufficientData,
    InvalidConfiguration,
    ManualClock,
    Stopwatch,
    Value,
    VelocityEstimator,
    VelocityResult,
    Zero,
)

__version__ = "0.1.0"

__all__ = [
    "INSUFFICIENT_DATA",
    "ZERO",
    "ChromeGate",
    "GateConfig",
    "InsufficientData",
    "InvalidConfiguration",
    "ManualClock",
    "NotificationKind",
    "ScrollMetrics",
    "ScrollNotification",
    "ScrollStreamNotification",
    "ScrollVelocityNotifier",
    "Stopwatch",
    "Value",
    "VelocityBroadcast",
    "VelocityEstimator",
    "VelocityResult",
    "Zero",
]
