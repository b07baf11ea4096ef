"""Glue between scroll sources, the velocity estimator and result sinks."""
from scroll_velocity.notifier.broadcast import Subscription, VelocityBroadcast
from scroll_velocity.notifier.listener import ScrollVelocityNotifier, VelocityListenerCallback
from scroll_velocity.notifier.metrics import (
    NotificationKind,
    ScrollMetrics,
    ScrollNotification,
    ScrollStreamNotification,
)

__all__ = [
    "NotificationKind",
    "ScrollMetrics",
    "ScrollNotification",
    "ScrollStreamNotification",
    "ScrollVelocityNotifier",
    "Subscription",
    "VelocityBroadcast",
    "VelocityListenerCallback",
]
