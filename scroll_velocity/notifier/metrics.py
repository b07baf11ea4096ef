"""Scroll notification value types passed between sample sources and sinks."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from scroll_velocity.tracking.velocity import VelocityResult


class NotificationKind(enum.Enum):
    """Kind of scroll notification."""

    START = "start"
    UPDATE = "update"
    OVERSCROLL = "overscroll"
    END = "end"


@dataclass(frozen=True)
class ScrollMetrics:
    """Scroll offset and the nominal (non-overscrolled) extent."""

    pixels: float
    min_scroll_extent: float = 0.0
    max_scroll_extent: float = float("inf")

    @property
    def in_range(self) -> bool:
        """Whether the offset lies inside [min_scroll_extent, max_scroll_extent]."""
        return self.min_scroll_extent <= self.pixels <= self.max_scroll_extent


@dataclass(frozen=True)
class ScrollNotification:
    """One scroll event. ``context`` carries whatever the source wants to attach."""

    kind: NotificationKind
    metrics: ScrollMetrics
    context: Any = None


@dataclass(frozen=True)
class ScrollStreamNotification:
    """Event pushed to broadcast subscribers."""

    notification: ScrollNotification
    velocity: float
    result: VelocityResult
