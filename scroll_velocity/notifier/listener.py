"""Sample source that turns scroll notifications into velocity callbacks."""
from __future__ import annotations

import logging
from typing import Callable

from scroll_velocity.notifier.broadcast import VelocityBroadcast
from scroll_velocity.notifier.metrics import (
    NotificationKind,
    ScrollNotification,
    ScrollStreamNotification,
)
from scroll_velocity.tracking.clock import Clock
from scroll_velocity.tracking.velocity import (
    DEFAULT_ALPHA,
    ZERO,
    VelocityEstimator,
    VelocityResult,
)

logger = logging.getLogger(__name__)

VelocityListenerCallback = Callable[[ScrollNotification, float], bool]


class ScrollVelocityNotifier:
    """Feeds scroll notifications through a VelocityEstimator and fans out the result.

    Each received notification is forwarded, together with its velocity in
    pixels per second, to an optional callback and to an optional broadcast
    controller. Only UPDATE notifications reach the estimator; every other
    kind reports a velocity of 0.

    The controller is not closed by the notifier. Whoever created it owns it.
    """

    def __init__(  # noqa: PLR0913
        self,
        on_notification: VelocityListenerCallback | None = None,
        include_overscroll: bool = False,  # noqa: FBT001, FBT002
        controller: VelocityBroadcast[ScrollStreamNotification] | None = None,
        alpha: float = DEFAULT_ALPHA,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the notifier."""
        self.on_notification_callback = on_notification
        self.controller = controller
        self.estimator = VelocityEstimator(
            alpha=alpha,
            include_out_of_range=include_overscroll,
            clock=clock,
        )
        self._latest: VelocityResult = ZERO

    @property
    def include_overscroll(self) -> bool:
        return self.estimator.include_out_of_range

    @property
    def latest(self) -> VelocityResult:
        return self._latest

    def calculate_velocity(self, notification: ScrollNotification) -> VelocityResult:
        """Run one UPDATE notification through the estimator."""
        metrics = notification.metrics
        return self.estimator.observe(metrics.pixels, metrics.in_range)

    def on_notification(self, notification: ScrollNotification) -> bool:
        """Handle a notification. Returns True to stop it from bubbling further."""
        result: VelocityResult = ZERO
        if notification.kind is NotificationKind.UPDATE:
            result = self.calculate_velocity(notification)
        self._latest = result
        velocity = result.velocity

        if self.controller is not None:
            if self.controller.closed:
                logger.warning("Velocity controller is closed; dropping %s", notification.kind.value)
            else:
                self.controller.add(
                    ScrollStreamNotification(notification=notification, velocity=velocity, result=result),
                )

        if self.on_notification_callback is None:
            return False
        return bool(self.on_notification_callback(notification, velocity))
