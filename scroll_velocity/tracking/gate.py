"""Chrome visibility gate driven by smoothed scroll velocity."""
from __future__ import annotations

from dataclasses import dataclass

from scroll_velocity.tracking.velocity import InvalidConfiguration, Value, VelocityResult


@dataclass
class GateConfig:
    """Gate configuration."""

    hide_velocity: float = 600.0  # px/s toward increasing offset
    show_velocity: float = 300.0  # px/s toward decreasing offset
    cooldown_s: float = 0.25      # minimum time between toggles

    def validate(self) -> None:
        """Check that thresholds and cooldown are non-negative."""
        for name in ("hide_velocity", "show_velocity", "cooldown_s"):
            value = getattr(self, name)
            if value < 0:
                msg = f"{name} must be >= 0, got {value}"
                raise InvalidConfiguration(msg)


class ChromeGate:
    """Decide when to hide or show chrome (toolbars, headers) while scrolling."""

    def __init__(self, cfg: GateConfig | None = None) -> None:
        """Initialize the gate. Chrome starts visible."""
        self.cfg = cfg if cfg is not None else GateConfig()
        self.cfg.validate()
        self.visible = True
        self._last_toggle_s: float | None = None

    def update(self, result: VelocityResult, now_s: float) -> bool | None:
        """Return the new visibility if it changed on this result, else None.

        Only real estimates can toggle; markers for missing data or ignored
        overscroll samples leave the gate alone.
        """
        if not isinstance(result, Value):
            return None
        if self._last_toggle_s is not None and (now_s - self._last_toggle_s) < self.cfg.cooldown_s:
            return None

        v = result.velocity
        if self.visible and v > self.cfg.hide_velocity:
            self.visible = False
        elif not self.visible and v < -self.cfg.show_velocity:
            self.visible = True
        else:
            return None
        self._last_toggle_s = now_s
        return self.visible
