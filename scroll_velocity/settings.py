"""Estimator and gate settings.

Settings are persisted as a simple JSON file, by default in the user's home
directory. The location can be overridden with SCROLL_VELOCITY_SETTINGS.

Gate thresholds can also be derived from a recorded velocity trace, taking
percentiles of the observed speeds so that small jitters never toggle chrome.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable

import numpy as np

from scroll_velocity.tracking.clock import Clock
from scroll_velocity.tracking.gate import ChromeGate, GateConfig
from scroll_velocity.tracking.velocity import DEFAULT_ALPHA, InvalidConfiguration, VelocityEstimator

SETTINGS_ENV = "SCROLL_VELOCITY_SETTINGS"

DEFAULT_SETTINGS = {
    "alpha": DEFAULT_ALPHA,           # EMA smoothing factor, (0, 1]
    "include_out_of_range": False,    # keep estimating while overscrolled
    "hide_velocity": 600.0,           # px/s threshold to hide chrome
    "show_velocity": 300.0,           # px/s threshold to show chrome
    "cooldown_s": 0.25,               # seconds between chrome toggles
}

logger = logging.getLogger(__name__)


def settings_path() -> Path:
    """Get the path to the settings file."""
    override = os.environ.get(SETTINGS_ENV)
    if override:
        return Path(override)
    return Path.home() / ".scroll_velocity" / "settings.json"


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Load the settings from the file, falling back to defaults."""
    path = path if path is not None else settings_path()
    data = DEFAULT_SETTINGS.copy()

    if path.exists():
        with path.open("r", encoding="utf-8") as f:
            try:
                stored = json.load(f)
            except json.JSONDecodeError as e:
                msg = f"Settings file {path} is not valid JSON: {e}"
                raise InvalidConfiguration(msg) from e
        if not isinstance(stored, dict):
            msg = f"Settings file {path} must contain a JSON object"
            raise InvalidConfiguration(msg)
        data.update(stored)
        logger.info("Loaded velocity settings from %s", path)
    else:
        logger.info("No settings at %s, using defaults", path)

    return data


def save_settings(data: dict[str, Any], path: Path | None = None) -> Path:
    """Save the settings to the file."""
    path = path if path is not None else settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Saving velocity settings to %s", path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


@dataclass
class EstimatorSettings:
    """Validated settings for building an estimator and its gate."""

    alpha: float = DEFAULT_ALPHA
    include_out_of_range: bool = False
    hide_velocity: float = 600.0
    show_velocity: float = 300.0
    cooldown_s: float = 0.25

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EstimatorSettings:
        """Build settings from a loaded dict, ignoring unknown keys."""
        merged = {**DEFAULT_SETTINGS, **data}
        if not isinstance(merged["include_out_of_range"], bool):
            msg = f"include_out_of_range must be true or false, got {merged['include_out_of_range']!r}"
            raise InvalidConfiguration(msg)
        try:
            settings = cls(
                alpha=float(merged["alpha"]),
                include_out_of_range=merged["include_out_of_range"],
                hide_velocity=float(merged["hide_velocity"]),
                show_velocity=float(merged["show_velocity"]),
                cooldown_s=float(merged["cooldown_s"]),
            )
        except (TypeError, ValueError) as e:
            msg = f"Invalid settings value: {e}"
            raise InvalidConfiguration(msg) from e
        settings.gate_config().validate()
        if not 0.0 < settings.alpha <= 1.0:
            msg = f"alpha must be in (0, 1], got {settings.alpha}"
            raise InvalidConfiguration(msg)
        return settings

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def gate_config(self) -> GateConfig:
        return GateConfig(
            hide_velocity=self.hide_velocity,
            show_velocity=self.show_velocity,
            cooldown_s=self.cooldown_s,
        )

    def build_estimator(self, clock: Clock | None = None) -> VelocityEstimator:
        """Create a fresh estimator from these settings."""
        return VelocityEstimator(
            alpha=self.alpha,
            include_out_of_range=self.include_out_of_range,
            clock=clock,
        )

    def build_gate(self) -> ChromeGate:
        """Create a fresh chrome gate from these settings."""
        return ChromeGate(self.gate_config())


def derive_gate_thresholds(
    velocities: Iterable[float],
    hide_percentile: float = 80.0,
    show_percentile: float = 60.0,
) -> dict[str, float]:
    """Derive gate thresholds from a recorded velocity trace.

    Forward speeds (positive) set ``hide_velocity``; backward speeds set
    ``show_velocity``. A direction with no samples keeps its default.
    """
    v = np.asarray(list(velocities), dtype=np.float64)
    v = v[np.isfinite(v)]
    forward = v[v > 0]
    backward = -v[v < 0]

    hide = float(np.percentile(forward, hide_percentile)) if forward.size else DEFAULT_SETTINGS["hide_velocity"]
    show = float(np.percentile(backward, show_percentile)) if backward.size else DEFAULT_SETTINGS["show_velocity"]
    logger.info("Derived: hide_velocity=%.1f show_velocity=%.1f from %d samples", hide, show, v.size)
    return {"hide_velocity": hide, "show_velocity": show}
