from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Optional

import numpy as np
import typer

from scroll_velocity.notifier import (
    NotificationKind,
    ScrollMetrics,
    ScrollNotification,
    ScrollStreamNotification,
    ScrollVelocityNotifier,
    VelocityBroadcast,
)
from scroll_velocity.settings import EstimatorSettings, derive_gate_thresholds, load_settings, save_settings
from scroll_velocity.tracking import (
    InsufficientData,
    InvalidConfiguration,
    ManualClock,
    Value,
    VelocityEstimator,
    VelocityResult,
    Zero,
)

app = typer.Typer(help="Smoothed scroll velocity estimation tools")

logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def result_kind(result: VelocityResult) -> str:
    """Short label for a velocity result."""
    if isinstance(result, InsufficientData):
        return "insufficient_data"
    if isinstance(result, Zero):
        return "zero"
    return "value"


def _load_samples(path: Path) -> np.ndarray:
    """Load a samples CSV as an (N, 2) or (N, 4) float array.

    Columns: t_seconds, position[, min_extent, max_extent]. A header line is
    skipped when its first field is not a number.
    """
    with open(path, encoding="utf-8") as f:
        first = f.readline().split(",")[0].strip()
    try:
        float(first)
        skip = 0
    except ValueError:
        skip = 1
    data = np.loadtxt(path, delimiter=",", skiprows=skip, comments="#", ndmin=2, dtype=np.float64)
    if data.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if data.shape[1] not in (2, 4):
        raise typer.BadParameter(
            f"Expected 2 or 4 columns in {path.name}, got {data.shape[1]}"
        )
    if not np.all(np.isfinite(data[:, :2])):
        raise typer.BadParameter(f"Timestamps and positions in {path.name} must be finite")
    if np.any(np.diff(data[:, 0]) < 0):
        raise typer.BadParameter("Sample timestamps must be non-decreasing")
    return data


def _resolve_settings(alpha: float | None, include_out_of_range: bool | None) -> EstimatorSettings:
    """Saved settings with command line overrides applied."""
    overrides: dict[str, Any] = {}
    if alpha is not None:
        overrides["alpha"] = alpha
    if include_out_of_range is not None:
        overrides["include_out_of_range"] = include_out_of_range
    try:
        return EstimatorSettings.from_dict({**load_settings(), **overrides})
    except InvalidConfiguration as e:
        raise typer.BadParameter(str(e)) from e


def _replay_file(
    samples_path: Path,
    settings: EstimatorSettings,
    min_extent: float,
    max_extent: float,
) -> list[tuple[float, VelocityResult]]:
    samples = _load_samples(samples_path)
    start = float(samples[0, 0]) if samples.shape[0] else 0.0
    clock = ManualClock(start_us=round(start * 1_000_000))
    estimator = settings.build_estimator(clock=clock)
    return replay_samples(samples, estimator, clock, min_extent=min_extent, max_extent=max_extent)


def replay_samples(
    samples: np.ndarray,
    estimator: VelocityEstimator,
    clock: ManualClock,
    min_extent: float = -math.inf,
    max_extent: float = math.inf,
) -> list[tuple[float, VelocityResult]]:
    """Feed recorded samples through an estimator driven by ``clock``."""
    results: list[tuple[float, VelocityResult]] = []
    for row in samples:
        t, position = float(row[0]), float(row[1])
        lo, hi = (float(row[2]), float(row[3])) if row.shape[0] >= 4 else (min_extent, max_extent)
        clock.set_seconds(t)
        metrics = ScrollMetrics(pixels=position, min_scroll_extent=lo, max_scroll_extent=hi)
        results.append((t, estimator.observe(metrics.pixels, metrics.in_range)))
    return results


@app.command()
def replay(
    samples_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, resolve_path=True, help="CSV of t_seconds,position samples"
    ),
    alpha: Optional[float] = typer.Option(
        None, help="EMA smoothing factor in (0, 1]. Defaults to the saved settings."
    ),
    include_out_of_range: Optional[bool] = typer.Option(
        None,
        "--include-out-of-range/--ignore-out-of-range",
        help="Keep estimating while the position is outside its extent",
    ),
    min_extent: float = typer.Option(-math.inf, help="Lower bound when the CSV has no extent columns"),
    max_extent: float = typer.Option(math.inf, help="Upper bound when the CSV has no extent columns"),
    output: Optional[Path] = typer.Option(
        None, help="Write t_seconds,kind,velocity lines here instead of stdout"
    ),
):
    """Replay recorded position samples and print the smoothed velocities."""
    settings = _resolve_settings(alpha, include_out_of_range)
    results = _replay_file(samples_path, settings, min_extent, max_extent)
    lines = [f"{t:.6f},{result_kind(r)},{r.velocity:.6f}" for t, r in results]

    if output is None:
        for line in lines:
            typer.echo(line)
        return
    with open(output, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    typer.echo(f"Wrote {len(lines)} velocities to {output}")


@app.command()
def calibrate(
    samples_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, resolve_path=True, help="CSV of t_seconds,position samples"
    ),
    alpha: Optional[float] = typer.Option(
        None, help="EMA smoothing factor in (0, 1]. Defaults to the saved settings."
    ),
    include_out_of_range: Optional[bool] = typer.Option(
        None,
        "--include-out-of-range/--ignore-out-of-range",
        help="Keep estimating while the position is outside its extent",
    ),
    min_extent: float = typer.Option(-math.inf, help="Lower bound when the CSV has no extent columns"),
    max_extent: float = typer.Option(math.inf, help="Upper bound when the CSV has no extent columns"),
    hide_percentile: float = typer.Option(
        80.0, min=0.0, max=100.0, help="Percentile of forward speeds used as the hide threshold"
    ),
    show_percentile: float = typer.Option(
        60.0, min=0.0, max=100.0, help="Percentile of backward speeds used as the show threshold"
    ),
    save: bool = typer.Option(True, help="Save the derived thresholds to the settings file"),
):
    """Derive chrome gate thresholds from a recorded scroll trace."""
    settings = _resolve_settings(alpha, include_out_of_range)
    results = _replay_file(samples_path, settings, min_extent, max_extent)
    velocities = [r.velocity for _, r in results if isinstance(r, Value)]
    if not velocities:
        raise typer.BadParameter(f"No velocity estimates in {samples_path.name}; need at least two accepted samples")

    derived = derive_gate_thresholds(
        velocities, hide_percentile=hide_percentile, show_percentile=show_percentile
    )
    data = {**settings.to_dict(), **derived}
    try:
        calibrated = EstimatorSettings.from_dict(data)
    except InvalidConfiguration as e:
        raise typer.BadParameter(str(e)) from e

    gate = calibrated.build_gate()
    toggles = 0
    for t, r in results:
        if gate.update(r, t) is not None:
            toggles += 1

    typer.echo(
        f"hide_velocity={calibrated.hide_velocity:.1f} show_velocity={calibrated.show_velocity:.1f} "
        f"from {len(velocities)} estimates; chrome would toggle {toggles} times"
    )
    if save:
        path = save_settings(calibrated.to_dict())
        typer.echo(f"Saved settings to {path}")


def fling_positions(steps: int, dt: float, extent: float) -> np.ndarray:
    """Positions of a fling that overshoots ``extent`` and settles back."""
    duration = max(dt, steps * dt)
    t = np.arange(steps, dtype=np.float64) * dt
    return extent * (1.0 - np.exp(-4.0 * t / duration)) * (1.0 + 0.25 * np.sin(np.pi * t / duration))


@app.command()
def simulate(
    alpha: float = typer.Option(0.15, min=0.0, max=1.0, help="EMA smoothing factor in (0, 1]"),
    include_overscroll: bool = typer.Option(
        False, help="Keep estimating while the fling is past the end"
    ),
    steps: int = typer.Option(60, min=2, help="Number of scroll updates"),
    dt: float = typer.Option(1 / 60, min=0.0, help="Seconds between updates"),
    extent: float = typer.Option(2000.0, min=1.0, help="Maximum scroll extent in pixels"),
):
    """Simulate an overscrolling fling through a notifier with a callback and a broadcast."""
    if not math.isfinite(dt) or dt <= 0:
        raise typer.BadParameter(f"dt must be a positive number of seconds, got {dt}")
    clock = ManualClock()
    controller: VelocityBroadcast[ScrollStreamNotification] = VelocityBroadcast()
    received: list[ScrollStreamNotification] = []
    subscription = controller.listen(received.append)

    def on_notification(notification: ScrollNotification, velocity: float) -> bool:
        typer.echo(f"{notification.kind.value:>8} pixels={notification.metrics.pixels:9.2f} velocity={velocity:10.2f} px/s")
        return False

    try:
        notifier = ScrollVelocityNotifier(
            on_notification=on_notification,
            include_overscroll=include_overscroll,
            controller=controller,
            alpha=alpha,
            clock=clock,
        )
    except InvalidConfiguration as e:
        raise typer.BadParameter(str(e)) from e

    positions = fling_positions(steps, dt, extent)
    kinds = [NotificationKind.START] + [NotificationKind.UPDATE] * steps + [NotificationKind.END]
    pixels = [float(positions[0])] + [float(p) for p in positions] + [float(positions[-1])]

    try:
        for i, (kind, px) in enumerate(zip(kinds, pixels)):
            if kind is NotificationKind.UPDATE and i > 1:
                clock.advance(dt)
            metrics = ScrollMetrics(pixels=px, min_scroll_extent=0.0, max_scroll_extent=extent)
            notifier.on_notification(ScrollNotification(kind=kind, metrics=metrics, context=i))
    finally:
        subscription.cancel()
        controller.close()

    typer.echo(f"Broadcast delivered {len(received)} events")


if __name__ == "__main__":
    app()
