"""
simulation.py

High-level simulation scripts for the slit interference model.

This module defines HOW simulations are run:
- assembling parameters
- sampling the screen / the plane
- returning raw results

No closed-form physics, no plotting.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time as _time

import numpy as np
from tqdm import tqdm

from config import SimulationConfig, default_simulation_config, validate_config
from far_field import far_field_profile, profile_half_range
from near_field import near_field_grid, scene_from_config, time_phase
from parameters import (
    SimulationMode,
    WaveParams,
    default_wave_params,
    make_wave_params,
)


logger = logging.getLogger("slits.simulation")


@dataclass(frozen=True)
class FieldFrame:
    """
    One near-field snapshot.
    """

    xs: np.ndarray        # [px] column coordinates
    ys: np.ndarray        # [px] row coordinates
    field: np.ndarray     # signed amplitude, shape (ny, nx)
    phase: float          # omega*t of this frame


def _check_finite(arr: np.ndarray, *, what: str) -> None:
    if not np.all(np.isfinite(arr)):
        raise FloatingPointError(f"NaN or Inf detected in {what}")


# ---------------------------------------------------------------------
# Far-field profile
# ---------------------------------------------------------------------

def run_intensity_profile(
    cfg: SimulationConfig,
    params: WaveParams,
    mode: SimulationMode | str,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Sample the far-field intensity across the screen.

    Parameters
    ----------
    cfg : SimulationConfig
        Sampling configuration (n_points, range_scale).
    params : WaveParams
        Physical parameters.
    mode : SimulationMode or str
        Slit arrangement.

    Returns
    -------
    x : np.ndarray
        Screen positions [m], symmetric about 0.
    I : np.ndarray
        Intensity scaled by params.intensity.
    """

    validate_config(cfg)
    mode = SimulationMode.parse(mode)

    x_max = profile_half_range(params, cfg.range_scale)
    x = np.linspace(-x_max, x_max, cfg.n_points)

    I = params.intensity * far_field_profile(x, params, mode)

    if cfg.check_nan:
        _check_finite(I, what="intensity profile")

    log = logger.info if cfg.verbose else logger.debug
    log("profile %s: %d points on [%.4g, %.4g] m", mode.value, x.size, -x_max, x_max)
    return x, I


# ---------------------------------------------------------------------
# Near-field frames
# ---------------------------------------------------------------------

def run_field_frame(
    cfg: SimulationConfig,
    params: WaveParams,
    mode: SimulationMode | str,
    *,
    elapsed_ms: float = 0.0,
) -> FieldFrame:
    """
    Evaluate the near-field amplitude on the coarse grid at one instant.
    """

    validate_config(cfg)
    scene = scene_from_config(cfg)
    phase = time_phase(elapsed_ms)

    xs, ys, field = near_field_grid(scene, params, mode, phase, stride=cfg.grid_stride)

    if cfg.check_nan:
        _check_finite(field, what="near field")

    return FieldFrame(xs=xs, ys=ys, field=field, phase=phase)


def run_field_animation(
    cfg: SimulationConfig,
    params: WaveParams,
    mode: SimulationMode | str,
    *,
    progress: bool = True,
) -> list[FieldFrame]:
    """
    Evaluate cfg.n_frames consecutive frames at cfg.frame_rate.

    Returns
    -------
    list[FieldFrame]
        Frames in time order.
    """

    validate_config(cfg)
    dt_ms = 1000.0 / cfg.frame_rate

    frames: list[FieldFrame] = []
    t0 = _time.perf_counter()

    bar = tqdm(
        range(cfg.n_frames),
        total=cfg.n_frames,
        desc="Rendering frames",
        unit="frame",
        dynamic_ncols=True,
        leave=False,
        disable=not progress,
    )
    for i in bar:
        frames.append(run_field_frame(cfg, params, mode, elapsed_ms=i * dt_ms))

    elapsed = _time.perf_counter() - t0
    logger.info(
        "rendered %d frames in %.3f s (%.1f frame/s)",
        cfg.n_frames, elapsed, cfg.n_frames / elapsed if elapsed > 0 else float("inf"),
    )
    return frames


# ---------------------------------------------------------------------
# Example simulations
# ---------------------------------------------------------------------

def example_single_slit() -> tuple[np.ndarray, np.ndarray]:
    """
    Example 1:
    Single 10 µm slit, green light, on-axis source.

    First envelope zero sits near lambda*L/a = 5 cm.
    """

    cfg = default_simulation_config()
    params = default_wave_params(SimulationMode.SINGLE)
    return run_intensity_profile(cfg, params, SimulationMode.SINGLE)


def example_double_slit() -> tuple[np.ndarray, np.ndarray]:
    """
    Example 2:
    Two 2 µm slits 10 µm apart. Fringe spacing near lambda*L/d = 5 cm.
    """

    cfg = default_simulation_config()
    params = default_wave_params(SimulationMode.DOUBLE)
    return run_intensity_profile(cfg, params, SimulationMode.DOUBLE)


def example_off_axis_grating() -> tuple[np.ndarray, np.ndarray]:
    """
    Example 3:
    Five-slit grating with the source raised 5 µm above the axis.
    The whole pattern is shifted by L*tan(theta_in).
    """

    cfg = default_simulation_config()
    params = make_wave_params(
        SimulationMode.GRATING,
        wavelength=500.0,
        slit_width=2.0,
        slit_separation=10.0,
        slit_count=5,
        distance_to_screen=1.0,
        source_position=(-20.0, 5.0),
    )
    return run_intensity_profile(cfg, params, SimulationMode.GRATING)


def example_double_slit_frame() -> FieldFrame:
    """
    Example 4:
    One near-field frame of the double slit with the default scene.
    """

    cfg = default_simulation_config()
    params = default_wave_params(SimulationMode.DOUBLE)
    return run_field_frame(cfg, params, SimulationMode.DOUBLE)
