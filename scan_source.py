"""
scan_source.py
scan the vertical source offset and track the central maximum on the screen
"""

from __future__ import annotations

from dataclasses import replace
import time

import numpy as np
from tqdm import tqdm  # pip install tqdm

from config import SimulationConfig, custom_simulation_config, validate_config
from far_field import central_maximum_position, profile_half_range
from parameters import SimulationMode, WaveParams, default_wave_params, make_source_position
from plotting import plot_intensity_profile, plot_source_scan
from simulation import run_intensity_profile


def _peak_position(x: np.ndarray, I: np.ndarray, x_expected: float) -> float:
    """
    Screen position of the largest sample, ties broken toward x_expected.

    Multi-slit profiles have several equal principal maxima; the one closest
    to the zero path difference point is the central one.
    """
    if x.ndim != 1 or I.shape != x.shape:
        raise ValueError("x and I must be 1D arrays of equal length")
    peak = np.max(I)
    candidates = np.flatnonzero(I >= peak * (1.0 - 1e-9))
    best = candidates[np.argmin(np.abs(x[candidates] - x_expected))]
    return float(x[best])


def scan_source_offset(
    cfg: SimulationConfig,
    params: WaveParams,
    mode: SimulationMode | str,
    offsets_um: np.ndarray,
    *,
    progress: bool = True,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Move the source along y and locate the central maximum for each offset.

    Parameters
    ----------
    cfg : SimulationConfig
        Profile sampling.
    params : WaveParams
        Base parameters; source x is kept.
    mode : SimulationMode or str
        Slit arrangement.
    offsets_um : np.ndarray
        Source y positions [µm].

    Returns
    -------
    offsets : np.ndarray
        Source y positions [µm].
    x_peak : np.ndarray
        Sampled central maximum positions [m].
    x_theory : np.ndarray
        L*tan(theta_in) for each offset [m].
    """

    validate_config(cfg)
    mode = SimulationMode.parse(mode)

    offsets = np.asarray(offsets_um, dtype=float)
    if offsets.ndim != 1 or offsets.size == 0:
        raise ValueError("offsets_um must be a non-empty 1D array")

    x_peak = np.empty_like(offsets)
    x_theory = np.empty_like(offsets)

    bar = tqdm(
        enumerate(offsets),
        total=len(offsets),
        desc="Scanning source offset",
        unit="pt",
        dynamic_ncols=True,
        leave=True,
        disable=not progress,
    )

    for k, y in bar:
        p = replace(params, source_position=make_source_position(params.source_position.x, y))
        x, I = run_intensity_profile(cfg, p, mode)

        x_theory[k] = central_maximum_position(p)
        x_peak[k] = _peak_position(x, I, x_theory[k])

        bar.set_postfix(
            y=f"{float(y):.3g}",
            x_peak=f"{x_peak[k]:.3g}",
        )

    return offsets, x_peak, x_theory


def scan_double_slit_source(show: bool = True) -> None:
    """
    Sweep the source of the default double slit from -2 to +2 µm and
    compare the sampled central maximum with L*tan(theta_in).
    """
    cfg = custom_simulation_config(n_points=2001)
    mode = SimulationMode.DOUBLE
    params = default_wave_params(mode)

    offsets = np.linspace(-2.0, 2.0, 21)

    print("=== Starting source offset scan ===")
    print(f"mode = {mode.value}, n_points = {cfg.n_points}")
    print(f"offset range = [{offsets[0]:.3g}, {offsets[-1]:.3g}] µm")

    t0 = time.perf_counter()
    offsets, x_peak, x_theory = scan_source_offset(cfg, params, mode, offsets)
    elapsed = time.perf_counter() - t0

    err = np.abs(x_peak - x_theory)
    print("=== Timing ===")
    print(f"Elapsed total: {elapsed:.3f} s")
    print("=== Scan results ===")
    print(f"max |x_peak - L tan(theta_in)| = {float(err.max()):.3g} m")
    spacing = 2.0 * profile_half_range(params, cfg.range_scale) / (cfg.n_points - 1)
    print(f"profile sample spacing          = {spacing:.3g} m")

    plot_source_scan(offsets, x_peak, x_theory, show=show)

    # Re-run the extreme offset and plot
    p_last = replace(params, source_position=make_source_position(params.source_position.x, offsets[-1]))
    x, I = run_intensity_profile(cfg, p_last, mode)
    plot_intensity_profile(x, I, title=f"Source at y = {offsets[-1]:.3g} µm", show=show)
