"""
geometry.py

Slit geometry: Huygens secondary sources along the slit plane.

Every physical aperture is represented by a small fixed number of emission
points spread evenly over its width (edges excluded):

    step   = w / (count + 1)
    points = center - w/2 + step * (i + 1),   i = 0..count-1

Aperture centers:
    single  : 0
    double  : -d/2, +d/2
    grating : -(N-1)d/2 + i*d,   i = 0..N-1

Degenerate widths, separations and counts are replaced by safe positive
fallbacks, so the result is never empty and never zero-width.
"""

from __future__ import annotations

import math

import numpy as np

import constants
from parameters import SimulationMode


def _safe_positive(x: float, fallback: float) -> float:
    v = float(x)
    if not math.isfinite(v) or v <= 0.0:
        return fallback
    return v


def _safe_count(n: int, fallback: int) -> int:
    try:
        v = int(n)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return v if v > 0 else fallback


def emitters_per_aperture(mode: SimulationMode | str) -> int:
    mode = SimulationMode.parse(mode)
    if mode is SimulationMode.SINGLE:
        return constants.EMITTERS_SINGLE
    if mode is SimulationMode.DOUBLE:
        return constants.EMITTERS_DOUBLE
    if mode is SimulationMode.GRATING:
        return constants.EMITTERS_GRATING
    raise ValueError(f"Unhandled mode: {mode!r}")


def emission_points(center: float, width: float, count: int) -> np.ndarray:
    """
    Interior, equally spaced emission points of a single aperture.

    Parameters
    ----------
    center : float
        Aperture center along the slit plane.
    width : float
        Aperture width (same units as center).
    count : int
        Number of emission points.

    Returns
    -------
    np.ndarray
        Offsets, shape (count,), increasing.
    """
    w = _safe_positive(width, constants.FALLBACK_SLIT_WIDTH_UM)
    n = _safe_count(count, constants.FALLBACK_EMITTER_COUNT)

    step = w / (n + 1)
    start = center - w / 2.0 + step
    return start + step * np.arange(n, dtype=float)


def aperture_centers(
    mode: SimulationMode | str,
    slit_separation: float,
    slit_count: int,
) -> np.ndarray:
    """
    Centers of the physical apertures, symmetric about 0.
    """
    mode = SimulationMode.parse(mode)

    if mode is SimulationMode.SINGLE:
        return np.zeros(1, dtype=float)

    d = _safe_positive(slit_separation, constants.FALLBACK_SLIT_SEPARATION_UM)

    if mode is SimulationMode.DOUBLE:
        return np.array([-d / 2.0, d / 2.0], dtype=float)

    if mode is SimulationMode.GRATING:
        n = _safe_count(slit_count, constants.FALLBACK_SLIT_COUNT)
        total = (n - 1) * d
        return -total / 2.0 + d * np.arange(n, dtype=float)

    raise ValueError(f"Unhandled mode: {mode!r}")


def resolve_secondary_sources(
    mode: SimulationMode | str,
    slit_width: float,
    slit_separation: float,
    slit_count: int,
    *,
    scale: float = 1.0,
) -> np.ndarray:
    """
    Ordered secondary source offsets along the slit plane.

    Parameters
    ----------
    mode : SimulationMode or str
        Slit arrangement.
    slit_width : float
        Aperture width a [µm].
    slit_separation : float
        Center-to-center distance d [µm]; ignored for single slit.
    slit_count : int
        Number of grating apertures N; ignored for single/double.
    scale : float, optional
        Multiplier applied to the result (e.g. pixels per µm).

    Returns
    -------
    np.ndarray
        1D array of offsets, aperture by aperture, increasing.
    """
    count = emitters_per_aperture(mode)
    width = _safe_positive(slit_width, constants.FALLBACK_SLIT_WIDTH_UM)
    centers = aperture_centers(mode, slit_separation, slit_count)

    sources = np.concatenate([emission_points(c, width, count) for c in centers])
    return sources * float(scale)


def group_sources(sources: np.ndarray, mode: SimulationMode | str) -> list[np.ndarray]:
    """
    Split a flat source array back into per-aperture groups.
    """
    sources = np.asarray(sources, dtype=float)
    if sources.ndim != 1:
        raise ValueError("sources must be a 1D array")

    count = emitters_per_aperture(mode)
    if sources.size % count != 0:
        raise ValueError(
            f"sources length {sources.size} is not a multiple of {count} emitters"
        )
    return [sources[i:i + count] for i in range(0, sources.size, count)]
