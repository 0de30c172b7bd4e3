"""
near_field.py

Huygens superposition of spherical waves in the 2-D plane of the slits.

The plane is split by the slit screen, a vertical line at x = slit_plane_x.

    source side  (x < slit_plane_x):
        A = G * sin(k r - phase) * decay(r),     r = |P - primary|

    screen side  (x >= slit_plane_x):
        A = sum_S sin(k r_S - phase + phi_S) * decay(r_S)
        r_S   = |P - S|
        phi_S = k |primary - S|    phase already accumulated on the way to S

    decay(r) = 1 / sqrt(r + 1)
    k        = 2 pi / lambda_sim

decay() and the source gain G are visual tuning of the original rendering,
not a rigorous 2-D radiation falloff. Amplitudes are signed, not intensities.
`phase` advances monotonically with time; the field is continuous in it.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence

import numpy as np

import constants
from geometry import resolve_secondary_sources
from parameters import SimulationMode, WaveParams, as_source_position


logger = logging.getLogger("slits.near_field")

Point = tuple[float, float]


# ---------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------

def wavenumber_from_wavelength(wavelength_sim: float) -> float:
    """
    k = 2 pi / lambda_sim, with a fallback wavelength for lambda_sim <= 0.
    """
    lam = float(wavelength_sim)
    if not math.isfinite(lam) or lam <= 0.0:
        lam = constants.FALLBACK_WAVELENGTH_SIM
    return constants.TWO_PI / lam


def decay(r: float | np.ndarray) -> float | np.ndarray:
    """Heuristic amplitude falloff 1/sqrt(r + 1)."""
    return 1.0 / np.sqrt(r + 1.0)


def time_phase(elapsed_ms: float) -> float:
    """
    Phase term omega*t of the animation at elapsed_ms milliseconds.

    The original rendering used t = -ms/100 inside sin(k r - t), so waves
    travel outward from the sources as time increases.
    """
    return -float(elapsed_ms) / constants.MS_PER_PHASE_UNIT


def compute_near_field_amplitude(
    point: Point,
    time: float,
    sources: Sequence[float] | np.ndarray,
    wavenumber: float,
    primary_source: Point,
    slit_plane_position: Point = (0.0, 0.0),
) -> float:
    """
    Signed wave amplitude at a single point.

    Parameters
    ----------
    point : (float, float)
        Query point P = (x, y).
    time : float
        Phase term omega*t (see time_phase).
    sources : sequence of float
        Secondary source offsets along the slit plane, measured from the
        slit-plane center.
    wavenumber : float
        k, in inverse units of the plane coordinates.
    primary_source : (float, float)
        Primary source position.
    slit_plane_position : (float, float), optional
        (x of the slit plane, y of its center).

    Returns
    -------
    float
        Signed amplitude.
    """
    px, py = float(point[0]), float(point[1])
    sx, sy = float(primary_source[0]), float(primary_source[1])
    plane_x, center_y = float(slit_plane_position[0]), float(slit_plane_position[1])
    k = float(wavenumber)
    if not math.isfinite(k):
        k = wavenumber_from_wavelength(0.0)

    if px < plane_x:
        r = math.hypot(px - sx, py - sy)
        return constants.PRIMARY_GAIN * math.sin(k * r - time) / math.sqrt(r + 1.0)

    amplitude = 0.0
    for s in sources:
        slit_y = center_y + float(s)
        phi = k * math.hypot(plane_x - sx, slit_y - sy)
        r = math.hypot(px - plane_x, py - slit_y)
        amplitude += math.sin(k * r - time + phi) / math.sqrt(r + 1.0)
    return amplitude


# ---------------------------------------------------------------------
# Pixel scene
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class NearFieldScene:
    """
    Mapping of the physical setup onto a pixel plane.

    The slit screen is the vertical line at the horizontal center, the slit
    arrangement is centered vertically. Lengths in µm are multiplied by
    `scale` to get pixels.
    """

    width: int                    # [px]
    height: int                   # [px]
    scale: float = constants.PIXELS_PER_UM   # [px/µm]

    @property
    def slit_plane_x(self) -> float:
        return self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.height / 2.0

    @property
    def slit_plane_position(self) -> Point:
        return (self.slit_plane_x, self.center_y)

    def primary_source_px(self, params: WaveParams) -> Point:
        sp = as_source_position(params.source_position)
        return (
            self.slit_plane_x + sp.x * self.scale,
            self.center_y + sp.y * self.scale,
        )

    def wavelength_px(self, params: WaveParams) -> float:
        """nm -> µm -> px"""
        return params.wavelength / 1000.0 * self.scale

    def wavenumber(self, params: WaveParams) -> float:
        return wavenumber_from_wavelength(self.wavelength_px(params))

    def secondary_sources_px(self, params: WaveParams, mode: SimulationMode | str) -> np.ndarray:
        return resolve_secondary_sources(
            mode,
            params.slit_width,
            params.slit_separation,
            params.slit_count,
            scale=self.scale,
        )

    def physical_to_px(self, x_um: float, y_um: float) -> Point:
        return (self.slit_plane_x + x_um * self.scale, self.center_y + y_um * self.scale)

    def px_to_physical(self, x_px: float, y_px: float) -> Point:
        return ((x_px - self.slit_plane_x) / self.scale, (y_px - self.center_y) / self.scale)


def scene_from_config(cfg) -> NearFieldScene:
    return NearFieldScene(
        width=cfg.canvas_width,
        height=cfg.canvas_height,
        scale=cfg.pixel_scale,
    )


# ---------------------------------------------------------------------
# Grid evaluation
# ---------------------------------------------------------------------

def near_field_grid(
    scene: NearFieldScene,
    params: WaveParams,
    mode: SimulationMode | str,
    time: float,
    *,
    stride: int = 3,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Amplitude on a coarse pixel grid.

    Vectorized over grid cells; the loop runs over secondary sources only,
    so memory stays at one grid-sized array per term.

    Parameters
    ----------
    scene : NearFieldScene
        Pixel geometry.
    params : WaveParams
        Parameter snapshot.
    mode : SimulationMode or str
        Slit arrangement.
    time : float
        Phase term omega*t.
    stride : int, optional
        Grid step in pixels.

    Returns
    -------
    xs : np.ndarray
        Column pixel coordinates, shape (nx,).
    ys : np.ndarray
        Row pixel coordinates, shape (ny,).
    field : np.ndarray
        Signed amplitude, shape (ny, nx).
    """
    if stride <= 0:
        raise ValueError("stride must be a positive integer")

    xs = np.arange(0, scene.width, stride, dtype=float)
    ys = np.arange(0, scene.height, stride, dtype=float)
    X, Y = np.meshgrid(xs, ys)

    k = scene.wavenumber(params)
    sx, sy = scene.primary_source_px(params)
    plane_x, center_y = scene.slit_plane_position
    sources = scene.secondary_sources_px(params, mode)

    logger.debug(
        "near field grid %dx%d, %d secondary sources, k=%.4g",
        xs.size, ys.size, sources.size, k,
    )

    field = np.zeros_like(X)

    left = X < plane_x
    r0 = np.hypot(X[left] - sx, Y[left] - sy)
    field[left] = constants.PRIMARY_GAIN * np.sin(k * r0 - time) * decay(r0)

    right = ~left
    Xr = X[right]
    Yr = Y[right]
    acc = np.zeros_like(Xr)
    for s in sources:
        slit_y = center_y + s
        phi = k * math.hypot(plane_x - sx, slit_y - sy)
        r = np.hypot(Xr - plane_x, Yr - slit_y)
        acc += np.sin(k * r - time + phi) * decay(r)
    field[right] = acc

    return xs, ys, field
