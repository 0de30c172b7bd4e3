"""
far_field.py

Closed-form Fraunhofer intensity for single, double and multi-slit apertures
illuminated by an off-axis point source.

    theta_in = atan(y_s / |x_s|)               incidence angle of the source
    theta    = atan(x / L)                     observation angle
    s        = sin(theta) - sin(theta_in)      path-difference driver

    beta  = pi * a * s / lambda                envelope phase
    alpha = pi * d * s / lambda                interference phase

    I = (sin(beta)/beta)^2 * F(alpha)

    F = 1                                      single
    F = cos^2(alpha)                           double
    F = (sin(N alpha) / (N sin(alpha)))^2      grating

All lengths are converted to meters before use. The removable singularities
(beta -> 0, sin(alpha) -> 0) are handled with a tolerance band of 1e-6, so
the result is 1 at zero path difference for every mode and every N.

Degenerate wavelength, slit width or screen distance is replaced by a
fallback value; these functions never raise on numeric input.
"""

from __future__ import annotations

import math

import numpy as np

import constants
from parameters import SimulationMode, SourcePosition, WaveParams, slit_count_for_mode


_EPS = constants.SINGULARITY_EPS


def _safe_positive(x: float, fallback: float) -> float:
    v = float(x)
    if not math.isfinite(v) or v <= 0.0:
        return fallback
    return v


# ---------------------------------------------------------------------
# Geometry of incidence
# ---------------------------------------------------------------------

def incidence_angle(source_position: SourcePosition | tuple[float, float] | None) -> float:
    """
    Angle of incidence theta_in [rad] of the primary source.

    The source is a SourcePosition or a plain (x, y) pair [µm]. On-axis
    sources (y == 0) give exactly 0. A source sitting directly on the slit
    plane (x == 0) gives the +-pi/2 limit of atan.
    """
    if source_position is None:
        x_um, y_um = constants.DEFAULT_SOURCE_X_UM, 0.0
    elif isinstance(source_position, SourcePosition):
        x_um, y_um = source_position.x, source_position.y
    else:
        x_um, y_um = source_position
    sx = abs(float(x_um)) * constants.UM
    sy = float(y_um) * constants.UM

    if sy == 0.0:
        return 0.0
    # atan2 gives the atan(y/|x|) value and its limit at x == 0
    return math.atan2(sy, sx)


def _interference_factor(alpha: float, mode: SimulationMode, n: int) -> float:
    if mode is SimulationMode.SINGLE:
        return 1.0

    if mode is SimulationMode.DOUBLE:
        return math.cos(alpha) ** 2

    if mode is SimulationMode.GRATING:
        sin_a = math.sin(alpha)
        if abs(sin_a) < _EPS:
            # principal maximum: limit N^2, normalized by N^2
            return 1.0
        return (math.sin(n * alpha) / sin_a) ** 2 / (n * n)

    raise ValueError(f"Unhandled mode: {mode!r}")


def compute_far_field_intensity(
    x: float,
    wavelength: float,
    slit_width: float,
    slit_separation: float,
    mode: SimulationMode | str,
    distance_to_screen: float,
    slit_count: int,
    source_position: SourcePosition | tuple[float, float] | None = None,
) -> float:
    """
    Normalized far-field intensity at screen position x.

    Parameters
    ----------
    x : float
        Screen position [m], centered at 0.
    wavelength : float
        [nm]
    slit_width : float
        a [µm]
    slit_separation : float
        d [µm], unused for single slit.
    mode : SimulationMode or str
        Slit arrangement.
    distance_to_screen : float
        L [m]
    slit_count : int
        N, used for grating only.
    source_position : SourcePosition, (x, y) or None
        Primary source [µm]; None means on-axis at x = -300 µm.

    Returns
    -------
    float
        Intensity, 1.0 at zero path difference.
    """
    mode = SimulationMode.parse(mode)

    lam = _safe_positive(wavelength, constants.FALLBACK_WAVELENGTH_NM) * constants.NM
    a = _safe_positive(slit_width, constants.FALLBACK_SLIT_WIDTH_UM) * constants.UM
    d = float(slit_separation) * constants.UM
    L = _safe_positive(distance_to_screen, constants.FALLBACK_DISTANCE_M)
    n = int(slit_count)
    if mode is SimulationMode.GRATING and n <= 0:
        n = constants.FALLBACK_SLIT_COUNT

    theta_in = incidence_angle(source_position)
    theta = math.atan(float(x) / L)
    s = math.sin(theta) - math.sin(theta_in)

    beta = constants.PI * a * s / lam
    diffraction = 1.0
    if abs(beta) >= _EPS:
        diffraction = (math.sin(beta) / beta) ** 2

    alpha = constants.PI * d * s / lam
    return diffraction * _interference_factor(alpha, mode, n)


def intensity_for_params(x: float, params: WaveParams, mode: SimulationMode | str) -> float:
    """Convenience wrapper taking a WaveParams snapshot."""
    mode = SimulationMode.parse(mode)
    return compute_far_field_intensity(
        x,
        params.wavelength,
        params.slit_width,
        params.slit_separation,
        mode,
        params.distance_to_screen,
        slit_count_for_mode(params, mode),
        params.source_position,
    )


# ---------------------------------------------------------------------
# Vectorized profile
# ---------------------------------------------------------------------

def far_field_profile(
    x: np.ndarray,
    params: WaveParams,
    mode: SimulationMode | str,
) -> np.ndarray:
    """
    Intensity at every screen position of x.

    Same formula and tolerance bands as compute_far_field_intensity,
    evaluated with numpy over the whole array.

    Parameters
    ----------
    x : np.ndarray
        Screen positions [m].
    params : WaveParams
        Parameter snapshot.
    mode : SimulationMode or str
        Slit arrangement.

    Returns
    -------
    np.ndarray
        Intensities, same shape as x.
    """
    mode = SimulationMode.parse(mode)
    x_arr = np.asarray(x, dtype=float)

    lam = _safe_positive(params.wavelength, constants.FALLBACK_WAVELENGTH_NM) * constants.NM
    a = _safe_positive(params.slit_width, constants.FALLBACK_SLIT_WIDTH_UM) * constants.UM
    d = float(params.slit_separation) * constants.UM
    L = _safe_positive(params.distance_to_screen, constants.FALLBACK_DISTANCE_M)
    n = slit_count_for_mode(params, mode)

    s = np.sin(np.arctan(x_arr / L)) - math.sin(incidence_angle(params.source_position))

    beta = constants.PI * a * s / lam
    small_beta = np.abs(beta) < _EPS
    beta_safe = np.where(small_beta, 1.0, beta)
    diffraction = np.where(small_beta, 1.0, (np.sin(beta_safe) / beta_safe) ** 2)

    if mode is SimulationMode.SINGLE:
        return diffraction

    alpha = constants.PI * d * s / lam

    if mode is SimulationMode.DOUBLE:
        return diffraction * np.cos(alpha) ** 2

    if mode is SimulationMode.GRATING:
        sin_a = np.sin(alpha)
        principal = np.abs(sin_a) < _EPS
        sin_a_safe = np.where(principal, 1.0, sin_a)
        ratio = (np.sin(n * alpha) / sin_a_safe) ** 2 / (n * n)
        return diffraction * np.where(principal, 1.0, ratio)

    raise ValueError(f"Unhandled mode: {mode!r}")


# ---------------------------------------------------------------------
# Reference positions on the screen
# ---------------------------------------------------------------------

def profile_half_range(params: WaveParams, range_scale: float = 6.0) -> float:
    """
    Screen half-width [m] that shows the central lobes:
        L * (lambda / a) * range_scale
    """
    lam = _safe_positive(params.wavelength, constants.FALLBACK_WAVELENGTH_NM) * constants.NM
    a = _safe_positive(params.slit_width, constants.FALLBACK_SLIT_WIDTH_UM) * constants.UM
    L = _safe_positive(params.distance_to_screen, constants.FALLBACK_DISTANCE_M)
    return L * (lam / a) * range_scale


def central_maximum_position(params: WaveParams) -> float:
    """
    Screen position [m] of zero path difference, x0 = L * tan(theta_in).
    """
    L = _safe_positive(params.distance_to_screen, constants.FALLBACK_DISTANCE_M)
    return L * math.tan(incidence_angle(params.source_position))


def first_minimum_position(params: WaveParams) -> float:
    """Small-angle envelope zero, lambda * L / a [m]."""
    lam = _safe_positive(params.wavelength, constants.FALLBACK_WAVELENGTH_NM) * constants.NM
    a = _safe_positive(params.slit_width, constants.FALLBACK_SLIT_WIDTH_UM) * constants.UM
    L = _safe_positive(params.distance_to_screen, constants.FALLBACK_DISTANCE_M)
    return lam * L / a


def fringe_spacing(params: WaveParams) -> float:
    """Small-angle fringe spacing, lambda * L / d [m]; inf for d <= 0."""
    lam = _safe_positive(params.wavelength, constants.FALLBACK_WAVELENGTH_NM) * constants.NM
    L = _safe_positive(params.distance_to_screen, constants.FALLBACK_DISTANCE_M)
    d = float(params.slit_separation) * constants.UM
    if d <= 0.0:
        return math.inf
    return lam * L / d
