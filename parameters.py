"""
parameters.py

Physical parameters for the slit interference model.

This module contains ONLY physical and model parameters.
No numerical methods and no simulation control logic.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
import math

import constants


logger = logging.getLogger("slits.parameters")


# ---------------------------------------------------------------------
# Simulation mode
# ---------------------------------------------------------------------

class SimulationMode(str, Enum):
    """
    Slit arrangement. Selects both the aperture geometry and the
    interference factor.
    """

    SINGLE = "single"
    DOUBLE = "double"
    GRATING = "grating"

    @classmethod
    def parse(cls, mode: "SimulationMode | str") -> "SimulationMode":
        if isinstance(mode, cls):
            return mode
        try:
            return cls(str(mode).lower())
        except ValueError as e:
            raise ValueError(
                f"Unknown mode={mode!r}. Use 'single', 'double' or 'grating'."
            ) from e


# ---------------------------------------------------------------------
# Point source
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class SourcePosition:
    """
    Primary source position relative to the slit-plane center.
    """

    x: float              # [µm] negative: left of the slits
    y: float              # [µm] 0 -> on-axis illumination


DEFAULT_SOURCE_POSITION = SourcePosition(x=-20.0, y=0.0)


# ---------------------------------------------------------------------
# Wave parameters
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class WaveParams:
    """
    Full parameter snapshot for one evaluation.
    """

    wavelength: float             # [nm]
    slit_width: float             # [µm] a
    slit_separation: float        # [µm] d (double / grating only)
    slit_count: int               # N (grating only)
    distance_to_screen: float     # [m] L
    source_position: SourcePosition
    intensity: float = 1.0        # I0, profile scale


def slit_count_for_mode(params: WaveParams, mode: SimulationMode) -> int:
    """
    Number of physical apertures: 1 for single, 2 for double, N for grating.
    """
    mode = SimulationMode.parse(mode)
    if mode is SimulationMode.SINGLE:
        return 1
    if mode is SimulationMode.DOUBLE:
        return 2
    if mode is SimulationMode.GRATING:
        n = int(params.slit_count)
        return n if n > 0 else constants.FALLBACK_SLIT_COUNT
    raise ValueError(f"Unhandled mode: {mode!r}")


# ---------------------------------------------------------------------
# Per-mode defaults
# ---------------------------------------------------------------------

_DEFAULTS: dict[SimulationMode, WaveParams] = {
    SimulationMode.SINGLE: WaveParams(
        wavelength=500.0,         # green light
        slit_width=10.0,
        slit_separation=0.0,      # not applicable
        slit_count=1,
        distance_to_screen=1.0,
        source_position=DEFAULT_SOURCE_POSITION,
    ),
    SimulationMode.DOUBLE: WaveParams(
        wavelength=500.0,
        slit_width=2.0,
        slit_separation=10.0,
        slit_count=2,
        distance_to_screen=1.0,
        source_position=DEFAULT_SOURCE_POSITION,
    ),
    SimulationMode.GRATING: WaveParams(
        wavelength=500.0,
        slit_width=2.0,
        slit_separation=10.0,
        slit_count=5,
        distance_to_screen=1.0,
        source_position=DEFAULT_SOURCE_POSITION,
    ),
}


def default_wave_params(mode: SimulationMode | str = SimulationMode.DOUBLE) -> WaveParams:
    """
    Returns
    ----------
    WaveParams
        Sensible defaults for the given mode.
    """
    return _DEFAULTS[SimulationMode.parse(mode)]


# ---------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------

def _to_finite_float(x: float, *, name: str) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{name} must be a real scalar, got {type(x)!r}") from e
    if not math.isfinite(v):
        raise ValueError(f"{name} must be finite, got {v!r}")
    return v


def make_source_position(x: float, y: float) -> SourcePosition:
    """
    @x: µm
    @y: µm
    """
    return SourcePosition(
        x=_to_finite_float(x, name="source x"),
        y=_to_finite_float(y, name="source y"),
    )


def as_source_position(value: SourcePosition | tuple[float, float]) -> SourcePosition:
    """
    Accept a SourcePosition or a plain (x, y) pair in µm.
    """
    if isinstance(value, SourcePosition):
        return value
    return make_source_position(*value)


def make_wave_params(
    mode: SimulationMode | str,
    *,
    wavelength: float,
    slit_width: float,
    slit_separation: float = 0.0,
    slit_count: int = 1,
    distance_to_screen: float = 1.0,
    source_position: SourcePosition | tuple[float, float] = DEFAULT_SOURCE_POSITION,
    intensity: float = 1.0,
) -> WaveParams:
    """
    Create WaveParams with basic validation.

    The field formulas themselves never raise on degenerate input; this
    factory is where callers reject out-of-contract values.

    @wavelength: nm, [380, 750]
    @slit_width: µm
    @slit_separation: µm
    @distance_to_screen: m
    """

    mode = SimulationMode.parse(mode)

    wavelength = _to_finite_float(wavelength, name="wavelength")
    slit_width = _to_finite_float(slit_width, name="slit_width")
    slit_separation = _to_finite_float(slit_separation, name="slit_separation")
    distance_to_screen = _to_finite_float(distance_to_screen, name="distance_to_screen")
    intensity = _to_finite_float(intensity, name="intensity")

    if not constants.WAVELENGTH_MIN_NM <= wavelength <= constants.WAVELENGTH_MAX_NM:
        raise ValueError(
            f"wavelength must be in [{constants.WAVELENGTH_MIN_NM:g}, "
            f"{constants.WAVELENGTH_MAX_NM:g}] nm, got {wavelength!r}"
        )

    if slit_width <= 0.0:
        raise ValueError("slit_width must be positive")

    if distance_to_screen <= 0.0:
        raise ValueError("distance_to_screen must be positive")

    if intensity < 0.0:
        raise ValueError("intensity must be non-negative")

    if int(slit_count) != slit_count:
        raise TypeError("slit_count must be an integer")
    slit_count = int(slit_count)

    if mode is SimulationMode.GRATING and slit_count < 2:
        raise ValueError("grating needs slit_count >= 2")

    if mode is not SimulationMode.SINGLE:
        if slit_separation < 0.0:
            raise ValueError("slit_separation must be non-negative")
        if slit_separation <= slit_width:
            logger.warning(
                "slit_separation (%g µm) does not exceed slit_width (%g µm); "
                "apertures overlap", slit_separation, slit_width,
            )

    source_position = as_source_position(source_position)

    return WaveParams(
        wavelength=wavelength,
        slit_width=slit_width,
        slit_separation=slit_separation,
        slit_count=slit_count,
        distance_to_screen=distance_to_screen,
        source_position=source_position,
        intensity=intensity,
    )


def with_mode(params: WaveParams, mode: SimulationMode | str) -> WaveParams:
    """
    Switch to another mode, overlaying that mode's defaults.
    """
    return replace(params, **_asdict_shallow(default_wave_params(mode)))


def with_source_position(params: WaveParams, x: float, y: float) -> WaveParams:
    return replace(params, source_position=make_source_position(x, y))


def reset_source_position(params: WaveParams, mode: SimulationMode | str) -> WaveParams:
    return replace(params, source_position=default_wave_params(mode).source_position)


def _asdict_shallow(params: WaveParams) -> dict:
    # dataclasses.asdict would also convert the nested SourcePosition
    return {
        "wavelength": params.wavelength,
        "slit_width": params.slit_width,
        "slit_separation": params.slit_separation,
        "slit_count": params.slit_count,
        "distance_to_screen": params.distance_to_screen,
        "source_position": params.source_position,
        "intensity": params.intensity,
    }
