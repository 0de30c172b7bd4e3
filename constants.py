"""
constants.py

Numerical constants shared across the slit interference project.

Unit conventions used everywhere:
    wavelength             nm
    slit width/separation  µm
    source position        µm
    distance to screen     m
    screen position x      m
"""

from __future__ import annotations

import math


# ---------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------

NM = 1e-9        # [m / nm]
UM = 1e-6        # [m / µm]

PI = math.pi
TWO_PI = 2.0 * math.pi


# ---------------------------------------------------------------------
# Removable singularities
# ---------------------------------------------------------------------

# Tolerance band around beta -> 0 and sin(alpha) -> 0.
SINGULARITY_EPS = 1e-6


# ---------------------------------------------------------------------
# Visible range
# ---------------------------------------------------------------------

WAVELENGTH_MIN_NM = 380.0
WAVELENGTH_MAX_NM = 750.0


# ---------------------------------------------------------------------
# Huygens emission points per aperture
# ---------------------------------------------------------------------

EMITTERS_SINGLE = 20
EMITTERS_DOUBLE = 10
EMITTERS_GRATING = 5


# ---------------------------------------------------------------------
# Safe fallbacks for degenerate input
# ---------------------------------------------------------------------

FALLBACK_SLIT_WIDTH_UM = 2.0
FALLBACK_SLIT_SEPARATION_UM = 10.0
FALLBACK_SLIT_COUNT = 2
FALLBACK_EMITTER_COUNT = 1
FALLBACK_WAVELENGTH_NM = 500.0
FALLBACK_DISTANCE_M = 1.0
FALLBACK_WAVELENGTH_SIM = 10.0   # same spatial units as the near-field grid

# Used when the caller gives no source position.
DEFAULT_SOURCE_X_UM = -300.0


# ---------------------------------------------------------------------
# Near-field visual tuning
# ---------------------------------------------------------------------

PIXELS_PER_UM = 20.0
PRIMARY_GAIN = 2.0
MS_PER_PHASE_UNIT = 100.0
