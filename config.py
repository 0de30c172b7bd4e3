from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    """
    general simulation configuration

    @n_points: number of samples in a far-field intensity profile
    @range_scale: profile half-width in units of the diffraction lobe (lambda*L/a)

    @canvas_width, canvas_height: near-field plane size in pixels
    @pixel_scale: pixels per micrometer
    @grid_stride: coarse sampling stride of the near-field plane in pixels

    @frame_rate: animation frames per second
    @n_frames: number of frames rendered by the animation runner
    @check_nan: check NaN/Inf in every computed array
    @verbose: verbosity
    """

    # ---- Far-field profile ----
    n_points: int         # samples on the screen
    range_scale: float    # [lobes]

    # ---- Near-field plane ----
    canvas_width: int     # [px]
    canvas_height: int    # [px]
    pixel_scale: float    # [px/µm]
    grid_stride: int      # [px]

    # ---- Animation ----
    frame_rate: float     # [1/s]
    n_frames: int

    # ---- Evaluation control ----
    check_nan: bool       # check NaN / Inf in every result
    verbose: bool         # print debug info


def default_simulation_config() -> SimulationConfig:
    """
    Returns
    ----------
    SimulationConfig
    """

    return SimulationConfig(
        n_points=300,
        range_scale=6.0,        # 4 lobes * 1.5
        canvas_width=800,       # px
        canvas_height=400,      # px
        pixel_scale=20.0,       # px/µm
        grid_stride=3,          # px
        frame_rate=30.0,        # fps
        n_frames=30,
        check_nan=True,
        verbose=False,
    )


def custom_simulation_config(
        *,
        n_points=300,
        range_scale=6.0,
        canvas_width=800,
        canvas_height=400,
        pixel_scale=20.0,
        grid_stride=3,
        frame_rate=30.0,
        n_frames=30,
        check_nan=True,
        verbose=False) -> SimulationConfig:
    """
    Returns
    ----------
    SimulationConfig
    """

    return SimulationConfig(
        n_points=n_points,
        range_scale=range_scale,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        pixel_scale=pixel_scale,
        grid_stride=grid_stride,
        frame_rate=frame_rate,
        n_frames=n_frames,
        check_nan=check_nan,
        verbose=verbose,
    )


def validate_config(cfg: SimulationConfig) -> None:
    """
    Exception
    ----------
    ValueError
        For incorrect parameters
    """
    if cfg.n_points < 2:
        raise ValueError("n_points must be at least 2")

    if cfg.range_scale <= 0.0:
        raise ValueError("range_scale must be positive")

    if cfg.canvas_width <= 0 or cfg.canvas_height <= 0:
        raise ValueError("canvas size must be positive")

    if cfg.pixel_scale <= 0.0:
        raise ValueError("pixel_scale must be positive")

    if cfg.grid_stride <= 0:
        raise ValueError("grid_stride must be a positive integer")

    if cfg.grid_stride > min(cfg.canvas_width, cfg.canvas_height):
        raise ValueError("grid_stride must be smaller than the canvas")

    if cfg.frame_rate <= 0.0:
        raise ValueError("frame_rate must be positive")

    if cfg.n_frames <= 0:
        raise ValueError("n_frames must be a positive integer")
