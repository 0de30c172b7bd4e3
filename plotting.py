"""
plotting.py

Visualization utilities for simulation results.

This module contains ONLY plotting code.
No physics, no field evaluation, no file I/O.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import matplotlib.pyplot as plt


# -----------------------------
# Internal validation helpers
# -----------------------------

def _validate_x_I(x: np.ndarray, I: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    x_arr = np.asarray(x, dtype=float)
    I_arr = np.asarray(I, dtype=float)

    if x_arr.ndim != 1:
        raise ValueError("x must be a 1D array")

    if I_arr.ndim == 1:
        I_arr = I_arr[:, None]

    if I_arr.ndim != 2:
        raise ValueError("I must have shape (N,) or (N, M)")

    if I_arr.shape[0] != x_arr.shape[0]:
        raise ValueError("I.shape[0] must match x.shape[0]")

    return x_arr, I_arr


def _apply_log_scale(y: np.ndarray, *, eps: float) -> np.ndarray:
    """
    Clip y to at least eps so the log axis never sees 0.
    """
    if eps <= 0.0:
        raise ValueError("eps must be > 0 for log-scale clipping")
    return np.maximum(y, eps)


def _finish(title: str | None, show: bool, save_path: str | None) -> None:
    if title is not None:
        plt.title(title)

    plt.tight_layout()

    if save_path is not None:
        plt.savefig(save_path, dpi=300)

    if show:
        plt.show()
    else:
        plt.close()


# -----------------------------
# One plotting "engine"
# -----------------------------

def _plot_series(
    x: np.ndarray,
    y: np.ndarray,
    labels: Sequence[str],
    *,
    title: str | None,
    xlabel: str,
    ylabel: str,
    log_scale: bool,
    log_eps: float,
    fill: bool,
    show: bool,
    save_path: str | None,
    figsize: tuple[float, float] = (8.0, 5.0),
) -> None:
    if y.shape[1] != len(labels):
        raise ValueError("labels length must match y.shape[1]")

    if log_scale:
        y = _apply_log_scale(y, eps=log_eps)

    plt.figure(figsize=figsize)

    for j, lab in enumerate(labels):
        plt.plot(x, y[:, j], label=lab, lw=2)
        if fill and not log_scale:
            plt.fill_between(x, 0.0, y[:, j], alpha=0.2)

    plt.xlabel(xlabel)
    plt.ylabel(ylabel)

    if log_scale:
        plt.yscale("log", base=10)
    else:
        plt.ylim(bottom=0.0)

    plt.grid(True, which="both", linestyle="--", alpha=0.5)
    if len(labels) > 1:
        plt.legend()

    _finish(title, show, save_path)


# -----------------------------
# Public functions (thin wrappers)
# -----------------------------

def plot_intensity_profile(
    x: np.ndarray,
    I: np.ndarray,
    *,
    labels: Sequence[str] = ("intensity",),
    title: str | None = "Intensity Distribution vs Position",
    log_scale: bool = False,
    log_eps: float = 1e-12,
    x_unit: str = "mm",
    show: bool = True,
    save_path: str | None = None,
) -> None:
    """
    Plot one or several far-field profiles against screen position.

    Parameters
    ----------
    x : np.ndarray
        Screen positions [m], shape (N,).
    I : np.ndarray
        Intensities, shape (N,) or (N, M) for M overlaid profiles.
    labels : sequence of str
        One label per profile.
    x_unit : str
        "m", "mm" or "um" for the horizontal axis.
    """
    x_arr, I_arr = _validate_x_I(x, I)

    factors = {"m": 1.0, "mm": 1e3, "um": 1e6}
    if x_unit not in factors:
        raise ValueError(f"Unknown x_unit={x_unit!r}. Use 'm', 'mm' or 'um'.")

    _plot_series(
        x_arr * factors[x_unit],
        I_arr,
        tuple(labels),
        title=title,
        xlabel=f"screen position x [{x_unit}]",
        ylabel="normalized intensity",
        log_scale=log_scale,
        log_eps=log_eps,
        fill=True,
        show=show,
        save_path=save_path,
    )


def plot_field_frame(
    xs: np.ndarray,
    ys: np.ndarray,
    field: np.ndarray,
    *,
    slit_plane_x: float | None = None,
    primary_source: tuple[float, float] | None = None,
    title: str | None = None,
    cmap: str = "RdBu_r",
    show: bool = True,
    save_path: str | None = None,
    figsize: tuple[float, float] = (10.0, 5.0),
) -> None:
    """
    Show a near-field amplitude snapshot in pixel coordinates.

    Rows grow downward as on a canvas. A diverging colormap centered at
    zero distinguishes crests and troughs.
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    field = np.asarray(field, dtype=float)

    if field.shape != (ys.size, xs.size):
        raise ValueError("field must have shape (len(ys), len(xs))")

    vmax = float(np.max(np.abs(field))) or 1.0

    plt.figure(figsize=figsize)
    plt.imshow(
        field,
        extent=(xs[0], xs[-1], ys[-1], ys[0]),
        cmap=cmap,
        vmin=-vmax,
        vmax=vmax,
        aspect="auto",
    )
    plt.colorbar(label="amplitude")

    if slit_plane_x is not None:
        plt.axvline(slit_plane_x, color="k", lw=2)

    if primary_source is not None:
        plt.plot(*primary_source, marker="o", color="gold", ms=10)

    plt.xlabel("x [px]")
    plt.ylabel("y [px]")

    _finish(title, show, save_path)


def plot_source_scan(
    offsets_um: np.ndarray,
    x_peak: np.ndarray,
    x_theory: np.ndarray,
    *,
    title: str | None = "Central maximum vs source offset",
    show: bool = True,
    save_path: str | None = None,
) -> None:
    """
    Compare sampled central maximum positions with L*tan(theta_in).
    """
    offsets = np.asarray(offsets_um, dtype=float)
    y = np.column_stack([np.asarray(x_peak, dtype=float), np.asarray(x_theory, dtype=float)])

    if y.shape[0] != offsets.shape[0]:
        raise ValueError("x_peak and x_theory must match offsets_um length")

    plt.figure(figsize=(8.0, 5.0))
    plt.plot(offsets, y[:, 0] * 1e3, "o", label="sampled peak")
    plt.plot(offsets, y[:, 1] * 1e3, "--", label=r"$L\,\tan\theta_{in}$")

    plt.xlabel("source offset y [µm]")
    plt.ylabel("central maximum x [mm]")
    plt.grid(True, which="both", alpha=0.3)
    plt.legend()

    _finish(title, show, save_path)
