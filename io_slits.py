"""
io_slits.py

Input/output helpers for simulation results.

Design goals:
- Fast and reliable storage (NumPy .npz)
- Human-readable profiles (CSV)
- Optional metadata (JSON) for reproducibility

This module must not contain physics or field evaluation code.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
import json
import csv
import datetime as _dt
import logging
from typing import Any

import numpy as np


logger = logging.getLogger("slits.io")


# ---------------------------------------------------------------------
# Small helpers
# ---------------------------------------------------------------------

def _ensure_path(path: str | Path) -> Path:
    """Convert input to Path and expand user symbols."""
    return Path(path).expanduser()


def _with_suffix(path: str | Path, suffix: str, overwrite: bool) -> Path:
    p = _ensure_path(path)
    if p.suffix.lower() != suffix:
        p = p.with_suffix(suffix)

    if p.exists() and not overwrite:
        raise FileExistsError(f"File already exists: {p}")

    return p


def _json_default(obj: Any) -> Any:
    """
    JSON serializer for objects not natively supported by json.dumps.
    - dataclasses: converted via asdict()
    - enums: their value
    - numpy scalars: converted to Python scalars
    - numpy arrays: converted to lists
    - Path: string
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, (np.integer, np.floating, np.bool_)):
        return obj.item()

    if isinstance(obj, np.ndarray):
        return obj.tolist()

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _make_metadata(
    metadata: dict[str, Any] | None,
    *,
    add_timestamp: bool = True,
) -> dict[str, Any]:
    """Create a metadata dict with optional timestamp."""
    md: dict[str, Any] = {}
    if metadata:
        md.update(metadata)

    if add_timestamp and "timestamp_utc" not in md:
        now = _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None)
        md["timestamp_utc"] = now.isoformat() + "Z"

    return md


def _validate_x_values(x: np.ndarray, values: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=float)
    values = np.asarray(values)

    if x.ndim != 1:
        raise ValueError("x must be a 1D array")

    if values.ndim < 1 or values.shape[-1] != x.shape[0]:
        raise ValueError("values.shape[-1] must match x.shape[0]")

    return x, values


# ---------------------------------------------------------------------
# NPZ: main storage format
# ---------------------------------------------------------------------

def save_result_npz(
    path: str | Path,
    x: np.ndarray,
    values: np.ndarray,
    *,
    y: np.ndarray | None = None,
    metadata: dict[str, Any] | None = None,
    overwrite: bool = False,
) -> Path:
    """
    Save a profile or a field snapshot to a compressed .npz file.

    Parameters
    ----------
    path : str | Path
        Output file path. If suffix is not '.npz', it will be appended.
    x : np.ndarray
        Screen positions [m] or pixel columns, shape (N,).
    values : np.ndarray
        Intensity profile, shape (N,), or field, shape (M, N).
    y : np.ndarray | None
        Pixel rows, shape (M,), for 2D fields.
    metadata : dict | None
        Optional JSON-serializable metadata (config, params, notes, etc.).
    overwrite : bool
        If False and file exists, raises FileExistsError.

    Returns
    -------
    Path
        Path to the saved file.
    """
    p = _with_suffix(path, ".npz", overwrite)
    x, values = _validate_x_values(x, values)

    arrays: dict[str, np.ndarray] = {"x": x, "values": values}

    if y is not None:
        y = np.asarray(y, dtype=float)
        if values.ndim != 2 or values.shape[0] != y.shape[0]:
            raise ValueError("values.shape[0] must match y.shape[0]")
        arrays["y"] = y

    md = _make_metadata(metadata)
    arrays["metadata_json"] = np.array(json.dumps(md, ensure_ascii=False, default=_json_default))

    p.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(p, **arrays)

    logger.debug("saved %s (%s)", p, values.shape)
    return p


def load_result_npz(path: str | Path) -> tuple[np.ndarray, np.ndarray, np.ndarray | None, dict[str, Any]]:
    """
    Load a result from a .npz file.

    Returns
    -------
    x : np.ndarray
    values : np.ndarray
    y : np.ndarray | None
        None for 1D profiles.
    metadata : dict
        Metadata dict (empty if missing).
    """
    p = _ensure_path(path)

    if not p.exists():
        raise FileNotFoundError(f"No such file: {p}")

    with np.load(p, allow_pickle=False) as data:
        if "x" not in data or "values" not in data:
            raise ValueError("NPZ file does not contain required keys: 'x' and 'values'")

        x = np.array(data["x"], dtype=float)
        values = np.array(data["values"])
        y = np.array(data["y"], dtype=float) if "y" in data else None

        metadata: dict[str, Any] = {}
        if "metadata_json" in data:
            md_json = str(data["metadata_json"])
            try:
                metadata = json.loads(md_json) if md_json else {}
            except json.JSONDecodeError:
                logger.warning("unreadable metadata in %s", p)
                metadata = {}

    return x, values, y, metadata


# ---------------------------------------------------------------------
# JSON: metadata-only storage (optional)
# ---------------------------------------------------------------------

def save_metadata_json(
    path: str | Path,
    metadata: dict[str, Any],
    *,
    overwrite: bool = False,
) -> Path:
    """
    Save metadata to a JSON file (human-readable and versionable).
    """
    p = _with_suffix(path, ".json", overwrite)
    md = _make_metadata(metadata)

    p.parent.mkdir(parents=True, exist_ok=True)

    with p.open("w", encoding="utf-8") as f:
        json.dump(md, f, ensure_ascii=False, indent=2, default=_json_default)

    return p


def load_metadata_json(path: str | Path) -> dict[str, Any]:
    """
    Load metadata from a JSON file.
    """
    p = _ensure_path(path)
    if not p.exists():
        raise FileNotFoundError(f"No such file: {p}")

    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


# ---------------------------------------------------------------------
# CSV profile: quick human-readable output
# ---------------------------------------------------------------------

def save_profile_csv(
    path: str | Path,
    x: np.ndarray,
    I: np.ndarray,
    *,
    overwrite: bool = False,
) -> Path:
    """
    Save a far-field profile as CSV with columns x_m, intensity.

    Parameters
    ----------
    path : str | Path
        Output CSV file.
    x : np.ndarray
        Screen positions [m], shape (N,).
    I : np.ndarray
        Intensities, shape (N,).
    overwrite : bool
        If False and file exists, raises FileExistsError.

    Returns
    -------
    Path
        Path to saved CSV.
    """
    p = _with_suffix(path, ".csv", overwrite)
    x, I = _validate_x_values(x, I)

    if I.ndim != 1:
        raise ValueError("I must be a 1D array for a profile CSV")

    p.parent.mkdir(parents=True, exist_ok=True)

    with p.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["x_m", "intensity"])
        for xi, Ii in zip(x, I):
            writer.writerow([float(xi), float(Ii)])

    return p


def load_profile_csv(path: str | Path) -> tuple[np.ndarray, np.ndarray]:
    """
    Read back a CSV written by save_profile_csv.
    """
    p = _ensure_path(path)
    if not p.exists():
        raise FileNotFoundError(f"No such file: {p}")

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header != ["x_m", "intensity"]:
            raise ValueError(f"Unexpected CSV header: {header!r}")
        rows = [(float(a), float(b)) for a, b in reader]

    data = np.array(rows, dtype=float).reshape(-1, 2)
    return data[:, 0], data[:, 1]


# ---------------------------------------------------------------------
# Convenience: save everything in one call
# ---------------------------------------------------------------------

def save_run_bundle(
    output_dir: str | Path,
    run_name: str,
    x: np.ndarray,
    I: np.ndarray,
    *,
    metadata: dict[str, Any] | None = None,
    overwrite: bool = False,
) -> dict[str, Path]:
    """
    Save a "bundle" of outputs for one profile:
    - <run_name>.npz  (x, values, metadata_json)
    - <run_name>.csv  (x_m, intensity)
    - <run_name>.json (metadata only)

    Returns a dict of saved file paths.
    """
    out_dir = _ensure_path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    md = _make_metadata(metadata)

    saved: dict[str, Path] = {}
    saved["npz"] = save_result_npz(out_dir / f"{run_name}.npz", x, I, metadata=md, overwrite=overwrite)
    saved["csv"] = save_profile_csv(out_dir / f"{run_name}.csv", x, I, overwrite=overwrite)
    saved["json"] = save_metadata_json(out_dir / f"{run_name}.json", md, overwrite=overwrite)

    logger.info("saved run bundle %r to %s", run_name, out_dir)
    return saved
