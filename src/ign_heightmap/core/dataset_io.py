"""
HDF5 persistence for heightmaps.

Output layout (one file):
    heights     float64[n_heights]
    positions   {lon: float64, lat: float64}[n_positions]
    resolution  float64 scalar (metres)
    valid       bool[n_heights]   (only when heights are kept aligned)

Consumers correlate heights[i] with positions[i] by index.
"""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import h5py
import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..constants import (
    HEIGHT_DTYPE,
    POSITION_FIELDS,
    DatasetName,
    ErrorMessages,
)
from .grid import Position

logger = logging.getLogger(__name__)

POSITION_DTYPE = np.dtype(POSITION_FIELDS)


class DatasetError(OSError):
    """Base class for heightmap file errors."""


class DatasetWriteError(DatasetError):
    """The output container could not be written."""


class DatasetReadError(DatasetError):
    """The heightmap file could not be read back."""


@dataclass
class HeightmapDataset:
    """Contents of a heightmap file read back from disk."""

    heights: NDArray[np.float64]
    positions: list[Position]
    resolution: float
    valid: NDArray[np.bool_] | None = None
    attrs: dict[str, Any] = field(default_factory=dict)


def positions_to_array(positions: Sequence[Position]) -> NDArray[np.void]:
    """Pack (lon, lat) pairs into a structured array."""
    array = np.empty(len(positions), dtype=POSITION_DTYPE)
    if len(positions):
        coords = np.asarray(positions, dtype=np.float64)
        array["lon"] = coords[:, 0]
        array["lat"] = coords[:, 1]
    return array


def write_output(
    path: str | os.PathLike[str],
    heights: ArrayLike,
    positions: Sequence[Position],
    resolution: float,
    *,
    valid: ArrayLike | None = None,
    attrs: dict[str, Any] | None = None,
) -> None:
    """
    Write a heightmap to an HDF5 file, replacing any existing file.

    Args:
        path: Output file path
        heights: Elevations in metres
        positions: (lon, lat) sample positions
        resolution: Grid spacing in metres
        valid: Optional per-height validity mask (aligned mode)
        attrs: Optional file-level metadata

    Raises:
        DatasetWriteError: naming the field that could not be written.
            The partial file is removed.
    """
    heights_arr = np.asarray(heights, dtype=HEIGHT_DTYPE).reshape(-1)
    valid_arr = None
    if valid is not None:
        valid_arr = np.asarray(valid, dtype=bool).reshape(-1)
        if valid_arr.shape != heights_arr.shape:
            raise DatasetWriteError(
                ErrorMessages.MASK_MISMATCH.format(valid_arr.size, heights_arr.size)
            )

    try:
        f = h5py.File(path, "w")
    except OSError as e:
        raise DatasetWriteError(ErrorMessages.CREATE_FILE.format(path, e)) from e

    try:
        with f:
            _create_dataset(f, DatasetName.HEIGHTS, heights_arr)
            _create_dataset(f, DatasetName.POSITIONS, positions_to_array(positions))

            try:
                f.create_dataset(
                    DatasetName.RESOLUTION, data=np.float64(resolution), dtype=HEIGHT_DTYPE
                )
            except (OSError, TypeError, ValueError) as e:
                raise DatasetWriteError(
                    ErrorMessages.CREATE_SCALAR.format(DatasetName.RESOLUTION, e)
                ) from e

            if valid_arr is not None:
                _create_dataset(f, DatasetName.VALID, valid_arr)

            if attrs:
                try:
                    f.attrs.update(attrs)
                except (OSError, TypeError, ValueError) as e:
                    raise DatasetWriteError(ErrorMessages.WRITE_ATTRS.format(e)) from e
    except DatasetWriteError:
        _remove_partial(path)
        raise
    except OSError as e:
        _remove_partial(path)
        raise DatasetWriteError(ErrorMessages.CLOSE_FILE.format(path, e)) from e

    logger.debug(
        f"Wrote {heights_arr.size} heights and {len(positions)} positions to {path}"
    )


def read_output(path: str | os.PathLike[str]) -> HeightmapDataset:
    """Read a heightmap file written by write_output()."""
    try:
        with h5py.File(path, "r") as f:
            heights = f[DatasetName.HEIGHTS][()]
            raw_positions = f[DatasetName.POSITIONS][()]
            resolution = float(f[DatasetName.RESOLUTION][()])
            valid = f[DatasetName.VALID][()] if DatasetName.VALID in f else None
            attrs = {key: _to_python(value) for key, value in f.attrs.items()}
    except (OSError, KeyError) as e:
        raise DatasetReadError(ErrorMessages.READ_FILE.format(path, e)) from e

    positions = [(float(p["lon"]), float(p["lat"])) for p in raw_positions]
    return HeightmapDataset(
        heights=np.asarray(heights, dtype=np.float64),
        positions=positions,
        resolution=resolution,
        valid=None if valid is None else np.asarray(valid, dtype=bool),
        attrs=attrs,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _create_dataset(f: h5py.File, name: str, data: np.ndarray) -> None:
    try:
        f.create_dataset(name, data=data, dtype=data.dtype)
    except (OSError, TypeError, ValueError) as e:
        raise DatasetWriteError(ErrorMessages.CREATE_DATASET.format(name, e)) from e


def _remove_partial(path: str | os.PathLike[str]) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial output {path}: {e}")


def _to_python(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode()
    if isinstance(value, np.generic):
        return value.item()
    return value
