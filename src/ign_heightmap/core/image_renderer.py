"""
Grayscale rendering of heightmaps.

Heights are stretched linearly between their minimum and maximum onto
8-bit intensities, laid out row-major in a square raster, then rotated
270 degrees clockwise so that rows and columns follow north/east.
"""

import logging
import os

import numpy as np
from numpy.typing import ArrayLike, NDArray
from PIL import Image

from ..constants import (
    INTENSITY_LEVELS,
    NODATA_INTENSITY,
    UNIFORM_INTENSITY,
    ErrorMessages,
)

logger = logging.getLogger(__name__)


class RenderError(ValueError):
    """The heightmap could not be turned into an image."""


def normalize_heights(heights: ArrayLike) -> NDArray[np.uint8]:
    """
    Map heights onto 0-255 intensities.

    intensity = floor(256 * (h - min) / (max - min)), saturated at 255.
    A flat map (max == min) renders uniform mid-gray. Non-finite heights
    are ignored for the range and rendered as 0.

    Raises:
        RenderError: if there is no finite height at all
    """
    arr = np.asarray(heights, dtype=np.float64).reshape(-1)
    finite = np.isfinite(arr)
    if not np.any(finite):
        raise RenderError(ErrorMessages.EMPTY_HEIGHTS)

    vmin = float(np.min(arr[finite]))
    vmax = float(np.max(arr[finite]))

    intensities = np.full(arr.shape, NODATA_INTENSITY, dtype=np.uint8)
    if vmax == vmin:
        intensities[finite] = UNIFORM_INTENSITY
        return intensities

    scaled = np.floor(INTENSITY_LEVELS * (arr[finite] - vmin) / (vmax - vmin))
    intensities[finite] = np.clip(scaled, 0, INTENSITY_LEVELS - 1).astype(np.uint8)
    return intensities


def render_image(heights: ArrayLike, side_length: int) -> Image.Image:
    """
    Build the rotated grayscale image of a square heightmap.

    Args:
        heights: Flat height buffer, side_length**2 values in point order
        side_length: Number of samples per axis

    Returns:
        Single-channel ("L") Pillow image

    Raises:
        RenderError: on an empty height set or a buffer of the wrong length
    """
    intensities = normalize_heights(heights)
    if side_length < 0 or intensities.size != side_length * side_length:
        raise RenderError(ErrorMessages.SHAPE_MISMATCH.format(side_length, intensities.size))

    img = Image.fromarray(intensities.reshape(side_length, side_length))
    return img.transpose(Image.Transpose.ROTATE_90)


def save_image(img: Image.Image, path: str | os.PathLike[str]) -> None:
    """Save an image; the format follows the file extension."""
    try:
        img.save(path)
    except (OSError, ValueError) as e:
        raise RenderError(ErrorMessages.SAVE_IMAGE.format(path, e)) from e
    logger.debug(f"Saved {img.size[0]}x{img.size[1]} image to {path}")
