"""Image export utilities for rendered images.

This module saves tone-mapped 8-bit images produced by the renderer.

Supported formats:
    - PNG (8-bit RGB via Pillow)
    - Plain-text PPM (``P3``), written to any text stream

Example:
    >>> import sys
    >>> from fastray.preview.export import save_png, write_ppm
    >>> image = renderer.render()
    >>> save_png(image, "output.png")
    >>> write_ppm(image, sys.stdout)
"""

from __future__ import annotations

from os import PathLike
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def _check_rgb8(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    array = np.asarray(image)
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {array.shape}")
    if array.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {array.dtype}")
    return array


def save_png(image: npt.NDArray[np.uint8], filepath: str | PathLike) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, top row first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    array = _check_rgb8(image)
    PILImage.fromarray(np.ascontiguousarray(array)).save(filepath)


def write_ppm(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an 8-bit RGB image as plain-text PPM.

    The header is ``P3``, the dimensions and the maximum value 255, followed
    by one ``r g b`` line per pixel, top row first.

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    array = _check_rgb8(image)
    height, width, _ = array.shape
    stream.write(f"P3\n{width} {height}\n255\n")
    for row in array:
        stream.writelines(f"{r} {g} {b}\n" for r, g, b in row)


def compute_rmse(
    image_a: npt.NDArray[np.number],
    image_b: npt.NDArray[np.number],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
