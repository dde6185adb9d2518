"""Small raster helpers shared by the drawing stages."""

import cv2
import numpy as np

from colidr.contracts.failure import ConfigurationError


def to_float_raster(image: np.ndarray) -> np.ndarray:
    """Scale an 8-bit raster to float64 values in [0, 1]."""
    return image.astype(np.float64) / 255.0


def round_half_away(values):
    """Round to the nearest integer, ties away from zero.

    ``np.round`` rounds ties to even, which would move samples that land
    exactly between two pixels.
    """
    values = np.asarray(values, dtype=np.float64)
    return np.where(values >= 0, np.floor(values + 0.5), -np.floor(-values + 0.5)).astype(np.intp)


def normalize_minmax(raster: np.ndarray, new_min: float = 0.0, new_max: float = 1.0) -> np.ndarray:
    """Linearly rescale ``raster`` so its range becomes [new_min, new_max].

    A constant raster has no range to stretch and is returned unchanged
    (as a float64 copy).
    """
    raster = np.asarray(raster, dtype=np.float64)
    lo = float(raster.min())
    hi = float(raster.max())
    if hi <= lo:
        return raster.copy()
    return (raster - lo) / (hi - lo) * (new_max - new_min) + new_min


def symmetric_blur(raster: np.ndarray, blur_size: int) -> np.ndarray:
    """Square Gaussian blur with a zero (constant) border.

    Sigma is derived from the kernel size by OpenCV. Returns a new array of
    the same dtype; the input is never modified.

    Raises
    ------
    ConfigurationError
        If blur_size is not a positive odd integer.
    """
    if blur_size < 1 or blur_size % 2 == 0:
        raise ConfigurationError(f"blur_size must be a positive odd integer, got {blur_size}")
    return cv2.GaussianBlur(raster, (blur_size, blur_size), 0, borderType=cv2.BORDER_CONSTANT)
