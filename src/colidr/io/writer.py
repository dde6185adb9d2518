"""Encode line drawings as JPEG or PNG."""

import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from colidr.contracts.failure import ComputationError, ConfigurationError

__all__ = ['encode_image', 'save_image']

logger = logging.getLogger(__name__)

_EXTENSIONS = {"jpeg": ".jpg", "png": ".png"}


def _format_from_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in (".jpg", ".jpeg"):
        return "jpeg"
    if suffix == ".png":
        return "png"
    raise ConfigurationError(f"Cannot infer image format from '{path.name}'")


def encode_image(raster: np.ndarray, fmt: str = "jpeg", jpeg_quality: int = 100) -> bytes:
    """Encode a uint8 raster.

    Parameters
    ----------
    raster : np.ndarray
        Grayscale uint8 raster.
    fmt : {"jpeg", "png"}
    jpeg_quality : int
        1-100, JPEG only.

    Returns
    -------
    bytes
    """
    if fmt not in _EXTENSIONS:
        raise ConfigurationError(f"Unsupported image format: {fmt}")

    params = [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)] if fmt == "jpeg" else []
    ok, buffer = cv2.imencode(_EXTENSIONS[fmt], raster, params)
    if not ok:
        raise ComputationError(f"Failed to encode {raster.shape} raster as {fmt}")
    return buffer.tobytes()


def save_image(raster: np.ndarray, path: Union[str, Path], fmt: Optional[str] = None,
               jpeg_quality: int = 100) -> Path:
    """Encode ``raster`` and write it to ``path``.

    The format follows the file suffix unless ``fmt`` is given.
    """
    path = Path(path)
    fmt = fmt or _format_from_suffix(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_image(raster, fmt, jpeg_quality))
    logger.debug("Saved %s", path)
    return path
