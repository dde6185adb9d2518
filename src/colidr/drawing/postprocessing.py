"""Post-processing of the line drawing and tangent field diagnostics."""

import logging
from typing import Optional

import cv2
import numpy as np

from colidr.drawing.parallel import parallel_rows
from colidr.drawing.raster_utils import normalize_minmax, symmetric_blur

logger = logging.getLogger(__name__)


def anti_alias(src: np.ndarray, blur_size: int) -> np.ndarray:
    """Soften the binary drawing.

    Stretches the raster to [0, 255] (a constant raster is left as is) and
    applies the symmetric Gaussian blur.

    Returns
    -------
    np.ndarray
        uint8 raster of the same shape.
    """
    stretched = normalize_minmax(src, 0.0, 255.0)
    stretched = np.clip(np.rint(stretched), 0, 255).astype(np.uint8)
    return symmetric_blur(stretched, blur_size)


def visualize_tangent_field(direction: np.ndarray, iterations: int = 10,
                            seed: Optional[int] = None, workers: Optional[int] = None,
                            min_band_rows: int = 16) -> np.ndarray:
    """Line integral convolution rendering of a tangent field.

    Uniform noise is drawn at half resolution and upsampled with
    nearest-neighbour interpolation, so streaks are wider than one pixel.
    Each output pixel averages the noise met while walking ``iterations``
    steps along the field and ``iterations`` steps against it. A step moves
    by the L1-normalized direction and positions wrap around the raster
    edges. Step ``k`` is weighted ``exp(-k^2 / s) / (pi * s)`` with
    ``s = 2 * iterations^2``.

    Parameters
    ----------
    direction : np.ndarray
        (rows, cols, 2) tangent field, x then y.
    iterations : int
        Walk length in each direction.
    seed : int, optional
        Seed for the noise; fixes the output.

    Returns
    -------
    np.ndarray
        float32 raster in [0, 1].
    """
    rows, cols = direction.shape[:2]
    rng = np.random.default_rng(seed)
    noise = rng.random((max(1, rows // 2), max(1, cols // 2)), dtype=np.float32)
    noise = cv2.resize(noise, (cols, rows), interpolation=cv2.INTER_NEAREST)

    sigma = 2.0 * iterations * iterations
    weights = [np.exp(-(k * k) / sigma) / (np.pi * sigma) for k in range(iterations)]
    total_weight = 2.0 * sum(weights)
    out = np.empty((rows, cols), dtype=np.float32)

    def lic_band(band: slice) -> None:
        py, px = np.mgrid[band, 0:cols].astype(np.float64)
        acc = np.zeros(py.shape, dtype=np.float64)
        for sign in (1.0, -1.0):
            y = py.copy()
            x = px.copy()
            for k in range(iterations):
                yi = y.astype(np.intp) % rows
                xi = x.astype(np.intp) % cols
                vx = sign * direction[yi, xi, 0]
                vy = sign * direction[yi, xi, 1]
                l1 = np.abs(vx) + np.abs(vy)
                moving = l1 > 0
                x[moving] += vx[moving] / l1[moving]
                y[moving] += vy[moving] / l1[moving]
                acc += weights[k] * noise[y.astype(np.intp) % rows, x.astype(np.intp) % cols]
        out[band] = acc / total_weight

    parallel_rows(lic_band, rows, workers, min_band_rows)
    logger.debug("Tangent field visualized: iterations=%d, seed=%s", iterations, seed)
    return np.clip(out, 0.0, 1.0)
