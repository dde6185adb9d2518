"""Edge tangent flow (ETF).

The tangent field follows the edges of the image: at every pixel it holds
the unit vector perpendicular to the intensity gradient, or the zero vector
where the image is flat. Refinement smooths the directions along coherent
edges while keeping the strong edges in charge.

Direction arrays have shape (rows, cols, 2); component 0 is x (column
direction) and component 1 is y (row direction).
"""

import logging
import time
from typing import Optional

import numpy as np
import xarray as xr
from scipy import ndimage

from colidr.contracts.failure import ConfigurationError, InitializationError
from colidr.drawing.parallel import parallel_rows
from colidr.drawing.raster_utils import to_float_raster

logger = logging.getLogger(__name__)


def _normalize_vectors(vectors: np.ndarray, fallback: np.ndarray) -> np.ndarray:
    """Scale vectors to unit length; zero-length entries take ``fallback``."""
    norm = np.hypot(vectors[..., 0], vectors[..., 1])[..., None]
    return np.divide(vectors, norm, out=fallback.copy(), where=norm > 0)


class EdgeTangentField:
    """Direction field plus normalized gradient magnitude for one image.

    Build with :meth:`build`; refine in place with :meth:`refine`.
    """

    def __init__(self, direction: np.ndarray, magnitude: np.ndarray,
                 workers: Optional[int] = None, min_band_rows: int = 16):
        self.direction = direction
        self.magnitude = magnitude
        self.magnitude.flags.writeable = False
        self.rows, self.cols = magnitude.shape
        self.workers = workers
        self.min_band_rows = min_band_rows

    @classmethod
    def build(cls, image: np.ndarray, workers: Optional[int] = None,
              min_band_rows: int = 16) -> "EdgeTangentField":
        """Initial tangent field from Sobel gradients of ``image``.

        Parameters
        ----------
        image : np.ndarray
            2-D grayscale raster (uint8, values 0-255).
        workers, min_band_rows
            Row-band parallelism used by :meth:`refine`.

        Returns
        -------
        EdgeTangentField

        Raises
        ------
        InitializationError
            If the image is not a non-empty 2-D array.
        """
        if not isinstance(image, np.ndarray) or image.ndim != 2 or image.size == 0:
            shape = getattr(image, "shape", None)
            raise InitializationError(f"Tangent field needs a non-empty 2-D raster, got shape {shape}")

        src = to_float_raster(image)
        # mirror == reflect-101, the border OpenCV's Sobel uses
        gx = ndimage.sobel(src, axis=1, mode="mirror")
        gy = ndimage.sobel(src, axis=0, mode="mirror")

        magnitude = np.hypot(gx, gy)
        max_mag = float(magnitude.max())
        if max_mag > 0:
            magnitude /= max_mag

        # Tangent is the gradient rotated by +90 degrees
        tangent = np.stack([-gy, gx], axis=-1)
        direction = _normalize_vectors(tangent, np.zeros_like(tangent))

        logger.debug("Tangent field built: shape=%s, max gradient=%.4f", image.shape, max_mag)
        return cls(direction, magnitude, workers=workers, min_band_rows=min_band_rows)

    def refine(self, kernel_radius: int) -> "EdgeTangentField":
        """One smoothing pass over the whole field.

        Every pixel ``p`` collects votes from the neighbours ``q`` inside the
        disc of radius ``kernel_radius``. A vote is the neighbour's tangent
        weighted by how much stronger its edge is (tanh of the magnitude
        difference) and by how well the two directions agree, flipped when
        they point more than 90 degrees apart. The summed vote is normalized;
        a pixel whose votes cancel exactly keeps its old vector.

        All reads come from a snapshot of the field taken before the pass.

        Raises
        ------
        ConfigurationError
            If kernel_radius is negative.
        """
        if kernel_radius < 0:
            raise ConfigurationError(f"ETF kernel radius must be >= 0, got {kernel_radius}")
        if kernel_radius == 0:
            return self

        t0 = time.time()
        k = int(kernel_radius)
        snapshot = self.direction
        # Zero padding stands in for neighbours outside the raster: a zero
        # tangent contributes nothing to the vote.
        padded_dir = np.pad(snapshot, ((k, k), (k, k), (0, 0)))
        padded_mag = np.pad(self.magnitude, k)
        offsets = [
            (dy, dx)
            for dy in range(-k, k + 1)
            for dx in range(-k, k + 1)
            if dx * dx + dy * dy <= k * k
        ]
        refined = np.empty_like(snapshot)
        cols = self.cols

        def refine_band(band: slice) -> None:
            tp = snapshot[band]
            mp = self.magnitude[band]
            vote = np.zeros_like(tp)
            for dy, dx in offsets:
                rows_q = slice(band.start + k + dy, band.stop + k + dy)
                cols_q = slice(k + dx, k + dx + cols)
                tq = padded_dir[rows_q, cols_q]
                mq = padded_mag[rows_q, cols_q]

                dot = tp[..., 0] * tq[..., 0] + tp[..., 1] * tq[..., 1]
                phi = np.where(dot > 0, 1.0, -1.0)
                wm = (1.0 + np.tanh(mq - mp)) / 2.0
                wd = np.abs(dot)
                vote += (phi * wm * wd)[..., None] * tq
            refined[band] = _normalize_vectors(vote, tp)

        parallel_rows(refine_band, self.rows, self.workers, self.min_band_rows)
        self.direction = refined

        logger.debug("Tangent field refined: radius=%d, neighbours=%d, %.3fs",
                     k, len(offsets), time.time() - t0)
        return self

    def gradient_direction(self) -> np.ndarray:
        """Unit gradient directions: the tangent rotated back by -90 degrees."""
        return np.stack([self.direction[..., 1], -self.direction[..., 0]], axis=-1)

    def to_dataset(self) -> xr.Dataset:
        """Export the field as an xarray Dataset on (y, x) pixel coordinates."""
        coords = {"y": np.arange(self.rows), "x": np.arange(self.cols)}
        return xr.Dataset(
            {
                "tangent_x": (("y", "x"), self.direction[..., 0].astype(np.float32),
                              {"long_name": "Edge tangent, column component"}),
                "tangent_y": (("y", "x"), self.direction[..., 1].astype(np.float32),
                              {"long_name": "Edge tangent, row component"}),
                "magnitude": (("y", "x"), self.magnitude.astype(np.float32),
                              {"long_name": "Normalized gradient magnitude", "units": "1"}),
            },
            coords=coords,
        )
