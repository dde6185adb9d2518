"""Flow-guided difference-of-Gaussians (FDoG) edge filter.

Two stages, both steered by the edge tangent flow:

1. ``gradient_dog`` - a 1-D DoG taken across the edge, along the gradient.
2. ``flow_dog`` - the DoG responses integrated along the tangent curve,
   mapped to a soft edge strength and min-max normalized.

``binary_threshold`` turns the soft response into the 0/255 line drawing.
"""

import logging
import time
from typing import Optional

import numpy as np

from colidr.contracts.failure import ComputationError
from colidr.drawing.kernels import make_gaussian_vector
from colidr.drawing.parallel import parallel_rows
from colidr.drawing.raster_utils import normalize_minmax, round_half_away
from colidr.drawing.tangent_field import EdgeTangentField

logger = logging.getLogger(__name__)


class FlowDoGFilter:
    """Config-driven FDoG filter bound to one tangent field.

    The tangent field is only read here; it must not change while a pass
    is running.
    """

    def __init__(self, etf: EdgeTangentField, sigma_r: float,
                 workers: Optional[int] = None, min_band_rows: int = 16):
        """Store the tangent field and the surround/center ratio.

        Parameters
        ----------
        etf : EdgeTangentField
            Refined tangent field with the same shape as the rasters filtered.
        sigma_r : float
            Surround sigma as a multiple of the center sigma.
        workers, min_band_rows
            Row-band parallelism, see :func:`parallel_rows`.
        """
        self.etf = etf
        self.sigma_r = sigma_r
        self.workers = workers
        self.min_band_rows = min_band_rows

    def _run(self, band_func, rows):
        parallel_rows(band_func, rows, self.workers, self.min_band_rows)

    def gradient_dog(self, src: np.ndarray, rho: float, sigma_c: float) -> np.ndarray:
        """DoG sampled along the gradient direction of every pixel.

        Samples ``src`` at ``p + s * g`` for ``s`` in ``-kernel..kernel``,
        where ``g`` is the unit gradient and ``kernel`` is the half width of
        the surround vector. Samples that fall outside the raster are
        skipped; coordinates round half away from zero. Center and surround
        sums are each normalized by their own weight sums.

        Parameters
        ----------
        src : np.ndarray
            float raster in [0, 1].
        rho : float
            Weight of the surround response.
        sigma_c : float
            Center sigma; the surround sigma is ``sigma_r * sigma_c``.

        Returns
        -------
        np.ndarray
            float64 raster ``center - rho * surround``.
        """
        t0 = time.time()
        gvc = make_gaussian_vector(sigma_c)
        gvs = make_gaussian_vector(self.sigma_r * sigma_c)
        kernel = len(gvs) - 1

        rows, cols = src.shape
        gradient = self.etf.gradient_direction()
        dst = np.empty((rows, cols), dtype=np.float64)

        def gradient_band(band: slice) -> None:
            gx = gradient[band, :, 0]
            gy = gradient[band, :, 1]
            py, px = np.mgrid[band, 0:cols].astype(np.float64)

            center_acc = np.zeros_like(gx)
            center_w = np.zeros_like(gx)
            surround_acc = np.zeros_like(gx)
            surround_w = np.zeros_like(gx)

            for step in range(-kernel, kernel + 1):
                r = py + gy * step
                c = px + gx * step
                inside = (r >= 0) & (r <= rows - 1) & (c >= 0) & (c <= cols - 1)
                ri = np.clip(round_half_away(r), 0, rows - 1)
                ci = np.clip(round_half_away(c), 0, cols - 1)
                value = src[ri, ci]

                idx = abs(step)
                wc = np.where(inside, gvc[idx] if idx < len(gvc) else 0.0, 0.0)
                ws = np.where(inside, gvs[idx], 0.0)
                center_acc += value * wc
                center_w += wc
                surround_acc += value * ws
                surround_w += ws

            center = np.divide(center_acc, center_w, out=np.zeros_like(gx), where=center_w > 0)
            surround = np.divide(surround_acc, surround_w, out=np.zeros_like(gx), where=surround_w > 0)
            dst[band] = center - rho * surround

        self._run(gradient_band, rows)
        logger.debug("Gradient DoG: kernel=%d, %.3fs", kernel, time.time() - t0)
        return dst

    def _walk(self, dog, start_y, start_x, acc, weight, gaus, sign):
        """Integrate ``dog`` along the tangent curve from each start pixel.

        Updates ``acc`` and ``weight`` in place. A walk ends when it meets a
        zero tangent, when its position leaves the raster, or after
        ``len(gaus) - 1`` steps.
        """
        rows, cols = dog.shape
        direction = self.etf.direction
        y = start_y.copy()
        x = start_x.copy()
        active = np.ones(y.shape, dtype=bool)

        for step in range(len(gaus) - 1):
            # Truncation toward zero picks the cell the position lies in
            yi = np.clip(y.astype(np.intp), 0, rows - 1)
            xi = np.clip(x.astype(np.intp), 0, cols - 1)
            dx = sign * direction[yi, xi, 0]
            dy = sign * direction[yi, xi, 1]

            active &= ~((dx == 0) & (dy == 0))
            active &= (x >= 0) & (x <= cols - 1) & (y >= 0) & (y <= rows - 1)
            if not active.any():
                break

            acc[active] += dog[yi[active], xi[active]] * gaus[step]
            weight[active] += gaus[step]

            x[active] += dx[active]
            y[active] += dy[active]

            rx = round_half_away(x)
            ry = round_half_away(y)
            active &= (rx >= 0) & (rx <= cols - 1) & (ry >= 0) & (ry <= rows - 1)

    def flow_dog(self, dog: np.ndarray, sigma_m: float) -> np.ndarray:
        """Integrate the gradient DoG along the tangent flow.

        The accumulator starts at ``-g[0] * dog[p]`` with weight ``-g[0]``
        because both walks sample ``p`` itself at step 0. The averaged
        response maps to 1.0 when positive and to ``1 + tanh(avg)``
        otherwise. The full raster is then min-max normalized to [0, 1]; a
        constant raster is only clipped. OpenCV's NORM_MINMAX would map a
        constant raster to 0 and turn a flat image into one solid line.
        Keeping the value instead lets a flat image draw nothing when its
        response is positive.

        Parameters
        ----------
        dog : np.ndarray
            Output of :meth:`gradient_dog`.
        sigma_m : float
            Sigma of the integration along the flow.

        Returns
        -------
        np.ndarray
            float64 raster in [0, 1]; low values are edges.

        Raises
        ------
        ComputationError
            If the response holds non-finite values.
        """
        t0 = time.time()
        gaus = make_gaussian_vector(sigma_m)
        rows, cols = dog.shape
        response = np.empty((rows, cols), dtype=np.float64)

        def flow_band(band: slice) -> None:
            py, px = np.mgrid[band, 0:cols].astype(np.float64)
            center = dog[band]
            acc = -gaus[0] * center
            weight = np.full(center.shape, -gaus[0])

            self._walk(dog, py, px, acc, weight, gaus, 1.0)
            self._walk(dog, py, px, acc, weight, gaus, -1.0)

            avg = np.divide(acc, weight, out=center.copy(), where=weight != 0)
            response[band] = np.where(avg > 0, 1.0, 1.0 + np.tanh(avg))

        self._run(flow_band, rows)

        if not np.all(np.isfinite(response)):
            raise ComputationError("Flow DoG produced non-finite values")

        normalized = np.clip(normalize_minmax(response, 0.0, 1.0), 0.0, 1.0)
        logger.debug("Flow DoG: steps=%d, %.3fs", len(gaus) - 1, time.time() - t0)
        return normalized

    def binary_threshold(self, fdog: np.ndarray, tau: float) -> np.ndarray:
        """0 where ``fdog < tau`` (edge), 255 elsewhere, as uint8."""
        rows = fdog.shape[0]
        result = np.empty(fdog.shape, dtype=np.uint8)

        def threshold_band(band: slice) -> None:
            result[band] = np.where(fdog[band] < tau, 0, 255)

        self._run(threshold_band, rows)
        return result
