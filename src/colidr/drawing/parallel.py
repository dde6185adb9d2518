"""Bounded parallel-for over row bands.

Every per-pixel stage splits the raster into horizontal bands and runs a
vectorized band function on a thread pool. A band function writes only
its own output rows and reads inputs that nobody writes during the stage,
so no locking is needed. numpy releases the GIL inside its kernels, which
is where the time goes.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


def row_bands(rows: int, workers: int, min_band_rows: int) -> List[slice]:
    """Split ``rows`` into at most ``workers`` contiguous bands.

    Bands are at least ``min_band_rows`` tall (except when the raster itself
    is shorter) and cover every row exactly once.
    """
    if rows <= 0:
        return []
    n_bands = max(1, min(workers, -(-rows // min_band_rows)))
    bounds = np.linspace(0, rows, n_bands + 1).round().astype(int)
    return [slice(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]


def parallel_rows(
    band_func: Callable[[slice], None],
    rows: int,
    workers: Optional[int] = None,
    min_band_rows: int = 16,
) -> None:
    """Run ``band_func(row_slice)`` over all row bands and wait for them.

    Returns only after every band has finished, which makes each call a
    barrier between pipeline stages. The first exception raised by a band
    propagates to the caller.

    Parameters
    ----------
    band_func : callable
        Receives a ``slice`` of rows and writes its results for those rows.
    rows : int
        Number of raster rows.
    workers : int, optional
        Thread count. None uses the CPU count.
    min_band_rows : int
        Minimum band height, so small rasters do not pay thread overhead.
    """
    if workers is None:
        workers = os.cpu_count() or 1
    bands = row_bands(rows, workers, min_band_rows)

    if len(bands) <= 1:
        for band in bands:
            band_func(band)
        return

    with ThreadPoolExecutor(max_workers=len(bands)) as executor:
        # list() drains the iterator so band exceptions are re-raised here
        list(executor.map(band_func, bands))
