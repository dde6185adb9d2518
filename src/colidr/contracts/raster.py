"""Raster stage contracts.

Enforces the guarantees on the grayscale input raster and on the binary
line drawing produced by each filtering pass.
"""

from typing import Optional, Tuple

import numpy as np

from colidr.contracts.base import require


def assert_grayscale_raster(raster: np.ndarray, shape: Optional[Tuple[int, int]] = None) -> None:
    """Enforce the input raster contract.

    Called before the tangent field is built and whenever a raster crosses
    from the boundary into the core.

    Parameters
    ----------
    raster : np.ndarray
        Single-channel 8-bit raster.

    shape : tuple of int, optional
        Expected (rows, cols). When given, the raster must match exactly.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        isinstance(raster, np.ndarray),
        f"Raster contract violated: got {type(raster).__name__}, expected numpy.ndarray"
    )
    require(
        raster.ndim == 2,
        f"Raster contract violated: raster has {raster.ndim} dims, expected 2"
    )
    require(
        raster.dtype == np.uint8,
        f"Raster contract violated: dtype is {raster.dtype}, expected uint8"
    )
    require(
        raster.size > 0,
        "Raster contract violated: raster has zero area"
    )
    if shape is not None:
        require(
            raster.shape == tuple(shape),
            f"Raster contract violated: shape {raster.shape} does not match {tuple(shape)}"
        )


def assert_binary_raster(raster: np.ndarray, shape: Optional[Tuple[int, int]] = None) -> None:
    """Enforce the binarization contract.

    After thresholding, the raster holds only the values 0 (edge) and 255
    (background).

    Raises
    ------
    ContractViolation
        If the raster is not uint8 or holds other values
    """
    assert_grayscale_raster(raster, shape)
    require(
        bool(np.all((raster == 0) | (raster == 255))),
        "Binary contract violated: raster holds values other than 0 and 255"
    )
