"""Tangent field contract.

Enforces the guarantee that after construction and after every refinement
pass the edge tangent flow is well-formed.
"""

import numpy as np
import xarray as xr

from colidr.contracts.base import require

UNIT_TOLERANCE = 1e-4


def assert_tangent_field(ds: xr.Dataset, shape=None) -> None:
    """Enforce tangent field contract.

    Parameters
    ----------
    ds : xr.Dataset
        Dataset from EdgeTangentField.to_dataset()

    shape : tuple of int, optional
        Expected (rows, cols) shared with the source raster.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for name in ("tangent_x", "tangent_y", "magnitude"):
        require(
            name in ds.data_vars,
            f"Field contract violated: missing '{name}' variable"
        )

    tx = ds["tangent_x"]
    require(
        tx.ndim == 2,
        f"Field contract violated: 'tangent_x' has {tx.ndim} dims, expected 2"
    )
    require(
        ds["tangent_y"].shape == tx.shape and ds["magnitude"].shape == tx.shape,
        "Field contract violated: tangent and magnitude shapes differ"
    )
    if shape is not None:
        require(
            tx.shape == tuple(shape),
            f"Field contract violated: shape {tx.shape} does not match raster {tuple(shape)}"
        )

    norm = np.hypot(tx.values, ds["tangent_y"].values)
    unit_or_zero = (norm == 0) | (np.abs(norm - 1.0) <= UNIT_TOLERANCE)
    require(
        bool(np.all(unit_or_zero)),
        f"Field contract violated: {int(np.count_nonzero(~unit_or_zero))} vectors are neither zero nor unit length"
    )

    mag = ds["magnitude"].values
    require(
        bool(np.all(np.isfinite(mag))) and float(np.min(mag)) >= 0.0,
        "Field contract violated: magnitude must be finite and non-negative"
    )
