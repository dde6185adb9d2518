"""Tests for pipeline contracts.

These tests verify that contracts are enforced at stage boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import pytest
import xarray as xr
import numpy as np

pytestmark = pytest.mark.unit

from colidr.contracts import (
    ContractViolation,
    require,
    assert_grayscale_raster,
    assert_binary_raster,
    assert_tangent_field,
)
from colidr.drawing.tangent_field import EdgeTangentField
from tests.helpers.fake_images import make_disc


def field_dataset(tx, ty, mag=None):
    tx = np.asarray(tx, dtype=np.float32)
    ty = np.asarray(ty, dtype=np.float32)
    if mag is None:
        mag = np.zeros_like(tx)
    return xr.Dataset(
        {
            "tangent_x": (("y", "x"), tx),
            "tangent_y": (("y", "x"), ty),
            "magnitude": (("y", "x"), np.asarray(mag, dtype=np.float32)),
        },
        coords={"y": range(tx.shape[0]), "x": range(tx.shape[1])},
    )


def test_require_passes_silently():
    require(True, "never raised")


def test_require_raises_with_message():
    with pytest.raises(ContractViolation, match="broken invariant"):
        require(False, "broken invariant")


class TestGrayscaleContract:
    """Test input raster contract."""

    def test_passes_with_uint8_raster(self):
        assert_grayscale_raster(np.zeros((4, 5), dtype=np.uint8))

    def test_fails_for_list(self):
        with pytest.raises(ContractViolation, match="expected numpy.ndarray"):
            assert_grayscale_raster([[0, 1], [2, 3]])

    def test_fails_for_color_raster(self):
        with pytest.raises(ContractViolation, match="expected 2"):
            assert_grayscale_raster(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_fails_for_float_raster(self):
        with pytest.raises(ContractViolation, match="expected uint8"):
            assert_grayscale_raster(np.zeros((4, 4), dtype=np.float64))

    def test_fails_for_zero_area(self):
        with pytest.raises(ContractViolation, match="zero area"):
            assert_grayscale_raster(np.zeros((0, 4), dtype=np.uint8))

    def test_fails_for_shape_mismatch(self):
        with pytest.raises(ContractViolation, match="does not match"):
            assert_grayscale_raster(np.zeros((4, 4), dtype=np.uint8), (4, 5))


class TestBinaryContract:
    """Test binarization contract."""

    def test_passes_with_zero_and_255(self):
        raster = np.array([[0, 255], [255, 0]], dtype=np.uint8)
        assert_binary_raster(raster, (2, 2))

    def test_fails_with_grey_values(self):
        raster = np.array([[0, 128], [255, 0]], dtype=np.uint8)
        with pytest.raises(ContractViolation, match="other than 0 and 255"):
            assert_binary_raster(raster)


class TestFieldContract:
    """Test tangent field contract."""

    def test_passes_for_built_field(self):
        etf = EdgeTangentField.build(make_disc())
        assert_tangent_field(etf.to_dataset(), (48, 48))

    def test_passes_with_zero_vectors(self):
        assert_tangent_field(field_dataset(np.zeros((3, 3)), np.zeros((3, 3))))

    def test_fails_without_tangent_y(self):
        ds = field_dataset(np.ones((3, 3)), np.zeros((3, 3))).drop_vars("tangent_y")
        with pytest.raises(ContractViolation, match="missing 'tangent_y'"):
            assert_tangent_field(ds)

    def test_fails_for_non_unit_vectors(self):
        ds = field_dataset(np.full((3, 3), 0.5), np.zeros((3, 3)))
        with pytest.raises(ContractViolation, match="neither zero nor unit"):
            assert_tangent_field(ds)

    def test_fails_for_negative_magnitude(self):
        ds = field_dataset(np.ones((3, 3)), np.zeros((3, 3)), np.full((3, 3), -0.1))
        with pytest.raises(ContractViolation, match="non-negative"):
            assert_tangent_field(ds)

    def test_fails_for_shape_mismatch(self):
        ds = field_dataset(np.ones((3, 3)), np.zeros((3, 3)))
        with pytest.raises(ContractViolation, match="does not match raster"):
            assert_tangent_field(ds, (3, 4))
