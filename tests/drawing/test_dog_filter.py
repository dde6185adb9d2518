"""Tests for the flow-guided DoG filter stages."""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from colidr.drawing.dog_filter import FlowDoGFilter
from colidr.drawing.raster_utils import to_float_raster
from colidr.drawing.tangent_field import EdgeTangentField
from tests.helpers.fake_images import make_disc, make_flat, make_noise, make_step_edge


def make_filter(img, sigma_r=2.6, **kwargs):
    etf = EdgeTangentField.build(img, **kwargs)
    return FlowDoGFilter(etf, sigma_r, **kwargs)


class TestGradientDoG:

    def test_flat_field_samples_only_center(self):
        img = make_flat(value=200)
        dog = make_filter(img).gradient_dog(to_float_raster(img), 0.98, 1.0)
        expected = (1 - 0.98) * 200 / 255.0
        assert np.allclose(dog, expected)

    def test_step_edge_dark_side_negative(self):
        img = make_step_edge()
        dog = make_filter(img).gradient_dog(to_float_raster(img), 0.98, 1.0)
        assert np.all(dog[:, 4] < -0.1)
        assert np.all(dog[:, 5] > 0.1)
        assert np.allclose(dog[:, :4], 0.0)

    def test_rho_zero_gives_center_average(self):
        img = make_disc()
        dog = make_filter(img).gradient_dog(to_float_raster(img), 0.0, 1.0)
        assert dog.min() >= 0.0
        assert dog.max() <= 1.0

    def test_output_shape_and_dtype(self):
        img = make_noise(shape=(17, 23))
        dog = make_filter(img).gradient_dog(to_float_raster(img), 0.98, 1.0)
        assert dog.shape == (17, 23)
        assert dog.dtype == np.float64


class TestFlowDoG:

    def test_output_normalized(self):
        img = make_disc()
        f = make_filter(img)
        fdog = f.flow_dog(f.gradient_dog(to_float_raster(img), 0.98, 1.0), 3.0)
        assert fdog.min() == pytest.approx(0.0)
        assert fdog.max() == pytest.approx(1.0)

    def test_positive_response_maps_to_one(self):
        img = make_flat(value=200)
        f = make_filter(img)
        dog = np.full(img.shape, 0.3)
        fdog = f.flow_dog(dog, 3.0)
        assert np.all(fdog == 1.0)

    def test_constant_negative_response_left_unnormalized(self):
        img = make_flat()
        f = make_filter(img)
        dog = np.full(img.shape, -0.5)
        fdog = f.flow_dog(dog, 3.0)
        assert np.allclose(fdog, 1.0 + np.tanh(-0.5))

    def test_step_edge_marks_dark_side_column(self):
        img = make_step_edge()
        f = make_filter(img)
        fdog = f.flow_dog(f.gradient_dog(to_float_raster(img), 0.98, 1.0), 3.0)
        assert np.allclose(fdog[:, 4], 0.0, atol=1e-9)
        other = np.delete(fdog, 4, axis=1)
        assert np.allclose(other, 1.0)

    def test_walk_integrates_along_flow(self):
        # A single negative pixel on a vertical edge spreads along the
        # column, never across it.
        img = make_step_edge(shape=(21, 10))
        f = make_filter(img)
        dog = np.zeros(img.shape)
        dog[10, 4] = -1.0
        fdog = f.flow_dog(dog, 3.0)
        assert fdog[10, 4] == pytest.approx(0.0)
        assert fdog[9, 4] < 1.0
        assert fdog[11, 4] < 1.0
        assert fdog[10, 3] == pytest.approx(1.0)
        assert fdog[10, 2] == pytest.approx(1.0)

    def test_deterministic_across_worker_counts(self):
        img = make_noise(shape=(41, 33))
        single = make_filter(img, workers=1)
        banded = make_filter(img, workers=6, min_band_rows=1)
        src = to_float_raster(img)
        a = single.flow_dog(single.gradient_dog(src, 0.98, 1.0), 3.0)
        b = banded.flow_dog(banded.gradient_dog(src, 0.98, 1.0), 3.0)
        assert np.array_equal(a, b)


class TestBinaryThreshold:

    def test_two_valued_uint8(self):
        f = make_filter(make_flat())
        fdog = np.random.default_rng(0).random((12, 12))
        out = f.binary_threshold(fdog, 0.5)
        assert out.dtype == np.uint8
        assert set(np.unique(out)) <= {0, 255}
        assert np.array_equal(out == 0, fdog < 0.5)

    def test_tau_zero_gives_all_background(self):
        f = make_filter(make_flat())
        fdog = np.random.default_rng(1).random((12, 12))
        assert np.all(f.binary_threshold(fdog, 0.0) == 255)

    def test_tau_above_one_gives_all_edges(self):
        f = make_filter(make_flat())
        fdog = np.random.default_rng(2).random((12, 12))
        fdog[0, 0] = 1.0
        assert np.all(f.binary_threshold(fdog, 1.01) == 0)

    def test_value_equal_to_tau_is_background(self):
        f = make_filter(make_flat())
        fdog = np.full((12, 12), 0.98)
        assert np.all(f.binary_threshold(fdog, 0.98) == 255)
