"""Tests for LineDrawingProcessor on synthetic images."""

import numpy as np
import pytest
import xarray as xr

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]

from colidr.contracts import ContractViolation, InitializationError
from colidr.pipeline.processor import LineDrawingProcessor
from colidr.schemas import ParamConfig, resolve_config
from tests.helpers.fake_images import make_disc, make_flat, make_noise, make_step_edge


class TestGenerate:

    def test_step_edge_single_pass(self, make_config):
        """Only the dark column next to the step becomes a line."""
        processor = LineDrawingProcessor(make_config(di=0))

        drawing = processor.generate(make_step_edge())

        assert drawing.dtype == np.uint8
        assert drawing.shape == (10, 10)
        assert np.all(drawing[:, 4] == 0)
        assert np.all(np.delete(drawing, 4, axis=1) == 255)

    def test_flat_image_has_no_lines(self, make_config):
        drawing = LineDrawingProcessor(make_config(di=0)).generate(make_flat())
        assert np.all(drawing == 255)

    def test_flat_image_with_strong_surround_is_all_lines(self, make_config):
        drawing = LineDrawingProcessor(make_config(di=0, rho=1.5)).generate(make_flat())
        assert np.all(drawing == 0)

    def test_default_output_is_binary(self, internal_config):
        drawing = LineDrawingProcessor(internal_config).generate(make_disc())
        assert set(np.unique(drawing)) <= {0, 255}
        assert np.any(drawing == 0)
        assert np.any(drawing == 255)

    def test_source_is_not_modified(self, internal_config):
        image = make_noise()
        before = image.copy()
        LineDrawingProcessor(internal_config).generate(image)
        assert np.array_equal(image, before)

    def test_repeatable(self, internal_config):
        processor = LineDrawingProcessor(internal_config)
        image = make_noise()
        assert np.array_equal(processor.generate(image), processor.generate(image))

    def test_worker_count_does_not_change_output(self):
        image = make_noise()
        single = resolve_config(ParamConfig(), None, {"workers": 1})
        banded = resolve_config(ParamConfig(parallel={"min_band_rows": 1}), None, {"workers": 4})

        a = LineDrawingProcessor(single).generate(image)
        b = LineDrawingProcessor(banded).generate(image)

        assert np.array_equal(a, b)

    def test_anti_alias_adds_grey_levels(self, make_config):
        image = make_disc()
        plain = LineDrawingProcessor(make_config(ai=False)).generate(image)
        soft = LineDrawingProcessor(make_config(ai=True)).generate(image)

        assert soft.dtype == np.uint8
        assert soft.shape == plain.shape
        assert np.any((soft > 0) & (soft < 255))

    def test_single_row_image(self, make_config):
        image = np.tile(np.array([0, 0, 0, 255, 255, 255], dtype=np.uint8), (1, 1))
        drawing = LineDrawingProcessor(make_config(di=0)).generate(image)
        assert drawing.shape == (1, 6)


class TestFailures:

    def test_color_image_rejected(self, internal_config):
        with pytest.raises(InitializationError, match="2-D"):
            LineDrawingProcessor(internal_config).generate(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_empty_image_rejected(self, internal_config):
        with pytest.raises(InitializationError, match="zero area"):
            LineDrawingProcessor(internal_config).generate(np.zeros((0, 5), dtype=np.uint8))

    def test_non_array_rejected(self, internal_config):
        with pytest.raises(InitializationError):
            LineDrawingProcessor(internal_config).generate([[0, 255], [255, 0]])

    def test_float_image_violates_contract(self, internal_config):
        with pytest.raises(ContractViolation, match="uint8"):
            LineDrawingProcessor(internal_config).generate(np.zeros((8, 8), dtype=np.float64))


class TestProcess:

    def test_dataset_variables(self, internal_config):
        ds = LineDrawingProcessor(internal_config).process(make_disc())

        assert isinstance(ds, xr.Dataset)
        for name in ("source", "line_drawing", "tangent_x", "tangent_y", "magnitude"):
            assert name in ds.data_vars
            assert ds[name].dims == ("y", "x")
        assert "etf_visualization" not in ds.data_vars
        assert ds["line_drawing"].dtype == np.uint8

    def test_dataset_matches_generate(self, internal_config):
        processor = LineDrawingProcessor(internal_config)
        image = make_disc()
        ds = processor.process(image)
        assert np.array_equal(ds["line_drawing"].values, processor.generate(image))
        assert np.array_equal(ds["source"].values, image)

    def test_attrs_record_parameters(self, make_config):
        ds = LineDrawingProcessor(make_config(sr=2.0, di=2, k=2)).process(make_disc())

        assert ds.attrs["sigma_r"] == 2.0
        assert ds.attrs["etf_kernel"] == 2
        assert ds.attrs["fdog_iterations"] == 2
        assert ds.attrs["anti_alias"] == 0
        assert ds.attrs["loop_history"] == "filtering,recombining,filtering,recombining,filtering"

    def test_etf_visualization_included_on_request(self, make_config):
        ds = LineDrawingProcessor(make_config(visualize_etf=True)).process(make_disc())

        vis = ds["etf_visualization"]
        assert vis.dtype == np.uint8
        assert vis.shape == (48, 48)

    def test_tangent_field_is_unit_or_zero(self, internal_config):
        etf = LineDrawingProcessor(internal_config).build_tangent_field(make_disc())
        norm = np.hypot(etf.direction[..., 0], etf.direction[..., 1])
        assert np.all((norm == 0) | np.isclose(norm, 1.0))
