"""Fixtures for pipeline tests that read image files from disk."""

import cv2
import pytest

from tests.helpers.fake_images import make_disc, make_step_edge


@pytest.fixture
def image_files(temp_dir):
    """Two small PNG inputs on disk."""
    inputs = temp_dir / "inputs"
    inputs.mkdir()
    disc = inputs / "disc.png"
    step = inputs / "step.png"
    cv2.imwrite(str(disc), make_disc())
    cv2.imwrite(str(step), make_step_edge(shape=(24, 24), edge_col=12))
    return [disc, step]
