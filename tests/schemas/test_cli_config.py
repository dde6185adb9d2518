"""Tests for CLIConfig normalization and overrides."""

import pytest
from pydantic import ValidationError

pytestmark = pytest.mark.unit

from colidr.schemas import CLIConfig


def test_log_level_uppercased():
    assert CLIConfig(log_level="debug").log_level == "DEBUG"


def test_jpg_becomes_jpeg():
    assert CLIConfig(image_format="JPG").image_format == "jpeg"


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        CLIConfig(colour="blue")


def test_workers_must_be_positive():
    with pytest.raises(ValidationError):
        CLIConfig(workers=0)


def test_empty_cli_has_no_overrides():
    assert CLIConfig().to_internal_overrides() == {}


def test_overrides_structure():
    cli = CLIConfig(base_dir="/out", log_level="WARNING", workers=2,
                    anti_alias=True, visualize_etf=False, plot=True, image_format="png")

    assert cli.to_internal_overrides() == {
        "base_dir": "/out",
        "logging": {"level": "WARNING"},
        "parallel": {"workers": 2},
        "postprocessing": {"anti_alias": True, "visualize_etf": False},
        "visualization": {"enabled": True},
        "output": {"image_format": "png"},
    }
