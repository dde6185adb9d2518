"""Tests for PipelineOrchestrator wiring and batch runs."""

import queue

import pytest

from colidr.pipeline.orchestrator import PipelineOrchestrator
from colidr.setup_directories import get_log_path

pytestmark = [pytest.mark.pipeline]


@pytest.mark.unit
def test_orchestrator_initialization(internal_config, output_dirs):
    orch = PipelineOrchestrator(internal_config, output_dirs)

    assert orch.config == internal_config
    assert orch.output_dirs == output_dirs
    assert isinstance(orch.input_queue, queue.Queue)
    assert orch.plotter_queue.maxsize == 100


@pytest.mark.unit
def test_orchestrator_creates_dirs_from_base_dir(make_config, temp_dir):
    config = make_config(base_dir=str(temp_dir / "run"))
    orch = PipelineOrchestrator(config)

    assert orch.output_dirs["drawings"].is_dir()
    assert orch.output_dirs["base"] == (temp_dir / "run").resolve()


@pytest.mark.unit
def test_orchestrator_stop_is_idempotent(internal_config, output_dirs):
    orch = PipelineOrchestrator(internal_config, output_dirs)

    orch.stop()
    orch.stop()  # should not raise


@pytest.mark.unit
def test_orchestrator_logging_writes_file(internal_config, output_dirs, restore_logging):
    orch = PipelineOrchestrator(internal_config, output_dirs)
    orch._setup_logging()

    assert get_log_path(output_dirs).exists()


@pytest.mark.integration
def test_batch_run_with_plots(make_config, output_dirs, image_files, temp_dir, restore_logging):
    bogus = temp_dir / "broken.jpg"
    bogus.write_bytes(b"\x00\x01\x02")
    config = make_config(cli={"plot": True, "workers": 2})

    summary = PipelineOrchestrator(config, output_dirs).start(image_files + [bogus])

    assert sorted(p.name for p in summary["completed"]) == ["disc_cld.jpg", "step_cld.jpg"]
    assert summary["failed"] == [str(bogus)]
    assert len(summary["plots"]) == 2
    for plot in summary["plots"]:
        assert plot.endswith(".png")
    log_text = get_log_path(output_dirs).read_text()
    assert "Starting Line Drawing Pipeline" in log_text


@pytest.mark.integration
def test_batch_run_without_plots(internal_config, output_dirs, image_files, restore_logging):
    summary = PipelineOrchestrator(internal_config, output_dirs).start(image_files)

    assert len(summary["completed"]) == 2
    assert summary["plots"] == []
    assert not any(output_dirs["plots"].iterdir())
