"""Tests for DrawingWorker file handling."""

import queue

import numpy as np
import pytest

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]

from colidr.contracts import ContractViolation
from colidr.io.loader import ImageLoader
from colidr.pipeline.worker import DrawingWorker


def test_process_file_writes_drawing(internal_config, output_dirs, image_files):
    worker = DrawingWorker(queue.Queue(), internal_config, output_dirs)

    path = worker.process_file(image_files[0])

    assert path == output_dirs["drawings"] / "disc_cld.jpg"
    assert path.exists()
    assert worker.completed == [path]
    assert worker.failed == []


def test_process_file_png_and_etf(make_config, output_dirs, image_files):
    config = make_config(image_format="png", visualize_etf=True)
    worker = DrawingWorker(queue.Queue(), config, output_dirs)

    path = worker.process_file(image_files[1])

    assert path.name == "step_cld.png"
    assert (output_dirs["etf"] / "step_etf.png").exists()
    drawing = ImageLoader(config).load_file(path)
    assert set(np.unique(drawing)) <= {0, 255}


def test_process_file_forwards_dataset(internal_config, output_dirs, image_files):
    out = queue.Queue()
    worker = DrawingWorker(queue.Queue(), internal_config, output_dirs, output_queue=out)

    worker.process_file(image_files[0])

    item = out.get_nowait()
    assert item["name"] == "disc.png"
    assert "line_drawing" in item["dataset"].data_vars


def test_bad_file_is_recorded_and_skipped(internal_config, output_dirs, temp_dir):
    bogus = temp_dir / "notes.png"
    bogus.write_text("not an image")
    worker = DrawingWorker(queue.Queue(), internal_config, output_dirs)

    assert worker.process_file(bogus) is None
    assert worker.failed == [str(bogus)]
    assert worker.completed == []


def test_contract_violation_stops_worker(internal_config, output_dirs, image_files, monkeypatch):
    worker = DrawingWorker(queue.Queue(), internal_config, output_dirs)

    def broken(raster):
        raise ContractViolation("bad raster")

    monkeypatch.setattr(worker.processor, "process", broken)

    with pytest.raises(ContractViolation):
        worker.process_file(image_files[0])
    assert worker.stopped()
    assert worker.failed == [str(image_files[0])]


def test_run_drains_queue_until_sentinel(internal_config, output_dirs, image_files):
    inputs = queue.Queue()
    for path in image_files:
        inputs.put(path)
    inputs.put(None)

    worker = DrawingWorker(inputs, internal_config, output_dirs)
    worker.start()
    worker.join(timeout=60)

    assert not worker.is_alive()
    assert len(worker.completed) == 2


def test_contract_violation_fails_remaining_files(internal_config, output_dirs, image_files, monkeypatch):
    inputs = queue.Queue()
    for path in image_files:
        inputs.put(path)
    inputs.put(image_files[0])
    inputs.put(None)

    worker = DrawingWorker(inputs, internal_config, output_dirs)

    def broken(raster):
        raise ContractViolation("bad raster")

    monkeypatch.setattr(worker.processor, "process", broken)
    worker.start()
    worker.join(timeout=30)

    assert not worker.is_alive()
    assert worker.completed == []
    assert worker.failed == [str(p) for p in image_files] + [str(image_files[0])]
    assert inputs.unfinished_tasks == 0
