"""Background worker that draws queued image files."""

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

import numpy as np

from colidr.contracts import ContractViolation
from colidr.io.loader import ImageLoader
from colidr.io.writer import save_image
from colidr.pipeline.processor import LineDrawingProcessor
from colidr.setup_directories import get_drawing_path, get_etf_path

if TYPE_CHECKING:
    from colidr.schemas import InternalConfig

__all__ = ['DrawingWorker']

logger = logging.getLogger(__name__)


class DrawingWorker(threading.Thread):
    """Draws every image file it receives from ``input_queue``.

    For each file the worker loads it as grayscale, runs
    LineDrawingProcessor.process(), writes the drawing (and the tangent field
    visualization when enabled) and forwards the dataset to the plotter
    queue. ``None`` on the input queue ends the thread.

    A failing file is logged and recorded in ``failed``; the worker moves on
    to the next one. A ContractViolation is a pipeline bug and stops the
    worker; files still queued are then recorded in ``failed`` without
    being attempted.
    """

    def __init__(self, input_queue: queue.Queue, config: "InternalConfig",
                 output_dirs: Dict[str, Path],
                 output_queue: Optional[queue.Queue] = None,
                 name: str = "DrawingWorker"):
        super().__init__(daemon=True, name=name)

        self.input_queue = input_queue
        self.config = config
        self.output_dirs = output_dirs
        self.output_queue = output_queue
        self._stop_event = threading.Event()

        self.loader = ImageLoader(config)
        self.processor = LineDrawingProcessor(config)

        self.completed: List[Path] = []
        self.failed: List[str] = []

    def stop(self):
        self._stop_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def process_file(self, filepath) -> Optional[Path]:
        """Draw one file. Returns the written drawing path, or None on failure."""
        filepath = Path(filepath)
        try:
            t0 = time.time()
            logger.info("Processing: %s", filepath.name)

            raster = self.loader.load_file(filepath)
            ds = self.processor.process(raster)

            out_cfg = self.config.output
            drawing_path = save_image(
                ds["line_drawing"].values,
                get_drawing_path(self.output_dirs, filepath.name, out_cfg.image_format),
                out_cfg.image_format,
                out_cfg.jpeg_quality,
            )

            if "etf_visualization" in ds.data_vars:
                etf_path = save_image(ds["etf_visualization"].values,
                                      get_etf_path(self.output_dirs, filepath.name), "png")
                logger.debug("Tangent field visualization saved: %s", etf_path)

            if self.output_queue is not None:
                try:
                    self.output_queue.put({"dataset": ds, "name": filepath.name}, timeout=5)
                except queue.Full:
                    logger.warning("Plotter queue full, skipping plot for %s", filepath.name)

            edges = int(np.count_nonzero(ds["line_drawing"].values == 0))
            logger.info("Saved %s (%d edge pixels, %.2fs)", drawing_path.name, edges, time.time() - t0)
            self.completed.append(drawing_path)
            return drawing_path

        except ContractViolation:
            logger.critical("Pipeline contract violated while processing %s", filepath)
            self.failed.append(str(filepath))
            self.stop()
            raise

        except Exception:
            logger.exception("Error processing %s", filepath)
            self.failed.append(str(filepath))
            return None

    def _skip_remaining(self) -> None:
        """Record every file still queued as failed, up to the None sentinel."""
        while True:
            try:
                filepath = self.input_queue.get(timeout=1)
            except queue.Empty:
                return
            try:
                if filepath is None:
                    return
                logger.error("Skipping %s after contract violation", filepath)
                self.failed.append(str(filepath))
            finally:
                self.input_queue.task_done()

    def run(self):
        """Main worker loop (runs in thread)."""
        logger.info("Worker started, waiting for files...")

        while not self.stopped():
            try:
                filepath = self.input_queue.get(timeout=1)
            except queue.Empty:
                continue

            try:
                if filepath is None:
                    break
                self.process_file(filepath)
            except ContractViolation:
                self._skip_remaining()
                break
            finally:
                self.input_queue.task_done()

        logger.info("Worker stopped")
