"""Threaded batch orchestration.

Feeds input files to a drawing worker thread and, when plotting is
enabled, its results to a plotter thread. Manages logging, lifecycle and
the final summary.
"""

import queue
import time
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, TYPE_CHECKING

from colidr.pipeline.worker import DrawingWorker
from colidr.setup_directories import get_log_path, setup_output_directories
from colidr.visualization.plotter import PlotterThread

if TYPE_CHECKING:
    from colidr.schemas import InternalConfig

__all__ = ['PipelineOrchestrator']

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs the line drawing pipeline over a batch of image files.

    **Pipeline Architecture:**

    1. **Worker Thread**: Loads each queued file, draws it and writes the
       drawing (plus the tangent field visualization when enabled).

    2. **Plotter Thread** (``visualization.enabled``): Renders a summary
       figure per image from the datasets the worker forwards.

    **Logging:**

    All output goes to both console and log file (logs/colidr_pipeline.log).
    Log level controlled via ``config.logging.level``.

    Example usage::

        orch = PipelineOrchestrator(config, output_dirs)
        summary = orch.start(["a.jpg", "b.png"])
        summary["completed"], summary["failed"]
    """

    def __init__(self, config: "InternalConfig", output_dirs: Optional[Dict[str, Path]] = None,
                 max_queue_size: int = 100):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        output_dirs : dict, optional
            Paths from setup_output_directories(). Created from
            ``config.base_dir`` when omitted.
        max_queue_size : int, optional
            Maximum size of the plotter queue (default: 100).
        """
        self.config = config
        self.output_dirs = output_dirs or setup_output_directories(config.base_dir)

        self.input_queue = queue.Queue()
        self.plotter_queue = queue.Queue(maxsize=max_queue_size)

        self.worker = None
        self.plotter = None

        self._stopped = False
        self._start_time = None

    def _setup_logging(self):
        """Configure root logger with file and console handlers."""
        log_level = getattr(logging, self.config.logging.level)
        log_path = get_log_path(self.output_dirs)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()

        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_path)

    def start(self, inputs: Iterable) -> Dict[str, list]:
        """Process all ``inputs`` and block until done.

        Parameters
        ----------
        inputs : iterable of str or Path
            Image files to draw.

        Returns
        -------
        dict
            ``completed`` (written drawing paths), ``failed`` (input paths)
            and ``plots`` (written figure paths).
        """
        self._setup_logging()
        self._start_time = time.time()

        logger.info("=" * 60)
        logger.info("Starting Line Drawing Pipeline")
        logger.info("=" * 60)

        if self.config.visualization.enabled:
            self.plotter = PlotterThread(self.plotter_queue, self.output_dirs, self.config)
            self.plotter.start()

        self.worker = DrawingWorker(
            input_queue=self.input_queue,
            config=self.config,
            output_dirs=self.output_dirs,
            output_queue=self.plotter_queue if self.plotter else None,
        )
        self.worker.start()

        count = 0
        for path in inputs:
            self.input_queue.put(Path(path))
            count += 1
        self.input_queue.put(None)
        logger.info("Queued %d file(s)", count)

        try:
            self.worker.join()
            if self.plotter:
                self.plotter_queue.join()
        except KeyboardInterrupt:
            logger.info("Shutdown signal received (Ctrl+C)")
        finally:
            self.stop()

        return {
            "completed": list(self.worker.completed),
            "failed": list(self.worker.failed),
            "plots": list(self.plotter.plot_files) if self.plotter else [],
        }

    def stop(self):
        """Stop worker threads and log the summary. Safe to call twice."""
        if self._stopped:
            return
        self._stopped = True

        for name, thread in [("Worker", self.worker), ("Plotter", self.plotter)]:
            if thread and thread.is_alive():
                thread.stop()
                thread.join(timeout=5)
                if thread.is_alive():
                    logger.warning("%s did not stop cleanly", name)

        elapsed = time.time() - self._start_time if self._start_time else 0
        logger.info("=" * 60)
        if self.worker:
            logger.info("Pipeline stopped. Runtime: %.1f seconds, completed=%d, failed=%d",
                        elapsed, len(self.worker.completed), len(self.worker.failed))
        logger.info("=" * 60)
