"""Line drawing visualization.

Renders source image + tangent field + line drawing side by side.
Supports threaded queue-based processing for pipeline integration.
"""

import threading
import queue
import logging
from pathlib import Path
from typing import Dict, Tuple, TYPE_CHECKING

import numpy as np
import xarray as xr
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from colidr.schemas import InternalConfig

__all__ = ['DrawingPlotter', 'PlotterThread']

logger = logging.getLogger(__name__)


class DrawingPlotter:
    """Three-panel figure of one processed image.

    - **Left Panel**: Grayscale source image
    - **Middle Panel**: Tangent field. The line integral convolution image
      when the dataset carries one, otherwise the gradient magnitude with
      subsampled tangent arrows.
    - **Right Panel**: Line drawing

    Example usage::

        plotter = DrawingPlotter(config)
        plot_path = plotter.plot(ds, output_path="plots/portrait_summary.png")
    """

    def __init__(self, config: "InternalConfig"):
        viz_config = config.visualization

        self.dpi = viz_config.dpi
        self.figsize = tuple(viz_config.figsize)
        self.output_format = viz_config.output_format
        self.cmap = viz_config.cmap
        # Aim for roughly 30 arrows along the longer side
        self.arrows_per_side = 30

        logger.info("DrawingPlotter initialized (format=%s, dpi=%d)", self.output_format, self.dpi)

    def _setup_figure(self) -> Tuple[plt.Figure, np.ndarray]:
        """Create figure with three subplots."""
        fig, axes = plt.subplots(1, 3, figsize=self.figsize, dpi=self.dpi)
        return fig, axes

    def _plot_tangent_arrows(self, ax: plt.Axes, ds: xr.Dataset) -> None:
        """Subsampled tangent vectors on top of the magnitude image."""
        rows, cols = ds["tangent_x"].shape
        step = max(1, max(rows, cols) // self.arrows_per_side)
        y_idx = np.arange(0, rows, step)
        x_idx = np.arange(0, cols, step)
        X, Y = np.meshgrid(x_idx, y_idx)

        U = ds["tangent_x"].values[np.ix_(y_idx, x_idx)]
        # Image rows grow downwards, quiver's y axis grows upwards
        V = -ds["tangent_y"].values[np.ix_(y_idx, x_idx)]

        ax.quiver(X, Y, U, V, color='tab:red', pivot='middle',
                  angles='xy', scale_units='xy', scale=1.0 / step,
                  width=0.003, headwidth=0, headlength=0, headaxislength=0)

    def _plot_tangent_field(self, ax: plt.Axes, ds: xr.Dataset) -> None:
        if "etf_visualization" in ds.data_vars:
            ax.imshow(ds["etf_visualization"].values, cmap=self.cmap, vmin=0, vmax=255)
            ax.set_title("Edge tangent flow (LIC)")
        else:
            ax.imshow(ds["magnitude"].values, cmap="magma", vmin=0, vmax=1)
            self._plot_tangent_arrows(ax, ds)
            ax.set_title("Gradient magnitude + tangents")

    def _save_figure(self, fig: plt.Figure, output_path: Path) -> str:
        """Save figure in configured format."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_file = output_path.with_suffix(f'.{self.output_format}')

        fig.savefig(output_file, dpi=self.dpi, bbox_inches='tight', format=self.output_format)
        plt.close(fig)
        logger.info("Plot saved: %s", output_file)

        return str(output_file)

    def plot(self, ds: xr.Dataset, output_path) -> str:
        """Render the dataset from LineDrawingProcessor.process() to a file.

        Parameters
        ----------
        ds : xr.Dataset
            Must hold ``source``, ``tangent_x``, ``tangent_y``, ``magnitude``
            and ``line_drawing``.
        output_path : str or Path
            Target path; the suffix is replaced by the configured format.

        Returns
        -------
        str
            Path of the written figure.
        """
        fig, (ax_src, ax_etf, ax_cld) = self._setup_figure()

        ax_src.imshow(ds["source"].values, cmap=self.cmap, vmin=0, vmax=255)
        ax_src.set_title("Source")

        self._plot_tangent_field(ax_etf, ds)

        ax_cld.imshow(ds["line_drawing"].values, cmap=self.cmap, vmin=0, vmax=255)
        title = "Line drawing"
        if ds.attrs:
            title += " (sr={sigma_r}, sm={sigma_m}, tau={tau})".format(**ds.attrs)
        ax_cld.set_title(title)

        for ax in (ax_src, ax_etf, ax_cld):
            ax.set_axis_off()

        return self._save_figure(fig, Path(output_path))


class PlotterThread(threading.Thread):
    """Background thread that plots datasets queued by the pipeline worker.

    Queue items are dicts with ``dataset`` (xr.Dataset) and ``name`` (the
    source file name). ``None`` signals shutdown.
    """

    def __init__(self, input_queue: queue.Queue, output_dirs: Dict, config: "InternalConfig",
                 name: str = 'DrawingPlotter'):
        super().__init__(name=name, daemon=True)

        self.input_queue = input_queue
        self.output_dirs = output_dirs
        self.config = config

        self.plotter = DrawingPlotter(config)
        self.plot_files = []
        self.running = True

    def run(self):
        """Process items from queue until shutdown signal received.

        Logs errors but continues processing on per-item failures.
        """
        logger.info("%s started", self.name)

        while self.running:
            try:
                item = self.input_queue.get(timeout=1.0)
            except queue.Empty:
                continue

            try:
                if item is None:
                    logger.info("%s received shutdown signal", self.name)
                    break
                self._process_item(item)
            except Exception:
                logger.exception("Error in %s", self.name)
            finally:
                self.input_queue.task_done()

        logger.info("%s stopped", self.name)

    def _process_item(self, item: Dict):
        """Plot one queued dataset."""
        from colidr.setup_directories import get_plot_path

        output_path = get_plot_path(self.output_dirs, item["name"], "summary",
                                    self.plotter.output_format)
        plot_file = self.plotter.plot(item["dataset"], output_path)
        self.plot_files.append(plot_file)

    def stop(self):
        """Signal thread to stop."""
        self.running = False
        self.input_queue.put(None)
