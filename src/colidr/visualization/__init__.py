"""Plotting of line drawing results."""

from colidr.visualization.plotter import DrawingPlotter, PlotterThread

__all__ = ['DrawingPlotter', 'PlotterThread']
