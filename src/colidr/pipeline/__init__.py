"""Line drawing pipeline: refinement loop, processor, batch orchestration."""

from colidr.pipeline.refinement import LoopState, RefinementLoop
from colidr.pipeline.processor import LineDrawingProcessor

__all__ = ['LoopState', 'RefinementLoop', 'LineDrawingProcessor']
