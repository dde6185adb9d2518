"""Line drawing algorithms: kernels, tangent flow, FDoG filter, post-processing."""

from colidr.drawing.kernels import gauss, make_gaussian_vector, TAIL_THRESHOLD
from colidr.drawing.tangent_field import EdgeTangentField
from colidr.drawing.dog_filter import FlowDoGFilter
from colidr.drawing.postprocessing import anti_alias, visualize_tangent_field
from colidr.drawing.parallel import parallel_rows

__all__ = [
    "gauss",
    "make_gaussian_vector",
    "TAIL_THRESHOLD",
    "EdgeTangentField",
    "FlowDoGFilter",
    "anti_alias",
    "visualize_tangent_field",
    "parallel_rows",
]
