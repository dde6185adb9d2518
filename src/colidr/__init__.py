"""`colidr` - COherent LIne DRawing from raster photographs.

Subpackages:
- drawing: Gaussian kernels, edge tangent flow, flow-guided DoG, post-processing
- pipeline: Refinement loop, processor, batch orchestrator
- io: Image decoding and encoding at the pipeline boundary
- service: Function-style request handler
- visualization: Plotting
"""

__version__ = "0.1.0"
