"""Pipeline contracts and failure types.

Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Algorithms handle numerical edge cases
"""

from colidr.contracts.failure import (
    ComputationError,
    ConfigurationError,
    ContractViolation,
    InitializationError,
)
from colidr.contracts.base import require
from colidr.contracts.raster import assert_grayscale_raster, assert_binary_raster
from colidr.contracts.field import assert_tangent_field

__all__ = [
    "ComputationError",
    "ConfigurationError",
    "ContractViolation",
    "InitializationError",
    "require",
    "assert_grayscale_raster",
    "assert_binary_raster",
    "assert_tangent_field",
]
