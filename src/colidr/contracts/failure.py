"""Centralized failure types for the line drawing pipeline.

Every failure raises one of four exception types so that callers can tell
bad input apart from bad configuration, numerical trouble and pipeline bugs.
"""


class InitializationError(RuntimeError):
    """Raised when the source image cannot be turned into a usable raster.

    Missing file, directory given instead of a file, undecodable or
    unsupported content, zero-area raster, failed download.
    """
    pass


class ConfigurationError(ValueError):
    """Raised for invalid configuration values.

    Non-positive sigma, negative iteration counts, even blur size, etc.
    Pydantic validation errors are re-raised as this type by resolve_config().
    """
    pass


class ComputationError(RuntimeError):
    """Raised when a numerically degenerate state is reached.

    Examples are a Gaussian vector whose peak weight already falls below
    the truncation threshold, or a filter stage producing non-finite values.
    """
    pass


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input. It means a
    pipeline stage did not produce the invariants it promised.

    Key distinction:
    - ConfigurationError: User/config error (mostly raised via Pydantic)
    - InitializationError: Unusable source image
    - ContractViolation: Pipeline bug (programmer error)
    """
    pass
