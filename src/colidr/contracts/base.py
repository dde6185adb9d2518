"""Single enforcement point for the raster and tangent field contracts."""

from colidr.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Raise ContractViolation unless ``condition`` holds.

    The raster and field contracts call this after each drawing stage: the
    tangent field after build and refinement, the binary raster after every
    filtering pass, the final drawing before it leaves the processor. A
    failure means a stage broke its own output guarantee, so there is no
    fallback.

    Parameters
    ----------
    condition : bool
        Invariant of the stage output.
    message : str
        Names the contract and what was found.

    Raises
    ------
    ContractViolation

    Examples
    --------
    >>> require(binary.dtype == np.uint8, "Binary contract violated: dtype is float64")
    """
    if not condition:
        raise ContractViolation(message)
