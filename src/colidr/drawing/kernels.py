"""Truncated 1-D Gaussian weight vectors for the DoG stages."""

import math
import logging

import numpy as np

from colidr.contracts.failure import ComputationError, ConfigurationError

logger = logging.getLogger(__name__)

# Smallest weight kept at the tail of a vector
TAIL_THRESHOLD = 0.001


def gauss(x, mean, sigma):
    """Normal density with the given mean and standard deviation.

    Works on scalars and numpy arrays alike.
    """
    return np.exp(-((x - mean) ** 2) / (2.0 * sigma * sigma)) / math.sqrt(2.0 * math.pi * sigma * sigma)


def make_gaussian_vector(sigma: float) -> np.ndarray:
    """Build the one-sided Gaussian weight vector for ``sigma``.

    ``g[j] = gauss(j, 0, sigma)`` for ``j = 0..i``, where ``i`` is the first
    integer >= 1 whose weight drops below TAIL_THRESHOLD. The last element
    is therefore always below the threshold. ``g[0]`` is the peak and is
    not doubled; callers index the vector by absolute offset.

    Parameters
    ----------
    sigma : float
        Standard deviation, must be positive and finite.

    Returns
    -------
    np.ndarray
        float64 vector of length ``i + 1`` (at least 2).

    Raises
    ------
    ConfigurationError
        If sigma is not a positive finite number.
    ComputationError
        If sigma is so wide that even the peak weight is below
        TAIL_THRESHOLD (sigma above roughly 398), which leaves no usable
        weights.

    Examples
    --------
    >>> g = make_gaussian_vector(1.0)
    >>> len(g), g[-1] < 0.001
    (5, True)
    """
    try:
        sigma = float(sigma)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"sigma must be a number, got {sigma!r}") from exc
    if not math.isfinite(sigma) or sigma <= 0:
        raise ConfigurationError(f"sigma must be a positive finite number, got {sigma!r}")

    peak = gauss(0.0, 0.0, sigma)
    if peak < TAIL_THRESHOLD:
        raise ComputationError(
            f"Gaussian vector for sigma={sigma} collapses: peak weight {peak:.2e} "
            f"is below {TAIL_THRESHOLD}"
        )

    i = 1
    while gauss(float(i), 0.0, sigma) >= TAIL_THRESHOLD:
        i += 1

    vector = gauss(np.arange(i + 1, dtype=np.float64), 0.0, sigma)
    logger.debug("Gaussian vector: sigma=%.3f, length=%d", sigma, vector.size)
    return vector
