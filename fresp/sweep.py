"""Frequency sweep generation"""

import logging
import numpy as np

from .config import FrespConfig

LOGGER = logging.getLogger(__name__)
CONF = FrespConfig()


def log_range(fstart, fstop, ratio=None, points_per_decade=None, rel_tol=None):
    """Logarithmically spaced frequency vector.

    The vector starts at `fstart` and advances geometrically by a constant factor of
    ``ratio ** (1 / points_per_decade)`` for as long as the next value does not exceed `fstop`.
    Each value is computed from its index rather than by accumulating the step, so identical
    inputs always produce an identical vector.

    The stop frequency is included when a step lands on it to within the relative tolerance
    `rel_tol`, in which case the last value is exactly `fstop`.

    Parameters
    ----------
    fstart, fstop : :class:`float`
        The start and stop frequencies. Both must be positive, with `fstart` < `fstop`.
    ratio : :class:`float`, optional
        The logarithmic step base, e.g. 10 for decades. Must be greater than 1. Defaults to the
        configured value.
    points_per_decade : :class:`int`, optional
        The number of points per multiplication by `ratio`. Defaults to the configured value.
    rel_tol : :class:`float`, optional
        Relative tolerance used to decide whether the stop frequency is reached. Defaults to the
        configured value.

    Returns
    -------
    :class:`np.ndarray`
        The strictly increasing frequency vector.

    Raises
    ------
    :class:`InvalidRangeError`
        If the frequency range or step parameters are invalid.
    """
    if ratio is None:
        ratio = float(CONF["sweep"]["ratio"])
    if points_per_decade is None:
        points_per_decade = int(CONF["sweep"]["points_per_decade"])
    if rel_tol is None:
        rel_tol = float(CONF["sweep"]["endpoint_rel_tol"])

    fstart = float(fstart)
    fstop = float(fstop)
    ratio = float(ratio)

    if not np.isfinite(fstart) or not np.isfinite(fstop) or fstart <= 0 or fstop <= 0:
        raise InvalidRangeError(f"frequencies must be positive and finite (got {fstart} to "
                                f"{fstop})")
    if fstart >= fstop:
        raise InvalidRangeError(f"start frequency {fstart} must be below stop frequency {fstop}")
    if not ratio > 1:
        raise InvalidRangeError(f"step ratio must be greater than 1 (got {ratio})")
    if int(points_per_decade) != points_per_decade or points_per_decade < 1:
        raise InvalidRangeError(f"points per decade must be a positive integer (got "
                                f"{points_per_decade})")

    points_per_decade = int(points_per_decade)

    # Number of whole steps that fit in the range, allowing the last step to undershoot the stop
    # frequency by the tolerance.
    steps = points_per_decade * np.log(fstop / fstart) / np.log(ratio)
    nsteps = int(np.floor(steps * (1 + rel_tol)))

    exponents = np.arange(nsteps + 1) / points_per_decade
    frequencies = fstart * ratio ** exponents

    if len(frequencies) > 1 and np.isclose(frequencies[-1], fstop, rtol=rel_tol, atol=0):
        # Snap to the exact stop frequency. The first value is always the start frequency.
        frequencies[-1] = fstop
    elif frequencies[-1] > fstop:
        # Rounding pushed the last point over the boundary.
        frequencies = frequencies[:-1]

    LOGGER.debug("generated %i frequencies between %g and %g Hz", len(frequencies), fstart, fstop)

    return frequencies


class InvalidRangeError(ValueError):
    """Invalid frequency sweep range"""
    pass
