"""Data representation and manipulation"""

import logging
import numpy as np

from .misc import mag_to_db

LOGGER = logging.getLogger(__name__)


class Series:
    """Data series"""
    def __init__(self, x, y):
        x = np.asarray(x)
        y = np.asarray(y)
        if x.shape != y.shape:
            raise ValueError("specified x and y vectors do not have the same shape")
        self.x = x
        self.y = y

    def __len__(self):
        return len(self.x)

    def __eq__(self, other):
        """Checks if the specified series is identical to this one, within tolerance"""
        return np.allclose(self.x, other.x) and np.allclose(self.y, other.y)


class Response:
    """Complex frequency response of a network model.

    Parameters
    ----------
    series : :class:`.Series`
        The response's frequencies and complex values.
    label : :class:`str`, optional
        The response label, used in plot legends.
    """
    def __init__(self, series, label=None):
        self.series = series
        self.label = label

    @classmethod
    def from_evaluator(cls, frequencies, evaluator, label=None):
        """Sample `evaluator` at each of `frequencies`.

        Parameters
        ----------
        frequencies : sequence of :class:`float`
            The frequencies to evaluate.
        evaluator : callable
            Function mapping a frequency to the model's complex response.
        label : :class:`str`, optional
            The response label.

        Returns
        -------
        :class:`Response`
            The sampled response.

        Raises
        ------
        :class:`EvaluationFailedError`
            If the evaluator raises an error or returns a non-finite or non-numeric value at any
            frequency.
        """
        frequencies = np.asarray(frequencies, dtype=float)
        values = np.empty(len(frequencies), dtype=complex)

        for index, frequency in enumerate(frequencies):
            try:
                value = complex(evaluator(frequency))
            except Exception as error:
                raise EvaluationFailedError(frequency, error) from error

            if not np.isfinite(value):
                raise EvaluationFailedError(frequency, f"non-finite value {value}")

            values[index] = value

        LOGGER.debug("evaluated response at %i frequencies", len(frequencies))

        return cls(Series(frequencies, values), label=label)

    @property
    def frequencies(self):
        return self.series.x

    @property
    def complex_magnitude(self):
        return self.series.y

    @property
    def magnitude(self):
        """Absolute magnitude."""
        return np.abs(self.complex_magnitude)

    @property
    def db_magnitude(self):
        r"""Magnitude scaled in units of decibel.

        The response is power scaled such that the response is :math:`20 \log_{10} \left| x \right|`
        where :math:`x` is the complex response provided by :attr:`.complex_magnitude`.
        """
        with np.errstate(divide="ignore"):
            return mag_to_db(self.magnitude)

    @property
    def phase(self):
        """Phase in degrees, in the half-open interval (-180, 180]."""
        phase = np.degrees(np.angle(self.complex_magnitude))
        # np.angle returns -180 for negative real values with negative zero imaginary part.
        phase[phase <= -180] += 360
        return phase

    def __len__(self):
        return len(self.series)

    def __str__(self):
        if self.label is not None:
            return self.label
        return f"response ({len(self)} points)"


class EvaluationFailedError(ValueError):
    """Model evaluation failure at a sampled frequency"""
    def __init__(self, frequency, reason, *args, **kwargs):
        self.frequency = frequency
        super().__init__(f"model evaluation failed at {frequency} Hz: {reason}", *args,
                         **kwargs)
