"""Frequency domain network models"""

from numbers import Number
import numpy as np


class SDomainModel:
    """Network model evaluated at a frequency.

    Models can be combined arithmetically, with each operation applied to the models' complex
    values at the evaluation frequency. Addition corresponds to series connection; use
    :meth:`parallel` for parallel connection.

    Parameters
    ----------
    function : callable
        Function mapping a frequency in Hz to the model's complex value.
    label : :class:`str`, optional
        The model label.
    """
    def __init__(self, function, label=None):
        self.function = function
        self.label = label

    def __call__(self, frequency):
        return complex(self.function(frequency))

    def impedance(self, frequency):
        """The model's value at `frequency`, for models representing an impedance."""
        return self(frequency)

    @staticmethod
    def _value(other, frequency):
        if isinstance(other, SDomainModel):
            return other(frequency)
        return other

    def _combine(self, other, operation):
        if not isinstance(other, (SDomainModel, Number)):
            return NotImplemented
        return self.__class__(lambda frequency: operation(self(frequency),
                                                          self._value(other, frequency)))

    def __add__(self, other):
        return self._combine(other, lambda a, b: a + b)

    def __radd__(self, other):
        # Addition is commutative.
        return self + other

    def __sub__(self, other):
        return self._combine(other, lambda a, b: a - b)

    def __neg__(self):
        return self.__class__(lambda frequency: -self(frequency))

    def __mul__(self, other):
        return self._combine(other, lambda a, b: a * b)

    def __rmul__(self, other):
        # Multiplication is commutative.
        return self * other

    def __truediv__(self, other):
        return self._combine(other, lambda a, b: a / b)

    def __rtruediv__(self, other):
        if not isinstance(other, Number):
            return NotImplemented
        return self.__class__(lambda frequency: other / self(frequency))

    def inverse(self):
        return 1 / self

    def parallel(self, other):
        """Parallel connection of this model with `other`."""
        return parallel(self, other)

    def __str__(self):
        if self.label is not None:
            return self.label
        return "s-domain model"


def parallel(*models):
    """Parallel connection of impedance models."""
    if not models:
        raise ValueError("at least one model must be specified")

    def admittance(frequency):
        return sum(1 / model(frequency) for model in models)

    return SDomainModel(lambda frequency: 1 / admittance(frequency))

def resistor(resistance):
    """Ideal resistor impedance."""
    resistance = float(resistance)
    return SDomainModel(lambda frequency: complex(resistance), label=f"R={resistance:g}")

def capacitor(capacitance):
    """Ideal capacitor impedance."""
    capacitance = float(capacitance)
    if capacitance <= 0:
        raise ValueError("capacitance must be positive")
    return SDomainModel(lambda frequency: 1 / (2j * np.pi * frequency * capacitance),
                        label=f"C={capacitance:g}")

def inductor(inductance):
    """Ideal inductor impedance."""
    inductance = float(inductance)
    return SDomainModel(lambda frequency: 2j * np.pi * frequency * inductance,
                        label=f"L={inductance:g}")

def rl(resistance, inductance):
    """Series resistor-inductor impedance, e.g. a regulator output."""
    model = resistor(resistance) + inductor(inductance)
    model.label = f"R={float(resistance):g}, L={float(inductance):g}"
    return model

def rcl(resistance, capacitance, inductance):
    """Series resistor-capacitor-inductor impedance, e.g. a capacitor with parasitics."""
    model = resistor(resistance) + capacitor(capacitance) + inductor(inductance)
    model.label = (f"R={float(resistance):g}, C={float(capacitance):g}, "
                   f"L={float(inductance):g}")
    return model
