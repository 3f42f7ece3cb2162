"""Miscellaneous functions"""

import abc
import numpy as np


class Singleton(abc.ABCMeta):
    """Metaclass implementing the singleton pattern

    This ensures that there is only ever one instance of a class that
    inherits this one.

    This is a subclass of ABCMeta so that it can be used as a metaclass of a
    subclass of an ABCMeta class.
    """

    # list of children by class
    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)

        return cls._instances[cls]


def mag_to_db(quantity):
    return 20 * np.log10(quantity)

def decade_less_equal(value):
    """Largest power of ten not greater than `value`"""
    return 10 ** np.floor(np.log10(value))
