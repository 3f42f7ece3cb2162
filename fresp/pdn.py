"""Power distribution network impedance models"""

import logging
from collections import namedtuple
import numpy as np
from scipy.signal import find_peaks
from quantiphy import Quantity

from .config import FrespConfig
from .data import Response
from .models import rcl, parallel

LOGGER = logging.getLogger(__name__)
CONF = FrespConfig()

# Impedance extremum.
Resonance = namedtuple("Resonance", ["frequency", "impedance", "kind"])

# Frequency band in which the impedance exceeds a target.
Exceedance = namedtuple("Exceedance", ["fstart", "fstop", "peak"])

# Capacitor bank entry.
CapacitorBank = namedtuple("CapacitorBank", ["name", "model", "count"])


class CapacitorPart:
    """Ceramic capacitor with package-dependent parasitics.

    Parameters
    ----------
    capacitance : :class:`float` or :class:`str`
        The capacitance, in farads. Strings with SI prefixes such as "4.7u" are accepted.
    package : :class:`str`
        The package size code, e.g. "0402". Must be listed in the configured capacitor packages.
    """
    def __init__(self, capacitance, package):
        package = str(package)
        packages = self.packages()
        if package not in packages:
            raise ValueError(f"unknown capacitor package '{package}' (choose from "
                             f"{', '.join(packages)})")
        capacitance = float(Quantity(capacitance, "F"))
        if capacitance <= 0:
            raise ValueError("capacitance must be positive")
        self.capacitance = capacitance
        self.package = package
        self.esr = float(packages[package]["esr"])
        self.esl = float(packages[package]["esl"])

    @staticmethod
    def packages():
        return CONF["parts"]["capacitor_packages"]

    def model(self):
        """Series resistor-capacitor-inductor model of the part."""
        model = rcl(self.esr, self.capacitance, self.esl)
        model.label = str(self)
        return model

    def resonant(self):
        """Self-resonant frequency in Hz."""
        return 1 / (2 * np.pi * np.sqrt(self.esl * self.capacitance))

    @classmethod
    def standard_values(cls, package=None):
        """Preferred capacitances, in ascending order.

        If `package` is specified, values larger than the package's maximum capacitance are
        excluded.
        """
        partsconf = CONF["parts"]
        mantissas = [float(mantissa) for mantissa in partsconf["e_series"]]
        decades = range(int(partsconf["min_decade"]), int(partsconf["max_decade"]) + 1)
        values = sorted(mantissa * 10 ** decade for decade in decades for mantissa in mantissas)

        if package is not None:
            maximum = float(cls.packages()[package]["max_capacitance"])
            # Allow for floating point error in the generated values.
            values = [value for value in values if value <= maximum * (1 + 1e-9)]

        return values

    @classmethod
    def from_resonant(cls, center, tolerance, packages=None):
        """Find the standard part that self-resonates closest to a frequency.

        Parameters
        ----------
        center : :class:`float` or :class:`str`
            The target resonant frequency, in Hz.
        tolerance : :class:`float` or :class:`str`
            The maximum allowed distance between the part's resonant frequency and `center`, in Hz.
        packages : sequence of :class:`str`, optional
            Packages to search. Defaults to all configured packages.

        Returns
        -------
        :class:`CapacitorPart` or None
            The closest part, or `None` if no part resonates within `tolerance` of `center`.
        """
        center = float(Quantity(center, "Hz"))
        tolerance = float(Quantity(tolerance, "Hz"))

        if packages is None:
            packages = list(cls.packages())

        best = None
        best_error = None

        for package in packages:
            for capacitance in cls.standard_values(package):
                part = cls(capacitance, package)
                error = abs(part.resonant() - center)
                if error > tolerance:
                    continue
                if best is None or error < best_error:
                    best = part
                    best_error = error

        if best is None:
            LOGGER.info("no capacitor resonates within %g Hz of %g Hz", tolerance, center)
        else:
            LOGGER.debug("found %s resonating at %g Hz", best, best.resonant())

        return best

    def __str__(self):
        capacitance = Quantity(self.capacitance, "F")
        return f"{capacitance} {self.package}"

    def __repr__(self):
        return f"CapacitorPart({self.capacitance!r}, {self.package!r})"


class PDNModel:
    """Power distribution network: a source impedance in parallel with decoupling capacitors.

    Parameters
    ----------
    source : :class:`.SDomainModel`
        The source (e.g. regulator) output impedance.
    label : :class:`str`, optional
        The network label.
    """
    def __init__(self, source, label=None):
        if label is None:
            label = "PDN"
        self.source = source
        self.label = label
        self.capacitors = []

    def add_capacitor(self, name, model, count=1):
        """Add a bank of `count` identical capacitors in parallel with the network."""
        count = int(count)
        if count < 1:
            raise ValueError("capacitor count must be at least 1")
        if any(bank.name == name for bank in self.capacitors):
            raise ValueError(f"capacitor '{name}' already exists in {self}")
        self.capacitors.append(CapacitorBank(name, model, count))

    def model(self):
        """The network's impedance model."""
        branches = [self.source]
        branches.extend(bank.model / bank.count for bank in self.capacitors)
        model = parallel(*branches)
        model.label = self.label
        return model

    def response(self, frequencies):
        return Response.from_evaluator(frequencies, self.model(), label=self.label)

    def resonances(self, frequencies):
        """Find impedance minima (series resonances) and maxima (anti-resonances).

        Returns
        -------
        :class:`list` of :class:`Resonance`
            The resonances, ordered by frequency.
        """
        response = self.response(frequencies)
        # Work on a log scale so that dips and peaks at different impedance levels are comparable.
        log_magnitude = np.log10(response.magnitude)

        resonances = []
        for kind, signal in (("minimum", -log_magnitude), ("maximum", log_magnitude)):
            indices, _ = find_peaks(signal)
            for index in indices:
                resonances.append(Resonance(response.frequencies[index],
                                            response.magnitude[index], kind))

        return sorted(resonances, key=lambda resonance: resonance.frequency)

    def exceedances(self, frequencies, target):
        """Find frequency bands where the impedance magnitude exceeds `target`.

        Returns
        -------
        :class:`list` of :class:`Exceedance`
            The bands, ordered by frequency. Band edges are the first and last sampled frequencies
            above the target.
        """
        response = self.response(frequencies)
        above = response.magnitude > float(target)

        bands = []
        start = None
        for index, flag in enumerate(above):
            if flag and start is None:
                start = index
            elif not flag and start is not None:
                bands.append(self._exceedance(response, start, index))
                start = None
        if start is not None:
            bands.append(self._exceedance(response, start, len(above)))

        return bands

    @staticmethod
    def _exceedance(response, start, stop):
        return Exceedance(response.frequencies[start], response.frequencies[stop - 1],
                          response.magnitude[start:stop].max())

    def __str__(self):
        return self.label
