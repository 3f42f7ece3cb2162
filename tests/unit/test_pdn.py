"""Power distribution network tests"""

from unittest import TestCase
import numpy as np

from fresp.config import FrespConfig
from fresp.models import resistor, inductor, rl
from fresp.pdn import CapacitorPart, PDNModel
from fresp.sweep import log_range

CONF = FrespConfig()


class CapacitorPartTestCase(TestCase):
    """Capacitor part tests"""
    def test_package_parasitics(self):
        """Test parasitics are taken from the package table"""
        part = CapacitorPart(22e-6, "0603")
        package = CONF["parts"]["capacitor_packages"]["0603"]
        self.assertEqual(part.esr, float(package["esr"]))
        self.assertEqual(part.esl, float(package["esl"]))

    def test_prefixed_capacitance(self):
        """Test capacitance with SI prefix"""
        self.assertAlmostEqual(CapacitorPart("4.7u", "0402").capacitance, 4.7e-6)
        self.assertAlmostEqual(CapacitorPart("100nF", "0201").capacitance, 100e-9)

    def test_invalid_part(self):
        """Test invalid packages and capacitances"""
        self.assertRaises(ValueError, CapacitorPart, 1e-6, "9999")
        self.assertRaises(ValueError, CapacitorPart, 0, "0402")

    def test_resonant(self):
        """Test self-resonant frequency"""
        part = CapacitorPart(22e-9, "0402")
        expected = 1 / (2 * np.pi * np.sqrt(part.esl * 22e-9))
        self.assertAlmostEqual(part.resonant(), expected)
        # Impedance is at its minimum, the ESR, at resonance.
        self.assertAlmostEqual(abs(part.model()(part.resonant())), part.esr)

    def test_standard_values(self):
        """Test preferred values are sorted and respect package limits"""
        values = CapacitorPart.standard_values()
        self.assertEqual(values, sorted(values))
        maximum = float(CONF["parts"]["capacitor_packages"]["0201"]["max_capacitance"])
        limited = CapacitorPart.standard_values("0201")
        self.assertLessEqual(max(limited), maximum * (1 + 1e-9))
        self.assertLess(len(limited), len(values))

    def test_from_resonant(self):
        """Test search for a part resonating near a frequency"""
        part = CapacitorPart.from_resonant(55e6, 5e6)
        self.assertIsNotNone(part)
        self.assertLessEqual(abs(part.resonant() - 55e6), 5e6)

    def test_from_resonant_closest(self):
        """Test the closest part is chosen"""
        part = CapacitorPart.from_resonant(55e6, 50e6)
        for package in CapacitorPart.packages():
            for capacitance in CapacitorPart.standard_values(package):
                other = CapacitorPart(capacitance, package)
                self.assertLessEqual(abs(part.resonant() - 55e6),
                                     abs(other.resonant() - 55e6) + 1e-6)

    def test_from_resonant_not_found(self):
        """Test search with no matching part"""
        self.assertIsNone(CapacitorPart.from_resonant(1, 0.5))
        self.assertIsNone(CapacitorPart.from_resonant("55M", "5M", packages=[]))


class PDNModelTestCase(TestCase):
    """Power distribution network model tests"""
    def test_source_only(self):
        """Test network without capacitors is the source"""
        network = PDNModel(resistor(10))
        self.assertAlmostEqual(network.model()(1), 10)

    def test_capacitor_banks(self):
        """Test banks of identical parts combine in parallel"""
        network = PDNModel(resistor(10))
        network.add_capacitor("a", resistor(10), 1)
        self.assertAlmostEqual(network.model()(1), 5)
        network.add_capacitor("b", resistor(10), 2)
        self.assertAlmostEqual(network.model()(1), 2.5)
        self.assertEqual([bank.name for bank in network.capacitors], ["a", "b"])
        self.assertEqual([bank.count for bank in network.capacitors], [1, 2])

    def test_invalid_capacitor(self):
        """Test invalid capacitor banks"""
        network = PDNModel(resistor(10))
        self.assertRaises(ValueError, network.add_capacitor, "a", resistor(10), 0)
        network.add_capacitor("a", resistor(10), 1)
        self.assertRaises(ValueError, network.add_capacitor, "a", resistor(10), 1)

    def test_label(self):
        """Test network label"""
        self.assertEqual(str(PDNModel(resistor(1))), "PDN")
        network = PDNModel(resistor(1), label="Core rail")
        self.assertEqual(str(network), "Core rail")
        self.assertEqual(network.model().label, "Core rail")

    def test_resonances(self):
        """Test series resonance of a decoupling capacitor is found"""
        part = CapacitorPart(22e-6, "0603")
        network = PDNModel(rl(52e-3, 1.5e-6))
        network.add_capacitor("0603 22uF", part.model(), 1)
        resonances = network.resonances(log_range(1, 100e6, 10, 100))
        minima = [resonance for resonance in resonances if resonance.kind == "minimum"]
        maxima = [resonance for resonance in resonances if resonance.kind == "maximum"]
        self.assertTrue(any(abs(resonance.frequency - part.resonant()) / part.resonant() < 0.05
                            for resonance in minima))
        # Anti-resonance between source inductance and capacitance.
        self.assertTrue(any(resonance.frequency < part.resonant() for resonance in maxima))
        frequencies = [resonance.frequency for resonance in resonances]
        self.assertEqual(frequencies, sorted(frequencies))

    def test_exceedances(self):
        """Test bands exceeding the target impedance"""
        # Impedance magnitude equal to frequency.
        network = PDNModel(inductor(1 / (2 * np.pi)))
        frequencies = log_range(1, 1000, 10, 10)
        bands = network.exceedances(frequencies, 150)
        self.assertEqual(len(bands), 1)
        band = bands[0]
        index = list(frequencies).index(band.fstart)
        self.assertGreater(band.fstart, 150)
        self.assertLess(frequencies[index - 1], 150)
        self.assertEqual(band.fstop, 1000)
        self.assertAlmostEqual(band.peak, 1000)
        self.assertEqual(network.exceedances(frequencies, 2000), [])

    def test_exceedance_bands(self):
        """Test separate bands either side of a dip"""
        network = PDNModel(rl(52e-3, 1.5e-6))
        network.add_capacitor("bulk", CapacitorPart(22e-6, "0603").model(), 1)
        frequencies = log_range(1, 100e6, 10, 100)
        bands = network.exceedances(frequencies, 0.1)
        self.assertGreaterEqual(len(bands), 1)
        for band in bands:
            self.assertLessEqual(band.fstart, band.fstop)
            self.assertGreater(band.peak, 0.1)
