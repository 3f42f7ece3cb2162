"""Response chart integration tests"""

from io import BytesIO
import numpy as np

from fresp.display import (plot_response, ResponsePlotter, PlotStyle, Plain, Thresholded,
                           PHASE_BOUNDS, RenderFailedError)
from fresp.data import EvaluationFailedError
from fresp.sweep import InvalidRangeError
from fresp.models import resistor, capacitor, inductor
from ..data import FrespTestCase


class PlotResponseTestCase(FrespTestCase):
    """Dual-axis response chart tests"""
    def test_constant_response(self):
        """Test constant model gives constant magnitude and phase"""
        axes = self._axes()
        response = plot_response(axes, "Constant", self._constant(3 + 4j), fstop=1e3)
        secondary = self._secondary(axes)

        self.assertEqual(len(response), 301)
        self.assertTrue(np.allclose(response.magnitude, 5))
        phase_line, = secondary.get_lines()
        self.assertTrue(np.allclose(phase_line.get_ydata(), 53.13010235415598))
        self.assertEqual(axes.get_title(), "Constant")

    def test_plain_mode(self):
        """Test plain mode draws a single magnitude line"""
        axes = self._axes()
        plot_response(axes, "Plain", self._constant(2), mode=Plain(), fstop=1e3)
        self.assertEqual(len(axes.get_lines()), 1)
        self.assertEqual(len(axes.collections), 0)

    def test_thresholded_mode(self):
        """Test thresholded mode draws filled regions, a target line and a border"""
        axes = self._axes()
        plot_response(axes, "Thresholded", self._constant(2), mode=Thresholded(3), fstop=1e3)
        self.assertEqual(len(axes.collections), 2)
        # target and border
        self.assertEqual(len(axes.get_lines()), 2)

    def test_phase_independent_of_mode(self):
        """Test the phase series does not depend on the render mode"""
        model = resistor(10) + inductor(1e-3)
        phases = []
        for mode in (Plain(), Thresholded(20)):
            axes = self._axes()
            plot_response(axes, "Model", model, mode=mode, scale_db=False, fstop=1e5)
            phase_line, = self._secondary(axes).get_lines()
            phases.append(phase_line.get_ydata())
        self.assertTrue(np.array_equal(*phases))

    def test_db_axis_limits(self):
        """Test decibel axis contains the data and phase axis spans a full turn"""
        axes = self._axes()
        model = capacitor(1e-6)
        response = plot_response(axes, "Capacitor", model, fstop=1e4)
        ymin, ymax = axes.get_ylim()
        self.assertLess(ymin, response.db_magnitude.min())
        self.assertGreater(ymax, response.db_magnitude.max())
        self.assertEqual(tuple(self._secondary(axes).get_ylim()), tuple(PHASE_BOUNDS))
        self.assertEqual(axes.get_xscale(), "log")
        self.assertEqual(axes.get_yscale(), "linear")

    def test_impedance_axis(self):
        """Test absolute magnitude is drawn on a logarithmic axis"""
        axes = self._axes()
        response = plot_response(axes, "Inductor", inductor(1e-6), scale_db=False, fstop=1e4)
        self.assertEqual(axes.get_yscale(), "log")
        ymin, _ = axes.get_ylim()
        self.assertLess(ymin, response.magnitude.min())

    def test_threshold_crossing(self):
        """Test filled regions meet where the magnitude crosses the target"""
        axes = self._axes()
        # |Z| = f / 1500 crosses 0.1 at 150 Hz.
        plot_response(axes, "Crossing", lambda frequency: 1j * frequency / 1500,
                      mode=Thresholded(0.1), scale_db=False, fstop=1e4)
        exceed, below = axes.collections
        exceed_x = np.concatenate([path.vertices[:, 0] for path in exceed.get_paths()])
        below_x = np.concatenate([path.vertices[:, 0] for path in below.get_paths()])
        self.assertAlmostEqual(exceed_x.min(), 150, delta=1e-6)
        self.assertAlmostEqual(exceed_x.max(), 1e4)
        self.assertAlmostEqual(below_x.min(), 1)
        self.assertAlmostEqual(below_x.max(), 150, delta=1e-6)

    def test_deterministic(self):
        """Test identical inputs produce identical images"""
        model = resistor(1) + capacitor(1e-6)
        images = []
        for _ in range(2):
            figure = self._figure()
            plot_response(figure.add_subplot(), "Model", model, mode=Thresholded(10),
                          scale_db=False, fstop=1e5)
            figure.canvas.draw()
            images.append(np.asarray(figure.canvas.buffer_rgba()).copy())
        self.assertTrue(np.array_equal(*images))

    def test_custom_labels_and_style(self):
        """Test legend label, axis label and style overrides"""
        axes = self._axes()
        style = PlotStyle(magnitude_colour="blue")
        plot_response(axes, "Model", self._constant(2), fstop=1e3, style=style, label="Gain",
                      ylabel="Gain (dB)")
        line, = axes.get_lines()
        self.assertEqual(line.get_label(), "Gain")
        self.assertEqual(line.get_color(), "blue")
        self.assertEqual(axes.get_ylabel(), "Gain (dB)")
        legend = self._secondary(axes).get_legend()
        self.assertEqual([text.get_text() for text in legend.get_texts()], ["Gain", "Phase"])

    def test_evaluation_failure(self):
        """Test failing model leaves axes untouched"""
        def model(frequency):
            if frequency > 10:
                raise ZeroDivisionError("model undefined")
            return 1

        axes = self._axes()
        with self.assertRaises(EvaluationFailedError) as context:
            plot_response(axes, "Failing", model, fstop=1e3)
        self.assertGreater(context.exception.frequency, 10)
        self.assertEqual(axes.figure.axes, [axes])
        self.assertEqual(len(axes.get_lines()), 0)

    def test_zero_magnitude_in_db(self):
        """Test zero magnitude cannot be drawn in decibels"""
        axes = self._axes()
        self.assertRaises(RenderFailedError, plot_response, axes, "Zero", self._constant(0),
                          fstop=1e3)
        self.assertEqual(axes.figure.axes, [axes])

    def test_render_failure_clears_axes(self):
        """Test failure while drawing removes the partial chart"""
        axes = self._axes()
        self.assertRaises(RenderFailedError, plot_response, axes, "Negative target",
                          self._constant(2), mode=Thresholded(-1), scale_db=False, fstop=1e3)
        self.assertEqual(axes.figure.axes, [axes])
        self.assertEqual(len(axes.get_lines()), 0)
        self.assertEqual(len(axes.collections), 0)
        self.assertEqual(axes.get_title(), "")

    def test_invalid_range(self):
        """Test invalid sweep range"""
        axes = self._axes()
        self.assertRaises(InvalidRangeError, plot_response, axes, "Model", self._constant(1),
                          fstart=1e3, fstop=10)
        self.assertEqual(axes.figure.axes, [axes])


class ResponsePlotterTestCase(FrespTestCase):
    """Chart grid tests"""
    def test_grid(self):
        """Test charts are drawn into grid positions"""
        plotter = ResponsePlotter(rows=2, cols=2, figure=self._figure())
        self.assertEqual(len(plotter.charts), 4)

        plotter.plot(0, "Resistor", resistor(10), scale_db=False, fstop=1e3)
        plotter.plot(3, "Capacitor", capacitor(22e-6), scale_db=False, fstop=1e3)

        # four charts plus two secondary axes
        self.assertEqual(len(plotter.figure.axes), 6)
        self.assertEqual(plotter.charts[0].get_title(), "Resistor")
        self.assertEqual(plotter.charts[1].get_title(), "")
        self.assertEqual(plotter.charts[3].get_title(), "Capacitor")

    def test_save(self):
        """Test figure can be saved"""
        plotter = ResponsePlotter(rows=1, cols=2, figure=self._figure())
        plotter.plot(0, "Resistor", resistor(10), fstop=1e3)
        image = BytesIO()
        plotter.save(image, format="png")
        self.assertTrue(image.getvalue().startswith(b"\x89PNG"))

    def test_failed_chart_leaves_others(self):
        """Test a failed chart does not affect other charts"""
        plotter = ResponsePlotter(rows=1, cols=2, figure=self._figure())
        plotter.plot(0, "Resistor", resistor(10), fstop=1e3)
        self.assertRaises(RenderFailedError, plotter.plot, 1, "Zero", self._constant(0),
                          fstop=1e3)
        self.assertEqual(len(plotter.figure.axes), 3)
        self.assertEqual(len(plotter.charts[0].get_lines()), 1)

    def test_invalid_figure(self):
        """Test figure with existing axes"""
        figure = self._figure()
        figure.add_subplot()
        self.assertRaises(ValueError, ResponsePlotter, figure=figure)

    def test_invalid_grid(self):
        """Test invalid grid shape"""
        self.assertRaises(ValueError, ResponsePlotter, rows=0)
