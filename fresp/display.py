"""Frequency response chart rendering"""

import abc
import logging
from collections import namedtuple
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.ticker import MultipleLocator

from .config import FrespConfig
from .data import Response
from .misc import decade_less_equal
from .sweep import log_range

LOGGER = logging.getLogger(__name__)
CONF = FrespConfig()

# Axis limits.
AxisBounds = namedtuple("AxisBounds", ["min", "max"])

# Phase axis limits, independent of data.
PHASE_BOUNDS = AxisBounds(-180, 180)

FREQUENCY_LABEL = r"$\bf{Frequency}$ (Hz)"
PHASE_LABEL = r"$\bf{Phase}$ ($\degree$)"
DB_MAGNITUDE_LABEL = r"$\bf{Magnitude}$ (dB)"
IMPEDANCE_LABEL = r"$\bf{Impedance}$ ($\Omega$)"


class PlotStyle:
    """Chart appearance.

    Each setting defaults to the corresponding value in the configuration's `plot` section and can
    be overridden with a keyword argument of the same name.
    """
    # settings read from plot.response
    RESPONSE_SETTINGS = ("magnitude_colour", "magnitude_linewidth", "phase_colour", "phase_alpha",
                         "phase_linewidth", "threshold_fill_colour", "threshold_exceed_colour",
                         "threshold_fill_alpha", "threshold_border_colour",
                         "threshold_line_colour", "threshold_linestyle", "legend_loc",
                         "legend_edge_colour", "legend_face_colour", "legend_alpha",
                         "title_font_size", "db_tick_major_step", "phase_tick_major_step",
                         "phase_tick_minor_step")

    def __init__(self, **overrides):
        settings = self.defaults()
        unknown = set(overrides) - set(settings)
        if unknown:
            raise ValueError("unrecognised style setting(s): %s" % ", ".join(sorted(unknown)))
        settings.update(overrides)
        self._settings = settings

    @classmethod
    def defaults(cls):
        plotconf = CONF["plot"]
        settings = {key: plotconf["response"][key] for key in cls.RESPONSE_SETTINGS}
        settings["background_colour"] = plotconf["background_colour"]
        settings["grid_alpha_major"] = float(plotconf["grid"]["alpha_major"])
        settings["grid_alpha_minor"] = float(plotconf["grid"]["alpha_minor"])
        settings["grid_zorder"] = plotconf["grid"]["zorder"]
        settings["impedance_decades"] = float(plotconf["impedance"]["decades"])
        settings["size_x"] = float(plotconf["size_x"])
        settings["size_y"] = float(plotconf["size_y"])
        return settings

    def __getattr__(self, name):
        try:
            return self.__dict__["_settings"][name]
        except KeyError:
            raise AttributeError(name)

    def copy(self, **overrides):
        """Copy of this style with some settings overridden."""
        settings = dict(self._settings)
        settings.update(overrides)
        return self.__class__(**settings)

    def __eq__(self, other):
        return isinstance(other, PlotStyle) and self._settings == other._settings


class RenderMode(metaclass=abc.ABCMeta):
    """Strategy for drawing the magnitude series on the primary axis."""

    @abc.abstractmethod
    def draw_magnitude(self, axes, frequencies, magnitude, style, label):
        """Draw magnitude series.

        Returns
        -------
        :class:`list`
            Artists to show in the legend.
        """
        raise NotImplementedError


class Plain(RenderMode):
    """Magnitude drawn as a line."""

    def draw_magnitude(self, axes, frequencies, magnitude, style, label):
        line, = axes.plot(frequencies, magnitude, color=style.magnitude_colour,
                          linewidth=style.magnitude_linewidth, label=label)
        return [line]

    def __str__(self):
        return "plain line"

    def __eq__(self, other):
        return isinstance(other, Plain)


class Thresholded(RenderMode):
    """Magnitude drawn as an area against a target baseline.

    Regions where the magnitude exceeds the target are filled in a different colour to those
    below it. Region boundaries are interpolated to the point where the magnitude crosses the
    target.

    Parameters
    ----------
    target : :class:`float`
        The baseline, in the units of the magnitude axis.
    """
    def __init__(self, target):
        target = float(target)
        if not np.isfinite(target):
            raise ValueError(f"target must be finite (got {target})")
        self.target = target

    def draw_magnitude(self, axes, frequencies, magnitude, style, label):
        if axes.get_yscale() == "log" and self.target <= 0:
            raise RenderFailedError(f"target {self.target} cannot be shown on a logarithmic axis")

        above = magnitude > self.target

        axes.fill_between(frequencies, magnitude, self.target, where=above, interpolate=True,
                          facecolor=style.threshold_exceed_colour,
                          alpha=style.threshold_fill_alpha, linewidth=0)
        axes.fill_between(frequencies, magnitude, self.target, where=~above, interpolate=True,
                          facecolor=style.threshold_fill_colour,
                          alpha=style.threshold_fill_alpha, linewidth=0)
        target_line = axes.axhline(self.target, color=style.threshold_line_colour,
                                   linestyle=style.threshold_linestyle,
                                   linewidth=style.magnitude_linewidth,
                                   label=f"Target ({self.target:g})")
        border, = axes.plot(frequencies, magnitude, color=style.threshold_border_colour,
                            linewidth=style.magnitude_linewidth, label=label)
        return [border, target_line]

    def __str__(self):
        return f"threshold at {self.target:g}"

    def __eq__(self, other):
        return isinstance(other, Thresholded) and self.target == other.target


def db_bounds(magnitude):
    """Decibel axis limits, padded by at least 1 dB beyond the data."""
    magnitude = np.asarray(magnitude)
    if not np.all(np.isfinite(magnitude)):
        raise RenderFailedError("decibel magnitude contains non-finite values")
    return AxisBounds(np.floor(magnitude.min()) - 1, np.ceil(magnitude.max()) + 1)

def impedance_bounds(magnitude, decades):
    """Logarithmic axis limits anchored to the smallest magnitude.

    The upper limit lies `decades` decades above the smallest magnitude. The lower limit is one
    decade below the decade containing the smallest magnitude.
    """
    magnitude = np.asarray(magnitude)
    if not np.all(np.isfinite(magnitude)):
        raise RenderFailedError("magnitude contains non-finite values")
    lowest = magnitude.min()
    if lowest <= 0:
        raise RenderFailedError(f"magnitude {lowest} cannot be shown on a logarithmic axis")
    return AxisBounds(decade_less_equal(lowest) / 10, lowest * 10 ** decades)


def plot_response(axes, title, evaluator, mode=None, scale_db=True, fstart=None, fstop=None,
                  style=None, label=None, ylabel=None):
    """Sample a network model and draw its magnitude and phase on a dual-axis chart.

    The model is evaluated over a logarithmic sweep. Its magnitude, either in decibels or as an
    absolute value on a logarithmic axis, is drawn on `axes` using the specified render `mode`,
    and its phase is drawn on a secondary axis sharing the frequency axis.

    Either the whole chart is drawn or, if an error occurs while drawing, the axes are cleared
    and an error is raised.

    Parameters
    ----------
    axes : :class:`matplotlib.axes.Axes`
        The axes to draw on.
    title : :class:`str`
        The chart title.
    evaluator : callable
        Function mapping a frequency to the model's complex response.
    mode : :class:`RenderMode`, optional
        Magnitude render mode. Defaults to :class:`Plain`.
    scale_db : :class:`bool`, optional
        Draw the magnitude in decibels on a linear axis. If `False`, draw the absolute magnitude
        on a logarithmic axis, as used for impedances.
    fstart, fstop : :class:`float`, optional
        Sweep start and stop frequencies. Default to the configured values.
    style : :class:`PlotStyle`, optional
        Chart appearance. Defaults to the configured style.
    label : :class:`str`, optional
        The magnitude legend label.
    ylabel : :class:`str`, optional
        The magnitude axis label.

    Returns
    -------
    :class:`.Response`
        The sampled response.

    Raises
    ------
    :class:`.InvalidRangeError`
        If the sweep range is invalid.
    :class:`.EvaluationFailedError`
        If the model cannot be evaluated at a sampled frequency.
    :class:`RenderFailedError`
        If the chart cannot be drawn.
    """
    if mode is None:
        mode = Plain()
    if style is None:
        style = PlotStyle()
    if fstart is None:
        fstart = float(CONF["sweep"]["fstart"])
    if fstop is None:
        fstop = float(CONF["sweep"]["fstop"])

    frequencies = log_range(fstart, fstop)
    response = Response.from_evaluator(frequencies, evaluator, label=label)

    if scale_db:
        magnitude = response.db_magnitude
        bounds = db_bounds(magnitude)
        default_label = "Magnitude"
        default_ylabel = DB_MAGNITUDE_LABEL
    else:
        magnitude = response.magnitude
        bounds = impedance_bounds(magnitude, style.impedance_decades)
        default_label = "Impedance"
        default_ylabel = IMPEDANCE_LABEL

    if label is None:
        label = default_label
    if ylabel is None:
        ylabel = default_ylabel

    if not bounds.min < bounds.max:
        raise RenderFailedError(f"degenerate magnitude axis limits {bounds}")

    LOGGER.debug("magnitude axis limits for '%s': %s", title, bounds)
    LOGGER.info("drawing '%s' with %s", title, mode)

    secondary = axes.twinx()

    try:
        axes.set_xscale("log")
        if not scale_db:
            axes.set_yscale("log")
        axes.set_xlim(frequencies[0], frequencies[-1])
        axes.set_ylim(bounds)
        secondary.set_ylim(PHASE_BOUNDS)

        handles = mode.draw_magnitude(axes, response.frequencies, magnitude, style, label)
        phase_line, = secondary.plot(response.frequencies, response.phase,
                                     color=style.phase_colour, alpha=style.phase_alpha,
                                     linewidth=style.phase_linewidth, label="Phase")

        if scale_db:
            axes.yaxis.set_major_locator(MultipleLocator(base=style.db_tick_major_step))
        secondary.yaxis.set_major_locator(MultipleLocator(base=style.phase_tick_major_step))
        secondary.yaxis.set_minor_locator(MultipleLocator(base=style.phase_tick_minor_step))

        axes.set_xlabel(FREQUENCY_LABEL)
        axes.set_ylabel(ylabel)
        secondary.set_ylabel(PHASE_LABEL)
        axes.set_title(title, fontsize=style.title_font_size)

        axes.grid(which="major", alpha=style.grid_alpha_major, zorder=style.grid_zorder)
        axes.grid(which="minor", alpha=style.grid_alpha_minor, zorder=style.grid_zorder)

        # The legend goes on the secondary axis so that it is drawn above both series.
        secondary.legend(handles=handles + [phase_line], loc=style.legend_loc,
                         edgecolor=style.legend_edge_colour, facecolor=style.legend_face_colour,
                         framealpha=style.legend_alpha)
    except RenderFailedError:
        _discard(axes, secondary)
        raise
    except Exception as error:
        _discard(axes, secondary)
        raise RenderFailedError(f"cannot draw '{title}': {error}") from error

    return response

def _discard(axes, secondary):
    """Remove a partially drawn chart."""
    secondary.remove()
    axes.cla()


class ResponsePlotter:
    """Figure split into a grid of independent response charts.

    Parameters
    ----------
    rows, cols : :class:`int`, optional
        The chart grid shape.
    style : :class:`PlotStyle`, optional
        Chart appearance used for every chart. Defaults to the configured style.
    figure : :class:`matplotlib.figure.Figure`, optional
        An empty figure to draw on. If not specified, a new figure is created.
    """
    def __init__(self, rows=1, cols=1, style=None, figure=None):
        if rows < 1 or cols < 1:
            raise ValueError("rows and cols must be at least 1")
        if style is None:
            style = PlotStyle()
        self.rows = int(rows)
        self.cols = int(cols)
        self.style = style
        # Defaults.
        self._figure = None
        self._charts = None
        if figure is not None:
            self.figure = figure

    @property
    def figure(self):
        if self._figure is None:
            self.figure = self._create_figure()
        return self._figure

    @figure.setter
    def figure(self, figure):
        if figure.axes:
            raise ValueError("figure must not contain axes")
        figure.set_facecolor(self.style.background_colour)
        self._charts = list(figure.subplots(self.rows, self.cols, squeeze=False).flat)
        self._figure = figure

    def _create_figure(self):
        figure = plt.figure(figsize=(self.style.size_x * self.cols, self.style.size_y * self.rows))
        LOGGER.debug("created %ix%i chart figure", self.rows, self.cols)
        return figure

    @property
    def charts(self):
        """Chart axes, in row-major order."""
        # Make sure the figure exists.
        self.figure
        return list(self._charts)

    def plot(self, index, title, evaluator, **kwargs):
        """Draw a response chart in the grid position `index` (row-major).

        Keyword arguments are passed to :func:`plot_response`.
        """
        return plot_response(self.charts[index], title, evaluator, style=self.style, **kwargs)

    def show(self, tight_layout=True):
        if tight_layout:
            self.figure.tight_layout()
        plt.show()

    def save(self, path, **kwargs):
        """Save figure to specified path (path can be file object or string path)."""
        # Squeeze things together.
        self.figure.tight_layout()
        self.figure.savefig(path, facecolor=self.figure.get_facecolor(), **kwargs)

    def close(self):
        plt.close(self.figure)


class RenderFailedError(Exception):
    """Chart drawing failure"""
    pass
