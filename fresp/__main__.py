"""Frequency response plotter command line interface"""

import sys
import logging
from pprint import pformat
import click
from quantiphy import Quantity, QuantiPhyError
from tabulate import tabulate

from . import __version__, PROGRAM, DESCRIPTION, set_log_verbosity
from .config import FrespConfig, ConfigDoesntExistException, ConfigAlreadyExistsException
from .display import ResponsePlotter, Plain, Thresholded, RenderFailedError
from .data import EvaluationFailedError
from .sweep import log_range, InvalidRangeError
from .models import resistor, capacitor, inductor, rcl, rl, parallel
from .pdn import PDNModel, CapacitorPart

LOGGER = logging.getLogger(__name__)
CONF = FrespConfig()

# Errors that abort a single chart.
PLOT_ERRORS = (InvalidRangeError, EvaluationFailedError, RenderFailedError)


# Shared arguments:
# https://github.com/pallets/click/issues/108
class State:
    """CLI state"""
    MIN_VERBOSITY = logging.WARNING
    MAX_VERBOSITY = logging.DEBUG

    def __init__(self):
        self._verbosity = self.MIN_VERBOSITY

    @property
    def verbosity(self):
        """Verbosity on stdout"""
        return self._verbosity

    @verbosity.setter
    def verbosity(self, verbosity):
        self._verbosity = self.MIN_VERBOSITY - 10 * int(verbosity)

        if self._verbosity < self.MAX_VERBOSITY:
            self._verbosity = self.MAX_VERBOSITY

        set_log_verbosity(self._verbosity)

        # write some debug info now that we've set up the logger
        LOGGER.debug("%s %s", PROGRAM, __version__)


def set_verbosity(ctx, _, value):
    """Set stdout verbosity"""
    state = ctx.ensure_object(State)
    state.verbosity = value


class QuantityParamType(click.ParamType):
    """Number with optional SI prefix and unit, e.g. "4.7u" or "10 MHz"."""
    name = "quantity"

    def convert(self, value, param, ctx):
        if isinstance(value, float):
            return value
        try:
            return float(Quantity(value))
        except QuantiPhyError:
            self.fail(f"'{value}' is not a valid quantity", param, ctx)

QUANTITY = QuantityParamType()


def output_options(func):
    """Figure output options shared by the plotting commands."""
    func = click.option("--plot/--no-plot", default=True, show_default=True,
                        help="Display results as figure.")(func)
    func = click.option("--save-figure", type=click.File("wb", lazy=False), multiple=True,
                        help="Save image of figure to file. Can be specified multiple "
                        "times.")(func)
    return func


@click.group(help=DESCRIPTION)
@click.version_option(version=__version__, prog_name=PROGRAM)
@click.option("-v", "--verbose", count=True, default=0, callback=set_verbosity, expose_value=False,
              help="Enable verbose output. Supply extra flag for greater verbosity, i.e. \"-vv\".")
def cli():
    """Base CLI command group"""
    pass

@cli.command()
@click.option("--lowpass-r", type=QUANTITY, default="100", show_default=True,
              help="Low pass filter series resistance.")
@click.option("--lowpass-c", type=QUANTITY, default="4.7u", show_default=True,
              help="Low pass filter shunt capacitance.")
@click.option("--highpass-top", type=QUANTITY, default="300k", show_default=True,
              help="High pass filter top divider resistance.")
@click.option("--highpass-bottom", type=QUANTITY, default="100k", show_default=True,
              help="High pass filter bottom divider resistance.")
@click.option("--highpass-c", type=QUANTITY, default="4p", show_default=True,
              help="High pass filter capacitance across the top resistor.")
@click.option("--fstop", type=QUANTITY, help="Sweep stop frequency. Defaults to the configured "
              "value.")
@output_options
def bode(lowpass_r, lowpass_c, highpass_top, highpass_bottom, highpass_c, fstop, save_figure,
         plot):
    """Plot Bode charts of an RC low pass filter and a compensated divider high pass filter."""
    zc = capacitor(lowpass_c)
    lowpass = zc / (resistor(lowpass_r) + zc)

    zbottom = resistor(highpass_bottom)
    highpass = zbottom / (zbottom + parallel(resistor(highpass_top), capacitor(highpass_c)))

    charts = [("Bode Plot for Low Pass Filter", lowpass, {}),
              ("Bode Plot for High Pass Filter", highpass, {})]

    _draw_charts(charts, rows=1, cols=2, fstop=fstop, scale_db=True, save_figure=save_figure,
                 plot=plot)

@cli.command()
@click.option("--resistance", type=QUANTITY, default="10", show_default=True,
              help="Resistor value.")
@click.option("--capacitance", type=QUANTITY, default="22u", show_default=True,
              help="Capacitor value.")
@click.option("--inductance", type=QUANTITY, default="1.5u", show_default=True,
              help="Inductor value.")
@click.option("--rcl", "rcl_values", type=(QUANTITY, QUANTITY, QUANTITY),
              default=("1m", "10u", "1.5n"), show_default=True,
              help="Series RCL resistance, capacitance and inductance.")
@click.option("--fstop", type=QUANTITY, help="Sweep stop frequency. Defaults to the configured "
              "value.")
@output_options
def components(resistance, capacitance, inductance, rcl_values, fstop, save_figure, plot):
    """Plot impedance charts of a resistor, capacitor, inductor and series RCL network."""
    charts = [("Impedance of resistor", resistor(resistance), {}),
              ("Impedance of capacitor", capacitor(capacitance), {}),
              ("Impedance of inductor", inductor(inductance), {}),
              ("Impedance of RCL", rcl(*rcl_values), {})]

    _draw_charts(charts, rows=2, cols=2, fstop=fstop, scale_db=False, save_figure=save_figure,
                 plot=plot)

@cli.command()
@click.option("--source", type=(QUANTITY, QUANTITY), default=("52m", "1.5u"), show_default=True,
              help="Source series resistance and inductance.")
@click.option("--capacitor", "capacitors", type=(str, QUANTITY, str, int), multiple=True,
              metavar="NAME VALUE PACKAGE COUNT",
              help="Add a bank of COUNT decoupling capacitors. Can be specified multiple times.")
@click.option("--resonant", "resonants", type=(QUANTITY, QUANTITY, int), multiple=True,
              metavar="CENTER TOLERANCE COUNT",
              help="Add a bank of COUNT capacitors resonating within TOLERANCE of CENTER, if one "
              "exists. Can be specified multiple times.")
@click.option("--target", type=QUANTITY, help="Target impedance. Frequencies where the impedance "
              "exceeds the target are highlighted.")
@click.option("--fstop", type=QUANTITY, help="Sweep stop frequency. Defaults to the configured "
              "power distribution network value.")
@output_options
def pdn(source, capacitors, resonants, target, fstop, save_figure, plot):
    """Plot the impedance of a power distribution network.

    The network consists of a source with series resistance and inductance in parallel with banks
    of decoupling capacitors, e.g.:

        fresp pdn --capacitor "0603 22uF" 22u 0603 1 --capacitor "0201 100nF" 100n 0201 3
        --resonant 55M 5M 1 --target 100m
    """
    if fstop is None:
        fstop = float(CONF["sweep"]["pdn_fstop"])

    network = PDNModel(rl(*source))

    try:
        for name, value, package, count in capacitors:
            network.add_capacitor(name, CapacitorPart(value, package).model(), count)
    except ValueError as error:
        click.echo(error, err=True)
        sys.exit(1)

    for center, tolerance, count in resonants:
        center_str = Quantity(center, "Hz")
        tolerance_str = Quantity(tolerance, "Hz")
        part = CapacitorPart.from_resonant(center, tolerance)
        if part is None:
            click.echo(f"Could not find a capacitor near {center_str} within {tolerance_str}")
            continue
        click.echo(f"Found capacitor near {center_str}: {part}\n"
                   f"  Resonant = {Quantity(part.resonant(), 'Hz')}")
        try:
            network.add_capacitor(f"~{center_str}", part.model(), count)
        except ValueError as error:
            click.echo(error, err=True)
            sys.exit(1)

    if network.capacitors:
        rows = [[bank.name, str(bank.model), bank.count] for bank in network.capacitors]
        click.echo(tabulate(rows, ["Name", "Model", "Count"], tablefmt=CONF["format"]["table"]))

    try:
        frequencies = log_range(float(CONF["sweep"]["fstart"]), fstop)
        resonances = network.resonances(frequencies)
        exceedances = network.exceedances(frequencies, target) if target is not None else []
    except PLOT_ERRORS as error:
        click.echo(error, err=True)
        sys.exit(1)

    if resonances:
        rows = [[str(Quantity(resonance.frequency, "Hz")),
                 str(Quantity(resonance.impedance, "Ω")), resonance.kind]
                for resonance in resonances]
        click.echo(tabulate(rows, ["Frequency", "Impedance", "Kind"],
                            tablefmt=CONF["format"]["table"]))

    if target is not None:
        if exceedances:
            click.echo(f"Impedance exceeds target of {Quantity(target, 'Ω')}:")
            rows = [[str(Quantity(band.fstart, "Hz")), str(Quantity(band.fstop, "Hz")),
                     str(Quantity(band.peak, "Ω"))] for band in exceedances]
            click.echo(tabulate(rows, ["From", "To", "Peak"], tablefmt=CONF["format"]["table"]))
        else:
            click.echo(f"Impedance is within target of {Quantity(target, 'Ω')}")

    if target is None:
        mode = Plain()
    else:
        mode = Thresholded(target)

    charts = [(f"Impedance of {network}", network.model(), {"mode": mode})]

    _draw_charts(charts, rows=1, cols=1, fstop=fstop, scale_db=False, save_figure=save_figure,
                 plot=plot)

def _draw_charts(charts, rows, cols, fstop, scale_db, save_figure, plot):
    """Draw charts into a grid, skipping (and reporting) those that fail."""
    if not plot and not save_figure:
        click.echo("Nothing to do: specify --plot or --save-figure.")
        return

    plotter = ResponsePlotter(rows=rows, cols=cols)
    failed = False

    for index, (title, model, kwargs) in enumerate(charts):
        try:
            plotter.plot(index, title, model, scale_db=scale_db, fstop=fstop, **kwargs)
        except PLOT_ERRORS as error:
            LOGGER.error("skipping '%s': %s", title, error)
            failed = True

    for save_path in save_figure:
        # NOTE: use figure file's name so that Matplotlib can identify the file type
        # appropriately.
        plotter.save(save_path.name)

    if plot:
        plotter.show()
    else:
        plotter.close()

    if failed:
        sys.exit(1)


@cli.group()
def config():
    """Fresp configuration functions."""
    pass

@config.command("path")
def config_path():
    """Print user config file path.

    Note: this path may not exist.
    """
    click.echo(click.format_filename(CONF.user_config_path))

@config.command("create")
def config_create():
    """Create empty config file in user directory."""
    # create config
    try:
        CONF.create_user_config()
    except ConfigAlreadyExistsException as e:
        click.echo(e, err=True)
    else:
        click.echo(f"Config created at {CONF.user_config_path}")

@config.command("edit")
def config_edit():
    """Open user config file in default editor."""
    try:
        CONF.open_user_config()
    except ConfigDoesntExistException:
        click.echo("Configuration file doesn't exist. Try 'fresp config create'.", err=True)

@config.command("remove")
def config_remove():
    """Remove user config file."""
    path = click.format_filename(CONF.user_config_path)
    click.confirm(f"Delete config file at {path}?", abort=True)
    try:
        CONF.remove_user_config()
    except ConfigDoesntExistException as e:
        click.echo(e, err=True)

@config.command("show")
@click.option("--paged", is_flag=True, default=False, help="Print with paging.")
def config_show(paged):
    """Print the config that fresp uses."""
    echo = click.echo_via_pager if paged else click.echo
    echo(pformat(dict(CONF)))


if __name__ == "__main__":
    cli()
