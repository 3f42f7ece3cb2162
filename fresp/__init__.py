import logging

PROGRAM = "fresp"
DESCRIPTION = "Frequency response and impedance plotter"

# Get package version.
try:
    from ._version import version as __version__
except ImportError:
    # Packaging resources are not installed.
    __version__ = '?.?.?'

from matplotlib import rcParams
from .config import FrespConfig
# Get config.
CONF = FrespConfig()
# Update Matplotlib options with overrides from config.
rcParams.update(CONF["plot"]["matplotlib"])

# Make the main plotting interface available from the main package.
# This is placed here because dependent imports need the code above.
from .sweep import log_range, InvalidRangeError
from .data import Response, EvaluationFailedError
from .display import (plot_response, ResponsePlotter, PlotStyle, Plain, Thresholded,
                      RenderFailedError)

# Suppress warnings when the user code does not include a handler.
logging.getLogger().addHandler(logging.NullHandler())

def add_log_handler(logger, handler=None, format_str="{levelname}: {message} ({name})"):
    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_str, style="{"))
    logger.addHandler(handler)

# Create base logger.
LOGGER = logging.getLogger(__name__)
add_log_handler(LOGGER)

def set_log_verbosity(level, logger=None):
    """Enable logging to stdout with a certain level"""
    if logger is None:
        logger = LOGGER
    logger.setLevel(level)
