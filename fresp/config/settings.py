"""Configuration parser and defaults"""

from .base import BaseConfig


class FrespConfig(BaseConfig):
    """Fresp config parser"""
    # user config filename
    USER_CONFIG_FILENAME = "fresp.yaml"
    # default config copied to user directory if requested
    DEFAULT_USER_CONFIG_FILENAME = USER_CONFIG_FILENAME + ".dist"
    # config into which others are merged
    BASE_CONFIG_FILENAME = USER_CONFIG_FILENAME + ".dist.default"
