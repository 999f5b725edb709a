"""
Process-wide logger setup shared by every module.
"""

import logging
import sys

from config.config import LOG_LEVEL, VERBOSE

LOGGER_NAME = "compass_nav"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name=LOGGER_NAME, level=None):
    """
    Return the named logger, attaching a stderr handler the first time only.
    Child names ("compass_nav.sensors") reuse the parent's handler.
    """
    logger = logging.getLogger(name)
    root_name = name.split(".")[0]
    root = logging.getLogger(root_name)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel("DEBUG" if VERBOSE else LOG_LEVEL)
    if level is not None:
        logger.setLevel(level)
    return logger
