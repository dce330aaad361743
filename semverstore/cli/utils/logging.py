import logging
import sys
from typing import Optional


logger = logging.getLogger("semverstore")

_handler: Optional[logging.Handler] = None


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.

    Messages go to stderr; stdout is reserved for versions.
    """
    global _handler

    # the stream is bound at creation, so a new handler follows sys.stderr swaps
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))

    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)
    logger.addHandler(_handler)
