"""Logging setup for scripts and notebooks that build the report.

Library modules only create module loggers; call ``configure_logging()`` once
from the entry point to see their output.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure the root logger with a console handler.

    Does nothing if the root logger already has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
