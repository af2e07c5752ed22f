"""
Mobile service client library containing logging helper functionality
"""

import logging
import logging.config
from typing import Optional

from ..schemas import config


def enforce_logger(logger: Optional[logging.Logger] = None) -> logging.Logger:
    """
    Enforce availability of a working logger
    """

    if logger is not None and isinstance(logger, logging.Logger):
        return logger
    elif logger is not None:
        raise TypeError(f"Expected 'logging.Logger', got {type(logger)}")
    return logging.getLogger("mobileservice_client")


def setup_logging(conf: Optional[config.ClientConfig] = None):
    """
    Apply the logging configuration of the given client config via ``dictConfig``
    """

    conf = conf or config.ClientConfig()
    logging.config.dictConfig(conf.logging.dict())


class NoDebugFilter(logging.Filter):
    """
    Logging filter that filters out any DEBUG message for the specified logger or handler
    """

    def filter(self, record: logging.LogRecord) -> int:
        if super().filter(record):
            return record.levelno > logging.DEBUG
        return True
