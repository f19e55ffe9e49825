import sys
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logging(level: str = "INFO", logger_name: str = None) -> logging.Logger:
    """
    Attach a single stdout handler to the given logger (root by default).
    Safe to call more than once: existing handlers are replaced.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger
