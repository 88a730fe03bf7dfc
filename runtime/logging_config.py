import logging
import sys
from typing import Optional

LOGGER_NAME = "surface_evolver"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def setup_logging(
    log_file: Optional[str],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> logging.Logger:
    """Configure the shared ``surface_evolver`` logger for a run.

    Handlers from a previous call are closed and replaced, so repeated runs in
    one process do not duplicate output. ``log_file`` receives everything at
    the run level (DEBUG with ``debug``); the console shows INFO and above
    unless ``quiet``. Records still propagate to the root logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = True
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        try:
            _attach(logger, logging.FileHandler(log_file, mode="w"), level)
        except OSError as exc:
            print(f"[logging] Could not open log file '{log_file}': {exc}", file=sys.stderr)

    if not quiet:
        _attach(logger, logging.StreamHandler(), logging.INFO)

    return logger
