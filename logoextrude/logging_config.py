import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level=logging.INFO, log_file=None):
    """
    Route the 'logoextrude' log records to stdout and optionally to a file.

    Earlier handlers on the package logger are closed and replaced, so calling
    this twice does not duplicate output. The library itself never calls it.

    Parameters:
    level (int, optional): Logging level for the logger and its handlers. Default is INFO.
    log_file (str, optional): Path of a log file, overwritten on each call.

    Returns:
    logging.Logger: The configured package logger.
    """
    logger = logging.getLogger("logoextrude")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to %d handler(s) at level %s", len(handlers), logging.getLevelName(level))
    return logger
