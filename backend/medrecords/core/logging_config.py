"""Process-wide logging setup for the API."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a console handler to the package logger once."""
    logger = logging.getLogger("medrecords")
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
    logger.setLevel(level.upper())
    logger.info("Logging configured at %s", level.upper())
