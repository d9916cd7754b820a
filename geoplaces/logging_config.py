# geoplaces/logging_config.py
import logging
import sys

from geoplaces import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level=None) -> None:
    """Send log records to stdout. Replaces handlers already on the root logger."""
    level_name = (level or config.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # SQL echo is controlled by DB_ECHO, keep the engine quiet otherwise
    if not config.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
