import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from .config import get_config

LOG_FILE = get_config("PD_LOG_FILE", "logs/app.log")

def get_logger(name: str) -> logging.Logger:
    """
    Configures and returns a logger instance.
    This logger uses a TimedRotatingFileHandler to automatically rotate logs.
    """
    log_level_str = get_config("PD_LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    retention_days = int(get_config("PD_LOG_RETENTION_DAYS", "7"))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Prevent duplicate handlers if the logger is already configured
    if logger.hasHandlers():
        return logger

    Path(LOG_FILE).parent.mkdir(parents=True, exist_ok=True)

    # Rotate the log file every day at midnight and keep N backups.
    handler = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        interval=1,
        backupCount=retention_days
    )
    handler.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger
