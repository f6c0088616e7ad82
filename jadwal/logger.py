import logging
import os
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_NAME = "jadwal-shalat.log"


def setup_logging(log_dir: str, level: str = "INFO") -> str:
    """Log to the console and to a daily rotating file (14 days kept). Returns the file path."""
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, LOG_NAME)
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(numeric_level)

    # Clean old handlers (avoid duplicates on reload)
    if logger.hasHandlers():
        logger.handlers.clear()

    file_handler = TimedRotatingFileHandler(
        log_path,
        when="midnight",
        interval=1,
        backupCount=14,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logging.info(f"[LOG] Logging initialized → {log_path}")
    return log_path
