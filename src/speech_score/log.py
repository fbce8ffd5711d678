import logging
import sys
from logging.handlers import RotatingFileHandler

from speech_score.config import cfg

_FORMAT = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def get_logger(name: str = "speech_score") -> logging.Logger:
    logger = logging.getLogger(name)

    # Only add handlers once per logger (prevents duplicate lines)
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(cfg.log_level.upper())
        console_handler.setFormatter(_FORMAT)
        logger.addHandler(console_handler)

        if cfg.log_file:
            # Stores everything, rotates at 5MB
            file_handler = RotatingFileHandler(
                cfg.log_file, maxBytes=5*1024*1024, backupCount=2, encoding="utf-8"
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(_FORMAT)
            logger.addHandler(file_handler)

    return logger


def set_console_level(level: str | int):
    """Change the console verbosity of every logger created by get_logger."""
    for name in list(logging.root.manager.loggerDict):
        if not name.startswith("speech_score"):
            continue
        for handler in logging.getLogger(name).handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(level)
