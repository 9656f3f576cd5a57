# utils/logger.py
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

# resolved at call time so values loaded from config.env are honoured
_USE_ENV = "env"


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logger(name: str,
                 level: Union[str, int, None] = None,
                 log_file: Optional[str] = _USE_ENV,
                 to_console: bool = True,
                 fmt: Optional[str] = None) -> logging.Logger:
    """
    Create/get a logger with console and rotating-file handlers.
    Re-using the same name returns the same configured logger (no duplicate handlers).
    Pass ``log_file=None`` to skip the file handler.
    """
    logger = logging.getLogger(name)
    if logger.handlers:  # already configured
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    if fmt == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    if log_file == _USE_ENV:
        log_file = os.getenv("LOG_FILE", "logs/bot.log")
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=int(os.getenv("LOG_MAX_MB", "5")) * 1024 * 1024,
            backupCount=int(os.getenv("LOG_BACKUPS", "5")),
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    if to_console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(level)
        logger.addHandler(stream_handler)

    # the HTTP stack is chatty at INFO
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return logger
