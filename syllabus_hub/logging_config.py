"""
Logging for the API.

Everything hangs off the "syllabus_hub" logger. setup_logging() is called
once from main.py (and the seed script); modules take a child logger:

    logger = get_logger("ratings")
"""
import json
import logging
import sys
from datetime import datetime
from typing import Optional

BASE_LOGGER = "syllabus_hub"

DEV_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record (LOG_JSON=true)"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", production: bool = False) -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if production:
        handler.setFormatter(JsonLineFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%H:%M:%S"))

    # Replace rather than stack handlers when called twice
    logger.handlers = [handler]
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    base = logging.getLogger(BASE_LOGGER)
    return base.getChild(name) if name else base
