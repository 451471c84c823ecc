# src/dealfindr/adapters/logging_utils.py
import json
import logging
import sys
import time

from .config import config


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; `extra={"context": {...}}` is merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.time(),
            "env": config.ENV,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict):
            payload.update(ctx)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # non-JSON context values (datetimes, exceptions) fall back to str()
        return json.dumps(payload, default=str, ensure_ascii=False)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonLogFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel((level or config.LOG_LEVEL).upper())
    return logger
