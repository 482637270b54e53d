"""ReactorLogger — process-wide JSON logger for the poll engine and the bot.

Every record is written as one JSON line to stderr and, unless ``LOG_DIR`` is
set to an empty string, to ``<LOG_DIR>/reactor.log`` (rotated at 5 MB, five
backups kept).  ``LOG_LEVEL`` picks the threshold.  Both variables are read
once, when the logger is first requested.

Context travels through the ``extra`` mapping of a logging call::

    logger.info("Cursor advanced", extra={"cursor": 11, "batch_size": 1})

which is emitted as::

    {"timestamp": "…", "level": "INFO", "logger": "reactor", …, "cursor": 11, "batch_size": 1}
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

DEFAULT_LOG_DIR = "logs"
LOG_FILE_NAME = "reactor.log"


class _JsonFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON object.

    The fixed keys come first; any attribute a caller attached through
    ``extra`` follows, and a formatted traceback is added under
    ``exception`` when the record carries ``exc_info``.
    """

    # Attribute names every LogRecord has; anything else came from ``extra``.
    _RECORD_ATTRS = frozenset(
        logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in self._RECORD_ATTRS and key not in payload
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ReactorLogger:
    """Owner of the shared ``reactor`` logger.

    Usage::

        from core.logger import ReactorLogger

        logger = ReactorLogger.get_logger()
        logger.info("Engine started", extra={"cursor": 0})
    """

    LOGGER_NAME: str = "reactor"

    _ROTATE_AT_BYTES: int = 5 * 1024 * 1024
    _ROTATED_COPIES: int = 5

    _instance: Optional["ReactorLogger"] = None

    def __init__(self, level: int) -> None:
        self._logger = logging.getLogger(self.LOGGER_NAME)
        self._logger.setLevel(level)
        # A re-imported module must not stack a second set of handlers.
        if not self._logger.handlers:
            for handler in self._build_handlers(level):
                self._logger.addHandler(handler)

    def _build_handlers(self, level: int) -> List[logging.Handler]:
        handlers: List[logging.Handler] = [logging.StreamHandler()]

        log_dir = os.environ.get("LOG_DIR", DEFAULT_LOG_DIR)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(RotatingFileHandler(
                os.path.join(log_dir, LOG_FILE_NAME),
                maxBytes=self._ROTATE_AT_BYTES,
                backupCount=self._ROTATED_COPIES,
                encoding="utf-8",
            ))

        formatter = _JsonFormatter()
        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
        return handlers

    @classmethod
    def get_logger(cls, level: Optional[int] = None) -> logging.Logger:
        """Return the shared logger, building it on first use.

        *level* only matters on that first call; later calls hand back the
        same logger untouched.
        """
        if cls._instance is None:
            cls._instance = cls(level if level is not None else _level_from_env())
        return cls._instance._logger


def _level_from_env() -> int:
    """Resolve ``LOG_LEVEL`` (name such as ``DEBUG``) to a numeric level."""
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
