# productstore/utils/logger.py
# Application-wide "ProductStore" logger: stdout plus a process-safe rotating log file.

import logging
import os
import sys
from concurrent_log_handler import ConcurrentRotatingFileHandler
from typing import Optional

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

LOGGER_NAME = "ProductStore"
LOG_DIRECTORY = os.environ.get('LOG_DIRECTORY', os.path.join(_PROJECT_ROOT, "logs"))
LOG_FILENAME = "productstore.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d | %(funcName)s] - %(message)s'
LOG_MAX_BYTES = int(os.environ.get('LOG_MAX_BYTES', 10 * 1024 * 1024))
LOG_BACKUP_COUNT = int(os.environ.get('LOG_BACKUP_COUNT', 10))

def _level_from_name(level_name: Optional[str]) -> int:
    level = logging.getLevelName((level_name or "DEBUG").upper())
    if not isinstance(level, int):
        print(f"Warning: unknown log level '{level_name}', using DEBUG.", file=sys.stderr)
        return logging.DEBUG
    return level

def _file_handler(formatter: logging.Formatter) -> Optional[logging.Handler]:
    """Rotating file handler safe for several worker processes, or None if the directory is unusable."""
    try:
        os.makedirs(LOG_DIRECTORY, exist_ok=True)
        handler = ConcurrentRotatingFileHandler(
            filename=os.path.join(LOG_DIRECTORY, LOG_FILENAME),
            mode='a',
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8',
        )
    except OSError as e:
        print(f"File logging disabled, cannot write to {LOG_DIRECTORY}: {e}", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    return handler

class Logger:
    """
    Singleton around the ProductStore logger.

    The first instantiation attaches the handlers; later ones (see
    configure_logger) only change the level.
    """
    _instance = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._logger = None
        return cls._instance

    def __init__(self, log_level: Optional[str] = None):
        if self._logger is not None:
            if log_level is not None:
                self._logger.setLevel(_level_from_name(log_level))
            return

        if log_level is None:
            from productstore.config import config  # late import: config <-> logger
            log_level = config.LOG_LEVEL

        self._logger = logging.getLogger(LOGGER_NAME)
        self._logger.setLevel(_level_from_name(log_level))
        if self._logger.handlers:
            return

        formatter = logging.Formatter(LOG_FORMAT)
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        file_handler = _file_handler(formatter)
        if file_handler is not None:
            self._logger.addHandler(file_handler)
        self._logger.info(f"Logging initialized (level {logging.getLevelName(self._logger.level)}, directory {LOG_DIRECTORY}).")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

logger = Logger().logger

def configure_logger(level: str):
    """Applies the configured level to the already-initialized logger."""
    Logger(log_level=level)
