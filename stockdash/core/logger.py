"""Logging infrastructure setup."""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Deque, List, Optional

_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s.%(funcName)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = "stockdash", log_file: Optional[str] = "output/stockdash.log") -> logging.Logger:
    """
    Configure and return a standard logger that writes to a specified file and the console.

    Args:
        name (str): The name of the logger.
        log_file (Optional[str]): The path to the log file. ``None`` disables the file handler.

    Returns:
        logging.Logger: The configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Avoid adding multiple handlers if setup is called multiple times.
    # Only this logger's own handlers count; a configured root must not skip setup.
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


@dataclass
class LogEntry:
    """One captured record, shaped for a debug panel."""
    timestamp: datetime
    level: str
    message: str
    component: str


class RingBufferHandler(logging.Handler):
    """Keeps the most recent ``capacity`` records in memory, newest first.

    An instance is owned by whoever attaches it (normally the dashboard
    engine), so two engines in one process keep separate buffers.
    """

    def __init__(self, capacity: int = 100, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._buffer_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created),
                level=record.levelname.lower(),
                message=record.getMessage(),
                component=record.module,
            )
        except Exception:
            self.handleError(record)
            return
        with self._buffer_lock:
            self._entries.appendleft(entry)

    def entries(self) -> List[LogEntry]:
        with self._buffer_lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._buffer_lock:
            self._entries.clear()

    def count(self, level: str) -> int:
        return sum(1 for e in self.entries() if e.level == level)


# Create a default logger instance
logger = setup_logger()
