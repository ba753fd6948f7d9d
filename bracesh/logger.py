"""
bracesh Logger Module

Subsystem logging for the shell core, built on the standard logging
module:
- Structured logging with contextual information
- Per-subsystem loggers (parser, evaluator, runner, shell)
- Optional console and file output
- In-memory buffer of recent records for inspection

Log output is diagnostic only. Errors meant for the user are written
to stderr by the shell itself, whether or not logging is enabled.

Author: YSNRFD
Version: 1.0.0
"""

import logging
import sys
import threading
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional, Any, List


class LogLevel(IntEnum):
    """Log level enumeration with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogFormatter(logging.Formatter):
    """
    Log formatter for bracesh.

    Produces lines of the form:
        [2026-10-18 12:00:00.123] DEBUG    [runner] (pid=42) launched {stage=0}
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        """Check if stderr is a terminal."""
        if not hasattr(sys.stderr, 'isatty'):
            return False
        return sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(
            '%Y-%m-%d %H:%M:%S.%f'
        )[:-3]

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_display = f"{self.COLORS[level]}{level:8s}{self.RESET}"
        else:
            level_display = f"{level:8s}"

        components = [f"[{timestamp}]", level_display]

        if hasattr(record, 'subsystem'):
            components.append(f"[{record.subsystem}]")

        if getattr(record, 'pid', None) is not None:
            components.append(f"(pid={record.pid})")

        components.append(str(record.getMessage()))

        if getattr(record, 'context', None):
            context_str = " ".join(f"{k}={v}" for k, v in record.context.items())
            components.append(f"{{{context_str}}}")

        message = " ".join(components)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class LogBuffer(logging.Handler):
    """
    Handler that keeps the most recent records in memory.

    Used by the test suite and by callers that want to inspect what
    the shell decided without scraping a log file.
    """

    def __init__(self, max_entries: int = 1000):
        super().__init__()
        self.max_entries = max_entries
        self._entries: List[dict[str, Any]] = []
        self._lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        entry = {
            'timestamp': record.created,
            'level': record.levelname,
            'message': record.getMessage(),
            'subsystem': getattr(record, 'subsystem', None),
            'pid': getattr(record, 'pid', None),
            'context': getattr(record, 'context', {}),
        }

        with self._lock:
            self._entries.append(entry)
            if len(self._entries) > self.max_entries:
                self._entries = self._entries[-self.max_entries:]

    def get_logs(
        self,
        level: Optional[str] = None,
        subsystem: Optional[str] = None,
        limit: int = 100
    ) -> List[dict[str, Any]]:
        """Retrieve buffered records with optional filtering."""
        with self._lock:
            logs = self._entries.copy()

        if level:
            logs = [l for l in logs if l['level'] == level]
        if subsystem:
            logs = [l for l in logs if l['subsystem'] == subsystem]

        return logs[-limit:]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# Nothing is printed until Logger.initialize() installs real handlers.
logging.getLogger('bracesh').addHandler(logging.NullHandler())


class Logger:
    """
    Subsystem logger for bracesh.

    One instance exists per subsystem name; asking for the same name
    twice returns the same object.

    Example:
        >>> log = Logger('runner')
        >>> log.debug("launched stage", pid=42, context={'stage': 0})
    """

    _instances: dict[str, 'Logger'] = {}
    _lock = threading.Lock()
    _initialized = False
    _buffer: Optional[LogBuffer] = None
    _handlers: List[logging.Handler] = []

    def __new__(cls, subsystem: str = 'shell') -> 'Logger':
        with cls._lock:
            if subsystem not in cls._instances:
                instance = super().__new__(cls)
                instance._subsystem = subsystem
                instance._logger = logging.getLogger(f'bracesh.{subsystem}')
                cls._instances[subsystem] = instance
            return cls._instances[subsystem]

    @property
    def subsystem(self) -> str:
        return self._subsystem

    @classmethod
    def initialize(
        cls,
        level: int = LogLevel.WARNING,
        log_file: Optional[str] = None,
        console: bool = False,
        use_colors: bool = True
    ) -> None:
        """
        Configure the logging system.

        Calling this more than once has no effect until reset() is called.

        Args:
            level: Minimum log level to capture
            log_file: Optional file path for log output
            console: Whether to echo log records to stderr
            use_colors: Whether to use ANSI colors in console output
        """
        with cls._lock:
            if cls._initialized:
                return

            root_logger = logging.getLogger('bracesh')
            root_logger.setLevel(level)

            cls._buffer = LogBuffer()
            cls._buffer.setLevel(level)
            cls._handlers = [cls._buffer]

            if console:
                console_handler = logging.StreamHandler(sys.stderr)
                console_handler.setLevel(level)
                console_handler.setFormatter(LogFormatter(use_colors=use_colors))
                cls._handlers.append(console_handler)

            if log_file:
                file_path = Path(log_file)
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(level)
                file_handler.setFormatter(LogFormatter(use_colors=False))
                cls._handlers.append(file_handler)

            for handler in cls._handlers:
                root_logger.addHandler(handler)

            cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Remove the handlers installed by initialize()."""
        with cls._lock:
            root_logger = logging.getLogger('bracesh')
            for handler in cls._handlers:
                root_logger.removeHandler(handler)
                handler.close()
            cls._handlers = []
            cls._buffer = None
            cls._initialized = False

    @classmethod
    def get_buffered_logs(
        cls,
        level: Optional[str] = None,
        subsystem: Optional[str] = None,
        limit: int = 100
    ) -> List[dict[str, Any]]:
        """Get records from the in-memory buffer."""
        if cls._buffer is None:
            return []
        return cls._buffer.get_logs(level=level, subsystem=subsystem, limit=limit)

    def _log(
        self,
        level: int,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        extra = {
            'subsystem': self._subsystem,
            'pid': pid,
            'context': context or {},
        }
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, pid: Optional[int] = None,
              context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.DEBUG, message, pid, context)

    def info(self, message: str, pid: Optional[int] = None,
             context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.INFO, message, pid, context)

    def warning(self, message: str, pid: Optional[int] = None,
                context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.WARNING, message, pid, context)

    def error(self, message: str, pid: Optional[int] = None,
              context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.ERROR, message, pid, context)

    def critical(self, message: str, pid: Optional[int] = None,
                 context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.CRITICAL, message, pid, context)


def get_logger(subsystem: str) -> Logger:
    """
    Get a logger for the specified subsystem.

    Args:
        subsystem: Name of the subsystem (e.g., 'parser', 'runner')

    Returns:
        Logger instance for the subsystem
    """
    return Logger(subsystem)


def parse_level(name: str) -> int:
    """Map a level name such as 'debug' to its LogLevel value."""
    try:
        return LogLevel[name.upper()]
    except KeyError:
        return LogLevel.WARNING
