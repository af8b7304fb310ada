"""
Logging setup for netanalyzer.

Library modules only ever call ``get_logger(__name__)``; nothing is printed
until an application calls ``setup_logging``. Settings come from keyword
arguments first, then ``NETANALYZER_LOG_*`` environment variables, then
the defaults below. ``LoggingTimer`` reports the wall-clock time of the
expensive all-pairs and iterative algorithms on the
``netanalyzer.performance`` logger at DEBUG level.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any


ROOT_LOGGER_NAME = "netanalyzer"
PERFORMANCE_LOGGER_NAME = "netanalyzer.performance"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE_NAME = "netanalyzer.log"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

ENV_LOG_LEVEL = "NETANALYZER_LOG_LEVEL"
ENV_LOG_FILE = "NETANALYZER_LOG_FILE"
ENV_LOG_DIR = "NETANALYZER_LOG_DIR"
ENV_LOG_FORMAT = "NETANALYZER_LOG_FORMAT"
ENV_LOG_CONSOLE = "NETANALYZER_LOG_CONSOLE"
ENV_LOG_JSON = "NETANALYZER_LOG_JSON"

_TRUE_VALUES = ("true", "yes", "1", "on")
_FALSE_VALUES = ("false", "no", "0", "off")

# Present on every LogRecord; other attributes arrived through ``extra``
_BUILTIN_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class LoggingSettings:
    """Fully resolved logging options."""
    level: str
    log_file: Optional[str]
    console: bool
    json_format: bool
    format_string: str
    date_format: str
    max_file_size: int
    backup_count: int

    @classmethod
    def resolve(
        cls,
        level: Optional[str] = None,
        log_file: Optional[str] = None,
        log_dir: Optional[str] = None,
        console: Optional[bool] = None,
        json_format: Optional[bool] = None,
        format_string: Optional[str] = None,
        date_format: Optional[str] = None,
        max_file_size: Optional[int] = None,
        backup_count: Optional[int] = None
    ) -> "LoggingSettings":
        """Fill every option left as None from the environment or the defaults."""
        log_dir = log_dir or os.getenv(ENV_LOG_DIR)
        log_file = log_file or os.getenv(ENV_LOG_FILE)
        if not log_file and log_dir:
            log_file = os.path.join(log_dir, DEFAULT_LOG_FILE_NAME)

        return cls(
            level=level or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
            log_file=log_file,
            console=_env_flag(ENV_LOG_CONSOLE, True) if console is None else console,
            json_format=_env_flag(ENV_LOG_JSON, False) if json_format is None else json_format,
            format_string=format_string or os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT),
            date_format=date_format or DEFAULT_DATE_FORMAT,
            max_file_size=max_file_size or DEFAULT_MAX_FILE_SIZE,
            backup_count=backup_count or DEFAULT_BACKUP_COUNT
        )

    def numeric_level(self) -> int:
        value = getattr(logging, str(self.level).upper(), None)
        if not isinstance(value, int):
            raise ValueError(f"Invalid logging level: {self.level}")
        return value

    def formatter(self) -> logging.Formatter:
        if self.json_format:
            return JSONFormatter()
        return logging.Formatter(fmt=self.format_string, datefmt=self.date_format)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, for log shippers.

    Fields passed with ``extra=`` (for example the ``operation`` and
    ``duration`` of a timed computation) are copied to the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (key, value) for key, value in vars(record).items()
            if key not in _BUILTIN_RECORD_FIELDS
        )
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a module.

    Pass ``__name__`` so the logger sits under the ``netanalyzer``
    hierarchy and picks up whatever ``setup_logging`` installed.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> logger.debug("Settled node %s", node_id)
    """
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    max_file_size: Optional[int] = None,
    backup_count: Optional[int] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Attach handlers to the ``netanalyzer`` logger.

    Parameters
    ----------
    level : str, optional
        Level name; falls back to NETANALYZER_LOG_LEVEL, then INFO
    log_file : str, optional
        Rotating log file; falls back to NETANALYZER_LOG_FILE
    log_dir : str, optional
        Directory for ``netanalyzer.log`` when no file is given; falls back
        to NETANALYZER_LOG_DIR. Without file or directory nothing is
        written to disk.
    console : bool, optional
        Log to stdout; falls back to NETANALYZER_LOG_CONSOLE, then True
    json_format : bool, optional
        Emit JSON lines; falls back to NETANALYZER_LOG_JSON, then False
    format_string : str, optional
        Text format; falls back to NETANALYZER_LOG_FORMAT
    date_format : str, optional
        ``asctime`` format
    max_file_size : int, optional
        Bytes before the file rotates (10 MB by default)
    backup_count : int, optional
        Rotated files kept (5 by default)
    force_setup : bool, default False
        Replace existing handlers. Without it a second call is a no-op.

    Returns
    -------
    logging.Logger
        The ``netanalyzer`` logger

    Raises
    ------
    ValueError
        If the level name is unknown

    Examples
    --------
    >>> setup_logging(level="DEBUG")
    >>> setup_logging(log_dir="/var/log/netanalyzer", json_format=True, console=False)
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if package_logger.handlers:
        if not force_setup:
            return package_logger
        for handler in list(package_logger.handlers):
            handler.close()
        package_logger.handlers.clear()

    settings = LoggingSettings.resolve(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        format_string=format_string,
        date_format=date_format,
        max_file_size=max_file_size,
        backup_count=backup_count
    )
    package_logger.setLevel(settings.numeric_level())
    formatter = settings.formatter()

    handlers = []
    if settings.console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=settings.max_file_size,
            backupCount=settings.backup_count,
            encoding="utf-8"
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    # Handlers live here, so records must not reach the root logger twice
    package_logger.propagate = False

    package_logger.info(
        "Logging configured: level=%s, console=%s, file=%s, json=%s",
        settings.level, settings.console, settings.log_file or "None", settings.json_format
    )
    return package_logger


def log_function_entry(func_name: str, **kwargs) -> None:
    """
    Trace a call and its arguments on ``netanalyzer.debug``.

    The arguments are only formatted when DEBUG is enabled.
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.debug")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Entering %s(%s)", func_name, ", ".join(f"{k}={v}" for k, v in kwargs.items()))


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None,
    outcome: str = "completed"
) -> None:
    """
    Report how long an operation took.

    Parameters
    ----------
    operation : str
        Operation name, usually the public function
    duration : float
        Seconds elapsed
    details : Dict[str, Any], optional
        Input sizes and similar facts appended to the message
    outcome : str, default "completed"
        Verb used in the message ("completed" or "failed")
    """
    message = f"Performance: {operation} {outcome} in {duration:.3f}s"
    if details:
        message += " (" + ", ".join(f"{k}={v}" for k, v in details.items()) + ")"

    get_logger(PERFORMANCE_LOGGER_NAME).debug(
        message, extra={"operation": operation, "duration": duration}
    )


class LoggingTimer:
    """
    Time the body of a ``with`` block and report it on exit.

    Exceptions propagate unchanged; the duration is still recorded and the
    message says the operation failed.

    Examples
    --------
    >>> with LoggingTimer("betweenness_centrality", {"nodes": 1000}):
    ...     scores = betweenness_centrality(graph)
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        self.duration = time.perf_counter() - self.start_time
        log_performance_metric(
            self.operation,
            self.duration,
            self.details,
            outcome="failed" if exc_type is not None else "completed"
        )
