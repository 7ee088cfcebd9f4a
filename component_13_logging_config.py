"""
component_13_logging_config.py

Central logging system for Shrdlite.
Provides structured logging with levels, component names and timing.

Features:
- Console logging, optional rotating log files (config: logging.file_logging)
- Structured formatting with timestamps and component names
- Performance tracking for searches and interpretation runs
- Contextual key=value information via extra={...}

Usage:
    from component_13_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Interpretation found", extra={"formula": "ontop(a,b)"})
    logger.warning("Search timed out", extra={"timeout": 10.0})
"""

import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type

DEFAULT_LOG_FILE_NAME: str = "shrdlite.log"
ERROR_LOG_FILE_NAME: str = "shrdlite_errors.log"
PERFORMANCE_LOG_FILE_NAME: str = "shrdlite_performance.log"
PERFORMANCE_LOGGER_NAME: str = "shrdlite.performance"

CONSOLE_LOG_LEVEL: int = logging.WARNING
FILE_LOG_LEVEL: int = logging.DEBUG


class ShrdliteLogFormatter(logging.Formatter):
    """
    Formatter for structured log output.
    Optionally colors console output by level.
    """

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        self.use_colors: bool = use_colors
        self.include_extra: bool = include_extra

        # [TIMESTAMP] [LEVEL] [COMPONENT] MESSAGE
        fmt = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_message = super().format(record)

        if self.include_extra and hasattr(record, "extra_info"):
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_info.items())
            if extra_str:
                log_message += f" | {extra_str}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            log_message = f"{color}{log_message}{self.COLORS['RESET']}"

        return log_message


class PerformanceLogger:
    """
    Context manager timing a critical operation.

    Usage:
        with PerformanceLogger(logger, "A* search", goal=str(formula)):
            engine.search(start)
    """

    def __init__(self, logger: logging.Logger, operation_name: str, **context: Any) -> None:
        self.logger: logging.Logger = logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.start_time: Optional[datetime] = None
        self.duration_ms: float = 0.0

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now()
        self.logger.debug(f"START: {self.operation_name}", extra={"extra_info": self.context})
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        assert self.start_time is not None, "PerformanceLogger used outside a with block"
        self.duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if exc_type is None:
            self.logger.debug(
                f"END: {self.operation_name} (duration: {self.duration_ms:.2f}ms)",
                extra={"extra_info": {**self.context, "duration_ms": self.duration_ms}},
            )
            logging.getLogger(PERFORMANCE_LOGGER_NAME).info(
                f"{self.operation_name}: {self.duration_ms:.2f}ms",
                extra={"extra_info": {**self.context, "duration_ms": self.duration_ms}},
            )
        else:
            # Recoverable failures (timeouts, impossible goals) are not errors of ours
            self.logger.info(
                f"FAILED: {self.operation_name} (duration: {self.duration_ms:.2f}ms)",
                extra={
                    "extra_info": {
                        **self.context,
                        "duration_ms": self.duration_ms,
                        "error": str(exc_val),
                    }
                },
            )

        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that stores extra={...} dicts as record.extra_info.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs

    def log_exception(self, exc: Exception, message: str = "", **context: Any) -> None:
        """Log an exception with full traceback and context."""
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self.error(f"{message}: {type(exc).__name__}: {str(exc)}\n{tb_str}", extra=context)


def _rotating_handler(path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setFormatter(ShrdliteLogFormatter(use_colors=False, include_extra=True))
    return handler


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = False,
    use_colors: Optional[bool] = None,
) -> None:
    """
    Configure the global logging system.

    Args:
        console_level: Level of console output (stderr)
        file_level: Level of the main log file
        log_dir: Directory for log files (default: ./logs)
        enable_file_logging: Write main, error-only and performance log files
        use_colors: ANSI colors on the console (default: only when stderr is a tty)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # filter on handler level
    root_logger.handlers.clear()

    if use_colors is None:
        use_colors = sys.stderr.isatty()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ShrdliteLogFormatter(use_colors=use_colors, include_extra=True))
    root_logger.addHandler(console_handler)

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
    perf_logger.handlers.clear()
    perf_logger.setLevel(logging.INFO)

    directory = log_dir or Path("logs")
    if enable_file_logging:
        directory.mkdir(parents=True, exist_ok=True)

        file_handler = _rotating_handler(directory / DEFAULT_LOG_FILE_NAME, 10 * 1024 * 1024, 5)
        file_handler.setLevel(file_level)
        root_logger.addHandler(file_handler)

        error_handler = _rotating_handler(directory / ERROR_LOG_FILE_NAME, 5 * 1024 * 1024, 3)
        error_handler.setLevel(logging.ERROR)
        root_logger.addHandler(error_handler)

        perf_logger.propagate = False
        perf_logger.addHandler(
            _rotating_handler(directory / PERFORMANCE_LOG_FILE_NAME, 5 * 1024 * 1024, 3)
        )
    else:
        perf_logger.propagate = True

    logging.getLogger("shrdlite.logging_config").info(
        "Logging initialised",
        extra={
            "extra_info": {
                "console_level": logging.getLevelName(console_level),
                "file_logging": enable_file_logging,
                "log_dir": str(directory),
            }
        },
    )


def setup_logging_from_config() -> None:
    """Configure logging from the logging section of shrdlite_config."""
    from shrdlite_config import get_config

    config = get_config()
    setup_logging(
        console_level=config.console_log_level,
        log_dir=Path(config.logging.log_dir),
        enable_file_logging=config.logging.file_logging,
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Create a structured logger for a component.

    Args:
        name: Component name (usually __name__)

    Returns:
        StructuredLogger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Plan found", extra={"length": 3})
    """
    return StructuredLogger(logging.getLogger(name), {})


# === Convenience functions ===


def log_component_start(logger: StructuredLogger, component_name: str, **context: Any) -> None:
    logger.info(f"START: {component_name}", extra=context)


def log_component_end(logger: StructuredLogger, component_name: str, **context: Any) -> None:
    logger.info(f"END: {component_name}", extra=context)


def log_component_error(
    logger: StructuredLogger, component_name: str, error: Exception, **context: Any
) -> None:
    """Log an error in a component with full traceback."""
    logger.log_exception(error, message=f"ERROR in {component_name}", **context)


# Automatic initialisation on import; an explicit setup_logging() call overrides it
if not logging.getLogger().handlers:
    setup_logging_from_config()
