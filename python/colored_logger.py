import logging
import os
import sys
from typing import Optional, TextIO, Union

# Extra levels used by the build summary
PROGRESS_LEVEL = 22
SUCCESS_LEVEL = 25
NOTICE_LEVEL = 35
FAILURE_LEVEL = 45

logging.addLevelName(PROGRESS_LEVEL, "PROGRESS")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")
logging.addLevelName(NOTICE_LEVEL, "NOTICE")
logging.addLevelName(FAILURE_LEVEL, "FAILURE")


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps each record in an ANSI color picked by level name."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "PROGRESS": "\033[94m",  # Bright Blue
        "SUCCESS": "\033[92m",  # Bright Green
        "WARNING": "\033[33m",  # Yellow
        "NOTICE": "\033[96m",  # Bright Cyan
        "ERROR": "\033[31m",  # Red
        "FAILURE": "\033[91m",  # Bright Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(fmt, datefmt)
        self._stream = stream

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        stream = self._stream or sys.stderr
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        if self._use_color():
            level_color = self.COLORS.get(record.levelname, "")
            return f"{level_color}{message}{self.COLORS['RESET']}"

        return message


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_colored_logging(
    level: Union[int, str] = logging.INFO, stream: Optional[TextIO] = None
) -> None:
    """
    Configure the root logger with a single colored console handler.

    Args:
        level: Logging level, either a number or a name such as "DEBUG"
        stream: Output stream (default: sys.stderr)
    """
    stream = stream or sys.stderr
    formatter = ColoredFormatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=stream,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level(level))

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


class EnhancedLogger:
    """Logger wrapper adding progress/success/notice/failure methods."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def progress(self, msg, *args, **kwargs):
        self._logger.log(PROGRESS_LEVEL, msg, *args, **kwargs)

    def success(self, msg, *args, **kwargs):
        self._logger.log(SUCCESS_LEVEL, msg, *args, **kwargs)

    def notice(self, msg, *args, **kwargs):
        self._logger.log(NOTICE_LEVEL, msg, *args, **kwargs)

    def failure(self, msg, *args, **kwargs):
        self._logger.log(FAILURE_LEVEL, msg, *args, **kwargs)

    # debug/info/warning/error/critical and everything else
    def __getattr__(self, name):
        return getattr(self._logger, name)


def get_colored_logger(name: str) -> EnhancedLogger:
    """
    Get an enhanced logger for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        EnhancedLogger wrapping logging.getLogger(name)
    """
    return EnhancedLogger(logging.getLogger(name))
