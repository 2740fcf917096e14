"""
Logging configuration for Penguin Exporter.

Features:
- Console output, colored when attached to a TTY
- Optional file output with rotation
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path

RESET = "\033[0m"

# Log level colors
LEVEL_COLORS = {
    logging.DEBUG: "\033[2m\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1m\033[91m",
}

# Component colors, matched against the logger name
COMPONENT_COLORS = {
    "config": "\033[35m",
    "collectors": "\033[36m",
    "registry": "\033[34m",
    "app": "\033[32m",
}


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level and component name."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        original = (record.levelname, record.name)

        level_color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{level_color}{record.levelname:8}{RESET}"

        for key, color in COMPONENT_COLORS.items():
            if key in record.name:
                record.name = f"{color}{record.name}{RESET}"
                break

        try:
            return super().format(record)
        finally:
            record.levelname, record.name = original


class PlainFormatter(logging.Formatter):
    """Plain formatter for file output."""

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        record.levelname = f"{levelname:8}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


@dataclass
class LogConfig:
    """Logging configuration."""

    # Console settings
    console_level: str = "INFO"
    console_colors: bool = True
    console_stderr: bool = False  # keeps stdout free for --once output

    # File settings
    file_enabled: bool = False
    file_path: str = "/var/log/penguin-exporter/penguin-exporter.log"
    file_level: str = "DEBUG"
    file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    file_backup_count: int = 5

    # Format
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_str: str) -> int:
    """Convert string log level to logging constant."""
    levels = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return levels.get(level_str.lower(), logging.INFO)


def setup_logging(config: LogConfig | None = None) -> None:
    """
    Configure logging for the application.

    Args:
        config: Logging configuration (uses defaults if None)
    """
    if config is None:
        config = LogConfig()

    root_logger = logging.getLogger("penguin_exporter")
    root_logger.setLevel(logging.DEBUG)  # filtered at handlers
    root_logger.handlers.clear()

    stream = sys.stderr if config.console_stderr else sys.stdout
    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(get_log_level(config.console_level))
    use_colors = config.console_colors and hasattr(stream, "isatty") and stream.isatty()
    console_handler.setFormatter(
        ColoredFormatter(fmt=config.format, datefmt=config.date_format, use_colors=use_colors)
    )
    root_logger.addHandler(console_handler)

    if config.file_enabled:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        file_handler.setLevel(get_log_level(config.file_level))
        file_handler.setFormatter(PlainFormatter(fmt=config.format, datefmt=config.date_format))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a component.

    Args:
        name: Component name (will be prefixed with penguin_exporter)

    Returns:
        Logger instance
    """
    if name.startswith("penguin_exporter"):
        return logging.getLogger(name)
    return logging.getLogger(f"penguin_exporter.{name}")
