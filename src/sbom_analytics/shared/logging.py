"""
Logging utilities for SBOM analytics.
"""

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "sbom_analytics"

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO", log_file: Path | None = None, use_rich: bool = True
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        use_rich: Whether to use Rich formatting for console output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if use_rich:
        console = Console(stderr=True)
        console_handler: logging.Handler = RichHandler(
            console=console, show_time=True, show_path=False, markup=False
        )
        formatter = logging.Formatter(fmt="%(message)s", datefmt="[%X]")
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class ProgressLogger:
    """Renders engine progress callbacks on the console."""

    def __init__(self, logger: logging.Logger | None = None, use_rich: bool = True):
        """Initialize progress logger.

        Args:
            logger: Logger instance to use
            use_rich: Whether to use Rich console for output
        """
        self.logger = logger or get_logger()
        self.use_rich = use_rich
        self.console = Console(stderr=True) if use_rich else None
        self.last_percent = -1

    def __call__(self, percent: float, message: str) -> None:
        """Report a progress update; usable directly as an engine callback."""
        rounded = int(percent)
        if rounded == self.last_percent:
            return
        self.last_percent = rounded

        line = f"[{rounded:3d}%] {message}"
        if self.console is not None:
            self.console.print(line, style="cyan", highlight=False)
        else:
            self.logger.info(line)

    def finish_operation(self, operation_name: str, duration: float | None = None) -> None:
        """Report that an operation has completed.

        Args:
            operation_name: Name of the operation
            duration: Duration in seconds (if measured)
        """
        duration_str = f" in {duration:.2f}s" if duration else ""
        message = f"{operation_name} completed{duration_str}"

        if self.console is not None:
            self.console.print(f"✓ {message}", style="green bold", highlight=False)
        else:
            self.logger.info(message)
