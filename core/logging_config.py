"""
Centralized logging configuration for the workflow compiler.

Features:
- Colored logging with different colors for different log levels
- Structured formatting with timestamps and context
- Section dividers around API calls and compile runs
- Configurable log levels and output formats
"""

import logging
import re
import sys
from datetime import datetime
from typing import Optional, Union
from pathlib import Path

# Color codes for terminal output
class Colors:
    """ANSI color codes for terminal output"""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"

class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log messages"""

    COLORS = {
        logging.DEBUG: Colors.GRAY,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.MAGENTA,
    }

    TIMESTAMP_PATTERN = re.compile(r'(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})')

    def format(self, record):
        formatted = super().format(record)

        level_color = self.COLORS.get(record.levelno, Colors.WHITE)
        formatted = formatted.replace(
            record.levelname,
            f"{level_color}{record.levelname}{Colors.RESET}",
            1
        )

        formatted = self.TIMESTAMP_PATTERN.sub(f"{Colors.CYAN}\\1{Colors.RESET}", formatted, count=1)

        if record.name:
            formatted = formatted.replace(
                f"{record.name} - ",
                f"{Colors.BLUE}{record.name}{Colors.RESET} - ",
                1
            )

        return formatted

class SectionLogger:
    """Logger that frames API calls and compile runs with dividers"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.divider_length = 80

    def log_api_call_start(self, endpoint: str, method: str = "POST", request_id: Optional[str] = None):
        """Log the start of an API call with clear dividers"""
        divider = "=" * self.divider_length
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        self.logger.info(divider)
        self.logger.info(f"API CALL START - {method} {endpoint}")
        if request_id:
            self.logger.info(f"Request ID: {request_id}")
        self.logger.info(f"Timestamp: {timestamp}")
        self.logger.info(divider)

    def log_api_call_end(self, endpoint: str, method: str = "POST", request_id: Optional[str] = None,
                         duration_ms: Optional[float] = None, status: str = "completed"):
        """Log the end of an API call with clear dividers"""
        divider = "=" * self.divider_length

        self.logger.info(divider)
        self.logger.info(f"API CALL END - {method} {endpoint}")
        if request_id:
            self.logger.info(f"Request ID: {request_id}")
        if duration_ms is not None:
            self.logger.info(f"Duration: {duration_ms:.2f}ms")
        self.logger.info(f"Status: {status}")
        self.logger.info(divider)

    def log_compile_start(self, workflow_id: str, step_count: int):
        """Log the start of a compile run"""
        divider = "-" * 60
        self.logger.debug(divider)
        self.logger.debug(f"COMPILE START - workflow={workflow_id} steps={step_count}")
        self.logger.debug(divider)

    def log_compile_end(self, workflow_id: str, state: str, error_count: int,
                        warning_count: int, duration_ms: Optional[float] = None):
        """Log the end of a compile run"""
        divider = "-" * 60
        level = logging.WARNING if error_count else logging.DEBUG
        self.logger.log(level, divider)
        self.logger.log(level, f"COMPILE END - workflow={workflow_id} state={state}")
        self.logger.log(level, f"Errors: {error_count}, Warnings: {warning_count}")
        if duration_ms is not None:
            self.logger.log(level, f"Duration: {duration_ms:.2f}ms")
        self.logger.log(level, divider)

def setup_logging(
    log_level: str = "INFO",
    log_format: str = "detailed",
    log_file: Optional[Union[str, Path]] = None,
    enable_colors: bool = True
) -> logging.Logger:
    """
    Set up centralized logging configuration

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format style ('simple', 'detailed', 'json')
        log_file: Optional file path for logging
        enable_colors: Whether to enable colored output (terminal only)

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Diagnostics go to stdout alongside compiler output, logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)

    use_colors = enable_colors and sys.stderr.isatty()
    if log_format == "simple":
        if use_colors:
            formatter = ColoredFormatter("%(levelname)s - %(message)s")
        else:
            formatter = logging.Formatter("%(levelname)s - %(message)s")
    elif log_format == "json":
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
        )
    else:  # detailed (default)
        if use_colors:
            formatter = ColoredFormatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        # File handler always uses non-colored format
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    return root_logger

def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name"""
    return logging.getLogger(name)

def get_section_logger(name: str) -> SectionLogger:
    """Get a section logger for the specified logger name"""
    return SectionLogger(logging.getLogger(name))

def configure_logging_from_settings(settings=None):
    """Configure logging based on application settings"""
    if settings is None:
        from core.config import settings

    log_level = settings.log_level
    if settings.debug:
        log_level = "DEBUG"

    setup_logging(
        log_level=log_level,
        log_format=settings.log_format,
        enable_colors=True
    )

    logger = get_logger(__name__)
    logger.debug(f"Logging configured with level: {log_level}, format: {settings.log_format}")
