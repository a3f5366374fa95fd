"""
Logging utilities for tess-client.

Provides structured logging with different output formats and levels.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
import json
from datetime import datetime

import coloredlogs


ROOT_LOGGER_NAME = "tessclient"


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs JSON structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, 'image_source'):
            log_data['image_source'] = record.image_source
        if hasattr(record, 'languages'):
            log_data['languages'] = record.languages
        if hasattr(record, 'elapsed'):
            log_data['elapsed'] = record.elapsed

        return json.dumps(log_data, ensure_ascii=False)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: Optional[str] = None,
    json_format: bool = False
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        log_dir: Directory for log files (default: ~/logs/tess-client)
        json_format: Whether to use JSON formatting for file logs

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Clear any existing handlers
    logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    coloredlogs.install(
        level=log_level,
        logger=logger,
        stream=sys.stderr,
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    if log_to_file:
        if log_dir is None:
            log_dir = Path.home() / "logs" / "tess-client"
        else:
            log_dir = Path(log_dir)

        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"tess_client_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)

        if json_format:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    # Prevent duplicate logs in parent loggers
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class ClientLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds client context to log records.

    Usage:
        adapter = ClientLoggerAdapter(logger, {'image_source': 'scan.png'})
        adapter.info("Extraction started", extra={'elapsed': 1.23})
    """

    def process(self, msg, kwargs):
        """Add extra context to log record."""
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def get_core_logger() -> logging.Logger:
    """Get logger for the client core."""
    return get_logger("core")
