"""
Centralized logging configuration for the application.
Logs to both console and rotating file.
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime

from railfare.core.config import settings

# Create logs directory if it doesn't exist
LOGS_DIR = Path(settings.LOG_DIR)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Log file path with date
LOG_FILE = LOGS_DIR / f"railfare_{datetime.now().strftime('%Y%m%d')}.log"


def setup_logger(name: str = "railfare") -> logging.Logger:
    """
    Setup and configure application logger.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (rotating, max 10MB per file, keep 5 backups)
    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


# Create default logger instance
logger = setup_logger()


def log_request(endpoint: str, method: str, params: str = ""):
    """Log incoming request"""
    logger.info(f"Request: {method} {endpoint} {params}".rstrip())


def log_success(endpoint: str, message: str):
    """Log successful operation"""
    logger.info(f"Success: {endpoint} - {message}")


def log_error(endpoint: str, error: Exception):
    """Log error with full traceback"""
    logger.error(f"Error: {endpoint} - {type(error).__name__}: {str(error)}", exc_info=True)


def log_warning(endpoint: str, message: str):
    """Log warning"""
    logger.warning(f"Warning: {endpoint} - {message}")


def log_ipws_request(method: str, success: bool, error: str = ""):
    """Log IPWS booking API requests"""
    if success:
        logger.debug(f"IPWS Request: {method} - Success")
    else:
        logger.error(f"IPWS Request: {method} - Failed: {error}")


def log_rate_request(currency: str, success: bool, error: str = ""):
    """Log exchange-rate API requests"""
    if success:
        logger.debug(f"Rate Request: {currency} - Success")
    else:
        logger.warning(f"Rate Request: {currency} - Failed: {error}")
