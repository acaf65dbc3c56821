"""
Logging configuration for the token deployer.

Every entry point configures the ``token_deployer`` logger once; module
loggers (``logging.getLogger(__name__)``) propagate to it. Output goes to:
- the console (stdout)
- <script>.log, rotated at midnight, 30 days kept
- <script>_errors.log, ERROR and above with file/line, 10 MB x 5
"""

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional


DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "token_deployer"

DAILY_BACKUPS = 30
ERROR_LOG_MAX_BYTES = 10 * 1024 * 1024
ERROR_LOG_BACKUPS = 5


def get_log_dir() -> Path:
    """Log directory, taken from LOG_DIR or ./logs, created on first use."""
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _formatter(detailed: bool) -> logging.Formatter:
    return logging.Formatter(DETAILED_FORMAT if detailed else SIMPLE_FORMAT, datefmt=DATE_FORMAT)


def _daily_handler(path: Path, level: int, detailed: bool) -> logging.Handler:
    handler = TimedRotatingFileHandler(
        path, when="midnight", interval=1, backupCount=DAILY_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(_formatter(detailed))
    return handler


def _error_handler(path: Path) -> logging.Handler:
    handler = RotatingFileHandler(
        path, maxBytes=ERROR_LOG_MAX_BYTES, backupCount=ERROR_LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(logging.ERROR)
    handler.setFormatter(_formatter(detailed=True))
    return handler


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
    file_logging: bool = True,
) -> logging.Logger:
    """
    Attach console and rotating file handlers to ``name``.

    Calling it again for a configured logger only updates the level.

    Args:
        name: Logger name, normally ROOT_LOGGER_NAME
        level: Logging level
        log_file: Log file name inside the log dir (defaults to <name>.log)
        console: Log to stdout
        detailed: Include logger name and file/line in console and file output
        file_logging: Attach the daily and error file handlers

    Example:
        >>> logger = setup_logger("token_deployer", log_file="deploy_tokens.log")
        >>> logger.info("Deploying My Token (MTK)...")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(_formatter(detailed))
        logger.addHandler(console_handler)

    if file_logging:
        log_dir = get_log_dir()
        log_file = log_file or f"{name}.log"
        logger.addHandler(_daily_handler(log_dir / log_file, level, detailed))
        logger.addHandler(_error_handler(log_dir / f"{Path(log_file).stem}_errors.log"))

    return logger


def log_deployment(
    logger: logging.Logger,
    symbol: str,
    address: str,
    tx_hash: str,
    gas_used: int,
    block_number: int,
) -> None:
    """One grep-able line per deployed token, the audit trail of a run."""
    logger.info(
        "DEPLOYED | %s | %s | TX: %s | Block: %d | Gas: %d",
        symbol, address, tx_hash, block_number, gas_used,
    )


def get_script_logger(script_name: str, debug: bool = False) -> logging.Logger:
    """Configure the package logger for a command-line entry point."""
    return setup_logger(
        ROOT_LOGGER_NAME,
        level=logging.DEBUG if debug else logging.INFO,
        log_file=f"{script_name}.log",
        detailed=debug,
    )
