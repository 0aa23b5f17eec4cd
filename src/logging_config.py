"""Logging configuration for the APEM ward mapping pipeline.

Provides structured logging with configurable levels, JSON formatting for
scheduled runs, and human-readable formatting for interactive use.
"""

import copy
import logging
import logging.config
from pathlib import Path
from typing import Optional

# Default logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "detailed": {
            "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "json": {
            "format": "%(asctime)s %(name)s %(levelname)s %(lineno)d %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%SZ",
            "class": "pythonjsonlogger.json.JsonFormatter",
        },
        "simple": {
            "format": "%(levelname)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "detailed",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filename": "logs/apem_pipeline.log",
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
    "loggers": {
        "apem": {
            "level": "DEBUG",
            "handlers": ["console", "file"],
            "propagate": False,
        },
        # Vector IO and plotting libraries log every driver and font lookup
        "pyogrio": {"level": "WARNING"},
        "fiona": {"level": "WARNING"},
        "matplotlib": {"level": "WARNING"},
        "PIL": {"level": "WARNING"},
    },
}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    verbose: bool = False,
) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        json_format: Use JSON formatting for structured logging
        verbose: Enable verbose output (DEBUG level, with logger names and
            line numbers on the console)

    The console uses the short "simple" format unless ``verbose`` or
    ``json_format`` is set; the log file always uses the "detailed" one.
    """
    config = copy.deepcopy(LOGGING_CONFIG)

    if verbose:
        level = "DEBUG"
    level = level.upper()

    config["root"]["level"] = level
    config["handlers"]["console"]["level"] = level
    if json_format:
        console_format = "json"
    elif verbose:
        console_format = "detailed"
    else:
        console_format = "simple"
    config["handlers"]["console"]["formatter"] = console_format

    if log_file:
        config["handlers"]["file"]["filename"] = log_file
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    else:
        config["handlers"].pop("file", None)
        for logger_config in config["loggers"].values():
            if "file" in logger_config.get("handlers", []):
                logger_config["handlers"].remove("file")

    logging.config.dictConfig(config)

    logger = logging.getLogger("apem.logging")
    logger.info(
        f"Logging configured: level={level}, json_format={json_format}, log_file={log_file}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


# Convenience functions for common logging patterns
def log_pipeline_start(pipeline_name: str, **context) -> None:
    """Log the start of a pipeline execution."""
    logger = get_logger("apem.pipeline")
    logger.info(f"Starting pipeline: {pipeline_name}", extra=context)


def log_pipeline_end(pipeline_name: str, success: bool = True, **context) -> None:
    """Log the end of a pipeline execution."""
    logger = get_logger("apem.pipeline")
    status = "completed successfully" if success else "failed"
    logger.info(f"Pipeline {pipeline_name} {status}", extra=context)


def log_data_processing(operation: str, record_count: int, **context) -> None:
    """Log data processing operations."""
    logger = get_logger("apem.processing")
    logger.info(f"Data processing: {operation} - {record_count} records", extra=context)


def log_error_with_context(error: Exception, operation: str, **context) -> None:
    """Log errors with additional context."""
    logger = get_logger("apem.errors")
    logger.error(f"Error in {operation}: {error}", extra=context, exc_info=True)
