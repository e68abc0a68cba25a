"""
Logging utilities for moku-pona.
Contains helper functions for consistent logging across modules.
"""
import logging, os
from logging.handlers import TimedRotatingFileHandler
from typing import Optional


def log_fetch_failure(logger: logging.Logger, host: str, port: int, selector: str, error: str) -> None:
    """
    Log a failed Gopher fetch.

    Args:
        logger: Logger instance to use
        host: Host that was contacted
        port: Port that was contacted
        selector: Selector that was requested
        error: Error message
    """
    logger.warning(f"Failed to fetch gopher://{host}:{port}/{selector}: {error}")


def log_fetch_success(logger: logging.Logger, host: str, selector: str, content_length: int, duration: float) -> None:
    """
    Log a successful Gopher fetch.

    Args:
        logger: Logger instance to use
        host: Host that was contacted
        selector: Selector that was requested
        content_length: Number of bytes received
        duration: Time taken for the fetch
    """
    logger.debug(f"Fetched {format_bytes(content_length)} from {host} '{selector}' in {duration:.2f}s")


def log_update_summary(logger: logging.Logger, stats: dict, duration: float) -> None:
    """
    Log the summary of an update run.

    Args:
        logger: Logger instance to use
        stats: Update report dictionary
        duration: Total duration in seconds
    """
    updated = stats.get('updated', 0)
    unchanged = stats.get('unchanged', 0)
    errors = stats.get('errors', 0)

    logger.info(f"Update completed in {duration:.2f}s: {updated} updated, {unchanged} unchanged ({errors} errors)")

    if errors > 0:
        logger.warning(f"{errors} items could not be fetched")


def log_cleanup_results(logger: logging.Logger, caches: int, records: int, confirmed: bool) -> None:
    """
    Log cleanup results.

    Args:
        logger: Logger instance to use
        caches: Number of stale cache files
        records: Number of stale update log records
        confirmed: Whether anything was actually deleted
    """
    verb = "Removed" if confirmed else "Would remove"
    logger.info(f"{verb} {caches} cache files and {records} update records")


def format_bytes(byte_count: int) -> str:
    """
    Format byte count in human-readable format.

    Args:
        byte_count: Number of bytes

    Returns:
        Formatted string (e.g., "1.2 KB", "3.4 MB")
    """
    if byte_count == 0:
        return "0 B"

    sizes = ["B", "KB", "MB", "GB"]
    i = 0

    while byte_count >= 1024 and i < len(sizes) - 1:
        byte_count /= 1024.0
        i += 1

    return f"{byte_count:.1f} {sizes[i]}"


def setup_logging(log_level: str = "WARNING", log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure console and, optionally, file logging.

    Args:
        log_level: Minimum logging level (e.g., "INFO", "DEBUG")
        log_dir: Directory to store log files, or None for console only

    Returns:
        The configured root logger instance.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))

    # Console handler; stdout is reserved for command output
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        # File handler (daily rotation)
        file_handler = TimedRotatingFileHandler(os.path.join(log_dir, 'moku_pona.log'), when='midnight', interval=1, backupCount=7)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(file_handler)

    root_logger.debug(f"Logging configured to level {log_level.upper()}")
    return root_logger
