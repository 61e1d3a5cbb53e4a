"""Utility functions for multizopfli"""

import logging
import math
import os

import psutil


LOG_LEVEL_ENV = 'MULTIZOPFLI_LOG_LEVEL'
CONCURRENCY_ENV = 'MULTIZOPFLI_CONCURRENCY'
ZOPFLIPNG_ENV = 'MULTIZOPFLI_ZOPFLIPNG'


def get_int_env(key: str) -> int:
    """Integer env var, 0 when unset or not a number."""
    try:
        return int(os.getenv(key, '0'))
    except ValueError:
        return 0


def get_str_env(key: str, default: str) -> str:
    """String env var, default when unset."""
    return os.getenv(key, default)


def setup_logging():
    """Configure root logging from MULTIZOPFLI_LOG_LEVEL (default WARNING)."""
    log_level_name = get_str_env(LOG_LEVEL_ENV, 'WARNING').upper()
    log_level = getattr(logging, log_level_name, logging.WARNING)
    logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def default_concurrency() -> int:
    """Half the logical CPUs, rounded up.

    MULTIZOPFLI_CONCURRENCY overrides the computed value when set to a
    positive integer.
    """
    override = get_int_env(CONCURRENCY_ENV)
    if override > 0:
        return override
    cpus = psutil.cpu_count(logical=True) or 1
    return max(1, math.ceil(cpus / 2))


def human_readable_size(size_bytes: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if abs(size_bytes) < 1024:
            return f'{size_bytes:.2f} {unit}'
        size_bytes /= 1024
    return f'{size_bytes:.2f} PB'


def saved_percent(before_size: int, after_size: int) -> float:
    """Percentage of bytes removed, 0.0 when there was nothing to shrink."""
    if before_size <= 0:
        return 0.0
    return (1 - after_size / before_size) * 100


def display_size(before_size: int, after_size: int) -> str:
    """Format a before -> after comparison, e.g. '97.66 KB -> 58.59 KB / -39.06 KB -40.0%'."""
    return (
        f'{human_readable_size(before_size)} -> {human_readable_size(after_size)} '
        f'/ -{human_readable_size(before_size - after_size)} '
        f'-{saved_percent(before_size, after_size):.1f}%'
    )
