"""Shared utility functions for the SMS Transaction Importer project."""

import logging
from datetime import UTC, datetime
from pathlib import Path

import colorlog

from sms_importer.core.settings import USD_TO_RWF


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project.

    Child loggers such as 'sms-importer.worker' propagate to the colorized project logger,
    so handlers added to 'sms-importer' (the log file) see every record.
    """
    root_name, _, child = name.partition(".")
    if child:
        get_logger(root_name)
        return logging.getLogger(name)
    logger = logging.getLogger(name)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def safe_cast(val: object, to_type: type, default: object = None) -> object:
    """Safely cast a value to a type, returning default on failure."""
    try:
        return to_type(val)
    except (ValueError, TypeError):
        return default


def parse_amount(text: str | None) -> float | None:
    """Parse a numeric literal such as '1,500.25', returning None when it is not a number."""
    if text is None:
        return None
    return safe_cast(text.replace(",", "").strip(), float)


def to_base_currency(
    amount: float | None,
    currency: str,
    rate: float = USD_TO_RWF,
    foreign_currency: str = "USD",
) -> float | None:
    """Convert an amount into the base currency; amounts already in base currency pass through."""
    if amount is None:
        return None
    if currency.upper() == foreign_currency.upper():
        return amount * rate
    return amount


def epoch_millis_to_iso(value: str | float | None) -> str | None:
    """Convert an epoch timestamp in milliseconds to an ISO8601 UTC string."""
    millis = safe_cast(value, float) if value is not None else None
    if millis is None:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=UTC).isoformat()
    except (OverflowError, OSError, ValueError):
        return None
