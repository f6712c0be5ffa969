"""Centralised logging configuration for blog_scout.

This module sets up console and optional file logging with one format across
the project. The log level is taken from the ``LOG_LEVEL`` environment
variable. File logging is enabled by passing an output directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(log_dir: Optional[str] = None) -> None:
    """Configure the root logger for the application.

    Parameters
    ----------
    log_dir: Optional[str]
        Directory where ``blog_scout.log`` should be written. If ``None``, file
        logging is disabled and only console output is used.
    """
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(log_level)
    logger.handlers = []  # Reset any existing handlers

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / "blog_scout.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))
