"""
Logging setup shared by the whole service.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import config


def _get_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _create_file_handler(log_path: Path, log_level: int) -> logging.FileHandler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(_get_formatter())
    return file_handler


def setup_logger(name: str = "", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger once (stdout + optional file) and return `name`'s logger.

    Calling it again is a no-op apart from returning the logger, so every entry
    point may call it.
    """
    logger = logging.getLogger(name)
    root_logger = logging.getLogger()

    if root_logger.handlers:
        return logger

    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_get_formatter())
    root_logger.addHandler(console_handler)

    path = log_file or config.LOG_FILE
    if path:
        root_logger.addHandler(_create_file_handler(Path(path), log_level))

    return logger
