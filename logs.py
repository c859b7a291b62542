#!/usr/bin/env python3
# logs.py – rev-l1  (2026-10-15)
"""Loguru sinks: rotating file in the config folder + warnings on stderr."""

from __future__ import annotations
import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def setup_logging(log_file: Path, level: str = "INFO", *, debug: bool = False) -> None:
    logger.remove()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="1 MB",
        retention=3,
        level="DEBUG" if debug else level,
        format=LOG_FORMAT,
        enqueue=False,
    )
    if sys.stderr is not None:           # pythonw / frozen GUI builds have none
        logger.add(sys.stderr, level="WARNING", format=LOG_FORMAT)
    logger.info(f"logging to {log_file} (level={'DEBUG' if debug else level})")
