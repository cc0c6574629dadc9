"""
Logging configuration for the sideloader.
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from platformdirs import user_log_dir

LOGGER_NAME = "sideloader"


def setup_logging(log_dir: Optional[str] = None, level: int = logging.INFO,
                  console: bool = True) -> logging.Logger:
    """Attach a dated file handler (and optionally stdout) to the package logger."""
    log_dir = log_dir or user_log_dir(LOGGER_NAME)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"sideloader_{datetime.now():%Y%m%d}.log")

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(fh)

    if console:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(logging.Formatter("[%(levelname)-7s] %(message)s"))
        root.addHandler(ch)

    root.info(f"Logging initialized: {log_file}")
    return root
