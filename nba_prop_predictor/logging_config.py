# file: nba_prop_predictor/logging_config.py
from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _has_file_handler(root: logging.Logger, log_file: str) -> bool:
    path = os.path.abspath(log_file)
    return any(isinstance(h, logging.FileHandler) and h.baseFilename == path for h in root.handlers)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure root logging once; later calls only adjust the level.

    `log_file` is attached even when handlers already exist, at most once per path.
    """
    root = logging.getLogger()
    level = getattr(logging, log_level.upper(), logging.INFO)
    if root.handlers:
        root.setLevel(level)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])

    if log_file and not _has_file_handler(root, log_file):
        handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
