"""Logging setup shared by the CLI and the API server."""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[str, int] = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure the root logger.

    Args:
        level: Level name (``"DEBUG"``, ``"INFO"``...) or number
        log_file: Optional file to log to in addition to stderr
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    # Replace handlers from a previous call
    for handler in list(root_logger.handlers):
        if getattr(handler, "_endpoint_registry", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler._endpoint_registry = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler._endpoint_registry = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)
