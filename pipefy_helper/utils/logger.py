import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "pipefy_helper"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    # Prevent duplicate handlers
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    return root


def create_logger(service_name: str) -> logging.Logger:
    """Create a logger namespaced under the package root logger.

    Args:
        service_name: Short name of the module or service, e.g. "filter_index"

    Returns:
        logging.Logger whose records propagate to the shared package handler
    """
    _configure_root()
    if service_name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(service_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{service_name}")


def set_log_level(level: Optional[Union[str, int]]) -> None:
    """Set the level of the package root logger; None leaves it unchanged."""
    if level is None:
        return
    root = _configure_root()
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    root.setLevel(level)
