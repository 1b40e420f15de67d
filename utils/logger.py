"""Logging configuration."""
import logging
from pathlib import Path

LOGGER_NAME = "alertinator"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_config=None, verbose=False):
    """Configure the ``alertinator`` logger from the ``logging`` config section.

    ``level`` defaults to INFO and ``verbose`` forces DEBUG. When ``file`` is
    set, records also go to that file (its directory is created). Calling
    again re-levels the existing handlers instead of stacking new ones.
    """
    log_config = log_config or {}
    level = "DEBUG" if verbose else log_config.get("level") or "INFO"
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(numeric_level)

    if root.handlers:
        for handler in root.handlers:
            handler.setLevel(numeric_level)
        return root

    from rich.logging import RichHandler
    root.addHandler(RichHandler(level=numeric_level, rich_tracebacks=True, markup=False))

    log_file = log_config.get("file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)

    return root
