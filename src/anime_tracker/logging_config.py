"""Logging helpers for anime_tracker."""

import logging


def setup_logging(level_name: str = "INFO") -> None:
    """Configure the root logger once for the API process.

    Args:
        level_name: Name of the log level (e.g. "DEBUG", "INFO").
                    Unknown names fall back to INFO.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    # One line per upstream call is too chatty next to our own request log
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
