"""Logging setup for the OneSync API.

Every module logs through ``logging.getLogger(__name__)``, so the
``onesync`` namespace controls the application's verbosity.
"""
import logging

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup.

    Raises:
        ValueError: If level is not a valid log level string.
    """
    upper = level.upper()
    if upper not in _VALID_LEVELS:
        raise ValueError(f"Invalid log level: {level!r}. Must be one of {_VALID_LEVELS}")

    logging.basicConfig(level=getattr(logging, upper), format=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    logging.getLogger("onesync").setLevel(getattr(logging, upper))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
