"""
Logging helpers shared by pipeline components.

Components never configure logging themselves. They take an optional
logger and fall back to the module logger; entry points call
configure_logging() once.
"""
import logging
import re
from typing import Optional

from perception.errors import ConfigurationError

_CONTROL_CHARS = re.compile(r"[\r\n\t]")
MAX_LOG_FIELD_LENGTH = 100

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def sanitize_for_log(value) -> str:
    """Make an externally supplied value safe to embed in a log line."""
    if value is None:
        return "null"
    text = _CONTROL_CHARS.sub("_", str(value))
    return text[:MAX_LOG_FIELD_LENGTH]


def resolve_logger(logger: Optional[logging.Logger], name: str) -> logging.Logger:
    """Return the injected logger, or the named module logger."""
    return logger if logger is not None else logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line entry points."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown log level: {level}")

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
