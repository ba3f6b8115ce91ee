"""Logging setup for the CCCD extraction pipeline.

Every module logs through a named logger from :func:`get_logger`.
Recognized card text is personal data, so anything derived from it is
passed through :func:`redact` before being logged above DEBUG.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood DEBUG output with decoder internals.
_NOISY_LOGGERS = ("PIL",)


def setup_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Calling this more than once is a no-op, so library users who already
    configured logging keep their handlers.

    Args:
        level: Logging level name. Unknown names fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, usually called with ``__name__``."""
    return logging.getLogger(name)


def redact(value: str | None, keep: int = 2) -> str:
    """Mask the middle of an extracted value for log output.

    Args:
        value: Field value such as a national ID or a name.
        keep: Number of characters left visible at each end.

    Returns:
        ``"<none>"`` for missing values, otherwise the value with all but
        ``keep`` leading and trailing characters replaced by ``*``.
    """
    if not value:
        return "<none>"
    if len(value) <= keep * 2:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep * 2) + value[-keep:]
