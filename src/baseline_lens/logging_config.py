"""Singleton logging configuration.

setup_logging() configures the root logger once per process. The CLI
calls it before dispatching a command; library callers may skip it and
configure logging themselves.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers held at WARNING even in verbose mode
_SUPPRESSED_LOGGERS = (
    "asyncio",
    "pathspec",
)

_configured = False


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger. Idempotent — second call is a no-op."""
    global _configured  # noqa: PLW0603
    if _configured:
        return
    _configured = True

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_level(level: str) -> None:
    """Adjust the root level after setup (``--verbose`` / ``--silent``)."""
    logging.getLogger().setLevel(getattr(logging, level.upper()))
