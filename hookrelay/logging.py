"""Logging for hook processing.

Every line logged while a hook is processed is prefixed with the
``owner/repo`` it belongs to, so interleaved output from concurrent hooks
stays readable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple, Union

_LOGGER_NAME = "hookrelay"
_NULL_LOGGER_NAME = f"{_LOGGER_NAME}.null"

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class HookLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the hook's ``owner/repo``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['hook']}] {msg}", kwargs


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the hookrelay hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def null_logger() -> logging.Logger:
    """Return a logger that discards everything sent to it."""
    logger = logging.getLogger(_NULL_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


def resolve_logger(logger: LoggerLike | None) -> LoggerLike:
    """Use the caller's logger when given, otherwise a silent one."""
    return logger if logger is not None else null_logger()


def hook_logger(logger: LoggerLike | None, owner: str, repo: str) -> HookLogAdapter:
    """Wrap ``logger`` (or the null logger) so its lines name the hook's repository."""
    base = resolve_logger(logger)
    if isinstance(base, logging.LoggerAdapter):
        base = base.logger
    return HookLogAdapter(base, {"hook": f"{owner}/{repo}"})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send hookrelay logs to stderr, and to ``log_file`` when given."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process don't duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [hookrelay] %(levelname)s %(message)s", "%H:%M:%S")
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(threadName)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "HookLogAdapter",
    "LoggerLike",
    "configure_logging",
    "get_logger",
    "hook_logger",
    "null_logger",
    "resolve_logger",
]
