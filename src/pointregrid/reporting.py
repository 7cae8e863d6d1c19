# SPDX-License-Identifier: MIT
"""
pointregrid.reporting
=====================

Warning/error sink injected into the matcher, the interpolator and the
readers.

The engine only needs two capabilities, ``warn(msg)`` and ``error(msg)``.
Three implementations are provided:

- :class:`NullReporter` – discards everything (default).
- :class:`LoggingReporter` – forwards to a :mod:`logging` logger.
- :class:`CollectingReporter` – keeps messages in memory, used to gather
  warnings from parallel chunks and replay them in order.

:func:`setup_logging` creates the ``logs/`` directory of a run and attaches
a timestamped file handler to the package logger.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, Union

LOGGER_NAME = "pointregrid"

_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Reporter(Protocol):
    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...


class NullReporter:
    def warn(self, msg: str) -> None:
        pass

    def error(self, msg: str) -> None:
        pass


class LoggingReporter:
    """Reporter backed by ``logging.getLogger("pointregrid")`` by default."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger if logger is not None else logging.getLogger(LOGGER_NAME)

    def warn(self, msg: str) -> None:
        self.logger.warning(msg)

    def error(self, msg: str) -> None:
        self.logger.error(msg)


class CollectingReporter:
    """Keep ``(level, message)`` pairs in arrival order."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def warn(self, msg: str) -> None:
        self.messages.append(("warning", msg))

    def error(self, msg: str) -> None:
        self.messages.append(("error", msg))

    @property
    def warnings(self) -> List[str]:
        return [m for level, m in self.messages if level == "warning"]

    @property
    def errors(self) -> List[str]:
        return [m for level, m in self.messages if level == "error"]

    def replay(self, reporter: Reporter) -> None:
        """Forward every stored message to ``reporter``, in order."""
        for level, msg in self.messages:
            if level == "error":
                reporter.error(msg)
            else:
                reporter.warn(msg)


def ensure_reporter(reporter: Optional[Reporter]) -> Reporter:
    return NullReporter() if reporter is None else reporter


def setup_logging(
    base_dir: Union[str, Path] = "./",
    level: Union[int, str] = logging.INFO,
) -> Path:
    """
    Attach a timestamped file handler to the package logger.

    The log file is ``<base_dir>/logs/pointregrid_YYYYmmdd_HHMMSS.log``.
    Calling this again replaces the previous file handler.

    Returns
    -------
    Path
        Path of the log file.
    """
    log_dir = Path(base_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = log_dir / f"pointregrid_{stamp}.log"

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_pointregrid_run_log", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    handler._pointregrid_run_log = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)

    logger.info("pointregrid logger initialized (log file: %s)", log_path)
    return log_path


__all__ = [
    "LOGGER_NAME",
    "Reporter",
    "NullReporter",
    "LoggingReporter",
    "CollectingReporter",
    "ensure_reporter",
    "setup_logging",
]
