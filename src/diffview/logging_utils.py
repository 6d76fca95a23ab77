#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/logging_utils.py
"""Logging setup for the ``diffview`` package logger.

Every module logs through a child of the ``diffview`` logger and the library
adds no handlers on import. An embedding application calls
:func:`configure_logging` once. Pool processes started by
:meth:`diffview.worker.DiffWorker.start` do not inherit the parent's handlers,
so the worker runs :func:`init_worker_logging` in each of them with the same
level.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

PACKAGE_LOGGER = "diffview"

TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(processName)s/%(threadName)s] [%(name)s] %(message)s"
PLAIN_FORMAT = "%(levelname)s: %(name)s: %(message)s"

# Attribute set on handlers owned by configure_logging
_OWNED = "_diffview_owned"


def resolve_level(log_level: int | str) -> int:
    """Turn a level number or name into a level number; unknown names are INFO."""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def _owned(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _OWNED, True)
    return handler


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Route diffview log records to stderr and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call;
    handlers added to the ``diffview`` logger by anyone else are left alone.
    Records stop propagating to the root logger so that an application with
    its own root handlers does not print them twice.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g., "DEBUG")
    log_file : str, optional
        Path of a file that receives the same records
    trace_mode : bool, default False
        Include timestamps, process and thread names, which tells apart
        records from the interactive thread, executor callbacks and pool
        processes
    stream : file-like, optional
        Console stream; defaults to ``sys.stderr``

    Returns
    -------
    logging.Logger
        The ``diffview`` package logger

    """
    level = resolve_level(log_level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        if getattr(handler, _OWNED, False):
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(
        TRACE_FORMAT if trace_mode else PLAIN_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S" if trace_mode else None,
    )
    package_logger.addHandler(_owned(logging.StreamHandler(stream or sys.stderr), level, formatter))

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            package_logger.warning(f"Could not create log file {log_file}: {exc}")
        else:
            package_logger.addHandler(_owned(file_handler, level, formatter))
            package_logger.debug(f"Logging to file: {log_file}")

    return package_logger


def init_worker_logging(log_level: int | str, trace_mode: bool = False) -> None:
    """Process pool initializer that configures logging in a worker process.

    File output stays with the parent process; workers log to stderr only.
    """
    configure_logging(log_level, trace_mode=trace_mode)


__all__ = ["PACKAGE_LOGGER", "resolve_level", "configure_logging", "init_worker_logging"]
