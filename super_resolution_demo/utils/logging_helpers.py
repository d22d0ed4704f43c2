# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager

import onnxruntime

LOG_FORMAT = "[ %(levelname)s ] %(message)s"

# onnxruntime severities: 0 verbose, 1 info, 2 warning, 3 error, 4 fatal
_ORT_SEVERITY_DEFAULT = 2
_ORT_SEVERITY_VERBOSE = 1


class _LevelNameFormatter(logging.Formatter):
    """Prints WARNING as WARN and CRITICAL as FATAL, to keep the level column short."""

    _SHORT_NAMES = {"WARNING": "WARN", "CRITICAL": "FATAL"}

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = self._SHORT_NAMES.get(record.levelname, record.levelname)
        return super().format(record)


def configure_logging(verbose: bool = False) -> None:
    """
    Route log records of this package to stdout in the demo's "[ INFO ] message" style.

    Calling this more than once replaces the previously installed handler.
    """
    logger = logging.getLogger("super_resolution_demo")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_LevelNameFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    onnxruntime.set_default_logger_severity(
        _ORT_SEVERITY_VERBOSE if verbose else _ORT_SEVERITY_DEFAULT
    )


@contextmanager
def set_log_level(log_level: int, name: str | None = None):
    logger = logging.getLogger(name)
    old_level = logger.level
    try:
        logger.setLevel(log_level)
        yield
    finally:
        logger.setLevel(old_level)
