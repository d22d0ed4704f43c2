# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def collect_input_files(paths: Iterable[str | os.PathLike]) -> list[str]:
    """
    Expand the paths passed with `-i` into a list of files.

    Files are returned as-is. Folders are replaced by the regular files they
    contain (not recursive, sorted by name). Paths that don't exist are skipped
    with a warning.
    """
    files: list[str] = []
    for path in paths:
        path = os.fspath(path)
        if os.path.isdir(path):
            folder_files = sorted(
                entry.path for entry in os.scandir(path) if entry.is_file()
            )
            logger.debug(f"Found {len(folder_files)} file(s) in folder {path}")
            files.extend(folder_files)
        elif os.path.isfile(path):
            files.append(path)
        else:
            logger.warning(f"File {path} not found")

    if files:
        logger.info("Files were added: " + str(len(files)))
        for file in files:
            logger.info(f"    {file}")
    return files
