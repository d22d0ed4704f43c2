# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import logging
import os

from PIL.Image import Image
from PIL.ImageShow import IPythonViewer, _viewers  # type: ignore[attr-defined]

from super_resolution_demo.utils.envvars import AlwaysDisplayOutputEnvvar
from super_resolution_demo.utils.logging_helpers import set_log_level

logger = logging.getLogger(__name__)


def is_running_in_notebook():
    try:
        from IPython import get_ipython

        if "IPKernelApp" not in get_ipython().config:  # pragma: no cover
            return False
    except ImportError:
        return False
    except AttributeError:
        return False
    return True


def is_remote_session() -> bool:
    return bool(os.environ.get("SSH_TTY") or os.environ.get("SSH_CLIENT"))


def save_image(
    image: Image, base_dir: str | os.PathLike, filename: str, desc: str
) -> str:
    os.makedirs(base_dir, exist_ok=True)
    path = os.path.join(base_dir, filename)
    image.save(path)
    logger.info(f"Saved {desc} to {path}")
    return path


def display_image(image: Image, desc: str = "image") -> bool:
    """
    Attempt to display image.
    Return true if displaying was attempted.
    """
    # Display IPython viewer first
    # Remote server notebooks will be caught here as well
    if is_running_in_notebook():
        for viewer in _viewers:
            if isinstance(viewer, IPythonViewer):
                viewer.show(image)
                return True

    if is_remote_session() and not AlwaysDisplayOutputEnvvar.get():
        logger.warning(
            "Image display is disabled by default for remote servers. "
            f"To override, set `{AlwaysDisplayOutputEnvvar.VARNAME}=1` in your environment."
        )
        return False

    logger.info(f"Displaying {desc}")
    # PIL logs every viewer lookup at debug level.
    with set_log_level(logging.INFO, "PIL"):
        image.show(title=desc)
    return True


def save_and_display_image(
    image: Image,
    output_dir: str | os.PathLike,
    filename: str,
    desc: str = "image",
    show: bool = False,
) -> str:
    """
    Optionally display the image, then save it to disk.

    Parameters:
        image: PIL Image to save.
        output_dir: Directory to save the image in.
        filename: File name to use.
        desc: Description of what the image is, used in log messages.
        show: If set, the image is displayed before it is saved.

    Returns:
        Path of the saved image.
    """
    if show:
        display_image(image, desc)
    return save_image(image, output_dir, filename, desc)
