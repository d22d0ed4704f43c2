# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from pathlib import Path

from super_resolution_demo.utils.envvar_bases import (
    SRDemoBoolEnvvar,
    SRDemoPathEnvvar,
    SRDemoStringEnvvar,
)


class AlwaysDisplayOutputEnvvar(SRDemoBoolEnvvar):
    """If this is true, output images are displayed even over a remote (SSH) session."""

    VARNAME = "SRDEMO_ALWAYS_DISPLAY_OUTPUT"
    CLI_ARGNAMES: list[str] = []
    CLI_HELP_MESSAGE = "Display output images even when running over SSH."

    @classmethod
    def default(cls):
        return False


class OutputDirEnvvar(SRDemoPathEnvvar):
    """Directory the upscaled images are written to."""

    VARNAME = "SRDEMO_OUTPUT_DIR"
    CLI_ARGNAMES = ["-o", "--output-dir"]
    CLI_DEST = "output_dir"
    CLI_HELP_MESSAGE = "Directory to write the upscaled images (sr_<index>.png) to. Defaults to the current directory."

    @classmethod
    def default(cls):
        return Path.cwd()


class DeviceEnvvar(SRDemoStringEnvvar):
    """Target device(s) to run inference on."""

    VARNAME = "SRDEMO_DEVICE"
    CLI_ARGNAMES = ["-d", "--device"]
    CLI_DEST = "device"
    CLI_HELP_MESSAGE = (
        "Target device to infer on: CPU, GPU, DML or NPU."
        " A comma separated list (eg. GPU,CPU) sets the device priority."
    )

    @classmethod
    def default(cls):
        return "CPU"
