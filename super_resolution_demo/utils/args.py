# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------

"""Utility functions for parsing and validating the demo's command line."""

from __future__ import annotations

import argparse
import sys

from super_resolution_demo._version import __version__
from super_resolution_demo.utils.envvars import DeviceEnvvar, OutputDirEnvvar
from super_resolution_demo.utils.onnx_torch_wrapper import Device


class SRDemoHelpFormatter(
    argparse.RawTextHelpFormatter, argparse.ArgumentDefaultsHelpFormatter
):
    """
    Argparse formatter that combines:
      * allowing raw text (eg. newlines) in help messages
      * including defaults in help messages (except for boolean args)
    """

    def _get_help_string(self, action):
        """
        Default value for booleans in CLI help can be misleading.
        This overridden function will print just the help message for boolean args
        and print help message along with the default value for all other args.
        """
        # Don't print "(default: <value>)" in the CLI help if the value is a bool
        # or something "non-truthy" (e.g. "", None, [])
        if isinstance(
            action, (argparse._StoreTrueAction, argparse._StoreFalseAction)
        ) or (not action.default):
            return action.help
        return super()._get_help_string(action)


class SRDemoArgumentParser(argparse.ArgumentParser):
    """
    An ArgumentParser that raises ValueError on invalid arguments instead of exiting,
    so that the demo reports every failure the same way.
    """

    def error(self, message):
        self.print_usage(sys.stderr)
        raise ValueError(message)


def get_demo_parser() -> SRDemoArgumentParser:
    parser = SRDemoArgumentParser(
        prog="super-resolution-demo",
        description="Upscale low resolution images with a pre-trained super resolution network.",
        formatter_class=SRDemoHelpFormatter,
    )
    parser.add_argument(
        "-i",
        "--input",
        dest="input",
        action="extend",
        nargs="+",
        default=[],
        help="Path to an image or a folder with images. May be passed more than once.",
    )
    parser.add_argument(
        "-m",
        "--model",
        type=str,
        default=None,
        help="Path to the super resolution model (.onnx).",
    )
    DeviceEnvvar.add_arg(parser)
    parser.add_argument(
        "-l",
        "--cpu-extension",
        type=str,
        default=None,
        help="Absolute path to a shared library with custom operator implementations.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to a YAML file with inference runtime configuration\n"
        "(threads, graph optimization level, session config entries, execution provider options).",
    )
    parser.add_argument(
        "-ni",
        "--num-iterations",
        dest="num_iterations",
        type=int,
        default=1,
        help="Number of inference iterations.",
    )
    parser.add_argument(
        "-pc",
        "--perf-counts",
        dest="perf_counts",
        action="store_true",
        help="Report per-layer performance counters.",
    )
    parser.add_argument(
        "-show",
        "--show",
        dest="show",
        action="store_true",
        help="Display each upscaled image before it is saved.",
    )
    OutputDirEnvvar.add_arg(parser)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def validate_demo_args(args: argparse.Namespace) -> None:
    """
    Validates the parsed demo arguments.

    Raises:
        ValueError if an argument is missing or invalid.
    """
    if args.num_iterations < 1:
        raise ValueError("Parameter -ni should be more than 0 !!! (default 1)")

    if not args.input:
        raise ValueError("Parameter -i is not set")

    if not args.model:
        raise ValueError("Parameter -m is not set")

    Device.parse_list(args.device)


def parse_demo_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate the demo command line. argv defaults to sys.argv[1:]."""
    args = get_demo_parser().parse_args(argv)
    validate_demo_args(args)
    return args
