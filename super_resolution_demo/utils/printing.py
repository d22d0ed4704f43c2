# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import onnxruntime
from tabulate import tabulate

from super_resolution_demo.utils.profiling import PerfCountRecord


def print_with_box(data: list[str]) -> None:
    """
    Print input list with box around it as follows
    +-----------------------------+
    | list data 1                 |
    | list data 2 that is longest |
    | data                        |
    +-----------------------------+
    """
    size = max(len(line) for line in data)
    size += 2
    print("+" + "-" * size + "+")
    for line in data:
        print("| {:<{}} |".format(line, size - 2))
    print("+" + "-" * size + "+")


def get_runtime_info() -> list[str]:
    """Inference runtime build and the execution providers it can use. The version is logged by the demo."""
    return [
        f"Build device: {onnxruntime.get_device()}",
        "Available execution providers: "
        + ", ".join(onnxruntime.get_available_providers()),
    ]


def get_performance_counts_table(records: list[PerfCountRecord]) -> str:
    rows = [
        [
            record.layer_name,
            record.status,
            record.layer_type,
            record.exec_provider,
            f"{record.avg_time_us:.1f}",
            record.num_calls,
        ]
        for record in records
    ]
    return tabulate(
        rows,
        headers=[
            "Layer",
            "Status",
            "Layer type",
            "Execution provider",
            "Real time (us)",
            "Calls",
        ],
        tablefmt="simple",
        disable_numparse=True,
    )


def print_performance_counts(records: list[PerfCountRecord]) -> None:
    """
    Print per-layer performance counters.
    Real time is the average time of one call of the layer.
    """
    total_us = sum(record.avg_time_us for record in records)
    print()
    print("Performance counts:")
    print(get_performance_counts_table(records))
    print(f"Total time: {total_us:.0f} microseconds")
