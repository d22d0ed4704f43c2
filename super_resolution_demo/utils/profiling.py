# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

# onnxruntime names node execution events "<node name>_kernel_time".
KERNEL_TIME_SUFFIX = "_kernel_time"
STATUS_EXECUTED = "EXECUTED"


@dataclass
class PerfCountRecord:
    """Per-layer performance counter, accumulated over all profiled inferences."""

    layer_name: str
    layer_type: str
    exec_provider: str
    total_time_us: int = 0
    num_calls: int = 0
    status: str = STATUS_EXECUTED

    @property
    def avg_time_us(self) -> float:
        return self.total_time_us / self.num_calls if self.num_calls else 0.0


def parse_profile_events(events: list[dict[str, Any]]) -> list[PerfCountRecord]:
    """
    Aggregate onnxruntime profiling events into one record per layer (graph node).

    Only "Node" category kernel events are counted; session and fence events are ignored.
    Records are returned in order of first execution.
    """
    records: dict[str, PerfCountRecord] = {}
    for event in events:
        name = event.get("name", "")
        if event.get("cat") != "Node" or not name.endswith(KERNEL_TIME_SUFFIX):
            continue

        layer_name = name[: -len(KERNEL_TIME_SUFFIX)]
        args = event.get("args", {})
        record = records.get(layer_name)
        if record is None:
            record = PerfCountRecord(
                layer_name=layer_name,
                layer_type=args.get("op_name", "UNK"),
                exec_provider=args.get("provider", "UNK"),
            )
            records[layer_name] = record
        record.total_time_us += int(event.get("dur", 0))
        record.num_calls += 1
    return list(records.values())


def load_profile_records(profile_path: str | os.PathLike) -> list[PerfCountRecord]:
    """Read an onnxruntime profiling trace (JSON) and aggregate it per layer."""
    with open(profile_path) as f:
        events = json.load(f)
    if isinstance(events, dict):
        # Chrome trace "object" format
        events = events.get("traceEvents", [])
    return parse_profile_events(events)
