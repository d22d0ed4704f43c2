# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
import json

from super_resolution_demo.utils.printing import (
    get_performance_counts_table,
    print_performance_counts,
    print_with_box,
)
from super_resolution_demo.utils.profiling import (
    load_profile_records,
    parse_profile_events,
)

EVENTS = [
    {"cat": "Session", "name": "model_run", "dur": 500},
    {
        "cat": "Node",
        "name": "upscale_kernel_time",
        "dur": 30,
        "args": {"op_name": "Resize", "provider": "CPUExecutionProvider"},
    },
    {
        "cat": "Node",
        "name": "upscale_fence_before",
        "dur": 0,
        "args": {"op_name": "Resize"},
    },
    {
        "cat": "Node",
        "name": "normalize_kernel_time",
        "dur": 10,
        "args": {"op_name": "Mul", "provider": "CPUExecutionProvider"},
    },
    {
        "cat": "Node",
        "name": "upscale_kernel_time",
        "dur": 50,
        "args": {"op_name": "Resize", "provider": "CPUExecutionProvider"},
    },
]


def test_parse_profile_events():
    records = parse_profile_events(EVENTS)
    assert [r.layer_name for r in records] == ["upscale", "normalize"]

    upscale = records[0]
    assert upscale.layer_type == "Resize"
    assert upscale.exec_provider == "CPUExecutionProvider"
    assert upscale.total_time_us == 80
    assert upscale.num_calls == 2
    assert upscale.avg_time_us == 40
    assert upscale.status == "EXECUTED"


def test_load_profile_records(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(EVENTS))
    assert len(load_profile_records(path)) == 2

    path.write_text(json.dumps({"traceEvents": EVENTS}))
    assert len(load_profile_records(path)) == 2


def test_print_performance_counts(capsys):
    records = parse_profile_events(EVENTS)
    table = get_performance_counts_table(records)
    assert "Layer type" in table
    assert "Execution provider" in table
    assert "40.0" in table

    print_performance_counts(records)
    out = capsys.readouterr().out
    assert "Performance counts:" in out
    assert "Total time: 50 microseconds" in out


def test_print_with_box(capsys):
    print_with_box(["a", "longer line"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "+-------------+"
    assert lines[1] == "| a           |"
    assert lines[2] == "| longer line |"
    assert lines[3] == lines[0]
