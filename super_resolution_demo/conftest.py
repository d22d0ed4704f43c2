# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from pathlib import Path

import pytest

from super_resolution_demo.utils.envvars import (
    AlwaysDisplayOutputEnvvar,
    DeviceEnvvar,
    OutputDirEnvvar,
)
from super_resolution_demo.utils.testing import make_upscale_onnx_model


def pytest_configure(config):
    config.addinivalue_line("markers", "demo: Run the end-to-end demo.")
    config.addinivalue_line("markers", "unmarked: Tests without any other marker.")


def pytest_collection_modifyitems(items, config):
    for item in items:
        if not any(item.iter_markers()):
            item.add_marker("unmarked")


@pytest.fixture(autouse=True)
def no_envvar_overrides(monkeypatch):
    """Tests never depend on the user's demo environment variables."""
    for envvar in (AlwaysDisplayOutputEnvvar, DeviceEnvvar, OutputDirEnvvar):
        envvar.patchenv(monkeypatch, None)


@pytest.fixture
def tiny_model_path(tmp_path: Path) -> Path:
    """1-input network, 4x4 -> 8x8, dynamic batch."""
    return make_upscale_onnx_model(tmp_path / "tiny_sr.onnx")


@pytest.fixture
def tiny_two_input_model_path(tmp_path: Path) -> Path:
    """2-input (low resolution + bicubic) network, 4x4 -> 8x8, dynamic batch."""
    return make_upscale_onnx_model(tmp_path / "tiny_sr_bicubic.onnx", two_inputs=True)
