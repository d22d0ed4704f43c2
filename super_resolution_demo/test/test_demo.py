# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from pathlib import Path
from types import SimpleNamespace

import cv2
import numpy as np
import onnxruntime
import pytest
import torch

from super_resolution_demo.app import SuperResolutionApp
from super_resolution_demo.demo import load_input_images, main
from super_resolution_demo.model import SuperResolutionModel
from super_resolution_demo.utils.testing import (
    make_upscale_onnx_model,
    write_solid_image,
)

COLOR = (10, 120, 250)


def _fake_session(inputs: dict, outputs: dict | None = None) -> SimpleNamespace:
    outputs = outputs or {"sr_image": (("N", 3, 8, 8), np.dtype(np.float32))}
    return SimpleNamespace(
        inputs={k: (v, np.dtype(np.float32)) for k, v in inputs.items()},
        outputs=outputs,
    )


def test_model_single_input(tiny_model_path: Path):
    model = SuperResolutionModel.from_pretrained(tiny_model_path)
    assert model.lr_input_name == "lr_image"
    assert model.bicubic_input_name is None
    assert model.lr_input_size == (4, 4)
    assert model.bicubic_input_size is None
    assert model.output_name == "sr_image"

    image = torch.full((2, 3, 4, 4), 255.0)
    output = model(image)
    assert output.shape == (2, 3, 8, 8)
    np.testing.assert_allclose(output.numpy(), 1.0, rtol=1e-6)


def test_model_two_inputs(tiny_two_input_model_path: Path):
    model = SuperResolutionModel.from_pretrained(tiny_two_input_model_path)
    assert model.lr_input_name == "lr_image"
    assert model.bicubic_input_name == "bicubic_image"
    assert model.bicubic_input_size == (8, 8)

    with pytest.raises(ValueError, match="bicubic"):
        model(torch.zeros(1, 3, 4, 4))


def test_model_input_order_independent():
    # The low resolution input is identified by size, not by position.
    model = SuperResolutionModel(
        _fake_session({"big": ("N", 3, 16, 16), "small": ("N", 3, 4, 4)})  # type: ignore[arg-type]
    )
    assert model.lr_input_name == "small"
    assert model.bicubic_input_name == "big"


def test_model_rejects_unsupported_topologies():
    with pytest.raises(ValueError, match="1 or 2 inputs only"):
        SuperResolutionModel(
            _fake_session(  # type: ignore[arg-type]
                {
                    "a": (1, 3, 4, 4),
                    "b": (1, 3, 8, 8),
                    "c": (1, 3, 8, 8),
                }
            )
        )
    with pytest.raises(ValueError, match="static height and width"):
        SuperResolutionModel(_fake_session({"a": (1, 3, "H", "W")}))  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="4 dimensions"):
        SuperResolutionModel(
            _fake_session(  # type: ignore[arg-type]
                {"a": (1, 3, 4, 4)},
                {"out": ((1, 64), np.dtype(np.float32))},
            )
        )


def test_validate_batch_size(tmp_path: Path):
    static_model = SuperResolutionModel.from_pretrained(
        make_upscale_onnx_model(tmp_path / "static.onnx", batch_size=1)
    )
    static_model.validate_batch_size(1)
    with pytest.raises(ValueError, match="fixed batch size of 1"):
        static_model.validate_batch_size(2)

    dynamic_model = SuperResolutionModel.from_pretrained(
        make_upscale_onnx_model(tmp_path / "dynamic.onnx")
    )
    dynamic_model.validate_batch_size(5)


def test_app_prepare_inputs():
    images = [np.full((4, 4, 3), COLOR, dtype=np.uint8) for _ in range(3)]

    image, bicubic_image = SuperResolutionApp(lambda *x: x[0]).prepare_inputs(images)
    assert image.shape == (3, 3, 4, 4)
    assert image.dtype == torch.float32
    # Pixel values are not rescaled; channel order is kept.
    assert image[1, :, 2, 2].tolist() == [float(c) for c in COLOR]
    assert bicubic_image is None

    _, bicubic_image = SuperResolutionApp(
        lambda *x: x[0], bicubic_input_size=(8, 12)
    ).prepare_inputs(images)
    assert bicubic_image is not None
    assert bicubic_image.shape == (3, 3, 8, 12)


def test_app_run_timed():
    calls = []

    def model(image, bicubic_image):
        calls.append(bicubic_image)
        return image / 255

    app = SuperResolutionApp(model)
    output, timing = app.run_timed(torch.full((1, 3, 2, 2), 255.0), num_iterations=4)
    assert len(calls) == 4
    assert len(timing.iteration_times_ms) == 4
    assert all(t >= 0 for t in timing.iteration_times_ms)
    assert timing.average_ms == pytest.approx(timing.total_ms / 4)
    assert torch.all(output == 1.0)

    with pytest.raises(ValueError):
        app.run_timed(torch.zeros(1, 3, 2, 2), num_iterations=0)


def test_app_postprocess():
    output = torch.zeros(2, 3, 2, 2)
    output[0, 0] = 1.0  # saturated plane
    output[0, 1] = 0.5
    output[0, 2] = -3.0  # clamped to 0
    output[1] = 2.0  # clamped to 255

    images = SuperResolutionApp.postprocess(output)
    assert len(images) == 2
    assert images[0].shape == (2, 2, 3)
    assert images[0].dtype == np.uint8
    assert images[0][0, 0].tolist() == [255, 128, 0]
    assert np.all(images[1] == 255)

    with pytest.raises(ValueError):
        SuperResolutionApp.postprocess(torch.zeros(3, 2, 2))


def test_app_upscale_image(tiny_model_path: Path):
    model = SuperResolutionModel.from_pretrained(tiny_model_path)
    app = SuperResolutionApp(model)
    images = [np.full((4, 4, 3), COLOR, dtype=np.uint8)]
    upscaled, timing = app.predict(images, num_iterations=2)
    assert len(timing.iteration_times_ms) == 2
    assert len(upscaled) == 1
    assert upscaled[0].shape == (8, 8, 3)
    assert np.all(upscaled[0] == np.array(COLOR, dtype=np.uint8))


def test_load_input_images(tmp_path: Path):
    good = write_solid_image(tmp_path / "good.png", 4, 4)
    wrong_size = write_solid_image(tmp_path / "wrong_size.png", 5, 4)
    not_an_image = tmp_path / "not_an_image.png"
    not_an_image.write_text("hello")

    images = load_input_images(
        [str(good), str(wrong_size), str(not_an_image)], input_size=(4, 4)
    )
    assert len(images) == 1
    assert images[0].shape == (4, 4, 3)


@pytest.mark.demo
def test_demo(tmp_path: Path, tiny_model_path: Path, capsys):
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    write_solid_image(image_dir / "a.png", 4, 4, COLOR)
    write_solid_image(image_dir / "b.png", 4, 4, (0, 0, 0))
    out_dir = tmp_path / "out"

    assert (
        main(["-i", str(image_dir), "-m", str(tiny_model_path), "-o", str(out_dir)])
        == 0
    )

    stdout = capsys.readouterr().out
    assert "Batch size is 2" in stdout
    assert "Average running time of one iteration:" in stdout
    assert "Output size [N,C,H,W]: 2, 3, 8, 8" in stdout
    assert "Execution successful" in stdout
    assert stdout.count(onnxruntime.__version__) == 1

    first = cv2.imread(str(out_dir / "sr_1.png"))
    second = cv2.imread(str(out_dir / "sr_2.png"))
    assert first.shape == (8, 8, 3)
    assert np.all(first == np.array(COLOR, dtype=np.uint8))
    assert np.all(second == 0)
    assert not (out_dir / "sr_3.png").exists()


@pytest.mark.demo
def test_demo_two_inputs(tmp_path: Path, tiny_two_input_model_path: Path):
    image = write_solid_image(tmp_path / "a.png", 4, 4, COLOR)
    out_dir = tmp_path / "out"
    assert (
        main(
            [
                "-i",
                str(image),
                "-m",
                str(tiny_two_input_model_path),
                "-ni",
                "3",
                "-o",
                str(out_dir),
            ]
        )
        == 0
    )
    result = cv2.imread(str(out_dir / "sr_1.png")).astype(np.int16)
    # Bicubic resize of a flat image may be off by one level.
    assert np.abs(result - np.array(COLOR, dtype=np.int16)).max() <= 1


@pytest.mark.demo
def test_demo_perf_counts(tmp_path: Path, tiny_model_path: Path, capsys):
    image = write_solid_image(tmp_path / "a.png", 4, 4)
    out_dir = tmp_path / "out"
    assert (
        main(
            [
                "-i",
                str(image),
                "-m",
                str(tiny_model_path),
                "-pc",
                "-ni",
                "2",
                "-o",
                str(out_dir),
            ]
        )
        == 0
    )
    stdout = capsys.readouterr().out
    assert "Performance counts:" in stdout
    assert "Total time:" in stdout

    # One row per graph node: layer, status, type, provider, time, calls.
    rows = {
        line.split()[0]: line.split()
        for line in stdout.splitlines()
        if " EXECUTED " in line
    }
    assert rows["upscale"][1:4] == ["EXECUTED", "Resize", "CPUExecutionProvider"]
    assert rows["normalize"][1:4] == ["EXECUTED", "Mul", "CPUExecutionProvider"]
    for row in rows.values():
        assert float(row[4]) >= 0
        assert row[5] == "2"
    assert list(out_dir.glob("sr_profile*.json"))


@pytest.mark.demo
def test_demo_runtime_config(tmp_path: Path, tiny_model_path: Path):
    image = write_solid_image(tmp_path / "a.png", 4, 4)
    config = tmp_path / "runtime.yaml"
    config.write_text(
        "intra_op_num_threads: 1\n"
        "graph_optimization_level: basic\n"
        "session_config_entries:\n"
        "  session.intra_op.allow_spinning: 0\n"
    )
    args = ["-i", str(image), "-m", str(tiny_model_path), "-o", str(tmp_path)]
    assert main(args + ["-c", str(config)]) == 0

    config.write_text("# no overrides\n")
    assert main(args + ["-c", str(config)]) == 0

    config.write_text("not_a_setting: 1\n")
    assert main(args + ["-c", str(config)]) == 1


@pytest.mark.demo
@pytest.mark.parametrize(
    "extra_args,message",
    [
        (["-ni", "0"], "Parameter -ni should be more than 0"),
        (["-ni", "two"], "invalid int value"),
        (["-d", "FPGA"], "Unsupported device FPGA"),
        (["-l", "/nonexistent/libcustom_ops.so"], "libcustom_ops.so not found"),
        (["-c", "/nonexistent/config.yaml"], "does not exist"),
    ],
)
def test_demo_invalid_args(
    tmp_path: Path, tiny_model_path: Path, capsys, extra_args, message
):
    image = write_solid_image(tmp_path / "a.png", 4, 4)
    args = ["-i", str(image), "-m", str(tiny_model_path), "-o", str(tmp_path)]
    assert main(args + extra_args) == 1
    assert message in capsys.readouterr().out


@pytest.mark.demo
def test_demo_failures(tmp_path: Path, tiny_model_path: Path, capsys):
    image = write_solid_image(tmp_path / "a.png", 4, 4)
    wrong_size = write_solid_image(tmp_path / "big.png", 16, 16)

    assert main(["-m", str(tiny_model_path)]) == 1
    assert "Parameter -i is not set" in capsys.readouterr().out

    assert main(["-i", str(image)]) == 1
    assert "Parameter -m is not set" in capsys.readouterr().out

    assert main(["-i", str(tmp_path / "missing.png"), "-m", str(tiny_model_path)]) == 1
    assert "No suitable images were found" in capsys.readouterr().out

    assert main(["-i", str(image), "-m", str(tmp_path / "missing.onnx")]) == 1
    assert "missing.onnx not found" in capsys.readouterr().out

    assert main(["-i", str(wrong_size), "-m", str(tiny_model_path)]) == 1
    stdout = capsys.readouterr().out
    assert "is not equal to WxH = 4x4" in stdout
    assert "Valid input images were not found!" in stdout

    static_model = make_upscale_onnx_model(tmp_path / "static.onnx", batch_size=1)
    assert (
        main(
            [
                "-i",
                str(image),
                str(image),
                "-m",
                str(static_model),
                "-o",
                str(tmp_path),
            ]
        )
        == 1
    )
    assert "fixed batch size of 1" in capsys.readouterr().out


@pytest.mark.demo
def test_demo_help(capsys):
    with pytest.raises(SystemExit) as e:
        main(["-h"])
    assert e.value.code == 0
    stdout = capsys.readouterr().out
    for flag in ["-i", "-m", "-d", "-l", "-c", "-ni", "-pc", "-show"]:
        assert flag in stdout
