# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import os
from pathlib import Path

import cv2
import numpy as np
import onnx
from onnx import TensorProto, helper, numpy_helper

# Oldest IR version / opset that every supported onnxruntime release can load.
TEST_MODEL_IR_VERSION = 7
TEST_MODEL_OPSET = 13


def make_upscale_onnx_model(
    path: str | os.PathLike,
    height: int = 4,
    width: int = 4,
    scale: int = 2,
    batch_size: int | str = "N",
    two_inputs: bool = False,
) -> Path:
    """
    Write a tiny stand-in for a super resolution network to `path`.

    The network upscales its input with nearest neighbor interpolation and
    maps [0, 255] pixel values to [0, 1], so the output image equals the
    input image repeated `scale` times along each axis.

    With two_inputs, the network also takes a bicubic upscaled copy of the
    image (input "bicubic_image") and returns the mean of both upscaled images.

    Parameters:
        path: Where to save the .onnx file.
        height / width: Low resolution input size.
        scale: Upscale factor.
        batch_size: Static batch size (int) or symbolic batch dimension name (str).
        two_inputs: Add a bicubic input.
    """
    out_height, out_width = height * scale, width * scale
    inputs = [
        helper.make_tensor_value_info(
            "lr_image", TensorProto.FLOAT, [batch_size, 3, height, width]
        )
    ]
    initializers = [
        numpy_helper.from_array(
            np.array([1, 1, scale, scale], dtype=np.float32), "scales"
        ),
    ]
    nodes = [
        helper.make_node(
            "Resize",
            ["lr_image", "", "scales"],
            ["upscaled"],
            name="upscale",
            mode="nearest",
        )
    ]

    if two_inputs:
        inputs.append(
            helper.make_tensor_value_info(
                "bicubic_image",
                TensorProto.FLOAT,
                [batch_size, 3, out_height, out_width],
            )
        )
        initializers.append(
            numpy_helper.from_array(np.array(0.5 / 255, dtype=np.float32), "norm")
        )
        nodes.append(
            helper.make_node(
                "Add", ["upscaled", "bicubic_image"], ["summed"], name="residual"
            )
        )
        nodes.append(
            helper.make_node("Mul", ["summed", "norm"], ["sr_image"], name="normalize")
        )
    else:
        initializers.append(
            numpy_helper.from_array(np.array(1 / 255, dtype=np.float32), "norm")
        )
        nodes.append(
            helper.make_node(
                "Mul", ["upscaled", "norm"], ["sr_image"], name="normalize"
            )
        )

    outputs = [
        helper.make_tensor_value_info(
            "sr_image", TensorProto.FLOAT, [batch_size, 3, out_height, out_width]
        )
    ]
    graph = helper.make_graph(
        nodes, "tiny_super_resolution", inputs, outputs, initializer=initializers
    )
    model = helper.make_model(
        graph, opset_imports=[helper.make_opsetid("", TEST_MODEL_OPSET)]
    )
    model.ir_version = TEST_MODEL_IR_VERSION
    onnx.checker.check_model(model)

    path = Path(path)
    onnx.save(model, str(path))
    return path


def write_solid_image(
    path: str | os.PathLike,
    height: int,
    width: int,
    bgr: tuple[int, int, int] = (10, 120, 250),
) -> Path:
    """Write a single color PNG image, returns its path."""
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[...] = bgr
    path = Path(path)
    assert cv2.imwrite(str(path), image)
    return path
