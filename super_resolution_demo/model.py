# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import logging
import os
from pathlib import Path

import torch

from super_resolution_demo.utils.onnx_helpers import DimType, is_static_dim
from super_resolution_demo.utils.onnx_torch_wrapper import (
    Device,
    OnnxModelTorchWrapper,
    OnnxSessionOptions,
    execution_providers_for_devices,
)
from super_resolution_demo.utils.runtime_config import RuntimeConfig

logger = logging.getLogger(__name__)


def _spatial_size(name: str, shape: tuple[DimType, ...]) -> tuple[int, int]:
    if len(shape) != 4:
        raise ValueError(
            f"Input {name} must have 4 dimensions [N, C, H, W], got {list(shape)}"
        )
    height, width = shape[2], shape[3]
    if not (is_static_dim(height) and is_static_dim(width)):
        raise ValueError(
            f"Input {name} must have static height and width, got {list(shape)}"
        )
    return int(height), int(width)  # type: ignore[arg-type]


class SuperResolutionModel:
    """
    A super resolution network loaded in the inference runtime.

    The network takes 1 or 2 inputs:
        * a low resolution image (always)
        * the same image upscaled with bicubic interpolation to the output size (optional)

    Inputs are float [N, 3, H, W] with pixel values in range [0, 255], BGR channel layout.
    The first output is float [N, C, H', W'] with values in range [0, 1].
    """

    def __init__(self, session: OnnxModelTorchWrapper):
        self.session = session

        num_inputs = len(session.inputs)
        if num_inputs not in (1, 2):
            raise ValueError("The demo supports topologies with 1 or 2 inputs only")

        # The smaller input is the low resolution image; the larger one is the bicubic upscaled image.
        sizes = {
            name: _spatial_size(name, shape)
            for name, (shape, _) in session.inputs.items()
        }
        ordered = sorted(sizes, key=lambda name: sizes[name][0] * sizes[name][1])
        self.lr_input_name = ordered[0]
        self.bicubic_input_name: str | None = ordered[1] if num_inputs == 2 else None

        self.output_name = next(iter(session.outputs))
        output_shape = session.outputs[self.output_name][0]
        if len(output_shape) != 4:
            raise ValueError(
                f"Output {self.output_name} must have 4 dimensions [N, C, H, W], got {list(output_shape)}"
            )

    @classmethod
    def from_pretrained(
        cls,
        model_path: str | os.PathLike,
        device: str = "CPU",
        cpu_extension: str | os.PathLike | None = None,
        runtime_config: RuntimeConfig | None = None,
        enable_profiling: bool = False,
        profile_file_prefix: str | None = None,
    ) -> SuperResolutionModel:
        """
        Load a super resolution network (.onnx) in the inference runtime.

        Parameters:
            model_path: ONNX model file.
            device: Device name or comma separated device priority list (see Device).
            cpu_extension: Shared library with custom operator implementations.
            runtime_config: Additional runtime settings (from the `-c` YAML file).
            enable_profiling: Record per-layer execution times.
            profile_file_prefix: Path prefix of the profiling trace file.
        """
        runtime_config = runtime_config or RuntimeConfig()
        session_options = OnnxSessionOptions(
            enable_profiling=enable_profiling,
            profile_file_prefix=profile_file_prefix,
        )
        session_options.apply_runtime_config(runtime_config)
        if cpu_extension:
            session_options.custom_op_libraries.append(Path(cpu_extension))

        execution_providers = execution_providers_for_devices(
            Device.parse_list(device),
            disable_cpu_ep_fallback=runtime_config.disable_cpu_ep_fallback,
            provider_options=runtime_config.provider_options,
        )
        logger.debug(
            "Execution providers: "
            + ", ".join(ep.ep_name for ep in execution_providers)
        )
        return cls(
            OnnxModelTorchWrapper(model_path, session_options, execution_providers)
        )

    @property
    def lr_input_size(self) -> tuple[int, int]:
        """(height, width) of the low resolution input."""
        return _spatial_size(
            self.lr_input_name, self.session.inputs[self.lr_input_name][0]
        )

    @property
    def bicubic_input_size(self) -> tuple[int, int] | None:
        """(height, width) of the bicubic input, if the network has one."""
        if self.bicubic_input_name is None:
            return None
        return _spatial_size(
            self.bicubic_input_name, self.session.inputs[self.bicubic_input_name][0]
        )

    def validate_batch_size(self, batch_size: int) -> None:
        """
        Raises:
            ValueError if the network has a static batch size that differs from batch_size.
        """
        for name, (shape, _) in self.session.inputs.items():
            if is_static_dim(shape[0]) and shape[0] != batch_size:
                raise ValueError(
                    f"Input {name} has a fixed batch size of {shape[0]}, but {batch_size} image(s) were provided."
                )

    def forward(
        self, image: torch.Tensor, bicubic_image: torch.Tensor | None = None
    ) -> torch.Tensor:
        """
        Run super resolution on `image`.

        Parameters:
            image: Low resolution images. float [N, 3, H, W], range [0, 255], BGR.
            bicubic_image: Required for 2-input networks.
                           Images resized (bicubic) to the network's bicubic input size. float [N, 3, H', W'].

        Returns:
            Upscaled images, output of the first network output. float [N, C, H', W'], range [0, 1].
        """
        inputs = {self.lr_input_name: image}
        if self.bicubic_input_name is not None:
            if bicubic_image is None:
                raise ValueError(
                    f"Network input {self.bicubic_input_name} requires a bicubic upscaled image."
                )
            inputs[self.bicubic_input_name] = bicubic_image

        output = self.session(**inputs)
        return output[0] if isinstance(output, tuple) else output

    def __call__(
        self, image: torch.Tensor, bicubic_image: torch.Tensor | None = None
    ) -> torch.Tensor:
        return self.forward(image, bicubic_image)

    def end_profiling(self) -> str | None:
        return self.session.end_profiling()
