# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
import torch

from super_resolution_demo.utils.image_processing import (
    numpy_image_to_torch,
    resize_bicubic,
    torch_planes_to_numpy_image,
)

SuperResolutionCallable = Callable[..., torch.Tensor]


@dataclass
class InferenceTiming:
    """Wall clock duration of each inference iteration, in milliseconds."""

    iteration_times_ms: list[float] = field(default_factory=list)

    @property
    def total_ms(self) -> float:
        return sum(self.iteration_times_ms)

    @property
    def average_ms(self) -> float:
        if not self.iteration_times_ms:
            return 0.0
        return self.total_ms / len(self.iteration_times_ms)


class SuperResolutionApp:
    """
    This class consists of light-weight "app code" that is required to perform end to end inference with Super Resolution models.

    For a given batch of images, the app will:
        * pre-process the images (planar float layout, plus a bicubic upscaled copy for 2-input networks)
        * run inference, optionally several times to measure the average inference time
        * post-process the output planes into uint8 images
    """

    def __init__(
        self,
        model: SuperResolutionCallable,
        bicubic_input_size: tuple[int, int] | None = None,
    ):
        """
        Parameters:
            model: Super resolution network. Called as model(image, bicubic_image).
            bicubic_input_size: (height, width) of the network's bicubic input.
                                None for networks that take only the low resolution image.
        """
        self.model = model
        self.bicubic_input_size = bicubic_input_size

    def predict(self, *args, **kwargs):
        # See upscale_image.
        return self.upscale_image(*args, **kwargs)

    def prepare_inputs(
        self, images: list[np.ndarray]
    ) -> tuple[torch.Tensor, torch.Tensor | None]:
        """
        Bind images to network inputs, one image per batch slot.

        Parameters:
            images: uint8 numpy arrays [H W C], all of the same size.

        Returns:
            image: float [N, C, H, W], range [0, 255]
            bicubic_image: float [N, C, H', W'] if the network has a bicubic input, else None
        """
        if not images:
            raise ValueError("At least one image is required.")
        image = numpy_image_to_torch(np.stack(images))

        bicubic_image = None
        if self.bicubic_input_size is not None:
            bicubic_image = numpy_image_to_torch(
                np.stack([resize_bicubic(x, self.bicubic_input_size) for x in images])
            )
        return image, bicubic_image

    def run_timed(
        self,
        image: torch.Tensor,
        bicubic_image: torch.Tensor | None = None,
        num_iterations: int = 1,
    ) -> tuple[torch.Tensor, InferenceTiming]:
        """
        Run inference num_iterations times on the same inputs.

        Returns:
            output: Network output of the last iteration.
            timing: Duration of each iteration.
        """
        if num_iterations < 1:
            raise ValueError("num_iterations must be at least 1.")

        timing = InferenceTiming()
        output: torch.Tensor | None = None
        for _ in range(num_iterations):
            t0 = time.perf_counter()
            output = self.model(image, bicubic_image)
            timing.iteration_times_ms.append((time.perf_counter() - t0) * 1000)
        assert output is not None
        return output, timing

    @staticmethod
    def postprocess(output: torch.Tensor) -> list[np.ndarray]:
        """
        Convert the network output [N, C, H, W] (range [0, 1]) to one uint8 image per batch slot.
        """
        if output.dim() != 4:
            raise ValueError(
                f"Expected an output of shape [N, C, H, W], got {list(output.shape)}"
            )
        return [torch_planes_to_numpy_image(planes) for planes in output]

    def upscale_image(
        self, images: list[np.ndarray], num_iterations: int = 1
    ) -> tuple[list[np.ndarray], InferenceTiming]:
        """
        Upscale provided images.

        Parameters:
            images: uint8 numpy arrays [H W C], BGR channel layout, all of the network's input size.
            num_iterations: Number of inference runs to time.

        Returns:
            images: Upscaled uint8 images (one for each batch slot of the network output).
            timing: Inference duration of each iteration.
        """
        image, bicubic_image = self.prepare_inputs(images)
        output, timing = self.run_timed(image, bicubic_image, num_iterations)
        return self.postprocess(output), timing
