# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import os
from typing import TypeVar, Union

import cv2
import numpy as np
import torch
from PIL.Image import Image
from PIL.Image import fromarray as ImageFromArray

ClipT = TypeVar("ClipT", bound=Union[int, float, np.ndarray, torch.Tensor])


def clip(n: ClipT, lower: float, upper: float) -> ClipT:
    """Clamp a scalar, numpy array or torch tensor to [lower, upper]."""
    if isinstance(n, torch.Tensor):
        return torch.clamp(n, min=lower, max=upper)  # type: ignore[return-value]
    if isinstance(n, np.ndarray):
        return np.clip(n, lower, upper)  # type: ignore[return-value]
    return max(lower, min(n, upper))  # type: ignore[return-value]


def read_image(path: str | os.PathLike) -> np.ndarray | None:
    """
    Read an image from disk.

    Returns:
        uint8 numpy array [H W C] in BGR channel layout,
        or None if the file can't be decoded as an image.
    """
    return cv2.imread(str(path), cv2.IMREAD_COLOR)


def numpy_image_to_torch(image: np.ndarray, to_float: bool = True) -> torch.Tensor:
    """
    Convert a Numpy image (dtype uint8, shape [H W C] or [N H W C]) into a pyTorch tensor of shape NCHW.

    Pixel values are not rescaled: a float tensor holds values in range [0, 255].
    Channel order is unchanged (BGR stays BGR).
    """
    image_torch = torch.from_numpy(np.ascontiguousarray(image))
    if len(image.shape) == 3:
        image_torch = image_torch.unsqueeze(0)
    image_torch = image_torch.permute(0, 3, 1, 2)
    return image_torch.float() if to_float else image_torch


def resize_bicubic(image: np.ndarray, dst_size: tuple[int, int]) -> np.ndarray:
    """
    Resize an [H W C] image to dst_size (height, width) with bicubic interpolation.
    """
    height, width = dst_size
    return cv2.resize(image, (width, height), interpolation=cv2.INTER_CUBIC)


def torch_planes_to_numpy_image(data: torch.Tensor) -> np.ndarray:
    """
    Convert a float tensor of shape CHW, with range [0, 1], into a uint8 numpy image.

    Each plane is scaled by 255, rounded and clamped to [0, 255].
    Networks that produce more than 3 planes are reduced to the first 3.

    Returns:
        [H W 3] image for 3+ planes, [H W] image for 1 plane.

    Raises:
        ValueError if the tensor is not CHW or has 2 planes.
    """
    if data.dim() != 3:
        raise ValueError(f"Expected an output of shape [C, H, W], got {list(data.shape)}")
    num_planes = data.shape[0]
    if num_planes == 2:
        raise ValueError("Output with 2 channels can't be converted to an image.")

    planes = data[:3] if num_planes >= 3 else data[:1]
    out = clip(torch.round(planes.float() * 255), 0, 255)
    np_out = out.to(torch.uint8).permute(1, 2, 0).detach().cpu().numpy()
    return np_out[..., 0] if np_out.shape[-1] == 1 else np_out


def bgr_image_to_PIL_image(image: np.ndarray) -> Image:
    """Convert a uint8 BGR [H W 3] or grayscale [H W] numpy image to a PIL image."""
    if image.ndim == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return ImageFromArray(image)
