# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import logging
import os
import sys

import numpy as np
import onnxruntime

from super_resolution_demo.app import SuperResolutionApp
from super_resolution_demo.model import SuperResolutionModel
from super_resolution_demo.utils.args import parse_demo_args
from super_resolution_demo.utils.display import save_and_display_image
from super_resolution_demo.utils.image_processing import (
    bgr_image_to_PIL_image,
    read_image,
)
from super_resolution_demo.utils.input_files import collect_input_files
from super_resolution_demo.utils.logging_helpers import configure_logging
from super_resolution_demo.utils.printing import (
    get_runtime_info,
    print_performance_counts,
    print_with_box,
)
from super_resolution_demo.utils.profiling import load_profile_records
from super_resolution_demo.utils.runtime_config import RuntimeConfig

logger = logging.getLogger("super_resolution_demo.demo")


def load_input_images(
    image_paths: list[str], input_size: tuple[int, int]
) -> list[np.ndarray]:
    """
    Read the images that match the network's low resolution input size.

    Images that can't be read or have a different size are skipped with a warning.

    Parameters:
        image_paths: Image files.
        input_size: (height, width) of the network's low resolution input.
    """
    height, width = input_size
    images: list[np.ndarray] = []
    for path in image_paths:
        image = read_image(path)
        if image is None:
            logger.warning(f"Image {path} cannot be read!")
            continue

        if image.shape[:2] != (height, width):
            logger.warning(
                f"Size of the image {path} is not equal to WxH = {width}x{height}"
            )
            continue

        images.append(image)
    return images


def run_demo(argv: list[str] | None = None) -> None:
    """
    Upscale the images passed on the command line.

    Raises on any failure; see main() for the exit code contract.
    """
    args = parse_demo_args(argv)
    configure_logging(args.verbose)

    image_paths = collect_input_files(args.input)
    if not image_paths:
        raise ValueError("No suitable images were found")

    # Load the network in the inference runtime
    logger.info("Loading inference runtime")
    print_with_box(get_runtime_info())

    if args.perf_counts:
        # The profiling trace is written next to the output images.
        os.makedirs(args.output_dir, exist_ok=True)

    runtime_config = None
    if args.config:
        runtime_config = RuntimeConfig.from_yaml(args.config)
        logger.info(f"Runtime config loaded: {args.config}")

    logger.info("Loading network files")
    model = SuperResolutionModel.from_pretrained(
        args.model,
        device=args.device,
        cpu_extension=args.cpu_extension,
        runtime_config=runtime_config,
        enable_profiling=args.perf_counts,
        profile_file_prefix=os.path.join(args.output_dir, "sr_profile"),
    )
    if args.cpu_extension:
        logger.info(f"CPU Extension loaded: {args.cpu_extension}")

    # Prepare input blobs
    logger.info("Preparing input blobs")
    images = load_input_images(image_paths, model.lr_input_size)
    if not images:
        raise ValueError("Valid input images were not found!")

    model.validate_batch_size(len(images))
    logger.info(f"Batch size is {len(images)}")

    app = SuperResolutionApp(model, model.bicubic_input_size)
    image, bicubic_image = app.prepare_inputs(images)

    # Inference
    logger.info(f"Start inference ({args.num_iterations} iterations)")
    output, timing = app.run_timed(image, bicubic_image, args.num_iterations)
    print()
    print(f"Average running time of one iteration: {timing.average_ms:.3f} ms")

    if args.perf_counts:
        profile_path = model.end_profiling()
        if profile_path is not None:
            logger.debug(f"Profiling trace written to {profile_path}")
            print_performance_counts(load_profile_records(profile_path))

    # Process output
    num_images, num_channels, height, width = output.shape
    logger.info(
        f"Output size [N,C,H,W]: {num_images}, {num_channels}, {height}, {width}"
    )
    for idx, result in enumerate(app.postprocess(output)):
        save_and_display_image(
            bgr_image_to_PIL_image(result),
            args.output_dir,
            f"sr_{idx + 1}.png",
            desc=f"upscaled image {idx + 1}",
            show=args.show,
        )


def main(argv: list[str] | None = None) -> int:
    """
    Entry point of the super resolution demo.

    Returns:
        0 on success, 1 if any step failed.
    """
    configure_logging()
    logger.info(f"ONNX Runtime: {onnxruntime.__version__}")
    try:
        run_demo(argv)
    except Exception as e:
        logger.error(str(e) or e.__class__.__name__)
        return 1

    logger.info("Execution successful")
    return 0


if __name__ == "__main__":
    sys.exit(main())
