# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
import os
import pathlib

from setuptools import find_packages, setup

srdemo_path = (pathlib.Path(__file__).parent / "super_resolution_demo").absolute()
version_path = srdemo_path / "_version.py"


def load_requirements(path: str | os.PathLike) -> list[str]:
    """
    Read requirements from the given path, return a list of pip-parseable requirements.
    Ignore / remove comments.
    """
    with open(path) as file:
        return [
            line.split("#")[0].strip()
            for line in file
            if line.strip() and not line.startswith("#")
        ]


def get_version() -> str:
    version_locals: dict[str, str] = {}
    exec(version_path.read_text(), version_locals)
    return version_locals["__version__"]


setup(
    name="super-resolution-demo",
    version=get_version(),
    description="Upscale images with a super resolution network on ONNX Runtime.",
    license="BSD-3-Clause",
    python_requires=">=3.10",
    packages=find_packages(include=["super_resolution_demo", "super_resolution_demo.*"]),
    install_requires=load_requirements(srdemo_path / "requirements.txt"),
    extras_require={"dev": load_requirements(srdemo_path / "requirements-dev.txt")},
    entry_points={
        "console_scripts": [
            "super-resolution-demo=super_resolution_demo.demo:main",
        ]
    },
)
