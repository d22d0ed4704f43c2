# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Union

import numpy as np
import onnxruntime

# A tensor dimension as reported by onnxruntime: an int if static,
# a symbol name (or None) if dynamic.
DimType = Union[int, str, None]
IOTypes = dict[str, tuple[tuple[DimType, ...], np.dtype]]

# Maps type strings returned by onnxruntime.InferenceSession.get_inputs() to numpy types.
ORT_TENSOR_STR_TO_NP_TYPE: dict[str, np.dtype] = {
    "tensor(float)": np.dtype(np.float32),
    "tensor(float16)": np.dtype(np.float16),
    "tensor(double)": np.dtype(np.float64),
    "tensor(uint8)": np.dtype(np.uint8),
    "tensor(int8)": np.dtype(np.int8),
    "tensor(uint16)": np.dtype(np.uint16),
    "tensor(int16)": np.dtype(np.int16),
    "tensor(int32)": np.dtype(np.int32),
    "tensor(int64)": np.dtype(np.int64),
    "tensor(bool)": np.dtype(np.bool_),
}


def kwargs_to_dict(argnames: Iterable[str], *args, **kwargs) -> dict[str, Any]:
    """
    Convert args + kwargs to a key / value dictionary.

    Parameters:
        argnames
            Argument names, in order. Ordered arguments will be mapped to these names.

        args
            Ordered arguments.

        kwargs
            Keyword arguments.

    Returns:
        Ordered key / value dictionary, in order of "argnames".

    Raises:
        ValueError if an input is passed twice or an argname is missing.
    """
    input_dict: dict[str, Any] = dict()
    for idx, input_name in enumerate(argnames):
        if len(args) > idx:
            input_val = args[idx]
            if input_name in kwargs:
                raise ValueError(
                    f"Cannot pass input {input_name} twice (as a positional arg and a keyword arg)."
                )
        elif input_name in kwargs:
            input_val = kwargs[input_name]
        else:
            raise ValueError(f"Missing input {input_name}")
        input_dict[input_name] = input_val
    return input_dict


def _node_args_to_io_types(node_args: list[onnxruntime.NodeArg]) -> IOTypes:
    io_types: IOTypes = dict()
    for arg in node_args:
        if arg.type not in ORT_TENSOR_STR_TO_NP_TYPE:
            raise ValueError(f"Unsupported type {arg.type} for model I/O {arg.name}.")
        io_types[arg.name] = (tuple(arg.shape), ORT_TENSOR_STR_TO_NP_TYPE[arg.type])
    return io_types


def extract_io_types_from_session(
    session: onnxruntime.InferenceSession,
) -> tuple[IOTypes, IOTypes]:
    """
    Extract model I/O names, shapes and types from an onnxruntime session.

    Returns:
        inputs, outputs
            dict[name, (shape, numpy dtype)], in the order defined by the model.
            Dynamic dimensions are reported as a symbol name or None.
    """
    return (
        _node_args_to_io_types(session.get_inputs()),
        _node_args_to_io_types(session.get_outputs()),
    )


def is_static_dim(dim: DimType) -> bool:
    return isinstance(dim, int) and dim > 0
