# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import logging
import os
import sys
from abc import abstractmethod
from dataclasses import dataclass, field, fields
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Any

import numpy as np
import onnxruntime
import torch

from super_resolution_demo.utils.onnx_helpers import (
    IOTypes,
    extract_io_types_from_session,
    kwargs_to_dict,
)
from super_resolution_demo.utils.runtime_config import (
    GraphOptimizationLevel,
    RuntimeConfig,
)

logger = logging.getLogger(__name__)


def _input_val_to_onnx_session_string_option(input_val: Any) -> str:
    """Convert input_value into a string option for an ONNX runtime session."""
    if isinstance(input_val, bool):
        return "1" if input_val else "0"
    return str(input_val)


@dataclass
class OnnxSessionOptions:
    """
    ONNX Runtime session level options.
    """

    enable_mem_pattern: bool = True
    enable_cpu_mem_arena: bool = True
    graph_optimization_level: GraphOptimizationLevel = GraphOptimizationLevel.ALL
    intra_op_num_threads: int | None = None
    inter_op_num_threads: int | None = None
    disable_cpu_ep_fallback: bool = False  # Applies to any execution provider

    # Per-node profiling. The trace is written to <profile_file_prefix>_<date>.json
    # when the session profiling is ended.
    enable_profiling: bool = False
    profile_file_prefix: str | None = None

    # Shared libraries with custom operator implementations.
    custom_op_libraries: list[Path] = field(default_factory=list)

    # Raw session config entries, applied after the entries derived from the fields above.
    extra_session_config_entries: dict[str, str] = field(default_factory=dict)

    @property
    def session_config_fields(self) -> dict[str, str]:
        session_fields = ["disable_cpu_ep_fallback"]
        return {y: f"session.{y}" for y in session_fields}

    @property
    def session_config_entries(self) -> dict[str, str]:
        """
        Convert these options to ONNX runtime session config entries.
        """
        out: dict[str, str] = dict()
        session_config_fields = self.session_config_fields
        for f in fields(self):
            if f.name not in session_config_fields:
                continue
            input_val = getattr(self, f.name)
            if input_val is not None and input_val != f.default:
                out[session_config_fields[f.name]] = (
                    _input_val_to_onnx_session_string_option(input_val)
                )
        out.update(self.extra_session_config_entries)
        return out

    @property
    def onnx_session_options(self) -> onnxruntime.SessionOptions:
        """Create ONNX session options from this class."""
        session = onnxruntime.SessionOptions()
        for k, v in self.session_config_entries.items():
            session.add_session_config_entry(k, v)

        session.enable_mem_pattern = self.enable_mem_pattern
        session.enable_cpu_mem_arena = self.enable_cpu_mem_arena
        session.graph_optimization_level = self.graph_optimization_level.ort_level
        if self.intra_op_num_threads is not None:
            session.intra_op_num_threads = self.intra_op_num_threads
        if self.inter_op_num_threads is not None:
            session.inter_op_num_threads = self.inter_op_num_threads

        session.enable_profiling = self.enable_profiling
        if self.enable_profiling and self.profile_file_prefix:
            session.profile_file_prefix = self.profile_file_prefix

        for library in self.custom_op_libraries:
            if not os.path.isfile(library):
                raise FileNotFoundError(f"Custom operator library {library} not found.")
            session.register_custom_ops_library(str(library))
        return session

    def apply_runtime_config(self, config: RuntimeConfig) -> None:
        """Override these options with the values set in the given runtime config file."""
        self.graph_optimization_level = config.graph_optimization_level
        self.disable_cpu_ep_fallback = config.disable_cpu_ep_fallback
        if config.intra_op_num_threads is not None:
            self.intra_op_num_threads = config.intra_op_num_threads
        if config.inter_op_num_threads is not None:
            self.inter_op_num_threads = config.inter_op_num_threads
        self.extra_session_config_entries.update(config.session_config_entries)


@dataclass
class ExecutionProviderOptions:
    """
    Execution provider options base class.
    Options not set in extra_options keep their ONNX Runtime defaults.
    """

    # Options passed to the provider verbatim (from the runtime config).
    extra_options: dict[str, str] = field(default_factory=dict)

    @property
    @abstractmethod
    def ep_name(self) -> str:
        """The name of the execution provider these options apply to."""
        pass

    @property
    def provider_options_dict(self) -> dict[str, str]:
        """
        Convert these options to an ONNX runtime ep provider options dictionary.

        This dictionary should be passed to
            onnxruntime.InferenceSession(
                ...,
                provider_options=[<this dict>]
            )
        """
        return dict(self.extra_options)


@dataclass
class CPUExecutionProviderOptions(ExecutionProviderOptions):
    @property
    def ep_name(self) -> str:
        return "CPUExecutionProvider"


@dataclass
class CUDAExecutionProviderOptions(ExecutionProviderOptions):
    @property
    def ep_name(self) -> str:
        return "CUDAExecutionProvider"


@dataclass
class DmlExecutionProviderOptions(ExecutionProviderOptions):
    @property
    def ep_name(self) -> str:
        return "DmlExecutionProvider"


def _default_qnn_backend_path() -> Path:
    # HTP (NPU) backend library shipped with onnxruntime-qnn.
    return Path("QnnHtp.dll" if sys.platform == "win32" else "libQnnHtp.so")


@dataclass
class QNNExecutionProviderOptions(ExecutionProviderOptions):
    """
    Options for the QNN execution provider.
    backend_path is always passed: the HTP backend library for this platform,
    unless provider_options in the runtime config name another one.
    Other QNN options (eg. htp_performance_mode) are set the same way.
    """

    @property
    def ep_name(self) -> str:
        return "QNNExecutionProvider"

    @property
    def provider_options_dict(self) -> dict[str, str]:
        options = super().provider_options_dict

        if "backend_path" not in options:
            options["backend_path"] = str(_default_qnn_backend_path())

        return options


class Device(Enum):
    """Inference targets selectable with `-d`."""

    CPU = "CPU"
    GPU = "GPU"
    DML = "DML"
    NPU = "NPU"

    @property
    def provider_options_cls(self) -> type[ExecutionProviderOptions]:
        return {
            Device.CPU: CPUExecutionProviderOptions,
            Device.GPU: CUDAExecutionProviderOptions,
            Device.DML: DmlExecutionProviderOptions,
            Device.NPU: QNNExecutionProviderOptions,
        }[self]

    @staticmethod
    def parse_list(devices: str) -> list[Device]:
        """
        Parse a device string such as "GPU" or "GPU,CPU" into devices, in priority order.

        Raises:
            ValueError if the string is empty or names an unknown device.
        """
        out: list[Device] = []
        for name in devices.split(","):
            name = name.strip().upper()
            if name not in Device.__members__:
                raise ValueError(
                    f"Unsupported device {name or repr(devices)}. Supported devices: {', '.join(Device.__members__)}"
                )
            if Device[name] not in out:
                out.append(Device[name])
        return out


def _npu_install_instructions() -> str:
    return "\n".join(
        [
            "You must have onnxruntime-qnn installed (and no other onnxruntime package) to run on NPU:",
            "    pip uninstall -y onnxruntime onnxruntime-gpu onnxruntime-directml",
            "    pip install onnxruntime-qnn",
        ]
    )


def execution_providers_for_devices(
    devices: list[Device],
    disable_cpu_ep_fallback: bool = False,
    provider_options: dict[str, dict[str, str]] | None = None,
) -> list[ExecutionProviderOptions]:
    """
    Get the execution providers to use for the given devices, in priority order.

    The CPU provider is appended as a fallback unless disable_cpu_ep_fallback is set.

    Raises:
        ValueError if the installed onnxruntime package does not provide a required execution provider.
    """
    provider_options = provider_options or {}
    available = onnxruntime.get_available_providers()
    targets = list(devices)
    if not disable_cpu_ep_fallback and Device.CPU not in targets:
        targets.append(Device.CPU)

    eps: list[ExecutionProviderOptions] = []
    for device in targets:
        ep = device.provider_options_cls()
        if ep.ep_name not in available:
            if device == Device.NPU:
                raise ValueError(_npu_install_instructions())
            raise ValueError(
                f"{ep.ep_name} (device {device.value}) is not available in this onnxruntime build."
                f" Available providers: {', '.join(available)}"
            )
        ep.extra_options.update(provider_options.get(ep.ep_name, {}))
        eps.append(ep)
    return eps


class OnnxSessionTorchWrapper:
    """
    A wrapper for ONNX session that provides a Torch-like inference interface.

    Implements the __call__() and forward() functions in the same way a pyTorch module would.
    This allows this class to act as drop-in replacement for a pyTorch module of the same model.
    """

    def __init__(
        self,
        session: onnxruntime.InferenceSession,
        inputs: IOTypes | None = None,
        outputs: IOTypes | None = None,
    ):
        """
        Create a wrapper for an ONNX session that uses torch-like I/O for the forward call.

        session:
            ONNX session.

        inputs / outputs
            Model inputs / output names, shapes & types.
            If not provided, they will be extracted from the session.
        """
        self.session = session

        if not inputs or not outputs:
            gen_inputs, gen_outputs = extract_io_types_from_session(session)
            inputs = inputs or gen_inputs
            outputs = outputs or gen_outputs
        self.inputs = inputs
        self.outputs = outputs

    def __call__(self, *args, **kwargs) -> torch.Tensor | tuple[torch.Tensor, ...]:
        return self.forward(*args, **kwargs)

    def forward(self, *args, **kwargs) -> torch.Tensor | tuple[torch.Tensor, ...]:
        """
        Calls the model with the given args and kwargs.
        Identical behavior (I/O) to calling forward() on a pyTorch Module.

        Parameters:
            *args
                Ordered inputs of any type that can be converted to a numpy array.

            **kwargs
                Keyword inputs of any type that can be converted to a numpy array.

        Returns:
            Model output in default order defined by the ONNX model.
            If the model has 1 output, it will be returned as a Tensor. Otherwise this returns a tuple of Tensors.
        """
        session_inputs = kwargs_to_dict(self.inputs.keys(), *args, **kwargs)
        session_outputs = self.run(session_inputs)
        model_output = [torch.from_numpy(x) for x in session_outputs]
        return model_output[0] if len(model_output) == 1 else tuple(model_output)

    def run(self, inputs: dict[str, Any]) -> list[np.ndarray]:
        """
        Run the model (equivalent to onnxruntime.InferenceSession.run) with the given inputs.

        Parameters:
            inputs
                Network inputs. Values can be any type that can be converted to a numpy array.

        Returns:
            Network outputs in default order defined by the ONNX model.
        """
        session_inputs = self._prepare_inputs(inputs)
        session_outputs = self.session.run(None, session_inputs)
        if len(session_outputs) != len(self.outputs):
            raise ValueError(
                f"Expected {len(self.outputs)} outputs, but got {len(session_outputs)} outputs."
            )
        return session_outputs

    def end_profiling(self) -> str | None:
        """
        Stop profiling and write the trace file.

        Returns:
            Path to the profiling trace, or None if profiling is disabled for this session.
        """
        if not self.session.get_session_options().enable_profiling:
            return None
        return self.session.end_profiling()

    def _prepare_inputs(self, inputs: dict[str, Any]) -> dict[str, np.ndarray]:
        """
        Prepare the input dictionary by:
            * converting each value to a numpy array
            * casting each value to the associated input type (if applicable)

        Raises:
            ValueError if:
                - "inputs" contains input names that aren't defined by the model.
                - An input's dtype is not compatible with the input dtype defined by the model.
        """
        prepared_inputs: dict[str, np.ndarray] = dict()
        for input_name, input_val in inputs.items():
            if input_name not in self.inputs:
                raise ValueError(
                    f"Unknown input with name {input_name}. Expected inputs: {list(self.inputs.keys())}"
                )
            _, onnx_input_dtype = self.inputs[input_name]

            if isinstance(input_val, torch.Tensor):
                input_val = input_val.detach().cpu().numpy()
            elif not isinstance(input_val, np.ndarray):
                input_val = np.asarray(input_val)

            if input_val.dtype != onnx_input_dtype:
                input_val_is_float = np.issubdtype(input_val.dtype, np.floating)
                onnx_dtype_is_float = np.issubdtype(onnx_input_dtype, np.floating)
                if input_val_is_float != onnx_dtype_is_float:
                    raise ValueError(
                        f"Input {input_name} has incorrect type {input_val.dtype}. Expected type {onnx_input_dtype}."
                    )
                # Cast the input to the appropriate type if it's the same fundamental type (int / float).
                input_val = input_val.astype(onnx_input_dtype)

            prepared_inputs[input_name] = input_val

        return prepared_inputs


class OnnxModelTorchWrapper(OnnxSessionTorchWrapper):
    """
    A wrapper for an ONNX model file that uses torch-like I/O for the forward call.
    """

    def __init__(
        self,
        model_path: str | PathLike,
        session_options: OnnxSessionOptions,
        execution_providers: list[ExecutionProviderOptions],
    ):
        """
        model_path
            ONNX model to load.

        session_options
            ONNX session options.

        execution_providers
            Execution providers to enable when running this model (& associated settings), in priority order.
            If empty, onnxruntime picks its default (CPU).
        """
        if not os.path.isfile(model_path):
            raise FileNotFoundError(f"Model file {model_path} not found.")

        self.model_path = model_path
        self.session_options = session_options
        self.execution_providers = execution_providers
        session = onnxruntime.InferenceSession(
            str(self.model_path),
            self.session_options.onnx_session_options,
            [x.ep_name for x in self.execution_providers] or None,
            [x.provider_options_dict for x in self.execution_providers] or None,
        )
        logger.debug(f"Session providers: {', '.join(session.get_providers())}")
        super().__init__(session)

