# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------
from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import onnxruntime
import ruamel.yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic_yaml import parse_yaml_raw_as
from typing_extensions import TypeVar


class BaseSRDemoConfig(BaseModel):
    """
    A base class for the demo's YAML configs.
    Config fields are defined as typed pydantic fields; unknown keys are rejected.

    This class is capable of loading a YAML file (via .from_yaml()) into an instance of itself.
    """

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_yaml(
        cls: type[BaseSRDemoConfigTypeVar],
        path: str | Path,
        create_empty_if_no_file: bool = False,
    ) -> BaseSRDemoConfigTypeVar:
        """
        Reads the yaml file at the given path and loads it into an instance of this class.
        A file without any content (empty, or only comments) loads as the default config.
        """
        if not os.path.exists(path):
            if create_empty_if_no_file:
                return cls()
            raise FileNotFoundError(f"Config file {path} does not exist.")

        with open(path) as f:
            raw_yaml = f.read()
        if ruamel.yaml.YAML(typ="safe").load(raw_yaml) is None:
            return cls()
        return parse_yaml_raw_as(cls, raw_yaml)


BaseSRDemoConfigTypeVar = TypeVar("BaseSRDemoConfigTypeVar", bound=BaseSRDemoConfig)


def _scalar_to_option_str(value: Any) -> Any:
    # YAML scalars arrive typed; onnxruntime takes every option as a string.
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    return value


# An onnxruntime session or provider option value. Unquoted YAML numbers and booleans are accepted.
OptionValue = Annotated[str, BeforeValidator(_scalar_to_option_str)]


class GraphOptimizationLevel(Enum):
    DISABLE = "disable"
    BASIC = "basic"
    EXTENDED = "extended"
    ALL = "all"

    @property
    def ort_level(self) -> onnxruntime.GraphOptimizationLevel:
        return {
            GraphOptimizationLevel.DISABLE: onnxruntime.GraphOptimizationLevel.ORT_DISABLE_ALL,
            GraphOptimizationLevel.BASIC: onnxruntime.GraphOptimizationLevel.ORT_ENABLE_BASIC,
            GraphOptimizationLevel.EXTENDED: onnxruntime.GraphOptimizationLevel.ORT_ENABLE_EXTENDED,
            GraphOptimizationLevel.ALL: onnxruntime.GraphOptimizationLevel.ORT_ENABLE_ALL,
        }[self]


class RuntimeConfig(BaseSRDemoConfig):
    """
    Inference runtime configuration, loaded from the file passed with `-c`.

    Example:
        intra_op_num_threads: 4
        graph_optimization_level: extended
        session_config_entries:
          session.intra_op.allow_spinning: 0
        provider_options:
          CUDAExecutionProvider:
            device_id: 1
    """

    intra_op_num_threads: int | None = Field(default=None, ge=0)
    inter_op_num_threads: int | None = Field(default=None, ge=0)
    graph_optimization_level: GraphOptimizationLevel = GraphOptimizationLevel.ALL
    disable_cpu_ep_fallback: bool = False

    # Passed as-is to onnxruntime.SessionOptions.add_session_config_entry
    session_config_entries: dict[str, OptionValue] = Field(default_factory=dict)

    # Execution provider name -> provider options.
    provider_options: dict[str, dict[str, OptionValue]] = Field(default_factory=dict)
