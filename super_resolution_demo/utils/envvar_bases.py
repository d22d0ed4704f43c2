# ---------------------------------------------------------------------
# Copyright (c) 2025 Qualcomm Technologies, Inc. and/or its subsidiaries.
# SPDX-License-Identifier: BSD-3-Clause
# ---------------------------------------------------------------------

from __future__ import annotations

import argparse
import os
from functools import partial
from pathlib import Path
from typing import Generic, TypeVar

ParsedT = TypeVar("ParsedT")


class SRDemoEnvvar(Generic[ParsedT]):
    """
    Class for defining environment variables used by the super resolution demo.
    """

    # Environment variable name.
    VARNAME: str

    # Argnames (eg. --output-dir, -o) that will represent this envvar,
    # if added as an argparse argument to a script.
    #
    # The first long argname is used as the mapping in the parsed namespace,
    # unless the envvar class sets CLI_DEST.
    CLI_ARGNAMES: list[str]
    CLI_DEST: str | None = None

    # Message for this envvar to be displayed by an argparse parser's help message.
    CLI_HELP_MESSAGE: str

    @classmethod
    def get(cls, default: ParsedT | None = None) -> ParsedT:
        """
        Get the value of this environment variable.
        If the envvar is unset, returns the default value.
        If the default value is none, returns cls.default()
        """
        envvar = os.environ.get(cls.VARNAME)
        if envvar is not None:
            return cls.parse(envvar)
        if default is None:
            default = cls.default()
        return default

    @classmethod
    def patchenv(cls, monkeypatch, value: ParsedT | str | None):
        """
        Patch the value of this envvar for the duration of this test,
        using the provided monkeypatch pytest fixture.

        If value is type ParsedT, it will be serialized to string first.
        If value is None, the envvar will be deleted.
        """
        if value is None:
            monkeypatch.delenv(cls.VARNAME, raising=False)
        elif isinstance(value, str):
            monkeypatch.setenv(cls.VARNAME, value)
        else:
            monkeypatch.setenv(cls.VARNAME, cls.serialize(value))

    @classmethod
    def default(cls) -> ParsedT:
        raise NotImplementedError()

    @classmethod
    def parse(cls, value: str) -> ParsedT:
        """
        Parse the string envvar value.
        """
        raise NotImplementedError()

    @classmethod
    def serialize(cls, value: ParsedT) -> str:
        """
        Serialize the parsed envvar value to string.
        """
        raise NotImplementedError()

    class ParseAction(argparse.Action):
        """Parses the CLI value the same way the envvar value would be parsed."""

        def __init__(
            self,
            option_strings,
            dest,
            envvar: type[SRDemoEnvvar[ParsedT]],
            **kwargs,
        ):
            super().__init__(option_strings, dest, **kwargs)
            self.envvar = envvar

        def __call__(self, parser, namespace, values, option_string=None):
            assert isinstance(values, str)
            setattr(namespace, self.dest, self.envvar.parse(values))

    @classmethod
    def add_arg(
        cls,
        parser: argparse.ArgumentParser | argparse._ArgumentGroup,
        default: ParsedT | None = None,
    ):
        """
        Adds an argument to the given parser or arg group for this envvar.

        The default for the argument will be the value of the envvar.
        If the envvar is unset, the default for the argument will be `default`.
        If the envvar is unset and `default` is None, the default will be cls.default()
        """
        kwargs = {} if cls.CLI_DEST is None else {"dest": cls.CLI_DEST}
        parser.add_argument(
            *cls.CLI_ARGNAMES,
            action=partial(cls.ParseAction, envvar=cls),  # type: ignore[arg-type]
            default=cls.get(default),
            help=cls.CLI_HELP_MESSAGE + f" Can also be set with ${cls.VARNAME}.",
            **kwargs,
        )


class SRDemoBoolEnvvar(SRDemoEnvvar[bool]):
    """
    Boolean environment variable.

    If the envvar is set to any value in TRUTHY_BOOLEAN_VALUES, it will be considered True.

    For example:
        Envvar value of "true" -> parsed to True
        Envvar value of "1" -> parsed to True
        Envvar value of "false" -> parsed to False
        Envvar value of "asdf" -> parsed to False
    """

    TRUTHY_BOOLEAN_VALUES = {"true", "1", "on", "yes"}

    @classmethod
    def parse(cls, value: str) -> bool:
        return value.lower() in SRDemoBoolEnvvar.TRUTHY_BOOLEAN_VALUES

    @classmethod
    def serialize(cls, value: bool) -> str:
        return "1" if value else "0"


class SRDemoStringEnvvar(SRDemoEnvvar[str]):
    """
    String (unparsed) environment variable.
    """

    @classmethod
    def parse(cls, value: str) -> str:
        return value

    @classmethod
    def serialize(cls, value: str) -> str:
        return value


class SRDemoPathEnvvar(SRDemoEnvvar[Path]):
    """
    Envvar that represents a Path.

    Parses to a Path object.
    """

    @classmethod
    def parse(cls, value: str) -> Path:
        return Path(value)

    @classmethod
    def serialize(cls, value: Path) -> str:
        return str(value)
