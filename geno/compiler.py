"""Common interface of compiler toolchains and their output locations."""

from __future__ import annotations

import abc
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

from geno.configuration import Configuration, ProjectKind
from geno.process import Process

PathLike = Union[str, os.PathLike]


def _output_dir(configuration: Configuration) -> Path:
    if configuration.output_dir is None:
        raise ValueError("configuration has no output directory")
    return Path(configuration.output_dir)


def compiler_output_path(configuration: Configuration, file_path: PathLike) -> Path:
    """Object file that compiling ``file_path`` produces."""
    return _output_dir(configuration) / Path(file_path).stem


def linker_output_path(configuration: Configuration, output_name: str, kind: ProjectKind) -> Path:
    """File that linking a project named ``output_name`` of ``kind`` produces."""
    output = _output_dir(configuration) / output_name
    windows = sys.platform == "win32"
    if kind is ProjectKind.APPLICATION:
        if windows:
            output = output.with_suffix(".exe")
    elif kind is ProjectKind.STATIC_LIBRARY:
        if windows:
            output = output.with_suffix(".lib")
        else:
            output = output.with_name("lib" + output.name).with_suffix(".a")
    elif kind is ProjectKind.DYNAMIC_LIBRARY:
        if windows:
            output = output.with_suffix(".lib")
        else:
            output = output.with_name("lib" + output.name).with_suffix(".so")
    return output


class Compiler(abc.ABC):
    """A toolchain that turns sources into object files and links them."""

    name: str = ""

    def compile(self, configuration: Configuration, file_path: PathLike) -> Optional[Path]:
        """Compile one source file; return the object file, or None on failure."""
        command = self.make_compiler_command_line(configuration, file_path)
        if Process(command).result_of() == 0:
            return compiler_output_path(configuration, file_path)
        return None

    def link(
        self,
        configuration: Configuration,
        input_files: Sequence[PathLike],
        output_name: str,
        kind: ProjectKind,
    ) -> Optional[Path]:
        """Link object files; return the produced file, or None on failure."""
        command = self.make_linker_command_line(configuration, input_files, output_name, kind)
        if Process(command).result_of() == 0:
            return linker_output_path(configuration, output_name, kind)
        return None

    @abc.abstractmethod
    def make_compiler_command_line(self, configuration: Configuration, file_path: PathLike) -> str:
        """Command line that compiles ``file_path``."""

    @abc.abstractmethod
    def make_linker_command_line(
        self,
        configuration: Configuration,
        input_files: Sequence[PathLike],
        output_name: str,
        kind: ProjectKind,
    ) -> str:
        """Command line that links ``input_files`` into ``output_name``."""