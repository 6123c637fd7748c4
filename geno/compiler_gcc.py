"""Command lines for the GNU toolchain (g++ and ar)."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from geno.compiler import Compiler, PathLike, compiler_output_path, linker_output_path
from geno.configuration import Configuration, ProjectKind

_LANGUAGES = {
    ".c": "c",
    ".cpp": "c++",
    ".cxx": "c++",
    ".cc": "c++",
    ".asm": "assembler",
}


class CompilerGCC(Compiler):
    """Builds with g++ and archives static libraries with ar."""

    name = "GCC"

    def make_compiler_command_line(self, configuration: Configuration, file_path: PathLike) -> str:
        """g++ command that compiles ``file_path`` into an object file.

        Verbosity flags are added whenever ``configuration.verbose`` is set.
        """
        path = Path(file_path)
        parts = ["g++", "-c", "-x", _LANGUAGES.get(path.suffix, "none")]
        if configuration.verbose is not None:
            parts.extend(("-time", "-v"))
        parts.extend(("-o", str(compiler_output_path(configuration, path))))
        parts.append(str(path))
        return " ".join(parts)

    def make_linker_command_line(
        self,
        configuration: Configuration,
        input_files: Sequence[PathLike],
        output_name: str,
        kind: ProjectKind,
    ) -> str:
        """g++ link command, or an ar command for static libraries; empty if unspecified."""
        inputs = [str(Path(f)) for f in input_files]
        output = str(linker_output_path(configuration, output_name, kind))

        if kind in (ProjectKind.APPLICATION, ProjectKind.DYNAMIC_LIBRARY):
            parts = ["g++"]
            if kind is ProjectKind.DYNAMIC_LIBRARY:
                parts.append("-shared")
            parts.extend(f"-L{Path(d)}" for d in configuration.library_dirs)
            parts.extend(f"-l{lib}" for lib in configuration.libraries)
            parts.extend(("-o", output))
            parts.extend(inputs)
            return " ".join(parts)

        if kind is ProjectKind.STATIC_LIBRARY:
            # r: replace or insert, P: full path names, u: only newer files,
            # c: create quietly, s: write an index
            return " ".join(["bin/ar", "rPucs", output, *inputs])

        return ""