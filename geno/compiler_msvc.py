"""Command lines for the Microsoft Visual C++ toolchain (cl.exe and link.exe)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence

from geno.compiler import Compiler, PathLike, compiler_output_path, linker_output_path
from geno.configuration import Architecture, Configuration, ProjectKind, host_architecture
from geno.process import Process

_TARGETS = {Architecture.X86: "x86", Architecture.X86_64: "x64"}
_CPP_EXTENSIONS = (".cpp", ".cxx", ".cc")


def host_string() -> str:
    """Name of the MSVC host tools directory for this machine."""
    return "Hostx86" if host_architecture() is Architecture.X86 else "Hostx64"


def target_string(architecture: Optional[Architecture]) -> str:
    """Name MSVC uses for ``architecture``; other values fall back to the host's."""
    if architecture in _TARGETS:
        return _TARGETS[architecture]
    host = host_architecture()
    if host in _TARGETS:
        return _TARGETS[host]
    raise ValueError(f"no MSVC target for architecture {host.value}")


def find_program_files_x86_dir() -> Path:
    """The 32-bit Program Files directory, or an empty path if unknown."""
    return Path(os.environ.get("ProgramFiles(x86)", ""))


def find_msvc_dir(program_files_x86: PathLike) -> Path:
    """Directory of the first installed MSVC toolset, or an empty path."""
    vswhere = Path(program_files_x86) / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"
    if not vswhere.exists():
        return Path("")
    result = Process(f"{vswhere} -legacy -prerelease -latest -property installationPath").output_of()
    if result.exit_code != 0:
        return Path("")
    visual_studio = Path(result.text.rstrip("\r\n"))
    if not visual_studio.exists():
        return Path("")
    for entry in sorted((visual_studio / "VC" / "Tools" / "MSVC").iterdir()):
        return entry
    return Path("")


def _target_for(configuration: Configuration) -> str:
    return target_string(configuration.architecture or host_architecture())


def find_windows_sdk_version(configuration: Configuration, program_files_x86: PathLike) -> str:
    """Version of the first Windows 10 SDK with libraries for the target, or ''."""
    target = _target_for(configuration)
    lib_root = Path(program_files_x86) / "Windows Kits" / "10" / "Lib"
    for directory in sorted(lib_root.iterdir()):
        if (directory / "um" / target / "kernel32.lib").exists():
            return directory.name
    return ""


def _quoted(path: PathLike) -> str:
    return f'"{path}"'


class CompilerMSVC(Compiler):
    """Builds with the Visual C++ compiler and linker."""

    name = "MSVC"

    def make_compiler_command_line(self, configuration: Configuration, file_path: PathLike) -> str:
        """cl.exe command that compiles ``file_path`` into an object file."""
        program_files = find_program_files_x86_dir()
        msvc_dir = find_msvc_dir(program_files)
        target = _target_for(configuration)
        path = Path(file_path)
        extension = path.suffix

        parts = [_quoted(msvc_dir / "bin" / host_string() / target / "cl.exe"), "/nologo", "/c"]

        if extension == ".c":
            parts.append("/std:c11")
        elif extension in _CPP_EXTENSIONS:
            parts.append("/std:c++latest /D _HAS_EXCEPTIONS=0")

        parts.extend(f"/D {_quoted(define)}" for define in configuration.defines)

        sdk_version = find_windows_sdk_version(configuration, program_files)
        sdk_include = program_files / "Windows Kits" / "10" / "Include" / sdk_version
        for include_dir in (
            msvc_dir / "include",
            sdk_include / "ucrt",
            sdk_include / "um",
            sdk_include / "shared",
        ):
            parts.append("/I" + _quoted(include_dir))

        parts.extend("/I" + _quoted(Path(d)) for d in configuration.include_dirs)

        parts.append("/Fo" + _quoted(compiler_output_path(configuration, path)))

        if extension == ".c":
            parts.append("/Tc " + _quoted(path))
        elif extension in _CPP_EXTENSIONS:
            parts.append("/Tp " + _quoted(path))

        return " ".join(parts)

    def make_linker_command_line(
        self,
        configuration: Configuration,
        input_files: Sequence[PathLike],
        output_name: str,
        kind: ProjectKind,
    ) -> str:
        """link.exe command that links ``input_files`` into the project output."""
        program_files = find_program_files_x86_dir()
        msvc_dir = find_msvc_dir(program_files)
        output = linker_output_path(configuration, output_name, kind)
        sdk_version = find_windows_sdk_version(configuration, program_files)
        target = _target_for(configuration)

        parts = [_quoted(msvc_dir / "bin" / host_string() / target / "link.exe")]

        if kind is ProjectKind.APPLICATION:
            parts.append("/SUBSYSTEM:CONSOLE /OUT:" + _quoted(output))
        elif kind is ProjectKind.STATIC_LIBRARY:
            parts.append("/LIB /OUT:" + _quoted(output))
        elif kind is ProjectKind.DYNAMIC_LIBRARY:
            parts.append("/DLL /OUT:" + _quoted(output))

        sdk_lib = program_files / "Windows Kits" / "10" / "Lib" / sdk_version
        for lib_dir in (msvc_dir / "lib" / target, sdk_lib / "um" / target, sdk_lib / "ucrt" / target):
            parts.append("/LIBPATH:" + _quoted(lib_dir))

        # Path drops trailing separators, which MSVC does not accept
        parts.extend("/LIBPATH:" + _quoted(Path(d)) for d in configuration.library_dirs)

        for library in configuration.libraries:
            library_path = Path(library)
            if not library_path.suffix:
                library_path = library_path.with_suffix(".lib")
            parts.append(_quoted(library_path))

        parts.extend(_quoted(f"{Path(f)}.obj") for f in input_files)

        parts.append("/NOLOGO")

        if configuration.architecture is Architecture.X86_64:
            parts.append("/MACHINE:x64")

        return " ".join(parts)