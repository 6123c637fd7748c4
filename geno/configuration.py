"""Build configuration: compiler, architecture, optimization and paths."""

from __future__ import annotations

import enum
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from geno.compiler import Compiler


class Optimization(enum.Enum):
    FAVOR_SIZE = "FavorSize"
    FAVOR_SPEED = "FavorSpeed"
    FULL = "Full"


class Architecture(enum.Enum):
    X86 = "x86"
    X86_64 = "x86_64"
    ARM = "ARM"
    ARM64 = "ARM64"


class ProjectKind(enum.Enum):
    UNSPECIFIED = "Unspecified"
    APPLICATION = "Application"
    STATIC_LIBRARY = "StaticLibrary"
    DYNAMIC_LIBRARY = "DynamicLibrary"


@dataclass
class Configuration:
    """Settings for building; unset values leave room for another layer."""

    compiler: Optional["Compiler"] = None
    include_dirs: list = field(default_factory=list)
    library_dirs: list = field(default_factory=list)
    libraries: list = field(default_factory=list)
    defines: list = field(default_factory=list)
    optimization: Optional[Optimization] = None
    architecture: Optional[Architecture] = None
    output_dir: Optional[Path] = None
    verbose: Optional[bool] = None

    def override(self, other: "Configuration") -> None:
        """Take every value set in ``other`` and append its lists to ours."""
        if other.compiler is not None:
            self.compiler = other.compiler
        if other.architecture is not None:
            self.architecture = other.architecture
        if other.optimization is not None:
            self.optimization = other.optimization
        if other.output_dir is not None:
            self.output_dir = other.output_dir
        if other.verbose is not None:
            self.verbose = other.verbose
        self.include_dirs.extend(other.include_dirs)
        self.library_dirs.extend(other.library_dirs)
        self.libraries.extend(other.libraries)
        self.defines.extend(other.defines)

    def __copy__(self) -> "Configuration":
        return Configuration(
            compiler=self.compiler,
            include_dirs=list(self.include_dirs),
            library_dirs=list(self.library_dirs),
            libraries=list(self.libraries),
            defines=list(self.defines),
            optimization=self.optimization,
            architecture=self.architecture,
            output_dir=self.output_dir,
            verbose=self.verbose,
        )


_MACHINES = {
    "x86_64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
    "x64": Architecture.X86_64,
    "i386": Architecture.X86,
    "i486": Architecture.X86,
    "i586": Architecture.X86,
    "i686": Architecture.X86,
    "x86": Architecture.X86,
    "aarch64": Architecture.ARM64,
    "arm64": Architecture.ARM64,
}


def host_architecture() -> Architecture:
    """The architecture of the machine this runs on."""
    machine = platform.machine().lower()
    if machine in _MACHINES:
        return _MACHINES[machine]
    if machine.startswith("arm"):
        return Architecture.ARM
    raise RuntimeError(f"unsupported host architecture '{machine}'")


def enum_to_string(value: object) -> str:
    """Name used in files for an architecture or optimization; 'Unknown' otherwise."""
    if isinstance(value, (Architecture, Optimization)):
        return value.value
    return "Unknown"


def architecture_from_string(text: str) -> Optional[Architecture]:
    """The architecture named ``text``, or None if the name is not known."""
    try:
        return Architecture(text)
    except ValueError:
        return None


def optimization_from_string(text: str) -> Optional[Optimization]:
    """The optimization named ``text``, or None if the name is not known."""
    try:
        return Optimization(text)
    except ValueError:
        return None