"""The build matrix: columns of named configurations that combine into one."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from geno.compiler_gcc import CompilerGCC
from geno.compiler_msvc import CompilerMSVC
from geno.configuration import Architecture, Configuration, Optimization


@dataclass
class Column:
    """A named set of alternative configurations with one of them selected."""

    name: str = ""
    configurations: list = field(default_factory=list)
    current_configuration: int = 0


@dataclass
class BuildMatrix:
    """Columns whose selected configurations together make the build configuration."""

    columns: list = field(default_factory=list)

    def new_column(self, name: str) -> None:
        """Append an empty column called ``name``."""
        self.columns.append(Column(name=name))

    def new_configuration(self, which_column: str, configuration: str) -> None:
        """Add an empty configuration called ``configuration`` to the named column.

        Nothing happens if no column has that name.
        """
        for column in self.columns:
            if column.name == which_column:
                column.configurations.append((configuration, Configuration()))
                return

    def current_configuration(self) -> Configuration:
        """Combine the selected configuration of every column, in column order."""
        result = Configuration()
        for column in self.columns:
            if 0 <= column.current_configuration < len(column.configurations):
                _, configuration = column.configurations[column.current_configuration]
                result.override(configuration)
        return result

    @classmethod
    def platform_default(cls) -> "BuildMatrix":
        """The matrix a new workspace starts with on this platform."""
        matrix = cls()

        target = Column(name="Target")
        if sys.platform == "win32":
            target.configurations.append(("Windows", Configuration(compiler=CompilerMSVC())))
        elif sys.platform.startswith("linux"):
            target.configurations.append(("Linux", Configuration(compiler=CompilerGCC())))
        elif sys.platform == "darwin":
            target.configurations.append(("macOS", Configuration(compiler=None)))
        matrix.columns.append(target)

        architecture = Column(name="Architecture")
        for name, value in (
            ("x86", Architecture.X86),
            ("x86_64", Architecture.X86_64),
            ("ARM", Architecture.ARM),
            ("ARM64", Architecture.ARM64),
        ):
            architecture.configurations.append((name, Configuration(architecture=value)))
        matrix.columns.append(architecture)

        optimization = Column(name="Optimization")
        optimization.configurations.append(("Off", Configuration()))
        for name, value in (
            ("Favor Size", Optimization.FAVOR_SIZE),
            ("Favor Speed", Optimization.FAVOR_SPEED),
            ("Full", Optimization.FULL),
        ):
            optimization.configurations.append((name, Configuration(optimization=value)))
        matrix.columns.append(optimization)

        return matrix