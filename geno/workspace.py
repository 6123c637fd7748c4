"""Workspaces: a set of projects sharing a build matrix, stored as ``.gwks``."""

from __future__ import annotations

import copy
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from geno.build_matrix import BuildMatrix, Column
from geno.compiler_gcc import CompilerGCC
from geno.compiler_msvc import CompilerMSVC
from geno.configuration import (
    Architecture,
    Configuration,
    Optimization,
    architecture_from_string,
    enum_to_string,
    optimization_from_string,
)
from geno.gcl import Deserializer, Object, Serializer
from geno.jobs import Job, JobSystem
from geno.process import Process
from geno.project import Project

PathLike = Union[str, os.PathLike]

BuildFinishedHandler = Callable[["Workspace", Optional[Path], bool], None]


@dataclass
class _LinkerOutput:
    path: Optional[Path] = None


def _with_extension(location: Path, name: str, extension: str) -> Path:
    base = location / name
    if base.name:
        return base.with_suffix(extension)
    return Path(str(base) + extension)


def _ordered_for_linking(projects: list) -> list:
    """Order projects so that libraries come before the projects that use them."""
    remaining = list(projects)
    ordered = []
    while remaining:
        names = {p.name for p in remaining}
        ready = next(
            (
                p
                for p in remaining
                if not any(
                    lib in names and lib != p.name for lib in p.local_configuration.libraries
                )
            ),
            remaining[0],
        )
        remaining.remove(ready)
        ordered.append(ready)
    return ordered


class Workspace:
    """A collection of projects with a shared build matrix."""

    EXTENSION = ".gwks"

    def __init__(self, location: Optional[PathLike]) -> None:
        if location is None or os.fspath(location) == "":
            self.location: Optional[Path] = None
        else:
            self.location = Path(location)
        self.name = "MyWorkspace"
        self.build_matrix = BuildMatrix()
        self.projects: list = []
        self.app_process = Process()
        self.build_finished: list = []

    def _file_path(self, name: Optional[str] = None) -> Path:
        return _with_extension(self.location, self.name if name is None else name, self.EXTENSION)

    def _emit_build_finished(self, output: Optional[Path], success: bool) -> None:
        for handler in list(self.build_finished):
            handler(self, output, success)

    # Building

    def build(self) -> Optional[Job]:
        """Queue compile and link jobs for all projects.

        Returns the job that reports the result to the ``build_finished``
        handlers, or None when there are no projects.
        """
        if not self.projects:
            return None

        linker_jobs: list = []
        linker_job_names: list = []
        linker_output = _LinkerOutput()

        for project in _ordered_for_linking(self.projects):
            configuration = self.build_matrix.current_configuration()
            project.local_configuration.override(configuration)
            project.build()
            configuration.override(project.local_configuration)
            compiler_outputs = list(project.compiler_outputs)

            for library in configuration.libraries:
                if library in linker_job_names:
                    project.linker_dependencies.append(linker_jobs[linker_job_names.index(library)])

            linker_job_names.append(project.name)
            linker_jobs.append(
                JobSystem.instance().new_job(
                    self._link_job(
                        copy.copy(configuration),
                        project.name,
                        project.kind,
                        compiler_outputs,
                        linker_output,
                    ),
                    project.linker_dependencies,
                )
            )

        def finish() -> None:
            # Holding the link jobs here keeps them alive until this job runs.
            _ = linker_jobs
            if linker_output.path:
                print("Done building workspace")
                self._emit_build_finished(linker_output.path, True)
            else:
                print("Failed to build workspace")
                self._emit_build_finished(None, False)

        return JobSystem.instance().new_job(finish, linker_jobs)

    @staticmethod
    def _link_job(configuration, name, kind, compiler_outputs, linker_output):
        def run() -> None:
            input_files = [slot.path for slot in compiler_outputs if slot.path]
            if not input_files:
                return
            if configuration.compiler is None:
                print(f"Failed to link {name}. No compiler active!", file=sys.stderr)
                return
            result = configuration.compiler.link(configuration, input_files, name, kind)
            if result is not None:
                linker_output.path = result

        return run

    # Serialization

    def serialize(self) -> bool:
        """Write the workspace file and every project file."""
        if self.location is None:
            return False

        with Serializer(self._file_path()) as serializer:
            if not serializer.is_open():
                return False

            serializer.write_object(Object("Name", self.name))

            matrix = Object("Matrix", [])
            for column in self.build_matrix.columns:
                matrix.add_child(self._column_to_object(column))
            serializer.write_object(matrix)

            projects = Object("Projects", [])
            for project in self.projects:
                projects.add_child(Object(self._relative_project_path(project)))
                project.serialize()
            serializer.write_object(projects)

        return True

    def _relative_project_path(self, project: Project) -> str:
        if project.location is None:
            return project.name
        try:
            relative = os.path.relpath(project.location, self.location)
        except ValueError:
            relative = ""
        return str(Path(relative) / project.name)

    @staticmethod
    def _column_to_object(column: Column) -> Object:
        column_obj = Object(column.name, [])
        for name, configuration in column.configurations:
            configuration_obj = Object(name)
            if (
                configuration.compiler is not None
                or configuration.architecture is not None
                or configuration.optimization is not None
            ):
                configuration_obj.set_table()
                if configuration.compiler is not None:
                    configuration_obj.add_child(Object("Compiler", configuration.compiler.name))
                if configuration.architecture is not None:
                    configuration_obj.add_child(
                        Object("Architecture", enum_to_string(configuration.architecture))
                    )
                if configuration.optimization is not None:
                    configuration_obj.add_child(
                        Object("Optimization", enum_to_string(configuration.optimization))
                    )
            column_obj.add_child(configuration_obj)
        return column_obj

    def deserialize(self) -> bool:
        """Read the workspace file and load the projects it lists."""
        if self.location is None:
            return False

        deserializer = Deserializer(self._file_path())
        if not deserializer.is_open():
            return False

        for obj in deserializer.objects():
            self._load_object(obj)
        return True

    def _load_object(self, obj: Object) -> None:
        if obj.name == "Name":
            self.name = obj.string()
        elif obj.name == "Matrix":
            self.build_matrix = BuildMatrix()
            for column_obj in obj.table() if obj.is_table() else []:
                self.build_matrix.new_column(column_obj.name)
                self._load_column(self.build_matrix.columns[-1], column_obj)
        elif obj.name == "Projects":
            for child in obj.table() if obj.is_table() else []:
                path = Path(child.string())
                if not path.is_absolute():
                    path = self.location / path
                path = Path(os.path.normpath(path))
                project = self.new_project(path.parent, path.name)
                project.deserialize()

    @staticmethod
    def _load_column(column: Column, column_obj: Object) -> None:
        for configuration_obj in column_obj.table() if column_obj.is_table() else []:
            configuration = Configuration()
            if configuration_obj.is_table():
                values = {
                    child.name: child.value
                    for child in reversed(configuration_obj.table())
                    if child.is_string()
                }
                compiler = values.get("Compiler")
                if compiler is not None:
                    if compiler == "MSVC" and sys.platform == "win32":
                        configuration.compiler = CompilerMSVC()
                    elif compiler == "GCC":
                        configuration.compiler = CompilerGCC()
                    else:
                        print(
                            f"Unrecognized compiler '{compiler}' for this workspace.",
                            file=sys.stderr,
                        )
                # An unknown name leaves the first enumerator, as a fresh value would be.
                if "Architecture" in values:
                    configuration.architecture = (
                        architecture_from_string(values["Architecture"]) or Architecture.X86
                    )
                if "Optimization" in values:
                    configuration.optimization = (
                        optimization_from_string(values["Optimization"])
                        or Optimization.FAVOR_SIZE
                    )
            column.configurations.append((configuration_obj.name, configuration))

    # Projects

    def rename(self, name: str) -> None:
        """Rename the workspace and its file, then save."""
        old_path = self._file_path()
        if old_path.exists():
            os.rename(old_path, self._file_path(name))
        self.name = name
        self.serialize()

    def new_project(self, location: Optional[PathLike], name: str) -> Project:
        """Create an empty project and add it to the workspace."""
        project = Project(location)
        project.name = name
        self.projects.append(project)
        return project

    def project_by_name(self, name: str) -> Optional[Project]:
        return next((p for p in self.projects if p.name == name), None)

    def add_project(self, path: PathLike) -> bool:
        """Load the project file at ``path``; False if the name is taken or loading fails."""
        project_path = Path(os.path.normpath(path))
        if self.project_by_name(project_path.stem) is not None:
            return False
        project = self.new_project(project_path.parent, project_path.stem)
        return project.deserialize()

    def remove_project(self, name: str) -> None:
        """Remove the project called ``name`` and save."""
        project = self.project_by_name(name)
        if project is not None:
            self.projects.remove(project)
            self.serialize()

    def rename_project(self, project_name: str, name: str) -> None:
        """Rename a project and its file, then save it and the workspace."""
        project = self.project_by_name(project_name)
        if project is None:
            return
        if project.location is not None:
            old_path = _with_extension(project.location, project.name, Project.EXTENSION)
            if old_path.exists():
                os.rename(old_path, _with_extension(project.location, name, Project.EXTENSION))
        project.name = name
        project.serialize()
        self.serialize()