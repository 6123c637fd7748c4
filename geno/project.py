"""Projects: named groups of source files with a local build configuration."""

from __future__ import annotations

import copy
import functools
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from geno.configuration import Configuration, ProjectKind
from geno.gcl import Deserializer, Object, Serializer
from geno.jobs import Job, JobSystem

PathLike = Union[str, os.PathLike]

_COMPILABLE_EXTENSIONS = (".c", ".cc", ".cpp", ".cxx", ".c++")
_SOURCE_FOLDER_EXTENSIONS = (
    ".cc", ".cpp", ".cxx", ".c++", ".h", ".hh", ".hpp", ".hxx", ".h++",
)


@dataclass
class FileFilter:
    """A named folder-like group of files; the unnamed filter holds loose files."""

    name: str = ""
    path: str = ""
    files: list = field(default_factory=list)


@dataclass
class _OutputSlot:
    """Receives the object file a compile job produced, if any."""

    path: Optional[Path] = None


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def alphabetic_less(a: str, b: str) -> bool:
    """Case-insensitive ordering in which lower case precedes upper case."""
    if not a:
        return False
    for char_a, char_b in zip(a, b):
        if _is_alpha(char_a) and _is_alpha(char_b):
            lower_a, lower_b = char_a.lower(), char_b.lower()
            if lower_a == lower_b:
                if char_a > char_b:
                    return True
                if char_a < char_b:
                    return False
            else:
                return lower_a < lower_b
        elif char_a < char_b:
            return True
        elif char_a > char_b:
            return False
    return len(a) < len(b)


def _alphabetic_cmp(a: str, b: str) -> int:
    if alphabetic_less(a, b):
        return -1
    if alphabetic_less(b, a):
        return 1
    return 0


_ALPHABETIC_KEY = functools.cmp_to_key(_alphabetic_cmp)


def _filter_name(name: Union[str, os.PathLike]) -> str:
    return name if isinstance(name, str) else os.fspath(name)


def _lexically_relative(path: PathLike, base: Path) -> str:
    path = Path(path)
    if path.is_absolute() != base.is_absolute():
        return ""
    try:
        return os.path.relpath(path, base)
    except ValueError:
        return ""


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return Path(a) == Path(b)


class Project:
    """A buildable project stored as a ``.gprj`` file in its location."""

    EXTENSION = ".gprj"

    def __init__(self, location: Optional[PathLike]) -> None:
        if location is None or os.fspath(location) == "":
            self.location: Optional[Path] = None
        else:
            self.location = Path(location)
        self.name = "MyProject"
        self.kind = ProjectKind.APPLICATION
        self.local_configuration = Configuration()
        self.file_filters: list = []
        self.linker_dependencies: list = []
        self.compiler_outputs: list = []
        self.new_file_filter("")

    # Files on disk

    def _file_path(self) -> Path:
        base = self.location / self.name
        if base.name:
            return base.with_suffix(self.EXTENSION)
        return Path(str(base) + self.EXTENSION)

    def _resolve(self, text: str) -> Path:
        path = Path(text)
        if not path.is_absolute():
            path = self.location / path
        return Path(os.path.normpath(path))

    def _report_missing_location(self, action: str) -> None:
        target = f"project '{self.name}'." if self.name else "unnamed project."
        print(f"Failed to {action} {target} Location not specified.", file=sys.stderr)

    # Building

    def build(self) -> None:
        """Queue a compile job for every compilable file of the project."""
        if self.local_configuration.output_dir is None:
            self.local_configuration.output_dir = self.location
        config = copy.copy(self.local_configuration)

        for file_filter in self.file_filters:
            for file in file_filter.files:
                if Path(file).suffix not in _COMPILABLE_EXTENSIONS:
                    continue
                slot = _OutputSlot()
                self.compiler_outputs.append(slot)
                self.linker_dependencies.append(
                    JobSystem.instance().new_job(self._compile_job(config, Path(file), slot))
                )

    @staticmethod
    def _compile_job(config: Configuration, file: Path, slot: _OutputSlot):
        def run() -> None:
            if config.compiler is None:
                print(f"Failed to compile {file}. No compiler active!", file=sys.stderr)
                return
            result = config.compiler.compile(config, file)
            if result is not None:
                slot.path = result

        return run

    # Serialization

    def serialize(self) -> bool:
        """Write the project file; False if it has no location or cannot be written."""
        if self.location is None:
            self._report_missing_location("serialize")
            return False

        with Serializer(self._file_path()) as serializer:
            if not serializer.is_open():
                return False

            serializer.write_object(Object("Name", self.name))
            serializer.write_object(Object("Kind", self.kind.value))

            if self.file_filters:
                filters = Object("FileFilters", [])
                for file_filter in self.file_filters:
                    if not file_filter.name:
                        continue
                    filter_obj = Object(file_filter.name, [])
                    if file_filter.path:
                        filter_obj.add_child(Object("Path", file_filter.path))
                    if file_filter.files:
                        files = Object("Files", [])
                        for file in file_filter.files:
                            files.add_child(Object(_lexically_relative(file, self.location)))
                        filter_obj.add_child(files)
                    filters.add_child(filter_obj)
                serializer.write_object(filters)

            default = self.file_filter_by_name("")
            if default is not None and default.files:
                files = Object("Files", [])
                for file in default.files:
                    files.add_child(Object(_lexically_relative(file, self.location)))
                serializer.write_object(files)

            config = self.local_configuration
            for key, dirs in (("IncludeDirs", config.include_dirs), ("LibraryDirs", config.library_dirs)):
                if dirs:
                    table = Object(key, [])
                    for directory in dirs:
                        table.add_child(Object(_lexically_relative(directory, self.location)))
                    serializer.write_object(table)

            for key, values in (("Defines", config.defines), ("Libraries", config.libraries)):
                if values:
                    table = Object(key, [])
                    for value in values:
                        table.add_child(Object(value))
                    serializer.write_object(table)

        return True

    def deserialize(self) -> bool:
        """Read the project file; False if it has no location or cannot be read."""
        if self.location is None:
            self._report_missing_location("deserialize")
            return False

        deserializer = Deserializer(self._file_path())
        if not deserializer.is_open():
            return False

        for obj in deserializer.objects():
            self._load_object(obj)

        default = self.file_filter_by_name("")
        if default is not None:
            named_files = [f for flt in self.file_filters if flt.name for f in flt.files]
            default.files = [
                f for f in default.files if not any(_same_file(f, other) for other in named_files)
            ]
        return True

    def _load_object(self, obj: Object) -> None:
        name = obj.name
        config = self.local_configuration

        if name == "Name":
            self.name = obj.string()
        elif name == "Kind":
            try:
                self.kind = ProjectKind(obj.string())
            except ValueError:
                self.kind = ProjectKind.UNSPECIFIED
        elif name == "FileFilters":
            for filter_obj in obj.table():
                file_filter = FileFilter(name=filter_obj.name)
                children = filter_obj.table() if filter_obj.is_table() else []
                for child in children:
                    if child.name == "Path":
                        file_filter.path = child.string()
                    elif child.name == "Files" and child.is_table():
                        file_filter.files.extend(self._resolve(f.string()) for f in child.table())
                self.file_filters.append(file_filter)
            self.sort_file_filters()
        elif name == "Files":
            for child in obj.table():
                default = self.file_filter_by_name("") or self.new_file_filter("")
                default.files.append(self._resolve(child.name))
        elif name == "IncludeDirs":
            config.include_dirs.extend(self._resolve(child.name) for child in obj.table())
        elif name == "LibraryDirs":
            config.library_dirs.extend(self._resolve(child.name) for child in obj.table())
        elif name == "Defines":
            config.defines.extend(child.name for child in obj.table())
        elif name == "Libraries":
            config.libraries.extend(child.name for child in obj.table())

    # File filters

    def sort_file_filters(self) -> None:
        """Sort files within each filter by file name, then the filters by name."""
        for file_filter in self.file_filters:
            file_filter.files.sort(key=lambda f: _ALPHABETIC_KEY(Path(f).name))
        self.file_filters.sort(key=lambda flt: _ALPHABETIC_KEY(flt.name))

    def new_file_filter(self, name: Union[str, os.PathLike]) -> Optional[FileFilter]:
        """Create a filter named ``name``; None if one already exists."""
        name = _filter_name(name)
        if self.file_filter_by_name(name) is not None:
            return None
        self.file_filters.append(FileFilter(name=name))
        self.sort_file_filters()
        return self.file_filter_by_name(name)

    def remove_file_filter(self, name: Union[str, os.PathLike]) -> None:
        """Remove the filter named ``name`` if there is one."""
        file_filter = self.file_filter_by_name(name)
        if file_filter is not None:
            self.file_filters.remove(file_filter)
        self.sort_file_filters()

    def file_filter_by_name(self, name: Union[str, os.PathLike]) -> Optional[FileFilter]:
        name = _filter_name(name)
        return next((flt for flt in self.file_filters if flt.name == name), None)

    def file_in_file_filter(self, file: PathLike, file_filter: Union[str, os.PathLike]) -> Optional[Path]:
        """The stored path equal to ``file`` in the given filter, or None."""
        found = self.file_filter_by_name(file_filter)
        if found is not None:
            target = Path(file)
            for stored in found.files:
                if Path(stored) == target:
                    return Path(stored)
        return None

    def rename_file_filter(self, file_filter: Union[str, os.PathLike], name: str) -> None:
        found = self.file_filter_by_name(file_filter)
        if found is not None:
            found.name = name
            self.sort_file_filters()
            self.serialize()

    # Files

    def new_file(self, path: PathLike, file_filter: Union[str, os.PathLike]) -> bool:
        """Create an empty file on disk and add it to the filter."""
        found = self.file_filter_by_name(file_filter)
        if found is None or self.file_in_file_filter(path, file_filter) is not None:
            return False
        try:
            with open(path, "wb"):
                pass
        except OSError:
            return False
        found.files.append(Path(path))
        self.sort_file_filters()
        self.serialize()
        return True

    def add_file(self, path: PathLike, file_filter: Union[str, os.PathLike]) -> bool:
        """Add an existing file to the filter; False if absent filter or duplicate."""
        found = self.file_filter_by_name(file_filter)
        if found is None or self.file_in_file_filter(path, file_filter) is not None:
            return False
        found.files.append(Path(path))
        self.sort_file_filters()
        self.serialize()
        return True

    def remove_file(self, file: PathLike, file_filter: Union[str, os.PathLike]) -> None:
        found = self.file_filter_by_name(file_filter)
        if found is None:
            return
        target = Path(file)
        for stored in found.files:
            if Path(stored) == target:
                found.files.remove(stored)
                self.sort_file_filters()
                self.serialize()
                break

    def rename_file(self, file: PathLike, file_filter: Union[str, os.PathLike], name: str) -> None:
        """Rename ``file`` on disk and in the filter to ``name`` in the filter's folder."""
        found = self.file_filter_by_name(file_filter)
        if found is None:
            return
        target = Path(file)
        new_path = self.location / found.path / name
        renamed = False
        for index, stored in enumerate(found.files):
            if Path(stored) != target:
                continue
            if Path(stored).exists():
                os.rename(stored, new_path)
            found.files[index] = new_path
            renamed = True
        if renamed:
            self.sort_file_filters()
            self.serialize()

    def find_source_folders(self) -> list:
        """Folders that hold the project's C++ sources and headers."""
        source_paths: list = []
        for file_filter in self.file_filters:
            for file in file_filter.files:
                parent = Path(file).parent
                if parent in source_paths:
                    break
                if Path(file).suffix in _SOURCE_FOLDER_EXTENSIONS:
                    source_paths.append(parent)
        return source_paths