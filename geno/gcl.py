"""Reading and writing of GCL, the indentation-based configuration format.

A GCL document is a sequence of objects, one per line. An object is either
``name`` (valueless), ``name:value`` (a string) or ``name:`` followed by
child objects indented one tab deeper (a table).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Union

Value = Union[None, str, list]


@dataclass(eq=False)
class Object:
    """A named GCL node that holds nothing, a string or a table of children."""

    name: str = ""
    value: Value = None

    def set_string(self, value: str) -> str:
        """Make this object a string holding ``value`` and return it."""
        self.value = str(value)
        return self.value

    def set_table(self) -> list:
        """Make this object a table, keeping existing children, and return it."""
        if not self.is_table():
            self.value = []
        return self.value

    def add_child(self, child: "Object") -> "Object":
        """Append ``child`` to this table and return it."""
        self.table().append(child)
        return child

    def is_null(self) -> bool:
        return self.value is None

    def is_string(self) -> bool:
        return isinstance(self.value, str)

    def is_table(self) -> bool:
        return isinstance(self.value, list)

    def string(self) -> str:
        """The string value; a valueless object yields its own name."""
        if self.is_null():
            return self.name
        if not self.is_string():
            raise TypeError(f"GCL object '{self.name}' is not a string")
        return self.value

    def table(self) -> list:
        """The list of children of a table object."""
        if not self.is_table():
            raise TypeError(f"GCL object '{self.name}' is not a table")
        return self.value

    def empty(self) -> bool:
        """True for valueless objects, empty strings and empty tables."""
        return not self.value

    def __getitem__(self, name: str) -> "Object":
        """Child named ``name``, appended as a valueless object if missing."""
        children = self.table()
        for child in children:
            if child.name == name:
                return child
        child = Object(name)
        children.append(child)
        return child

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.is_string() and self.value == other
        if isinstance(other, Object):
            return self.name == other.name and self.value == other.value
        return NotImplemented

    __hash__ = None


class Serializer:
    """Writes GCL objects to a file, truncating it on open."""

    def __init__(self, path: Union[str, os.PathLike]) -> None:
        self.path = Path(path)
        self._file: IO[bytes] | None
        try:
            self._file = open(self.path, "wb")
        except OSError:
            self._file = None

    def write_object(self, obj: Object, indent_level: int = 0) -> None:
        """Write ``obj`` and, for tables, all of its children."""
        if self._file is None:
            raise ValueError(f"serializer for '{self.path}' is not open")
        parts = ["\t" * indent_level, obj.name]
        if obj.is_null():
            parts.append("\n")
        elif obj.is_string():
            parts.extend((":", obj.value, "\n"))
        else:
            parts.append(":\n")
        self._file.write("".join(parts).encode("utf-8"))
        if obj.is_table():
            for child in obj.value:
                self.write_object(child, indent_level + 1)

    def is_open(self) -> bool:
        return self._file is not None

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "Serializer":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class Deserializer:
    """Reads a whole GCL file and parses it into objects."""

    def __init__(self, path: Union[str, os.PathLike]) -> None:
        self.path = Path(path)
        self._text = ""
        if not self.path.exists():
            print(f"GCL::Serializer failed: '{self.path}' does not exist.", file=sys.stderr)
            return
        try:
            data = self.path.read_bytes()
        except OSError:
            return
        self._text = data.decode("utf-8", errors="replace")

    def is_open(self) -> bool:
        return bool(self._text)

    def objects(self) -> Iterator[Object]:
        """Yield the top-level objects of the file in order."""
        lines = self._text.split("\n")
        if self._text.endswith("\n"):
            lines.pop()
        pos = 0
        while pos < len(lines):
            obj, pos = self._parse_line(lines, pos, 0)
            if obj.is_null() and not obj.name:
                continue
            yield obj

    def _parse_line(self, lines: list, pos: int, indent: int) -> tuple:
        trimmed = lines[pos][indent:].rstrip("\r\t ")
        pos += 1
        name, colon, rest = trimmed.partition(":")
        if not colon:
            return Object(trimmed), pos
        if rest:
            return Object(name, rest), pos
        table = Object(name, [])
        prefix = "\t" * (indent + 1)
        while pos < len(lines) and lines[pos].startswith(prefix):
            child, pos = self._parse_line(lines, pos, indent + 1)
            table.value.append(child)
        return table, pos