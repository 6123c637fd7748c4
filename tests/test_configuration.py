import copy
import platform
from pathlib import Path

import pytest

from geno.configuration import (
    Architecture,
    Configuration,
    Optimization,
    ProjectKind,
    architecture_from_string,
    enum_to_string,
    host_architecture,
    optimization_from_string,
)


def test_override_takes_set_values():
    base = Configuration(architecture=Architecture.X86, output_dir=Path("a"))
    other = Configuration(architecture=Architecture.ARM64, optimization=Optimization.FULL)
    base.override(other)
    assert base.architecture is Architecture.ARM64
    assert base.optimization is Optimization.FULL
    assert base.output_dir == Path("a")


def test_override_keeps_values_unset_in_other():
    base = Configuration(architecture=Architecture.X86, verbose=True)
    base.override(Configuration())
    assert base.architecture is Architecture.X86
    assert base.verbose is True


def test_override_false_verbose_counts_as_set():
    base = Configuration(verbose=True)
    base.override(Configuration(verbose=False))
    assert base.verbose is False


def test_override_appends_lists():
    base = Configuration(defines=["A"], libraries=["m"])
    other = Configuration(
        defines=["B"], libraries=["z"], include_dirs=[Path("inc")], library_dirs=[Path("lib")]
    )
    base.override(other)
    assert base.defines == ["A", "B"]
    assert base.libraries == ["m", "z"]
    assert base.include_dirs == [Path("inc")]
    assert base.library_dirs == [Path("lib")]
    assert other.defines == ["B"]


def test_override_compiler():
    marker = object()
    base = Configuration()
    base.override(Configuration(compiler=marker))
    assert base.compiler is marker


def test_copy_has_independent_lists():
    original = Configuration(defines=["X"])
    duplicate = copy.copy(original)
    duplicate.defines.append("Y")
    assert original.defines == ["X"]
    assert duplicate == Configuration(defines=["X", "Y"])


@pytest.mark.parametrize("value", list(Architecture) + list(Optimization))
def test_enum_string_round_trip(value):
    text = enum_to_string(value)
    parsed = (
        architecture_from_string(text)
        if isinstance(value, Architecture)
        else optimization_from_string(text)
    )
    assert parsed is value


def test_enum_to_string_names():
    assert enum_to_string(Architecture.X86_64) == "x86_64"
    assert enum_to_string(Optimization.FAVOR_SIZE) == "FavorSize"
    assert enum_to_string(ProjectKind.APPLICATION) == "Unknown"


def test_from_string_unknown():
    assert architecture_from_string("mips") is None
    assert optimization_from_string("Fast") is None


def test_project_kind_names():
    assert ProjectKind("StaticLibrary") is ProjectKind.STATIC_LIBRARY


@pytest.mark.parametrize(
    "machine, expected",
    [
        ("AMD64", Architecture.X86_64),
        ("x86_64", Architecture.X86_64),
        ("i686", Architecture.X86),
        ("aarch64", Architecture.ARM64),
        ("armv7l", Architecture.ARM),
    ],
)
def test_host_architecture(monkeypatch, machine, expected):
    monkeypatch.setattr(platform, "machine", lambda: machine)
    assert host_architecture() is expected


def test_host_architecture_unknown(monkeypatch):
    monkeypatch.setattr(platform, "machine", lambda: "sparc")
    with pytest.raises(RuntimeError):
        host_architecture()