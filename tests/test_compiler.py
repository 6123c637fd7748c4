import os
import shlex
import subprocess
import sys
from pathlib import Path

import pytest

from geno.compiler import Compiler, compiler_output_path, linker_output_path
from geno.configuration import Configuration, ProjectKind


def _py(code):
    args = [sys.executable, "-c", code]
    if os.name == "nt":
        return subprocess.list2cmdline(args)
    return shlex.join(args)


class _ScriptCompiler(Compiler):
    name = "Script"

    def __init__(self, exit_code):
        self.exit_code = exit_code
        self.linked = None

    def make_compiler_command_line(self, configuration, file_path):
        return _py(f"import sys; sys.exit({self.exit_code})")

    def make_linker_command_line(self, configuration, input_files, output_name, kind):
        self.linked = list(input_files)
        return _py(f"import sys; sys.exit({self.exit_code})")


def test_compiler_output_path_uses_stem():
    config = Configuration(output_dir=Path("out"))
    assert compiler_output_path(config, Path("src") / "main.cpp") == Path("out") / "main"


def test_output_path_requires_output_dir():
    with pytest.raises(ValueError):
        compiler_output_path(Configuration(), "main.cpp")
    with pytest.raises(ValueError):
        linker_output_path(Configuration(), "app", ProjectKind.APPLICATION)


def test_linker_output_posix(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    config = Configuration(output_dir=Path("out"))
    assert linker_output_path(config, "app", ProjectKind.APPLICATION) == Path("out") / "app"
    assert linker_output_path(config, "foo", ProjectKind.STATIC_LIBRARY) == Path("out") / "libfoo.a"
    assert linker_output_path(config, "foo", ProjectKind.DYNAMIC_LIBRARY) == Path("out") / "libfoo.so"
    assert linker_output_path(config, "foo", ProjectKind.UNSPECIFIED) == Path("out") / "foo"


def test_linker_output_windows(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    config = Configuration(output_dir=Path("out"))
    assert linker_output_path(config, "app", ProjectKind.APPLICATION) == Path("out") / "app.exe"
    assert linker_output_path(config, "foo", ProjectKind.STATIC_LIBRARY) == Path("out") / "foo.lib"
    assert linker_output_path(config, "foo", ProjectKind.DYNAMIC_LIBRARY) == Path("out") / "foo.lib"


def test_compile_success_returns_object_path(tmp_path):
    config = Configuration(output_dir=tmp_path)
    result = _ScriptCompiler(0).compile(config, tmp_path / "main.c")
    assert result == compiler_output_path(config, tmp_path / "main.c")


def test_compile_failure_returns_none(tmp_path):
    config = Configuration(output_dir=tmp_path)
    assert _ScriptCompiler(1).compile(config, tmp_path / "main.c") is None


def test_link_success_returns_output(tmp_path):
    config = Configuration(output_dir=tmp_path)
    compiler = _ScriptCompiler(0)
    inputs = [tmp_path / "a", tmp_path / "b"]
    result = compiler.link(config, inputs, "prog", ProjectKind.APPLICATION)
    assert result == linker_output_path(config, "prog", ProjectKind.APPLICATION)
    assert compiler.linked == inputs


def test_link_failure_returns_none(tmp_path):
    config = Configuration(output_dir=tmp_path)
    assert _ScriptCompiler(2).link(config, [], "prog", ProjectKind.STATIC_LIBRARY) is None


def test_compiler_is_abstract():
    with pytest.raises(TypeError):
        Compiler()