from pathlib import Path

import pytest

from geno.compiler import compiler_output_path, linker_output_path
from geno.compiler_msvc import (
    CompilerMSVC,
    find_msvc_dir,
    find_program_files_x86_dir,
    find_windows_sdk_version,
    host_string,
    target_string,
)
from geno.configuration import Architecture, Configuration, ProjectKind


@pytest.fixture
def program_files(tmp_path, monkeypatch):
    root = tmp_path / "pf"
    lib = root / "Windows Kits" / "10" / "Lib"
    (lib / "10.0.1" / "um" / "x86").mkdir(parents=True)
    (lib / "10.0.1" / "um" / "x86" / "kernel32.lib").write_bytes(b"")
    (lib / "10.0.2" / "um" / "x64").mkdir(parents=True)
    (lib / "10.0.2" / "um" / "x64" / "kernel32.lib").write_bytes(b"")
    monkeypatch.setenv("ProgramFiles(x86)", str(root))
    return root


def _config(**kwargs):
    kwargs.setdefault("architecture", Architecture.X86_64)
    return Configuration(output_dir=Path("out"), **kwargs)


def test_name():
    assert CompilerMSVC().name == "MSVC"


def test_host_string_is_known():
    assert host_string() in {"Hostx86", "Hostx64"}


def test_target_string_known_architectures():
    assert target_string(Architecture.X86) == "x86"
    assert target_string(Architecture.X86_64) == "x64"


def test_program_files_from_environment(program_files):
    assert find_program_files_x86_dir() == program_files


def test_program_files_missing(monkeypatch):
    monkeypatch.delenv("ProgramFiles(x86)", raising=False)
    assert find_program_files_x86_dir() == Path("")


def test_msvc_dir_without_vswhere(tmp_path):
    assert find_msvc_dir(tmp_path) == Path("")


def test_sdk_version_per_target(program_files):
    assert find_windows_sdk_version(_config(), program_files) == "10.0.2"
    assert find_windows_sdk_version(_config(architecture=Architecture.X86), program_files) == "10.0.1"


def test_sdk_version_missing_dir_raises(tmp_path):
    with pytest.raises(OSError):
        find_windows_sdk_version(_config(), tmp_path)


def test_compile_cpp(program_files):
    config = _config(defines=["DEBUG"], include_dirs=[Path("inc")])
    source = Path("src") / "main.cpp"
    command = CompilerMSVC().make_compiler_command_line(config, source)
    assert command.startswith('"')
    assert " /nologo /c /std:c++latest /D _HAS_EXCEPTIONS=0" in command
    assert ' /D "DEBUG"' in command
    assert f' /I"{Path("inc")}"' in command
    sdk_include = program_files / "Windows Kits" / "10" / "Include" / "10.0.2"
    assert f' /I"{sdk_include / "ucrt"}"' in command
    assert f' /Fo"{compiler_output_path(config, source)}"' in command
    assert command.endswith(f' /Tp "{source}"')


def test_compile_c(program_files):
    command = CompilerMSVC().make_compiler_command_line(_config(), Path("a.c"))
    assert " /std:c11" in command
    assert command.endswith(' /Tc "a.c"')


def test_compile_other_extension_has_no_input(program_files):
    command = CompilerMSVC().make_compiler_command_line(_config(), Path("a.asm"))
    assert "/Tc" not in command and "/Tp" not in command
    assert "/std:" not in command


@pytest.mark.parametrize(
    "kind, flag",
    [
        (ProjectKind.APPLICATION, "/SUBSYSTEM:CONSOLE /OUT:"),
        (ProjectKind.STATIC_LIBRARY, "/LIB /OUT:"),
        (ProjectKind.DYNAMIC_LIBRARY, "/DLL /OUT:"),
    ],
)
def test_link_kind(program_files, kind, flag):
    config = _config()
    command = CompilerMSVC().make_linker_command_line(config, [Path("a")], "app", kind)
    assert f' {flag}"{linker_output_path(config, "app", kind)}"' in command


def test_link_libraries_and_inputs(program_files):
    config = _config(libraries=["user32", "foo.dll"], library_dirs=["libs/"])
    command = CompilerMSVC().make_linker_command_line(
        config, [Path("a"), Path("b")], "app", ProjectKind.APPLICATION
    )
    assert ' "user32.lib"' in command
    assert ' "foo.dll"' in command
    assert f' /LIBPATH:"{Path("libs")}"' in command
    assert ' "a.obj" "b.obj"' in command
    assert command.endswith(" /NOLOGO /MACHINE:x64")


def test_link_x86_has_no_machine_flag(program_files):
    config = _config(architecture=Architecture.X86)
    command = CompilerMSVC().make_linker_command_line(config, [], "app", ProjectKind.APPLICATION)
    assert command.endswith(" /NOLOGO")
    sdk_lib = program_files / "Windows Kits" / "10" / "Lib" / "10.0.1"
    assert f' /LIBPATH:"{sdk_lib / "um" / "x86"}"' in command