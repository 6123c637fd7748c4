"""Workspace, project and build model for a C/C++ IDE, with the GCL file format."""

__version__ = "0.1.0"

__all__ = [
    "application",
    "build_matrix",
    "compiler",
    "compiler_gcc",
    "compiler_msvc",
    "configuration",
    "discord_rpc",
    "gcl",
    "jobs",
    "local_app_data",
    "process",
    "profiling",
    "project",
    "workspace",
]