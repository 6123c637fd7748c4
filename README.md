# geno

The model behind a small C/C++ IDE: workspaces that hold projects, projects
that group source files into file filters, a build matrix of configurations,
and compiler drivers for GCC and MSVC. Workspaces (`.gwks`) and projects
(`.gprj`) are stored in GCL, a plain indentation-based text format.

The package has no runtime dependencies.

## GCL files

A GCL file is a list of named objects, one per line. An object is either
bare (`name`), a string (`name:value`) or a table (`name:` followed by
children indented one tab deeper).

```
Name:MyWorkspace
Projects:
	app/App
```

`geno.gcl.Object` holds a name and a value that is `None`, a string or a
list of child objects. `Serializer` writes objects to a file (it truncates
the file when opened and works as a context manager); `Deserializer` reads
a whole file and `objects()` yields its top-level objects in order.

```python
from geno.gcl import Object, Serializer, Deserializer

root = Object("Projects")
root.set_table()
root.add_child(Object("app/App"))

with Serializer("demo.gwks") as out:
    out.write_object(root, 0)

for obj in Deserializer("demo.gwks").objects():
    print(obj.name, [child.string() for child in obj.table()])
```

`Object.string()` of a bare object gives its name; `obj["key"]` on a table
returns the child called `key`, appending an empty one if it is missing.

## Workspaces and projects

```python
from pathlib import Path
from geno.workspace import Workspace

root = Path("my_workspace")
(root / "app").mkdir(parents=True, exist_ok=True)

workspace = Workspace(root)
project = workspace.new_project(root / "app", "App")
project.new_file(root / "app" / "main.cpp", "")
workspace.serialize()
```

`Workspace.serialize()` writes the workspace file and every project file;
`deserialize()` reads them back. `add_project`, `remove_project`,
`rename_project` and `rename` manage the list of projects and rename files
on disk where they exist.

`Project` keeps its files in `FileFilter`s; the filter with the empty name
holds files that belong to no named filter. `new_file_filter`,
`remove_file_filter`, `rename_file_filter`, `new_file`, `add_file`,
`remove_file` and `rename_file` edit them, saving the project after each
change. Files and filters are kept sorted by `geno.project.alphabetic_less`:
case-insensitive, with lower case before upper case.
`find_source_folders()` lists the folders that hold C++ sources and headers.

## Building

`Workspace.build()` queues compile and link jobs for every project on the
shared `geno.jobs.JobSystem`, ordered so that libraries a project depends
on are linked first, and returns the final job (or `None` with no
projects). The jobs run only while worker threads are started:

```python
from geno.jobs import JobSystem

JobSystem.instance().start_threads(4)
workspace.build_finished.append(lambda ws, output, ok: print(output, ok))
workspace.build()
```

Each handler in `build_finished` is called with the workspace, the linker
output path (or `None`) and whether the build succeeded.

## Configurations and the build matrix

`geno.configuration.Configuration` holds the compiler, include and library
directories, libraries, defines, optimization, architecture, output
directory and verbosity; `override()` takes every value set in another
configuration and appends its lists.

`geno.build_matrix.BuildMatrix.platform_default()` gives a matrix with
Target, Architecture and Optimization columns. `current_configuration()`
merges the selected entry of each column into one `Configuration`.

## Compilers

`geno.compiler_gcc.CompilerGCC` and `geno.compiler_msvc.CompilerMSVC` turn a
configuration and a set of files into compiler and linker command lines;
`compile()` and `link()` run them through the shell and return the output
path, or `None` when the tool fails. `geno.compiler.compiler_output_path`
and `linker_output_path` give the files they produce (`lib<name>.a` and
`lib<name>.so` outside Windows). The MSVC driver locates Visual Studio with
`vswhere.exe` and the Windows 10 SDK under `ProgramFiles(x86)`, so it only
works on a Windows machine with them installed.

## Other pieces

- `geno.process.Process` runs a shell command; `result_of()` returns the
  exit code and `output_of()` returns a `ProcessOutput(text, exit_code)`.
- `geno.profiling.Timer` prints a message with the elapsed time in `us`,
  `ms` or `s`, either on `stop()` or on leaving a `with` block.
- `geno.local_app_data.local_app_data_dir()` returns, creating it, the
  per-user data folder (`%LOCALAPPDATA%\Geno` on Windows, `geno` under
  `XDG_DATA_HOME` or the first `XDG_DATA_DIRS` entry on Linux), or `None`.
- `geno.discord_rpc.DiscordRPC` connects to a running Discord client over
  its local IPC socket or pipe and publishes the open file and workspace as
  rich presence; `build_presence()` shows what would be sent.
- `geno.application.Application` holds the current workspace and applies
  the program arguments (`handle_command_line_args`), opening a workspace
  file given as the second argument.

## What it does not do

There is no editor window or user interface and no command to start: the
package is the model and build machinery only, used from Python code.

## Running the tests

Install the `test` extra and run pytest from the project root.