"""Running external commands and collecting their exit codes and output."""

from __future__ import annotations

import locale
import os
import subprocess
from typing import IO, NamedTuple, Optional, Union

_WINDOWS = os.name == "nt"

Output = Union[None, int, IO]


class ProcessOutput(NamedTuple):
    """Text a process wrote to stdout and stderr, and its exit code."""

    text: str
    exit_code: int


def _output_encoding() -> str:
    if _WINDOWS:
        return locale.getpreferredencoding(False)
    return "utf-8"


class ProcessNotStartedError(RuntimeError):
    """Raised when waiting on or killing a process that was never started."""


class Process:
    """A command line run through the system shell."""

    def __init__(self, command_line: str = "") -> None:
        self.command_line = command_line
        self.exit_code = 0
        self.running = False
        self._popen: Optional[subprocess.Popen] = None

    @property
    def pid(self) -> Optional[int]:
        """Process id of the started command, or None before it starts."""
        return self._popen.pid if self._popen is not None else None

    def start(self, output: Output = None) -> None:
        """Start the command with stdout and stderr both sent to ``output``.

        ``output`` may be a file object, a file descriptor, ``subprocess.PIPE``
        or None to inherit the current standard output.
        """
        kwargs = {}
        if _WINDOWS:
            startup = subprocess.STARTUPINFO()
            startup.dwFlags |= subprocess.STARTF_USESHOWWINDOW
            startup.wShowWindow = 0
            kwargs["startupinfo"] = startup
        self._popen = subprocess.Popen(
            self.command_line,
            shell=not _WINDOWS,
            stdout=output,
            stderr=subprocess.STDOUT,
            **kwargs,
        )
        self.running = True

    def _started(self) -> subprocess.Popen:
        if self._popen is None:
            raise ProcessNotStartedError(f"process '{self.command_line}' was not started")
        return self._popen

    def wait(self) -> int:
        """Block until the command ends and return its exit code."""
        popen = self._started()
        self.exit_code = popen.wait()
        self.running = False
        return self.exit_code

    def force_kill(self) -> None:
        """Kill the command immediately."""
        popen = self._started()
        popen.kill()
        self.exit_code = popen.wait()
        self.running = False

    def try_kill(self) -> None:
        """Stop the command; currently the same as :meth:`force_kill`."""
        self.force_kill()

    def result_of(self) -> int:
        """Run the command with output on stdout and return its exit code."""
        self.start(None)
        return self.wait()

    def output_of(self) -> ProcessOutput:
        """Run the command and return everything it printed with its exit code."""
        self.start(subprocess.PIPE)
        popen = self._started()
        data, _ = popen.communicate()
        self.exit_code = popen.returncode
        self.running = False
        return ProcessOutput(data.decode(_output_encoding(), errors="replace"), self.exit_code)