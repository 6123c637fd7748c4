import os
import shlex
import subprocess
import sys

import pytest

from geno.process import Process, ProcessNotStartedError, ProcessOutput


def _py(code):
    args = [sys.executable, "-c", code]
    if os.name == "nt":
        return subprocess.list2cmdline(args)
    return shlex.join(args)


def test_result_of_returns_exit_code():
    process = Process(_py("import sys; sys.exit(3)"))
    assert process.result_of() == 3
    assert process.exit_code == 3
    assert process.running is False


def test_result_of_success():
    assert Process(_py("pass")).result_of() == 0


def test_output_of_captures_stdout():
    result = Process(_py("print('hello')")).output_of()
    assert isinstance(result, ProcessOutput)
    assert result.text.strip() == "hello"
    assert result.exit_code == 0


def test_output_of_merges_stderr():
    text, code = Process(_py("import sys; sys.stderr.write('oops'); sys.exit(2)")).output_of()
    assert "oops" in text
    assert code == 2


def test_start_and_wait_with_file(tmp_path):
    target = tmp_path / "out.txt"
    process = Process(_py("print('written')"))
    with open(target, "wb") as handle:
        process.start(handle)
        assert process.running is True
        assert process.wait() == 0
    assert target.read_text().strip() == "written"


def test_force_kill_stops_process():
    process = Process(_py("import time; time.sleep(30)"))
    process.start(subprocess.DEVNULL)
    process.force_kill()
    assert process.running is False
    assert process.exit_code != 0


def test_try_kill_stops_process():
    process = Process(_py("import time; time.sleep(30)"))
    process.start(subprocess.DEVNULL)
    process.try_kill()
    assert process.running is False
    assert process.exit_code != 0


def test_wait_before_start_raises():
    with pytest.raises(ProcessNotStartedError):
        Process("anything").wait()


def test_kill_before_start_raises():
    with pytest.raises(ProcessNotStartedError):
        Process("anything").force_kill()


def test_pid_after_start():
    process = Process(_py("pass"))
    assert process.pid is None
    process.start(subprocess.DEVNULL)
    assert process.pid > 0
    process.wait()