import io
import os
import shutil
import time
from datetime import timedelta

import pytest

from kubeutil.executor import (
    CodeExitError,
    DeadlineExceededError,
    ExecutableNotFoundError,
    ExitError,
    ExitErrorWrapper,
    new_executor,
)

NOT_FOUND_MESSAGE = 'exec: "fake_executable_name": executable file not found in $PATH'


def test_executor_no_args_true():
    out = new_executor().command("true").combined_output()
    assert out == b""


def test_executor_no_args_false():
    with pytest.raises(ExitError) as info:
        new_executor().command("false").combined_output()
    err = info.value
    assert err.output == b""
    assert err.exited()
    assert err.exit_status() == 1


def test_executor_missing_path_is_not_exit_error():
    with pytest.raises(OSError) as info:
        new_executor().command("/does/not/exist").combined_output()
    assert not isinstance(info.value, ExitError)


def test_executor_with_args():
    ex = new_executor()
    assert ex.command("echo", "stdout").combined_output() == b"stdout\n"
    out = ex.command("/bin/sh", "-c", "echo stderr 1>&2").combined_output()
    assert out == b"stderr\n"


def test_look_path():
    assert new_executor().look_path("sh") == shutil.which("sh")


def test_look_path_not_found():
    with pytest.raises(ExecutableNotFoundError) as info:
        new_executor().look_path("fake_executable_name")
    assert info.value.name == "fake_executable_name"


def test_executable_not_found_combined_output():
    cmd = new_executor().command("fake_executable_name")
    with pytest.raises(ExecutableNotFoundError) as info:
        cmd.combined_output()
    assert str(info.value) == NOT_FOUND_MESSAGE
    assert info.value.name == "fake_executable_name"


def test_executable_not_found_output():
    cmd = new_executor().command("fake_executable_name")
    with pytest.raises(ExecutableNotFoundError) as info:
        cmd.output()
    assert str(info.value) == NOT_FOUND_MESSAGE


def test_executable_not_found_run():
    cmd = new_executor().command("fake_executable_name")
    with pytest.raises(ExecutableNotFoundError) as info:
        cmd.run()
    assert str(info.value) == NOT_FOUND_MESSAGE


def test_stop_before_start_and_after_done():
    cmd = new_executor().command("echo", "hello")
    buffer = io.BytesIO()
    cmd.stdout = buffer
    cmd.stop()
    cmd.run()
    cmd.stop()
    assert buffer.getvalue() == b"hello\n"


def test_timeout_already_expired():
    ex = new_executor()
    with pytest.raises(DeadlineExceededError) as info:
        ex.command_context(1e-9, "sleep", "2").run()
    assert str(info.value) == "context deadline exceeded"


def test_timeout_kills_running_command():
    ex = new_executor()
    started = time.monotonic()
    with pytest.raises(DeadlineExceededError):
        ex.command_context(timedelta(milliseconds=200), "sleep", "5").run()
    assert time.monotonic() - started < 4


def test_set_env():
    ex = new_executor()
    out = ex.command("/bin/sh", "-c", "echo $FOOBAR").combined_output()
    assert out == b"\n"

    cmd = ex.command("/bin/sh", "-c", "echo $FOOBAR")
    cmd.env = ["FOOBAR=baz"]
    assert cmd.combined_output() == b"baz\n"


def test_stdio_pipes():
    cmd = new_executor().command("/bin/sh", "-c", "echo 'OUT'>&1; echo 'ERR'>&2")
    stdout_pipe = cmd.stdout_pipe()
    stderr_pipe = cmd.stderr_pipe()
    cmd.start()
    out = stdout_pipe.read()
    err = stderr_pipe.read()
    cmd.wait()
    assert out == b"OUT\n"
    assert err == b"ERR\n"


def test_example_stdout_writer():
    cmd = new_executor().command("echo", "Bonjour!")
    buffer = io.BytesIO()
    cmd.stdout = buffer
    cmd.run()
    assert buffer.getvalue().decode() == "Bonjour!\n"


def test_example_stderr_pipe():
    cmd = new_executor().command(
        "/bin/sh", "-c", "echo 'We can read from stderr via pipe!' >&2"
    )
    stderr_pipe = cmd.stderr_pipe()
    cmd.start()
    received = stderr_pipe.read()
    cmd.wait()
    assert received.decode() == "We can read from stderr via pipe!\n"


def test_stdout_pipe_after_stdout_set():
    cmd = new_executor().command("true")
    cmd.stdout = io.BytesIO()
    with pytest.raises(ValueError, match="Stdout already set"):
        cmd.stdout_pipe()


def test_combined_output_with_stdout_set():
    cmd = new_executor().command("true")
    cmd.stdout = io.BytesIO()
    with pytest.raises(ValueError, match="Stdout already set"):
        cmd.combined_output()


def test_output_captures_stderr_on_failure():
    cmd = new_executor().command("/bin/sh", "-c", "echo data; echo oops >&2; exit 2")
    with pytest.raises(ExitErrorWrapper) as info:
        cmd.output()
    err = info.value
    assert err.stderr == b"oops\n"
    assert err.output == b"data\n"
    assert err.exit_status() == 2
    assert str(err) == "exit status 2"


def test_output_returns_stdout_only():
    cmd = new_executor().command("/bin/sh", "-c", "echo out; echo err >&2")
    assert cmd.output() == b"out\n"


def test_stdin_reader():
    cmd = new_executor().command("cat")
    cmd.stdin = io.BytesIO(b"abc")
    assert cmd.output() == b"abc"


def test_working_directory(tmp_path):
    cmd = new_executor().command("pwd")
    cmd.dir = str(tmp_path)
    out = cmd.output().decode().strip()
    assert os.path.realpath(out) == os.path.realpath(str(tmp_path))


def test_killed_by_signal():
    with pytest.raises(ExitErrorWrapper) as info:
        new_executor().command("/bin/sh", "-c", "kill -9 $$").run()
    err = info.value
    assert not err.exited()
    assert err.exit_status() == -1
    assert str(err).startswith("signal: ")


def test_wait_before_start():
    cmd = new_executor().command("true")
    with pytest.raises(RuntimeError, match="not started"):
        cmd.wait()


def test_start_twice():
    cmd = new_executor().command("true")
    cmd.start()
    with pytest.raises(RuntimeError, match="already started"):
        cmd.start()
    cmd.wait()
    with pytest.raises(RuntimeError, match="already called"):
        cmd.wait()


def test_code_exit_error():
    err = CodeExitError(ValueError("boom"), 42)
    assert str(err) == "boom"
    assert err.exited()
    assert err.exit_status() == 42
    assert isinstance(err, ExitError)