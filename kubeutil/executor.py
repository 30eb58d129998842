"""An injectable interface for running commands.

Commands are built by an Executor and run through Cmd objects whose standard
streams, working directory and environment are plain attributes:

* ``stdin``: None (the null device), bytes, or a binary reader.
* ``stdout`` / ``stderr``: None (the null device) or a binary writer. The
  same object for both merges the two streams.
* ``dir``: the working directory, or None for the current one.
* ``env``: a list of ``"KEY=value"`` strings or a mapping, or None to inherit.
"""

from __future__ import annotations

import functools
import io
import os
import shutil
import signal
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import timedelta
from typing import IO, Any, Optional, Union

_CHUNK = 64 * 1024
_KILL_GRACE_SECONDS = 10.0


class ExecutableNotFoundError(Exception):
    """Raised when a command name cannot be found on the search path."""

    def __init__(self, name: str) -> None:
        super().__init__(f'exec: "{name}": executable file not found in $PATH')
        self.name = name


class DeadlineExceededError(TimeoutError):
    """Raised when a command's deadline passes before it completes."""

    def __init__(self) -> None:
        super().__init__("context deadline exceeded")


class ExitError(Exception, ABC):
    """A command that ran but did not finish successfully."""

    @abstractmethod
    def exited(self) -> bool:
        """Return True if the process exited on its own rather than by a signal."""

    @abstractmethod
    def exit_status(self) -> int:
        """Return the exit code, or -1 if the process did not exit normally."""


def _describe_status(returncode: int) -> str:
    if returncode >= 0:
        return f"exit status {returncode}"
    signum = -returncode
    try:
        description = signal.strsignal(signum)
    except ValueError:
        description = None
    if not description:
        description = f"signal {signum}"
    return f"signal: {description[:1].lower()}{description[1:]}"


class ExitErrorWrapper(ExitError):
    """The exit of a real process with a non-zero status or by a signal."""

    def __init__(self, returncode: int, stderr: bytes = b"", output: bytes = b"") -> None:
        super().__init__(_describe_status(returncode))
        self.returncode = returncode
        self.stderr = stderr
        self.output = output

    def exited(self) -> bool:
        return self.returncode >= 0

    def exit_status(self) -> int:
        return self.returncode if self.returncode >= 0 else -1


class CodeExitError(ExitError):
    """An exit error made of an underlying error and an exit code."""

    def __init__(self, err: BaseException, code: int) -> None:
        super().__init__(str(err))
        self.err = err
        self.code = code

    def exited(self) -> bool:
        return True

    def exit_status(self) -> int:
        return self.code


def _fileno(obj: Any) -> Optional[int]:
    if isinstance(obj, int):
        return obj
    try:
        fd = obj.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    flush = getattr(obj, "flush", None)
    if callable(flush):
        try:
            flush()
        except (OSError, ValueError):
            pass
    return fd


def _close_quietly(stream: Any) -> None:
    try:
        stream.close()
    except OSError:
        pass


def _to_seconds(d: Union[timedelta, float, int]) -> float:
    if isinstance(d, timedelta):
        return d.total_seconds()
    return float(d)


class Cmd:
    """A single command, run once."""

    def __init__(self, argv: list[str], deadline: Optional[float] = None) -> None:
        self.argv = list(argv)
        self.dir: Optional[str] = None
        self.stdin: Any = None
        self.stdout: Any = None
        self.stderr: Any = None
        self.env: Any = None
        self._deadline = deadline
        self._process: Optional[subprocess.Popen] = None
        self._waited = False
        self._threads: list[threading.Thread] = []
        self._copy_errors: list[BaseException] = []
        self._close_after_start: list[IO[bytes]] = []
        self._close_after_wait: list[IO[bytes]] = []
        self._deadline_timer: Optional[threading.Timer] = None
        self._deadline_hit = False

    def __repr__(self) -> str:
        return f"Cmd({self.argv!r})"

    def _environment(self) -> Optional[dict[str, str]]:
        if self.env is None:
            return None
        if isinstance(self.env, Mapping):
            return {str(k): str(v) for k, v in self.env.items()}
        result: dict[str, str] = {}
        for entry in self.env:
            key, sep, value = entry.partition("=")
            if sep:
                result[key] = value
        return result

    def _executable(self) -> Optional[str]:
        name = self.argv[0]
        if os.sep in name or (os.altsep and os.altsep in name):
            return None
        found = shutil.which(name)
        if found is None:
            raise ExecutableNotFoundError(name)
        return found

    def _close_descriptors(self) -> None:
        for stream in self._close_after_start + self._close_after_wait:
            _close_quietly(stream)
        self._close_after_start.clear()
        self._close_after_wait.clear()

    def _stdin_arg(self) -> tuple[Any, Any]:
        source = self.stdin
        if source is None:
            return subprocess.DEVNULL, None
        if isinstance(source, str):
            source = source.encode()
        if isinstance(source, (bytes, bytearray)):
            return subprocess.PIPE, bytes(source)
        fd = _fileno(source)
        if fd is not None:
            return fd, None
        return subprocess.PIPE, source

    @staticmethod
    def _output_arg(target: Any) -> tuple[Any, Any]:
        if target is None:
            return subprocess.DEVNULL, None
        fd = _fileno(target)
        if fd is not None:
            return fd, None
        return subprocess.PIPE, target

    def _copy_out(self, src: IO[bytes], dst: Any) -> None:
        try:
            with src:
                for chunk in iter(functools.partial(src.read, _CHUNK), b""):
                    dst.write(chunk)
        except Exception as exc:  # raised later by wait()
            self._copy_errors.append(exc)

    def _feed_in(self, dst: IO[bytes], source: Any) -> None:
        try:
            if isinstance(source, bytes):
                dst.write(source)
            else:
                for chunk in iter(functools.partial(source.read, _CHUNK), b""):
                    dst.write(chunk)
        except BrokenPipeError:
            pass
        except Exception as exc:  # raised later by wait()
            self._copy_errors.append(exc)
        finally:
            _close_quietly(dst)

    def _spawn(self, target: Any, *args: Any) -> None:
        thread = threading.Thread(target=target, args=args, daemon=True)
        self._threads.append(thread)
        thread.start()

    def _on_deadline(self) -> None:
        process = self._process
        if process is not None and process.poll() is None:
            self._deadline_hit = True
            try:
                process.kill()
            except OSError:
                pass

    def start(self) -> None:
        """Start the command without waiting for it to finish."""
        if self._process is not None:
            raise RuntimeError("exec: already started")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._close_descriptors()
            raise DeadlineExceededError()
        try:
            executable = self._executable()
        except ExecutableNotFoundError:
            self._close_descriptors()
            raise

        stdin_arg, stdin_source = self._stdin_arg()
        stdout_arg, stdout_sink = self._output_arg(self.stdout)
        if self.stderr is not None and self.stderr is self.stdout:
            stderr_arg, stderr_sink = subprocess.STDOUT, None
        else:
            stderr_arg, stderr_sink = self._output_arg(self.stderr)

        try:
            process = subprocess.Popen(
                self.argv,
                executable=executable,
                cwd=self.dir,
                env=self._environment(),
                stdin=stdin_arg,
                stdout=stdout_arg,
                stderr=stderr_arg,
            )
        except OSError:
            self._close_descriptors()
            raise
        self._process = process

        for stream in self._close_after_start:
            _close_quietly(stream)
        self._close_after_start.clear()

        if stdin_source is not None and process.stdin is not None:
            self._spawn(self._feed_in, process.stdin, stdin_source)
        if stdout_sink is not None and process.stdout is not None:
            self._spawn(self._copy_out, process.stdout, stdout_sink)
        if stderr_sink is not None and process.stderr is not None:
            self._spawn(self._copy_out, process.stderr, stderr_sink)

        if self._deadline is not None:
            timer = threading.Timer(
                max(0.0, self._deadline - time.monotonic()), self._on_deadline
            )
            timer.daemon = True
            self._deadline_timer = timer
            timer.start()

    def wait(self) -> None:
        """Wait for a started command to finish and its streams to be copied.

        Raises ExitErrorWrapper on a non-zero exit and DeadlineExceededError
        if the command was killed because its deadline passed.
        """
        if self._process is None:
            raise RuntimeError("exec: not started")
        if self._waited:
            raise RuntimeError("exec: Wait was already called")
        self._waited = True
        returncode = self._process.wait()
        if self._deadline_timer is not None:
            self._deadline_timer.cancel()
        for thread in self._threads:
            thread.join()
        for stream in self._close_after_wait:
            _close_quietly(stream)
        self._close_after_wait.clear()
        if self._deadline_hit:
            raise DeadlineExceededError()
        if returncode != 0:
            raise ExitErrorWrapper(returncode)
        if self._copy_errors:
            raise self._copy_errors[0]

    def run(self) -> None:
        """Start the command and wait for it to finish."""
        self.start()
        self.wait()

    def combined_output(self) -> bytes:
        """Run the command and return its standard output and error together.

        On a failed exit the ExitErrorWrapper carries what was written in
        its ``output`` attribute.
        """
        if self.stdout is not None:
            raise ValueError("exec: Stdout already set")
        if self.stderr is not None:
            raise ValueError("exec: Stderr already set")
        buffer = io.BytesIO()
        self.stdout = buffer
        self.stderr = buffer
        try:
            self.run()
        except ExitErrorWrapper as exc:
            exc.output = buffer.getvalue()
            raise
        return buffer.getvalue()

    def output(self) -> bytes:
        """Run the command and return its standard output.

        If standard error is not set it is captured, and on a failed exit the
        ExitErrorWrapper carries it in ``stderr`` and the output in ``output``.
        """
        if self.stdout is not None:
            raise ValueError("exec: Stdout already set")
        buffer = io.BytesIO()
        self.stdout = buffer
        captured: Optional[io.BytesIO] = None
        if self.stderr is None:
            captured = io.BytesIO()
            self.stderr = captured
        try:
            self.run()
        except ExitErrorWrapper as exc:
            exc.output = buffer.getvalue()
            if captured is not None:
                exc.stderr = captured.getvalue()
            raise
        return buffer.getvalue()

    def _pipe(self, stream_name: str, label: str) -> IO[bytes]:
        if getattr(self, stream_name) is not None:
            raise ValueError(f"exec: {label} already set")
        if self._process is not None:
            raise RuntimeError(f"exec: {label}Pipe after process started")
        read_fd, write_fd = os.pipe()
        writer = os.fdopen(write_fd, "wb")
        reader = os.fdopen(read_fd, "rb")
        setattr(self, stream_name, writer)
        self._close_after_start.append(writer)
        self._close_after_wait.append(reader)
        return reader

    def stdout_pipe(self) -> IO[bytes]:
        """Return a reader connected to the command's standard output.

        The reader is closed by wait(), so read from it before waiting.
        """
        return self._pipe("stdout", "Stdout")

    def stderr_pipe(self) -> IO[bytes]:
        """Return a reader connected to the command's standard error.

        The reader is closed by wait(), so read from it before waiting.
        """
        return self._pipe("stderr", "Stderr")

    def stop(self) -> None:
        """Send SIGTERM to a started command, and SIGKILL if it is still running 10s later."""
        process = self._process
        if process is None:
            return
        try:
            process.send_signal(signal.SIGTERM)
        except OSError:
            pass

        def _force_kill() -> None:
            if process.poll() is None:
                try:
                    process.send_signal(signal.SIGKILL)
                except OSError:
                    pass

        timer = threading.Timer(_KILL_GRACE_SECONDS, _force_kill)
        timer.daemon = True
        timer.start()


class Executor:
    """Builds commands that really run programs."""

    def command(self, cmd: str, *args: str) -> Cmd:
        """Return a Cmd that runs cmd with the given arguments."""
        return Cmd([cmd, *args])

    def command_context(
        self, timeout: Union[timedelta, float, int], cmd: str, *args: str
    ) -> Cmd:
        """Return a Cmd that is killed if it has not finished within timeout.

        The deadline counts from this call.
        """
        return Cmd([cmd, *args], deadline=time.monotonic() + _to_seconds(timeout))

    def look_path(self, file: str) -> str:
        """Return the path of an executable, searching PATH for bare names."""
        if os.sep in file or (os.altsep and os.altsep in file):
            if not os.path.exists(file):
                raise FileNotFoundError(f'exec: "{file}": no such file or directory')
            if os.path.isdir(file) or not os.access(file, os.X_OK):
                raise PermissionError(f'exec: "{file}": permission denied')
            return file
        found = shutil.which(file)
        if found is None:
            raise ExecutableNotFoundError(file)
        return found


def new_executor() -> Executor:
    """Return an Executor that runs real programs."""
    return Executor()