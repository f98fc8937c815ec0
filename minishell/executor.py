"""Running the commands of a pipeline."""

from __future__ import annotations

import codecs
import copy
import io
import os
import subprocess
import tempfile
import threading
from collections.abc import Iterable, Sequence
from contextlib import contextmanager
from typing import IO, Iterator, TextIO

from .builtins import ShellExit, is_builtin, run_builtin, runs_in_parent
from .environment import Environment
from .parser import CommandLine, RedirKind, Redirection

_FILE_MODE = 0o644
_CHUNK = 65536


class CommandError(Exception):
    """A command could not be started; *status* is the status it ends with."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


def find_in_path(directories: Iterable[str], cmd: str) -> str | None:
    """Return the first ``<dir>/<cmd>`` that exists and is executable, or None."""
    for directory in directories:
        path = f"{directory}/{cmd}"
        if os.access(path, os.F_OK | os.X_OK):
            return path
    return None


def resolve_command(cmd: str | None, envp: Sequence[str]) -> str:
    """Find the program to run for *cmd*, using the PATH entry of *envp*.

    A name holding '/' is used as it is, after checking that it is neither a
    directory nor a file without execute permission. Raises CommandError
    when no program can be run.
    """
    if not cmd:
        raise CommandError("MYSHELL: command not found", 127)
    if "/" in cmd:
        if os.path.exists(cmd):
            if os.path.isdir(cmd):
                raise CommandError("MYSHELL : Is a directory", 126)
            if not os.access(cmd, os.X_OK):
                raise CommandError("MYSHELL : Permission denied", 126)
        return cmd
    for entry in envp:
        if entry.startswith("PATH="):
            directories = [part for part in entry[5:].split(":") if part]
            found = find_in_path(directories, cmd)
            if found:
                return found
    raise CommandError("MYSHELL : command not found", 127)


class _OpenFiles:
    """The descriptors a command's redirections leave open for its input and output."""

    def __init__(self) -> None:
        self.stdin: int | None = None
        self.stdout: int | None = None

    def set_stdin(self, fd: int) -> None:
        if self.stdin is not None:
            os.close(self.stdin)
        self.stdin = fd

    def set_stdout(self, fd: int) -> None:
        if self.stdout is not None:
            os.close(self.stdout)
        self.stdout = fd

    def close(self) -> None:
        for fd in (self.stdin, self.stdout):
            if fd is not None:
                os.close(fd)
        self.stdin = self.stdout = None

    def __enter__(self) -> "_OpenFiles":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_redirections(redirections: Iterable[Redirection]) -> _OpenFiles:
    """Open every redirection in order; the last input and last output win.

    Output files are created with mode 0644, truncated or appended to.
    Raises CommandError with status 1 at the first file that cannot be
    opened; files opened before it stay created.
    """
    files = _OpenFiles()
    target = ""
    try:
        for redirection in redirections:
            target = redirection.target if redirection.target is not None else ""
            if redirection.kind.is_output:
                mode = os.O_TRUNC if redirection.kind is RedirKind.OUT else os.O_APPEND
                files.set_stdout(os.open(target, os.O_WRONLY | os.O_CREAT | mode, _FILE_MODE))
            else:
                files.set_stdin(os.open(target, os.O_RDONLY))
    except OSError as exc:
        files.close()
        reason = os.strerror(exc.errno) if exc.errno else str(exc)
        raise CommandError(f"{target}: {reason}", 1) from exc
    return files


def _exec_error(exc: OSError) -> CommandError:
    if isinstance(exc, FileNotFoundError):
        return CommandError("MYSHELL : No such file or directory", 127)
    if isinstance(exc, PermissionError):
        return CommandError("MYSHELL : Permission denied", 126)
    return CommandError("", 1)


def _environ_dict(envp: Sequence[str]) -> dict[str, str]:
    environ: dict[str, str] = {}
    for entry in envp:
        name, sep, value = entry.partition("=")
        if sep and name:
            environ[name] = value
    return environ


def _fileno(stream: TextIO) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _close(handle: object) -> None:
    close = getattr(handle, "close", None)
    if close is not None:
        close()


def _write_all(fd: int, data: bytes) -> None:
    while data:
        written = os.write(fd, data)
        data = data[written:]


@contextmanager
def _preserved_cwd() -> Iterator[None]:
    """Undo any change of directory made by a builtin run as a pipeline stage."""
    cwd = os.getcwd()
    pwd = os.environ.get("PWD")
    try:
        yield
    finally:
        os.chdir(cwd)
        if pwd is None:
            os.environ.pop("PWD", None)
        else:
            os.environ["PWD"] = pwd


class _Pump(threading.Thread):
    """Copy a child's output pipe into a text stream."""

    def __init__(self, source: IO[bytes], sink: TextIO) -> None:
        super().__init__(daemon=True)
        self._source = source
        self._sink = sink

    def run(self) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        with self._source:
            while True:
                chunk = self._source.read1(_CHUNK)  # type: ignore[attr-defined]
                if not chunk:
                    break
                text = decoder.decode(chunk)
                if text:
                    self._sink.write(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            self._sink.write(tail)


class _PipelineRun:
    """The stages of one pipeline, started one after another."""

    def __init__(self, env: Environment, out: TextIO, err: TextIO) -> None:
        self._env = env
        self._out = out
        self._err = err
        self._envp = env.to_envp()
        self._popen_env = _environ_dict(self._envp)
        self._upstream: object = None
        self._results: list[int | subprocess.Popen] = []
        self._pumps: list[_Pump] = []

    def start(self, command: CommandLine, last: bool) -> None:
        upstream, self._upstream = self._upstream, None
        try:
            files = open_redirections(command.redirections)
        except CommandError as exc:
            _close(upstream)
            self._fail(exc, last)
            return
        with files:
            if command.name is None:
                _close(upstream)
                self._done(0, last)
            elif is_builtin(command.name):
                _close(upstream)
                self._run_builtin(command, files, last)
            else:
                self._spawn(command, files, upstream, last)

    def _done(self, status: int, last: bool) -> None:
        self._results.append(status)
        if not last:
            self._upstream = subprocess.DEVNULL

    def _fail(self, exc: CommandError, last: bool) -> None:
        if exc.message:
            self._err.write(exc.message + "\n")
        self._done(exc.status, last)

    def _run_builtin(self, command: CommandLine, files: _OpenFiles, last: bool) -> None:
        # A builtin in a pipeline works on copies and reports 0 unless it exits.
        buffer = io.StringIO()
        status = 0
        with _preserved_cwd():
            try:
                run_builtin(command.words, copy.deepcopy(self._env), buffer, self._err)
            except ShellExit as exc:
                status = exc.status
        data = buffer.getvalue()
        if files.stdout is not None:
            _write_all(files.stdout, data.encode("utf-8", "surrogateescape"))
            self._done(status, last)
        elif not last:
            spool = tempfile.TemporaryFile()
            spool.write(data.encode("utf-8", "surrogateescape"))
            spool.seek(0)
            self._results.append(status)
            self._upstream = spool
        else:
            self._out.write(data)
            self._results.append(status)

    def _sink(self, stream: TextIO) -> int:
        fd = _fileno(stream)
        if fd is None:
            return subprocess.PIPE
        stream.flush()
        return fd

    def _spawn(
        self, command: CommandLine, files: _OpenFiles, upstream: object, last: bool
    ) -> None:
        try:
            path = resolve_command(command.name, self._envp)
        except CommandError as exc:
            _close(upstream)
            self._fail(exc, last)
            return
        stdin = files.stdin if files.stdin is not None else upstream
        if files.stdout is not None:
            stdout = files.stdout
        elif not last:
            stdout = subprocess.PIPE
        else:
            stdout = self._sink(self._out)
        stderr = self._sink(self._err)
        try:
            proc = subprocess.Popen(
                command.words,
                executable=path,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                env=self._popen_env,
            )
        except OSError as exc:
            self._fail(_exec_error(exc), last)
            return
        finally:
            _close(upstream)
        self._results.append(proc)
        if files.stdout is not None:
            if not last:
                self._upstream = subprocess.DEVNULL
        elif not last:
            self._upstream = proc.stdout
        elif proc.stdout is not None:
            self._pump(proc.stdout, self._out)
        if proc.stderr is not None:
            self._pump(proc.stderr, self._err)

    def _pump(self, source: IO[bytes], sink: TextIO) -> None:
        pump = _Pump(source, sink)
        pump.start()
        self._pumps.append(pump)

    def finish(self) -> int:
        _close(self._upstream)
        self._upstream = None
        status = 0
        for result in self._results:
            if isinstance(result, int):
                status = result
            else:
                code = result.wait()
                # A process killed by a signal reports 0, as its exit code field holds.
                status = code if code >= 0 else 0
        for pump in self._pumps:
            pump.join()
        return status


def _run_in_parent(command: CommandLine, env: Environment, out: TextIO, err: TextIO) -> int:
    redirect_status = 0
    try:
        with open_redirections(command.redirections):
            pass
    except CommandError as exc:
        err.write(exc.message + "\n")
        redirect_status = exc.status
    status = run_builtin(command.words, env, out, err)
    return status if status else redirect_status


def run_pipeline(
    commands: Iterable[CommandLine], env: Environment, out: TextIO, err: TextIO
) -> int:
    """Run the commands of a pipeline and return the status of the last one.

    A lone unset, export, pwd, exit or cd runs in the shell itself, so it
    changes the shell's state; its redirections are only opened, and its
    output is not redirected. ShellExit from exit is not caught there.
    """
    commands = list(commands)
    if not commands:
        return 0
    if len(commands) == 1 and runs_in_parent(commands[0].name):
        return _run_in_parent(commands[0], env, out, err)
    run = _PipelineRun(env, out, err)
    try:
        for index, command in enumerate(commands):
            run.start(command, index == len(commands) - 1)
    finally:
        status = run.finish()
    return status