"""The interactive loop: prompt, check, here-documents, execution."""

from __future__ import annotations

import os
import signal
import sys
import tempfile
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TextIO

from .builtins import ShellExit
from .checker import SyntaxCheckError, check_line
from .environment import Environment
from .executor import run_pipeline
from .heredoc import HereDocLimitError, delete_tmp_files, process_heredocs
from .parser import parse_commands

PROMPT = "minishell$ "
INTERRUPTED_STATUS = 130
_SILENT_LINES = {":": 0, "#": 0, "!": 1}

ReadLine = Callable[[str], "str | None"]


def _console_read(prompt: str) -> str | None:
    """Read one line from the terminal; None at end of input."""
    try:
        return input(prompt)
    except EOFError:
        return None


def _in_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


@contextmanager
def _job_signals(out: TextIO, err: TextIO) -> Iterator[None]:
    """While children run, report a quit signal instead of ignoring it."""
    if not hasattr(signal, "SIGQUIT") or not _in_main_thread():
        yield
        return

    def on_quit(signum: int, frame: object) -> None:
        err.write("Quit (core dumped)")
        out.write("\n")

    previous = signal.signal(signal.SIGQUIT, on_quit)
    try:
        yield
    finally:
        signal.signal(signal.SIGQUIT, previous if previous is not None else signal.SIG_DFL)


class Shell:
    """One shell session: its variables, last exit status and input source."""

    def __init__(
        self,
        environ: Mapping[str, str] | Iterable[str] | None = None,
        read_line: ReadLine | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.env = Environment.from_environ(os.environ if environ is None else environ)
        self.read_line: ReadLine = read_line if read_line is not None else _console_read
        self.out: TextIO = out if out is not None else sys.stdout
        self.err: TextIO = err if err is not None else sys.stderr
        self.status = 0
        self.history: list[str] = []
        self.tmp_dir = tempfile.gettempdir()

    def read_prompt(self) -> str | None:
        """Read the next command line; None at end of input.

        An interrupt gives an empty line and status 130. The lines ':' and
        '#' set the status to 0 and '!' to 1; they, like empty lines, are
        returned as empty and kept out of the history.
        """
        try:
            line = self.read_line(PROMPT)
        except KeyboardInterrupt:
            self.out.write("\n")
            self.status = INTERRUPTED_STATUS
            return ""
        if line is None:
            return None
        if line == "" or line in _SILENT_LINES:
            if line in _SILENT_LINES:
                self.status = _SILENT_LINES[line]
            return ""
        self.history.append(line)
        return line

    def run_line(self, line: str) -> int:
        """Check and run one command line; return the new exit status.

        ShellExit is raised when the line asks the shell to end.
        """
        try:
            tokens = check_line(line, self.env, self.status)
        except SyntaxCheckError as exc:
            self.err.write(exc.message + "\n")
            if exc.status is not None:
                self.status = exc.status
            return self.status
        try:
            try:
                completed = process_heredocs(tokens, self.read_line, self.tmp_dir, self.err)
            except HereDocLimitError as exc:
                self.err.write(exc.message + "\n")
                raise ShellExit(exc.status) from exc
            if not completed:
                self.out.write("^C\n")
                if tokens:
                    self.status = INTERRUPTED_STATUS
                return self.status
            if tokens:
                commands = parse_commands(tokens)
                with _job_signals(self.out, self.err):
                    self.status = run_pipeline(commands, self.env, self.out, self.err)
        except KeyboardInterrupt:
            self.out.write("\n")
            self.status = INTERRUPTED_STATUS
        finally:
            delete_tmp_files(self.tmp_dir)
        return self.status

    def loop(self) -> int:
        """Read and run lines until end of input or exit; return the final status."""
        while True:
            line = self.read_prompt()
            if line is None:
                self.out.write("exit\n")
                return 0
            try:
                self.run_line(line)
            except ShellExit as exc:
                return exc.status


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive shell; arguments are refused."""
    if argv is None:
        argv = sys.argv[1:]
    if argv:
        sys.stderr.write("Arguments aren't allowed\n")
        return 0
    try:
        import readline  # noqa: F401  (line editing and history for input())
    except ImportError:
        pass
    if hasattr(signal, "SIGQUIT") and _in_main_thread():
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    shell = Shell(os.environ, _console_read, sys.stdout, sys.stderr)
    return shell.loop()


if __name__ == "__main__":
    sys.exit(main())