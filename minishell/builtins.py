"""The builtin commands: echo, cd, pwd, env, unset, export and exit."""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import TextIO

from .environment import Environment
from .export import run_export

_BUILTINS = frozenset({"echo", "cd", "exit", "env", "pwd", "unset", "export"})
_PARENT_BUILTINS = frozenset({"unset", "export", "pwd", "exit", "cd"})


class ShellExit(Exception):
    """Raised by the exit builtin; *status* is the status the shell ends with."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def is_builtin(name: str | None) -> bool:
    """Tell whether *name* is one of the shell's builtins."""
    return name in _BUILTINS


def runs_in_parent(name: str | None) -> bool:
    """Tell whether a lone command *name* runs in the shell process itself."""
    return name in _PARENT_BUILTINS


def is_n_flag(text: str) -> bool:
    """Tell whether *text* is an echo '-n' option ('-n' followed by more 'n's)."""
    rest = text[2:] if text.startswith("-n") else text
    return all(char == "n" for char in rest)


def echo(args: Sequence[str], out: TextIO) -> int:
    """Print *args* separated by spaces; a leading -n drops the newline."""
    if not args:
        out.write("\n")
        return 0
    newline = True
    words = list(args)
    if is_n_flag(words[0]):
        words = words[1:]
        newline = False
    for index, word in enumerate(words):
        if word == "|":
            break
        out.write(word)
        if index + 1 < len(words):
            out.write(" ")
    if newline:
        out.write("\n")
    return 0


def _change_dir(path: str, err: TextIO) -> int:
    try:
        os.chdir(path)
    except OSError as exc:
        reason = os.strerror(exc.errno) if exc.errno else str(exc)
        err.write(f"minishell: cd: {path}: {reason}\n")
        return 1
    os.environ["PWD"] = os.getcwd()
    return 0


def cd(args: Sequence[str], err: TextIO) -> int:
    """Change directory to the single argument, or to HOME without one."""
    if not args:
        home = os.environ.get("HOME")
        if home is None:
            err.write("minishell: cd: HOME not set\n")
        else:
            _change_dir(home, err)
        return 0
    if len(args) > 1:
        err.write("minishel: cd: too many arguments\n")
        return 1
    return _change_dir(args[0], err)


def pwd(out: TextIO, err: TextIO) -> int:
    """Print the working directory, preferring PWD while it names an existing path."""
    current = os.environ.get("PWD")
    if current is None or not os.path.exists(current):
        try:
            current = os.getcwd()
        except OSError as exc:
            err.write(f"getcwd: {exc.strerror or exc}\n")
            return 1
    out.write(current + "\n")
    return 0


def print_env(args: Sequence[str], env: Environment, out: TextIO, err: TextIO) -> int:
    """Print every variable of *env*; arguments are refused."""
    if args:
        err.write("minishell: env: too many arguments\n")
        return 1
    for entry in env.to_envp():
        out.write(entry + "\n")
    return 0


def unset(env: Environment, args: Sequence[str]) -> int:
    """Remove each named variable from *env*."""
    for name in args:
        env.remove(name)
    return 0


def is_numeric(text: str) -> bool:
    """Tell whether *text* is an optional sign followed only by digits."""
    body = text[1:] if text[:1] in ("+", "-") else text
    return all(char in "0123456789" for char in body)


def _atoi(text: str) -> int:
    sign = -1 if text.startswith("-") else 1
    digits = text[1:] if text[:1] in ("+", "-") else text
    return sign * int(digits) if digits else 0


def exit_builtin(args: Sequence[str], out: TextIO, err: TextIO) -> int:
    """Leave the shell by raising ShellExit; returns only on too many arguments."""
    if not args:
        out.write("exit\n")
        raise ShellExit(1)
    if not is_numeric(args[0]):
        err.write("exit\n")
        err.write(f"minishell: exit :{args[0]}: numeric argument required\n")
        raise ShellExit(2)
    if len(args) > 1:
        err.write("exit: too many arguments\n")
        return 0
    out.write("exit\n")
    raise ShellExit(_atoi(args[0]) & 0xFF)


def run_builtin(
    argv: Sequence[str], env: Environment, out: TextIO, err: TextIO
) -> int | None:
    """Run *argv* if it names a builtin and return its status; None otherwise."""
    if not argv or not is_builtin(argv[0]):
        return None
    name, args = argv[0], list(argv[1:])
    if name == "echo":
        return echo(args, out)
    if name == "cd":
        return cd(args, err)
    if name == "exit":
        return exit_builtin(args, out, err)
    if name == "env":
        return print_env(args, env, out, err)
    if name == "pwd":
        return pwd(out, err)
    if name == "unset":
        return unset(env, args)
    return run_export(env, args, out, err)