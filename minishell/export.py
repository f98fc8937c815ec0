"""The export builtin."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TextIO

from .environment import Environment, EnvVar

_EMPTY_QUOTED = '""'


class InvalidIdentifier(ValueError):
    """An export argument does not start with a valid variable name."""

    def __init__(self, arg: str) -> None:
        self.arg = arg
        self.message = f"minishell: export: '{arg}': not a valid identifier"
        super().__init__(self.message)


def _is_name_char(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalpha())


def parse_export_name(arg: str) -> tuple[str, bool]:
    """Return the name in *arg* and whether an '=' follows it.

    Raises InvalidIdentifier when the name holds anything but letters and '_'.
    """
    if arg.startswith("="):
        raise InvalidIdentifier(arg)
    name, sep, _ = arg.partition("=")
    if not all(_is_name_char(char) for char in name):
        raise InvalidIdentifier(arg)
    return name, bool(sep)


def parse_export_value(arg: str) -> str | None:
    """Return what follows the first '=' in *arg*, or None if it is missing or empty."""
    _, sep, value = arg.partition("=")
    if not sep or not value:
        return None
    return value


def export_variable(env: Environment, arg: str) -> EnvVar:
    """Set or create the variable described by *arg* and return it."""
    name, has_equal = parse_export_name(arg)
    value = parse_export_value(arg)
    existing = env.find(name)
    if existing is not None:
        if value is not None:
            existing.value = value
        existing.has_equal = value is not None
        return existing
    if value is None and has_equal:
        value = _EMPTY_QUOTED
    return env.add(name, value, has_equal)


def format_export_listing(env: Environment) -> list[str]:
    """Sort the environment by name and return its lines as export prints them."""
    lines = []
    for var in env.sorted_entries():
        line = f"export {var.name}"
        if var.has_equal:
            line += "="
        if var.value:
            line += var.value
        lines.append(line)
    return lines


def run_export(env: Environment, args: Sequence[str], out: TextIO, err: TextIO) -> int:
    """Run export with *args* (the words after the command name); return the status."""
    if not args:
        for line in format_export_listing(env):
            out.write(line + "\n")
        return 0
    for arg in args:
        try:
            export_variable(env, arg)
        except InvalidIdentifier as exc:
            err.write(exc.message + "\n")
            return 1
    return 0