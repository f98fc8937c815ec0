"""The shell's own table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass


def find_equal_sign(text: str) -> int:
    """Return the index of the first '=' in *text*, or -1 if there is none."""
    return text.find("=")


@dataclass
class EnvVar:
    """One variable: its name, its value and whether it was set with '='."""

    name: str
    value: str | None = None
    has_equal: bool = True


class Environment:
    """An ordered collection of shell variables."""

    def __init__(self) -> None:
        self._vars: list[EnvVar] = []

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | Iterable[str]) -> "Environment":
        """Build an environment from a mapping or from ``NAME=value`` strings.

        Entries with no '=' or with an empty name are skipped.
        """
        env = cls()
        if isinstance(environ, Mapping):
            pairs: Iterable[tuple[str, str]] = environ.items()
        else:
            pairs = _split_entries(environ)
        for name, value in pairs:
            if name and "=" not in name:
                env.add(name, value, True)
        return env

    def find(self, name: str) -> EnvVar | None:
        """Return the variable called *name*, or None."""
        return next((var for var in self._vars if var.name == name), None)

    def add(self, name: str, value: str | None, has_equal: bool) -> EnvVar:
        """Append a new variable at the end and return it."""
        var = EnvVar(name, value, has_equal)
        self._vars.append(var)
        return var

    def remove(self, name: str) -> bool:
        """Remove the first variable called *name*; report whether one was found."""
        for index, var in enumerate(self._vars):
            if var.name == name:
                del self._vars[index]
                return True
        return False

    def sorted_entries(self) -> list[EnvVar]:
        """Sort the variables by name, in place, and return them in that order."""
        self._vars.sort(key=lambda var: var.name)
        return list(self._vars)

    def to_envp(self) -> list[str]:
        """Return the variables as strings for a child process's environment."""
        return [
            f"{var.name}={var.value or ''}" if var.has_equal else var.name
            for var in self._vars
        ]

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)


def _split_entries(entries: Iterable[str]) -> Iterator[tuple[str, str]]:
    for entry in entries:
        position = find_equal_sign(entry)
        if position > 0:
            yield entry[:position], entry[position + 1:]