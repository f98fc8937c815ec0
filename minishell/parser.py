"""Grouping tokens into the commands of a pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .lexer import Token, TokenType

_WORD_TYPES = frozenset({TokenType.CMD, TokenType.ARG, TokenType.WORD})


class RedirKind(Enum):
    """What a redirection does with its target."""

    IN = "<"
    HEREDOC = "<<"
    OUT = ">"
    APPEND = ">>"

    @property
    def is_input(self) -> bool:
        return self in (RedirKind.IN, RedirKind.HEREDOC)

    @property
    def is_output(self) -> bool:
        return self in (RedirKind.OUT, RedirKind.APPEND)


_REDIR_KINDS = {
    TokenType.REDIR_IN: RedirKind.IN,
    TokenType.HERE_DOC: RedirKind.HEREDOC,
    TokenType.REDIR_OUT: RedirKind.OUT,
    TokenType.APPEND: RedirKind.APPEND,
}


@dataclass
class Redirection:
    """A redirection and the file it names; the target is None when missing."""

    kind: RedirKind
    target: str | None = None


@dataclass
class CommandLine:
    """One command of a pipeline: its argument words and its redirections."""

    words: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        """The command name, or None when the command has no words."""
        return self.words[0] if self.words else None


def split_pipeline(tokens: Sequence[Token]) -> list[list[Token]]:
    """Cut *tokens* at each pipe.

    A pipe at the start or two pipes in a row give an empty segment; a pipe
    at the very end does not open a new one.
    """
    if not tokens:
        return []
    segments: list[list[Token]] = [[]]
    for token in tokens:
        if token.type is TokenType.PIPE:
            segments.append([])
        else:
            segments[-1].append(token)
    if tokens[-1].type is TokenType.PIPE:
        segments.pop()
    return segments


def command_words(tokens: Sequence[Token]) -> list[str]:
    """Return the words of the first command in *tokens*, up to the first pipe."""
    words: list[str] = []
    for token in tokens:
        if token.type is TokenType.PIPE:
            break
        if token.type in _WORD_TYPES:
            words.append(token.value)
    return words


def collect_redirections(tokens: Sequence[Token]) -> list[Redirection]:
    """Return the redirections of the first command in *tokens*, in order."""
    redirections: list[Redirection] = []
    index = 0
    while index < len(tokens) and tokens[index].type is not TokenType.PIPE:
        kind = _REDIR_KINDS.get(tokens[index].type)
        if kind is not None:
            target = tokens[index + 1].value if index + 1 < len(tokens) else None
            redirections.append(Redirection(kind, target))
            index += 2
        else:
            index += 1
    return redirections


def parse_commands(tokens: Sequence[Token]) -> list[CommandLine]:
    """Turn a token list into the commands of its pipeline."""
    return [
        CommandLine(command_words(segment), collect_redirections(segment))
        for segment in split_pipeline(tokens)
    ]