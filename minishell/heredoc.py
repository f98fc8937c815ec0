"""Reading here-documents into temporary files."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO

from .lexer import Token, TokenType

TMP_PREFIX = ".here_doc"
MAX_HEREDOCS = 16
HEREDOC_PROMPT = "> "


class HereDocLimitError(Exception):
    """A line holds more here-documents than the shell accepts."""

    status = 2

    def __init__(self) -> None:
        self.message = "minishell: maximum here-document count exceeded"
        super().__init__(self.message)


def _tmp_path(directory: str | os.PathLike, number: int) -> Path:
    return Path(directory) / f"{TMP_PREFIX}{number}"


def find_tmp_filename(directory: str | os.PathLike) -> Path:
    """Return the first ``.here_doc<N>`` path in *directory* that does not exist."""
    number = 1
    while _tmp_path(directory, number).exists():
        number += 1
    return _tmp_path(directory, number)


def delete_tmp_files(directory: str | os.PathLike) -> int:
    """Delete ``.here_doc1``, ``.here_doc2``… up to the first missing one; return the count."""
    number = 1
    while True:
        path = _tmp_path(directory, number)
        if not path.exists():
            return number - 1
        path.unlink()
        number += 1


def matches_limiter(line: str, limiter: str) -> bool:
    """Tell whether *line* is exactly the limiter."""
    return line == limiter


def eof_warning(limiter: str) -> str:
    """Return the warning shown when input ends before the limiter."""
    return (
        "MYSHELL: warning: here-document delimited by end-of-file "
        f"(wanted `{limiter}')"
    )


def count_heredocs(tokens: Sequence[Token]) -> int:
    """Count here-document operators, raising HereDocLimitError past the limit."""
    count = sum(1 for token in tokens if token.type is TokenType.HERE_DOC)
    if count > MAX_HEREDOCS:
        raise HereDocLimitError()
    return count


def collect_heredoc(
    path: str | os.PathLike,
    limiter: str,
    read_line: Callable[[str], str | None],
    err: TextIO,
) -> None:
    """Append lines read with *read_line* to *path* until the limiter or end of input.

    *read_line* is called with the prompt and returns None at end of input.
    """
    with open(path, "a", encoding="utf-8") as handle:
        while True:
            line = read_line(HEREDOC_PROMPT)
            if line is None:
                err.write(eof_warning(limiter) + "\n")
                return
            if matches_limiter(line, limiter):
                return
            handle.write(line + "\n")


def _create_file(path: Path) -> None:
    fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o644)
    os.close(fd)


def process_heredocs(
    tokens: Sequence[Token],
    read_line: Callable[[str], str | None],
    directory: str | os.PathLike,
    err: TextIO,
) -> bool:
    """Read every here-document of *tokens* into a temporary file.

    Each limiter token is turned into an INFILE token naming its file.
    Returns False when reading was interrupted with KeyboardInterrupt,
    True otherwise.
    """
    count_heredocs(tokens)
    for index, token in enumerate(tokens):
        if token.type is not TokenType.HERE_DOC or index + 1 >= len(tokens):
            continue
        limiter = tokens[index + 1]
        if limiter.type is not TokenType.LIMITER:
            continue
        path = find_tmp_filename(directory)
        try:
            _create_file(path)
        except OSError:
            continue
        try:
            collect_heredoc(path, limiter.value, read_line, err)
        except KeyboardInterrupt:
            return False
        limiter.value = str(path)
        limiter.type = TokenType.INFILE
    return True