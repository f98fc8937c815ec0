"""Splitting a command line into typed tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    WORD = auto()
    CMD = auto()
    ARG = auto()
    PIPE = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    HERE_DOC = auto()
    APPEND = auto()
    INFILE = auto()
    OUTFILE = auto()
    LIMITER = auto()


@dataclass
class Token:
    """A piece of the command line with its role."""

    value: str
    type: TokenType = TokenType.WORD
    to_delete: bool = False


_OPERATORS = {
    "|": TokenType.PIPE,
    "<": TokenType.REDIR_IN,
    ">": TokenType.REDIR_OUT,
    "<<": TokenType.HERE_DOC,
    ">>": TokenType.APPEND,
}

_AFTER = {
    TokenType.INFILE: TokenType.CMD,
    TokenType.PIPE: TokenType.CMD,
    TokenType.REDIR_IN: TokenType.INFILE,
    TokenType.REDIR_OUT: TokenType.OUTFILE,
    TokenType.APPEND: TokenType.OUTFILE,
    TokenType.HERE_DOC: TokenType.LIMITER,
}


def is_separator(char: str, next_char: str = "") -> bool:
    """Tell whether *char* starts a pipe or redirection operator."""
    return char in ("|", "<", ">") and char != ""


def is_quote(char: str) -> bool:
    return char in ('"', "'") and char != ""


def is_space(char: str) -> bool:
    return char in (" ", "\t", "\n") and char != ""


def quotes_balanced(text: str | None) -> bool:
    """Tell whether every quote in *text* is closed."""
    if text is None:
        return False
    open_quote = None
    for char in text:
        if open_quote is None and is_quote(char):
            open_quote = char
        elif char == open_quote:
            open_quote = None
    return open_quote is None


def is_quoted(text: str, index: int) -> bool:
    """Tell whether position *index* of *text* lies inside quotes."""
    in_single = in_double = False
    for char in text[:index]:
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
    return in_single or in_double


def token_type(value: str, previous_type: TokenType | None) -> TokenType:
    """Give a token its type from its text and the type of the token before it."""
    if value in _OPERATORS:
        return _OPERATORS[value]
    if value[:1] == " " and value[1:2] == "-":
        return TokenType.ARG
    if previous_type is None:
        return TokenType.CMD
    return _AFTER.get(previous_type, TokenType.WORD)


def _char(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else ""


def _read_separator(text: str, pos: int) -> int:
    pair = text[pos:pos + 2]
    return pos + (2 if pair in ("<<", ">>") else 1)


def _read_word(text: str, pos: int) -> int:
    length = len(text)
    in_quotes = False
    while pos < length and not is_space(text[pos]) and (
        in_quotes or not is_separator(text[pos], _char(text, pos + 1))
    ):
        if is_quote(text[pos]):
            quote = text[pos]
            in_quotes = not in_quotes
            pos += 1
            while pos < length and text[pos] != quote:
                pos += 1
            if pos >= length:
                break
            in_quotes = not in_quotes
        pos += 1
    return min(pos, length)


def split_words(text: str) -> list[str]:
    """Cut *text* into words and operators, keeping quoted parts together."""
    words: list[str] = []
    pos = 0
    length = len(text)
    while pos < length and is_space(text[pos]):
        pos += 1
    while pos < length:
        char = text[pos]
        nxt = _char(text, pos + 1)
        if is_quote(char) or (not is_space(char) and not is_separator(char, nxt)):
            end = _read_word(text, pos)
        elif not is_space(char) and not is_quoted(text, pos):
            end = _read_separator(text, pos)
        else:
            pos += 1
            continue
        words.append(text[pos:end])
        pos = end
    return words


def tokenize(text: str | None) -> list[Token]:
    """Split *text* and give each piece its token type."""
    if text is None:
        return []
    tokens: list[Token] = []
    previous: TokenType | None = None
    for word in split_words(text):
        kind = token_type(word, previous)
        tokens.append(Token(word, kind))
        previous = kind
    return tokens