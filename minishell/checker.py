"""Syntax checks run on a line before it is executed."""

from __future__ import annotations

from .environment import Environment
from .expander import expand_tokens
from .lexer import Token, TokenType, is_quoted, quotes_balanced, tokenize

LINE_ERROR = "bash: syntax error near unexpected token `;'"
REDIRECTION_ERROR = "MYSHELL: syntax error near unexpected token `newline'"

_FORBIDDEN = set("&;%\t\v\f\r\n,()")
_SPACES = " \t\n\v\f\r"
_TARGETS = {
    TokenType.REDIR_IN: TokenType.INFILE,
    TokenType.REDIR_OUT: TokenType.OUTFILE,
    TokenType.APPEND: TokenType.OUTFILE,
    TokenType.HERE_DOC: TokenType.LIMITER,
}


class SyntaxCheckError(Exception):
    """A line was rejected; *status* is the new exit status, or None to keep it."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


def is_forbidden_char(char: str, next_char: str, next_next_char: str) -> bool:
    """Tell whether *char* starts a construct the shell does not support."""
    return char in _FORBIDDEN or (char == "|" and next_char in ("|", "&") and next_char != "")


def chars_ok(text: str) -> bool:
    """Reject unquoted forbidden characters; the last character is not examined."""
    if not quotes_balanced(text):
        return True
    for index, char in enumerate(text[:-1]):
        if is_quoted(text, index):
            continue
        if is_forbidden_char(char, text[index + 1], text[index + 2:index + 3]):
            return False
    return True


def pipes_ok(text: str) -> bool:
    """Reject a line that starts or ends with a pipe."""
    if len(text) >= 3:
        first, second, third = text[0], text[1], text[2]
        if first == "|" or (first == ">" and second == "|") or (
            first == ">" and second == " " and third == "|"
        ):
            return False
    return not text.rstrip(_SPACES).endswith("|")


def redirections_ok(tokens: list[Token]) -> bool:
    """Check that every redirection operator is followed by its target."""
    for index, token in enumerate(tokens):
        expected = _TARGETS.get(token.type)
        if expected is None:
            continue
        if index + 1 >= len(tokens) or tokens[index + 1].type is not expected:
            return False
    return True


def remove_deleted(tokens: list[Token]) -> list[Token]:
    """Return the tokens not marked for deletion."""
    return [token for token in tokens if not token.to_delete]


def check_line(line: str, env: Environment, last_status: int) -> list[Token]:
    """Check, tokenize and expand *line*, raising SyntaxCheckError if it is rejected."""
    if not quotes_balanced(line) or not chars_ok(line) or not pipes_ok(line):
        raise SyntaxCheckError(LINE_ERROR)
    tokens = tokenize(line)
    expand_tokens(tokens, env, last_status)
    tokens = remove_deleted(tokens)
    if not redirections_ok(tokens):
        raise SyntaxCheckError(REDIRECTION_ERROR, 2)
    return tokens