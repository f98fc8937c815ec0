"""Variable expansion and quote removal on tokens."""

from __future__ import annotations

from collections.abc import Iterable

from .environment import Environment
from .lexer import Token, TokenType

_EMPTY_QUOTED = '""'


def _is_name_char(char: str) -> bool:
    return char != "" and char.isascii() and (char.isalnum() or char == "_")


def remove_quotes(text: str) -> str:
    """Drop the quote characters that open and close quoted parts of *text*."""
    kept: list[str] = []
    in_single = in_double = False
    for char in text:
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        else:
            kept.append(char)
    return "".join(kept)


def is_expandable(text: str, pos: int) -> bool:
    """Tell whether the '$' at *pos* starts an expansion.

    It does when it is not inside single quotes and is followed by a name
    character or '?'.
    """
    in_single = in_double = False
    for index, char in enumerate(text):
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
        if index == pos:
            if in_single:
                return False
            following = text[index + 1:index + 2]
            name_follows = _is_name_char(following) or following == "?"
            if in_double and name_follows:
                return True
            return char == "$" and name_follows
    return False


def read_variable_name(text: str, pos: int) -> tuple[str | None, int]:
    """Read the variable name after the '$' at *pos*.

    Returns the name and the position just after it, or ``(None, pos)`` when
    *pos* does not hold a '$'.
    """
    if text[pos:pos + 1] != "$":
        return None, pos
    end = pos + 1
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    return text[pos + 1:end], end


def should_delete(value: str, env: Environment) -> bool:
    """Tell whether a token starting with an unset or empty variable is dropped."""
    if value == "$" or value.startswith(("$?", "$$")):
        return False
    name, _ = read_variable_name(value, 0)
    if name is None:
        return False
    var = env.find(name)
    return var is None or var.value is None or var.value == _EMPTY_QUOTED


def expand_value(value: str, env: Environment, last_status: int) -> tuple[str, bool]:
    """Expand variables and ``$?`` in *value*.

    Returns the expanded text and whether the token should be removed.
    Quotes are left in place.
    """
    first = next(iter(env), None)
    if first is None or first.value is None:
        return value, False
    delete = should_delete(value, env)
    pieces: list[str] = []
    pos = 0
    length = len(value)
    while pos < length:
        char = value[pos]
        following = value[pos + 1:pos + 2]
        if char == "$" and following:
            if following == "$":
                pieces.append("$$")
                pos += 2
            elif following == "?" and is_expandable(value, pos):
                pieces.append(str(last_status))
                pos += 2
            elif is_expandable(value, pos):
                name, pos = read_variable_name(value, pos)
                var = env.find(name) if name else None
                if var is not None and var.value is not None:
                    if var.value == _EMPTY_QUOTED:
                        delete = True
                    pieces.append(var.value)
            else:
                pieces.append(char)
                pos += 1
        else:
            pieces.append(char)
            pos += 1
    return "".join(pieces), delete


def expand_tokens(
    tokens: Iterable[Token], env: Environment, last_status: int
) -> Iterable[Token]:
    """Expand and unquote every token in place; here-document limiters are only unquoted."""
    previous: Token | None = None
    for token in tokens:
        token.to_delete = False
        if previous is not None and previous.type is TokenType.HERE_DOC:
            token.value = remove_quotes(token.value)
        else:
            expanded, token.to_delete = expand_value(token.value, env, last_status)
            token.value = remove_quotes(expanded)
        previous = token
    return tokens