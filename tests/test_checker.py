import pytest

from minishell.checker import (
    LINE_ERROR,
    REDIRECTION_ERROR,
    SyntaxCheckError,
    chars_ok,
    check_line,
    is_forbidden_char,
    pipes_ok,
    redirections_ok,
    remove_deleted,
)
from minishell.environment import Environment
from minishell.lexer import tokenize


@pytest.fixture
def env():
    return Environment.from_environ({"HOME": "/home/user"})


def test_is_forbidden_char():
    assert is_forbidden_char(";", "a", "") is True
    assert is_forbidden_char("|", "|", "") is True
    assert is_forbidden_char("|", "a", "") is False
    assert is_forbidden_char("a", "b", "c") is False


def test_chars_ok():
    assert chars_ok("ls ; ls") is False
    assert chars_ok("ls && ls") is False
    assert chars_ok("echo 'a;b'") is True
    assert chars_ok("ls | wc") is True


def test_pipes_ok():
    assert pipes_ok("| ls") is False
    assert pipes_ok("ls |  ") is False
    assert pipes_ok(">| x") is False
    assert pipes_ok("ls | wc") is True
    assert pipes_ok("") is True


def test_redirections_ok():
    assert redirections_ok(tokenize("cat <")) is False
    assert redirections_ok(tokenize("cat > | wc")) is False
    assert redirections_ok(tokenize("cat < f")) is True
    assert redirections_ok(tokenize("cat << EOF >> out")) is True


def test_remove_deleted():
    tokens = tokenize("a b c")
    tokens[1].to_delete = True
    assert [token.value for token in remove_deleted(tokens)] == ["a", "c"]


def test_check_line_expands(env):
    tokens = check_line("echo $HOME $MISSING", env, 0)
    assert [token.value for token in tokens] == ["echo", "/home/user"]


def test_check_line_unclosed_quote(env):
    with pytest.raises(SyntaxCheckError) as info:
        check_line("echo 'open", env, 0)
    assert info.value.message == LINE_ERROR
    assert info.value.status is None


def test_check_line_missing_target(env):
    with pytest.raises(SyntaxCheckError) as info:
        check_line("cat >", env, 0)
    assert info.value.message == REDIRECTION_ERROR
    assert info.value.status == 2


def test_check_line_deleted_target(env):
    with pytest.raises(SyntaxCheckError) as info:
        check_line("cat > $MISSING", env, 0)
    assert info.value.status == 2