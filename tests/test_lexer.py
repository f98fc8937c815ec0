import pytest

from minishell.lexer import (
    Token,
    TokenType,
    is_quote,
    is_quoted,
    is_separator,
    is_space,
    quotes_balanced,
    split_words,
    token_type,
    tokenize,
)


def test_char_classes():
    assert is_separator("|", "")
    assert is_separator("<", "<")
    assert not is_separator("a", "|")
    assert not is_separator("", "")
    assert is_quote("'") and is_quote('"') and not is_quote("a")
    assert is_space("\t") and is_space("\n") and not is_space("x")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("echo 'a'", True),
        ('echo "it\'s"', True),
        ("echo 'open", False),
        ('"a" "b', False),
        ("", True),
        (None, False),
    ],
)
def test_quotes_balanced(text, expected):
    assert quotes_balanced(text) is expected


def test_is_quoted():
    text = "a 'b|c' d"
    assert is_quoted(text, text.index("|")) is True
    assert is_quoted(text, text.index("d")) is False


def test_split_simple_pipeline():
    assert split_words("  ls -l | wc  ") == ["ls", "-l", "|", "wc"]


def test_split_operators_without_spaces():
    assert split_words("cat<<EOF>>out") == ["cat", "<<", "EOF", ">>", "out"]
    assert split_words("a||b") == ["a", "|", "|", "b"]


def test_split_keeps_quotes_together():
    assert split_words('echo "a | b"x \'c d\'') == ["echo", '"a | b"x', "'c d'"]


def test_split_unterminated_quote_runs_to_end():
    assert split_words("echo 'abc") == ["echo", "'abc"]


def test_token_type_rules():
    assert token_type("|", TokenType.CMD) is TokenType.PIPE
    assert token_type("<<", None) is TokenType.HERE_DOC
    assert token_type("x", None) is TokenType.CMD
    assert token_type("x", TokenType.CMD) is TokenType.WORD
    assert token_type("x", TokenType.HERE_DOC) is TokenType.LIMITER
    assert token_type(" -n", TokenType.CMD) is TokenType.ARG


def test_tokenize_redirections():
    types = [t.type for t in tokenize("< in cat > out")]
    assert types == [
        TokenType.REDIR_IN,
        TokenType.INFILE,
        TokenType.CMD,
        TokenType.REDIR_OUT,
        TokenType.OUTFILE,
    ]


def test_tokenize_pipeline_and_heredoc():
    tokens = tokenize("cat << END | grep x >> log")
    assert tokens[0] == Token("cat", TokenType.CMD)
    assert [t.type for t in tokens[1:]] == [
        TokenType.HERE_DOC,
        TokenType.LIMITER,
        TokenType.PIPE,
        TokenType.CMD,
        TokenType.WORD,
        TokenType.APPEND,
        TokenType.OUTFILE,
    ]
    assert all(t.to_delete is False for t in tokens)


def test_tokenize_none_and_blank():
    assert tokenize(None) == []
    assert tokenize("   ") == []