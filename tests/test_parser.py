import pytest

from minishell.lexer import Token, TokenType, tokenize
from minishell.parser import (
    CommandLine,
    Redirection,
    RedirKind,
    collect_redirections,
    command_words,
    parse_commands,
    split_pipeline,
)


def test_split_pipeline_empty():
    assert split_pipeline([]) == []


def test_split_pipeline_two_commands():
    tokens = tokenize("ls -l | wc")
    segments = split_pipeline(tokens)
    assert [[t.value for t in seg] for seg in segments] == [["ls", "-l"], ["wc"]]


def test_split_pipeline_leading_pipe_gives_empty_segment():
    segments = split_pipeline(tokenize("| a"))
    assert [[t.value for t in seg] for seg in segments] == [[], ["a"]]


def test_split_pipeline_trailing_pipe_adds_nothing():
    segments = split_pipeline(tokenize("a |"))
    assert [[t.value for t in seg] for seg in segments] == [["a"]]


def test_split_pipeline_double_pipe():
    segments = split_pipeline(tokenize("a | | b"))
    assert len(segments) == 3
    assert segments[1] == []


def test_command_words_skip_redirections():
    tokens = tokenize("cat < in -e > out")
    assert command_words(tokens) == ["cat", "-e"]


def test_command_words_stop_at_pipe():
    tokens = tokenize("echo hi | wc")
    assert command_words(tokens) == ["echo", "hi"]


def test_collect_redirections_in_order():
    tokens = tokenize("cat < in << EOF > out >> log")
    assert collect_redirections(tokens) == [
        Redirection(RedirKind.IN, "in"),
        Redirection(RedirKind.HEREDOC, "EOF"),
        Redirection(RedirKind.OUT, "out"),
        Redirection(RedirKind.APPEND, "log"),
    ]


def test_collect_redirections_missing_target():
    tokens = [Token("cat", TokenType.CMD), Token("<", TokenType.REDIR_IN)]
    assert collect_redirections(tokens) == [Redirection(RedirKind.IN, None)]


def test_collect_redirections_stop_at_pipe():
    tokens = tokenize("a | b > out")
    assert collect_redirections(tokens) == []


def test_parse_commands_pipeline():
    commands = parse_commands(tokenize("cat < in | wc -l > out"))
    assert commands == [
        CommandLine(["cat"], [Redirection(RedirKind.IN, "in")]),
        CommandLine(["wc", "-l"], [Redirection(RedirKind.OUT, "out")]),
    ]


def test_parse_commands_redirection_first():
    commands = parse_commands(tokenize("< in cat"))
    assert commands[0].words == ["cat"]
    assert commands[0].name == "cat"


def test_command_line_without_words_has_no_name():
    commands = parse_commands(tokenize("> out"))
    assert commands[0].name is None
    assert commands[0].redirections == [Redirection(RedirKind.OUT, "out")]


@pytest.mark.parametrize(
    "kind, is_input",
    [
        (RedirKind.IN, True),
        (RedirKind.HEREDOC, True),
        (RedirKind.OUT, False),
        (RedirKind.APPEND, False),
    ],
)
def test_redir_kind_direction(kind, is_input):
    assert kind.is_input is is_input
    assert kind.is_output is not is_input