import io

import pytest

from minishell.heredoc import (
    HereDocLimitError,
    collect_heredoc,
    count_heredocs,
    delete_tmp_files,
    eof_warning,
    find_tmp_filename,
    matches_limiter,
    process_heredocs,
)
from minishell.lexer import Token, TokenType, tokenize


def _reader(lines):
    items = iter(lines)
    prompts = []

    def read_line(prompt):
        prompts.append(prompt)
        return next(items, None)

    read_line.prompts = prompts
    return read_line


def test_find_tmp_filename_first(tmp_path):
    assert find_tmp_filename(tmp_path) == tmp_path / ".here_doc1"


def test_find_tmp_filename_skips_existing(tmp_path):
    first = find_tmp_filename(tmp_path)
    first.touch()
    second = find_tmp_filename(tmp_path)
    assert second != first
    assert not second.exists()
    assert second.name.startswith(".here_doc")


def test_delete_tmp_files_removes_consecutive(tmp_path):
    for _ in range(3):
        find_tmp_filename(tmp_path).touch()
    assert delete_tmp_files(tmp_path) == 3
    assert list(tmp_path.iterdir()) == []


def test_delete_tmp_files_stops_at_gap(tmp_path):
    (tmp_path / ".here_doc1").touch()
    (tmp_path / ".here_doc3").touch()
    assert delete_tmp_files(tmp_path) == 1
    assert (tmp_path / ".here_doc3").exists()


def test_matches_limiter():
    assert matches_limiter("EOF", "EOF") is True
    assert matches_limiter("EOFX", "EOF") is False
    assert matches_limiter("EO", "EOF") is False


def test_eof_warning_text():
    assert eof_warning("END") == (
        "MYSHELL: warning: here-document delimited by end-of-file (wanted `END')"
    )


def test_count_heredocs_within_limit():
    tokens = [Token("<<", TokenType.HERE_DOC), Token("a", TokenType.LIMITER)] * 16
    assert count_heredocs(tokens) == 16


def test_count_heredocs_over_limit():
    tokens = [Token("<<", TokenType.HERE_DOC), Token("a", TokenType.LIMITER)] * 17
    with pytest.raises(HereDocLimitError) as info:
        count_heredocs(tokens)
    assert info.value.status == 2
    assert "maximum here-document count exceeded" in info.value.message


def test_collect_heredoc_until_limiter(tmp_path):
    path = tmp_path / "doc"
    read_line = _reader(["one", "two", "EOF", "after"])
    err = io.StringIO()
    collect_heredoc(path, "EOF", read_line, err)
    assert path.read_text() == "one\ntwo\n"
    assert err.getvalue() == ""
    assert read_line.prompts == ["> "] * 3


def test_collect_heredoc_end_of_input(tmp_path):
    path = tmp_path / "doc"
    err = io.StringIO()
    collect_heredoc(path, "EOF", _reader(["only"]), err)
    assert path.read_text() == "only\n"
    assert err.getvalue() == eof_warning("EOF") + "\n"


def test_process_heredocs_turns_limiter_into_infile(tmp_path):
    tokens = tokenize("cat << EOF")
    assert process_heredocs(tokens, _reader(["hello", "EOF"]), tmp_path, io.StringIO()) is True
    limiter = tokens[2]
    assert limiter.type is TokenType.INFILE
    assert limiter.value == str(tmp_path / ".here_doc1")
    assert (tmp_path / ".here_doc1").read_text() == "hello\n"


def test_process_heredocs_two_documents_get_distinct_files(tmp_path):
    tokens = tokenize("cat << A << B")
    read_line = _reader(["x", "A", "y", "B"])
    assert process_heredocs(tokens, read_line, tmp_path, io.StringIO()) is True
    files = [token.value for token in tokens if token.type is TokenType.INFILE]
    assert len(set(files)) == 2
    assert [open(name).read() for name in files] == ["x\n", "y\n"]


def test_process_heredocs_interrupted(tmp_path):
    tokens = tokenize("cat << EOF")

    def read_line(prompt):
        raise KeyboardInterrupt

    assert process_heredocs(tokens, read_line, tmp_path, io.StringIO()) is False
    assert tokens[2].type is TokenType.LIMITER
    assert tokens[2].value == "EOF"


def test_process_heredocs_without_heredoc(tmp_path):
    tokens = tokenize("echo hi")
    assert process_heredocs(tokens, _reader([]), tmp_path, io.StringIO()) is True
    assert [token.value for token in tokens] == ["echo", "hi"]
    assert list(tmp_path.iterdir()) == []