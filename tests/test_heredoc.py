import io

import pytest

from dancingshell.heredoc import heredoc_delimiters, write_heredoc
from dancingshell.models import ShellSyntaxError, Token, TokenType
from dancingshell.tokenizer import tokenize


def test_write_heredoc_stops_at_delimiter():
    out, err = io.StringIO(), io.StringIO()
    count = write_heredoc("EOF", ["a", "b", "EOF", "c"], out, err)
    assert out.getvalue() == "a\nb\n"
    assert err.getvalue() == ""
    assert count == 2


def test_write_heredoc_accepts_lines_with_newlines():
    out, err = io.StringIO(), io.StringIO()
    write_heredoc("END", io.StringIO("first\nEND\nafter\n"), out, err)
    assert out.getvalue() == "first\n"


def test_write_heredoc_needs_exact_match():
    out, err = io.StringIO(), io.StringIO()
    count = write_heredoc("EOF", ["EOFX", " EOF", "EOF"], out, err)
    assert out.getvalue() == "EOFX\n EOF\n"
    assert count == 2


def test_write_heredoc_warns_at_end_of_input():
    out, err = io.StringIO(), io.StringIO()
    count = write_heredoc("EOF", ["a"], out, err)
    assert out.getvalue() == "a\n"
    assert count == 1
    assert err.getvalue() == (
        "warning: here-document at line 2 delimited by end-of-file (wanted'EOF')\n"
    )


def test_write_heredoc_empty_input_warns():
    out, err = io.StringIO(), io.StringIO()
    assert write_heredoc("X", [], out, err) == 0
    assert "(wanted'X')" in err.getvalue()
    assert out.getvalue() == ""


def test_heredoc_delimiters_in_order():
    tokens = tokenize("cat << EOF | wc <<'E F'")
    assert heredoc_delimiters(tokens) == ["EOF", "E F"]


def test_heredoc_delimiters_none():
    assert heredoc_delimiters(tokenize("echo hi > out")) == []


def test_heredoc_delimiter_missing_raises():
    tokens = [Token(TokenType.HERE_DOC), Token(TokenType.SPC, " "), Token(TokenType.PIPE)]
    with pytest.raises(ShellSyntaxError) as info:
        heredoc_delimiters(tokens)
    assert info.value.token == "heredoc"
    assert info.value.status == 2


def test_heredoc_delimiter_at_end_raises():
    with pytest.raises(ShellSyntaxError):
        heredoc_delimiters([Token(TokenType.WORD, "cat"), Token(TokenType.HERE_DOC)])