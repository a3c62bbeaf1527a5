import pytest

from dancingshell.environment import Environment
from dancingshell.expansion import expand_string, expand_tokens
from dancingshell.models import Token, TokenType
from dancingshell.tokenizer import tokenize


@pytest.fixture
def env():
    return Environment.from_mapping({"A": "hello", "SPLIT": "a b", "EMPTY": ""})


def test_plain_text_unchanged(env):
    assert expand_string("no dollar here", env, 0) == "no dollar here"


def test_simple_variable(env):
    assert expand_string("$A", env, 0) == "hello"


def test_variable_inside_text(env):
    assert expand_string("x$A", env, 0) == "x" + "hello"


def test_status(env):
    assert expand_string("$?", env, 7) == str(7)


def test_missing_variable_is_empty(env):
    assert expand_string("$NOPE", env, 0) == ""


def test_trailing_dollar_kept(env):
    assert expand_string("cost$", env, 0) == "cost$"


def test_adjacent_variables(env):
    assert expand_string("$A$A", env, 0) == "hello" * 2


def test_double_dollar_gives_status_then_dollar(env):
    assert expand_string("$$", env, 3) == "3$"


def test_blank_after_name_is_swallowed(env):
    assert expand_string("$A b", env, 0) == "hellob"


def test_unexpanded_tokens_untouched(env):
    tokens = tokenize("echo '$A'")
    assert expand_tokens(tokens, env, 0) == tokens


def test_double_quoted_not_split(env):
    tokens = tokenize('echo "$SPLIT" x')
    expanded = expand_tokens(tokens, env, 0)
    assert expanded[2] == Token(TokenType.DQ_STR, "a b")
    assert len(expanded) == len(tokens)


def test_last_word_not_split(env):
    expanded = expand_tokens(tokenize("echo $SPLIT"), env, 0)
    assert expanded[-1] == Token(TokenType.WORD, "a b")


def test_inner_word_is_split(env):
    expanded = expand_tokens(tokenize("echo $SPLIT x"), env, 0)
    assert expanded == (
        tokenize("echo ") + tokenize("a b") + tokenize(" x")
    )


def test_empty_expansion_stays_word(env):
    expanded = expand_tokens(tokenize("$EMPTY x"), env, 0)
    assert expanded[0] == Token(TokenType.WORD, "")
    assert len(expanded) == len(tokenize("$EMPTY x"))


def test_input_list_not_modified(env):
    tokens = tokenize("$A")
    expand_tokens(tokens, env, 0)
    assert tokens == [Token(TokenType.WORD, "$A")]