import pytest

from safecmd.core.lexer import is_well_nested, split_args


def test_three_top_level_args_despite_inner_commas():
    assert split_args("{a:1,b:2}, 'x,y', [1,2,3]") == ["{a:1,b:2}", "'x,y'", "[1,2,3]"]


@pytest.mark.parametrize("text", ["", "   "])
def test_blank_is_empty(text):
    assert split_args(text) == []


def test_parentheses_nest():
    assert split_args("new Date(Date.now() + 1000), 3") == ["new Date(Date.now() + 1000)", "3"]


def test_escaped_quote_does_not_close_string():
    assert split_args(r'"a\",b", c') == [r'"a\",b"', "c"]


def test_other_quote_inside_string_is_literal():
    assert split_args("\"it's\", 'x'") == ["\"it's\"", "'x'"]


def test_brackets_inside_string_do_not_count():
    assert split_args('"{[(", 2') == ['"{[("', "2"]


def test_trailing_comma_drops_blank_tail():
    assert split_args("1, 2,") == ["1", "2"]


def test_empty_middle_argument_kept():
    assert split_args("1,,2") == ["1", "", "2"]


def test_single_argument():
    assert split_args("  {title: 'x'}  ") == ["{title: 'x'}"]


@pytest.mark.parametrize("text, expected", [
    ("1, (2)", True),
    ("[1, 2,", True),
    ("1)(2", False),
    ('")("', True),
    ("", True),
])
def test_is_well_nested(text, expected):
    assert is_well_nested(text) is expected
