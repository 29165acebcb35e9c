import pytest

from minire.errors import InvalidCharacterSet, InvalidMetacharacter
from minire.tokens import (
    class_length,
    match_class,
    match_token,
    op_length,
    token_length,
    validate_escape,
)
from minire.utils import RegexFlag


@pytest.mark.parametrize(
    "pattern, expected",
    [(b"a", 1), (b".", 1), (b"\\d", 2), (b"\\.", 2), (b"\\x7F", 4)],
)
def test_op_length(pattern, expected):
    assert op_length(pattern, 0) == expected


@pytest.mark.parametrize("pattern", [b"\\", b"\\x", b"\\x1", b"\\xG1", b"\\w", b"\\1"])
def test_invalid_escapes(pattern):
    with pytest.raises(InvalidMetacharacter):
        validate_escape(pattern, 0)


@pytest.mark.parametrize(
    "pattern, expected",
    [(b"[a]", 3), (b"[^a-z]x", 6), (b"[\\]]", 4), (b"[\\x41-]", 7)],
)
def test_class_length(pattern, expected):
    assert class_length(pattern, 0) == expected
    assert token_length(pattern, 0) == expected


@pytest.mark.parametrize("pattern", [b"[", b"[ab", b"[\\]"])
def test_unclosed_class(pattern):
    with pytest.raises(InvalidCharacterSet):
        class_length(pattern, 0)


def test_bad_escape_inside_class():
    with pytest.raises(InvalidMetacharacter):
        class_length(b"[a\\qb]", 0)


@pytest.mark.parametrize(
    "pattern, byte, expected",
    [
        (b"\\s", ord(" "), True),
        (b"\\s", ord("\v"), True),
        (b"\\s", ord("a"), False),
        (b"\\S", ord("\n"), False),
        (b"\\S", 0xFF, True),
        (b"\\d", ord("0"), True),
        (b"\\d", ord("a"), False),
        (b"\\n", 0x0A, True),
        (b"\\t", 0x09, True),
        (b"\\b", 0x08, True),
        (b"\\x00", 0x00, True),
        (b"\\xff", 0xFF, True),
        (b"\\*", ord("*"), True),
        (b".", 0x00, True),
        (b"a", ord("b"), False),
    ],
)
def test_match_token(pattern, byte, expected):
    assert match_token(pattern, 0, byte, RegexFlag.NOFLAG) is expected


def test_hex_escape_is_exact():
    assert not match_token(b"\\x61", 0, ord("A"), RegexFlag.IGNORECASE)
    assert match_token(b"a", 0, ord("A"), RegexFlag.IGNORECASE)
    assert not match_token(b"a", 0, ord("A"), RegexFlag.NOFLAG)


@pytest.mark.parametrize(
    "cls, byte, expected",
    [
        (b"[abc]", ord("b"), True),
        (b"[abc]", ord("d"), False),
        (b"[^abc]", ord("d"), True),
        (b"[a-c]", ord("c"), True),
        (b"[-a]", ord("-"), True),
        (b"[a-]", ord("-"), True),
        (b"[\\d_]", ord("_"), True),
        (b"[\\d_]", ord("5"), True),
        (b"[|$]", ord("|"), True),
        (b"[|$]", ord("$"), True),
        (b"[.]", ord("x"), True),
        (b"[\\x41-\\x43]", ord("B"), False),
        (b"[\\]]", ord("]"), True),
        (b"[a-\\x43]", ord("b"), False),
        (b"[a-\\x43]", ord("x"), False),
        (b"[a-\\x43]", ord("4"), False),
        (b"[A-\\x43]", ord("B"), True),
        (b"[A-\\x43]", ord("x"), False),
        (b"[a-\\x7a]", ord("m"), True),
        (b"[a-\\x7a]", ord("{"), False),
        (b"[!-\\]]", ord("A"), True),
        (b"[0-\\d]", ord("-"), True),
        (b"[0-\\d]", ord("7"), True),
    ],
)
def test_match_class(cls, byte, expected):
    assert match_class(cls, 1, len(cls) - 1, byte, RegexFlag.NOFLAG) is expected


def test_match_class_ignorecase():
    assert match_class(b"[a-c]", 1, 4, ord("B"), RegexFlag.IGNORECASE)
    assert not match_class(b"[^A-C]", 1, 5, ord("b"), RegexFlag.IGNORECASE)
