from typing import Final, Optional

from minire.errors import InternalError, InvalidCharacterSet, InvalidMetacharacter
from minire.utils import RegexFlag, fold

BACKSLASH: Final[int] = ord("\\")
CARET: Final[int] = ord("^")
DOLLAR: Final[int] = ord("$")
DOT: Final[int] = ord(".")
DASH: Final[int] = ord("-")
PIPE: Final[int] = ord("|")
STAR: Final[int] = ord("*")
PLUS: Final[int] = ord("+")
QUESTION: Final[int] = ord("?")
OPEN_PAREN: Final[int] = ord("(")
CLOSE_PAREN: Final[int] = ord(")")
OPEN_BRACKET: Final[int] = ord("[")
CLOSE_BRACKET: Final[int] = ord("]")

# bytes that may follow a backslash; `x` is handled separately since it takes two hex digits
METACHARACTERS: Final[frozenset[int]] = frozenset(b"^$().[]*+?|\\Ssdbfnrtv")
QUANTIFIERS: Final[frozenset[int]] = frozenset(b"*+?")
WHITESPACE: Final[frozenset[int]] = frozenset(b" \t\n\v\f\r")
HEXDIGITS: Final[frozenset[int]] = frozenset(b"0123456789abcdefABCDEF")
CONTROL_ESCAPES: Final[dict[str, int]] = {
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
}


def is_quantifier(byte: int) -> bool:
    return byte in QUANTIFIERS


def op_length(pattern: bytes, i: int) -> int:
    """
    Length of the single token starting at pattern[i], classes excluded

    Examples
    --------
    >>> op_length(b"a", 0), op_length(b"\\\\d", 0), op_length(b"\\\\x41", 0)
    (1, 2, 4)
    """
    if pattern[i] == BACKSLASH:
        return 4 if i + 1 < len(pattern) and pattern[i + 1] == ord("x") else 2
    return 1


def validate_escape(pattern: bytes, i: int) -> None:
    """
    Check that the backslash at pattern[i] starts a well-formed escape

    Raises
    ------
    InvalidMetacharacter
        If the backslash is the last byte, if `\\x` is not followed by two hex digits,
        or if the escaped byte is not a metacharacter

    Examples
    --------
    >>> validate_escape(b"\\\\x4F", 0)
    >>> validate_escape(b"\\\\q", 0)
    Traceback (most recent call last):
        ...
    minire.errors.InvalidMetacharacter: unknown escape '\\q' at offset 0
    """
    if i + 1 >= len(pattern):
        raise InvalidMetacharacter(f"dangling backslash at offset {i}")
    escaped = pattern[i + 1]
    if escaped == ord("x"):
        digits = pattern[i + 2 : i + 4]
        if len(digits) != 2 or not all(digit in HEXDIGITS for digit in digits):
            raise InvalidMetacharacter(f"malformed hex escape at offset {i}")
    elif escaped not in METACHARACTERS:
        raise InvalidMetacharacter(
            f"unknown escape '\\{chr(escaped)}' at offset {i}"
        )


def class_length(pattern: bytes, i: int) -> int:
    """
    Length of the character class starting at pattern[i], both brackets included

    Escapes inside the class are skipped as whole tokens, so `[\\]]` is one class.

    Examples
    --------
    >>> class_length(b"[a-z]+", 0)
    5
    >>> class_length(b"x[\\\\]]", 1)
    4
    >>> class_length(b"[abc", 0)
    Traceback (most recent call last):
        ...
    minire.errors.InvalidCharacterSet: character class at offset 0 is not closed
    """
    k = i + 1
    while k < len(pattern) and pattern[k] != CLOSE_BRACKET:
        if pattern[k] == BACKSLASH:
            validate_escape(pattern, k)
        k += op_length(pattern, k)
    if k >= len(pattern):
        raise InvalidCharacterSet(f"character class at offset {i} is not closed")
    return k - i + 1


def token_length(pattern: bytes, i: int) -> int:
    """Length of the token at pattern[i], validating escapes and classes on the way"""
    if pattern[i] == OPEN_BRACKET:
        return class_length(pattern, i)
    if pattern[i] == BACKSLASH:
        validate_escape(pattern, i)
    return op_length(pattern, i)


def match_token(pattern: bytes, i: int, byte: int, flags: RegexFlag) -> bool:
    """
    Check one (non-class) token of the pattern against one subject byte

    Examples
    --------
    >>> match_token(b"\\\\d", 0, ord("7"), RegexFlag.NOFLAG)
    True
    >>> match_token(b"\\\\x41", 0, ord("A"), RegexFlag.NOFLAG)
    True
    >>> match_token(b"a", 0, ord("A"), RegexFlag.IGNORECASE)
    True
    >>> match_token(b"$", 0, ord("$"), RegexFlag.NOFLAG)
    False
    """
    token = pattern[i]
    if token == BACKSLASH:
        match chr(pattern[i + 1]):
            case "S":
                return byte not in WHITESPACE
            case "s":
                return byte in WHITESPACE
            case "d":
                return 0x30 <= byte <= 0x39
            case "x":
                return byte == int(pattern[i + 2 : i + 4], 16)
            case escaped if escaped in CONTROL_ESCAPES:
                return byte == CONTROL_ESCAPES[escaped]
            case _:
                return byte == pattern[i + 1]
    if token == PIPE:
        raise InternalError(f"alternation reached as a literal at offset {i}")
    if token == DOLLAR:
        return False
    if token == DOT:
        return True
    if flags.ignores_case():
        return fold(token) == fold(byte)
    return token == byte


def range_bound(pattern: bytes, i: int) -> Optional[int]:
    """
    The byte value of the token at pattern[i] when used as the high end of a range

    Escapes denoting a single byte resolve to that byte, `\\S`, `\\s` and `\\d` stand for
    several bytes and give None.

    Examples
    --------
    >>> range_bound(b"z", 0), range_bound(b"\\\\x43", 0), range_bound(b"\\\\]", 0)
    (122, 67, 93)
    >>> range_bound(b"\\\\d", 0) is None
    True
    """
    if pattern[i] != BACKSLASH:
        return pattern[i]
    match chr(pattern[i + 1]):
        case "S" | "s" | "d":
            return None
        case "x":
            return int(pattern[i + 2 : i + 4], 16)
        case escaped if escaped in CONTROL_ESCAPES:
            return CONTROL_ESCAPES[escaped]
        case _:
            return pattern[i + 1]


def match_class(
    pattern: bytes, start: int, end: int, byte: int, flags: RegexFlag
) -> bool:
    """
    Check a subject byte against the class body pattern[start:end]

    The body excludes the surrounding brackets. A leading `^` negates the class, `a-b` is
    an inclusive range and a `-` at the end of the body is literal. The high end of a range
    may be a single-byte escape such as `\\x43`.

    Examples
    --------
    >>> body = b"[a-z_]"
    >>> match_class(body, 1, 5, ord("q"), RegexFlag.NOFLAG)
    True
    >>> match_class(body, 1, 5, ord("Q"), RegexFlag.NOFLAG)
    False
    >>> match_class(body, 1, 5, ord("Q"), RegexFlag.IGNORECASE)
    True
    >>> match_class(b"[^0-9]", 1, 5, ord("5"), RegexFlag.NOFLAG)
    False
    >>> match_class(b"[+-]", 1, 3, ord("-"), RegexFlag.NOFLAG)
    True
    >>> match_class(b"[A-\\\\x43]", 1, 7, ord("B"), RegexFlag.NOFLAG)
    True
    """
    negated = start < end and pattern[start] == CARET
    k = start + negated
    found = False
    while k < end and not found:
        high = None
        if (
            pattern[k] not in (DASH, BACKSLASH)
            and k + 2 < end
            and pattern[k + 1] == DASH
        ):
            high = range_bound(pattern, k + 2)
        if high is not None:
            low = pattern[k]
            if flags.ignores_case():
                found = fold(low) <= fold(byte) <= fold(high)
            else:
                found = low <= byte <= high
            k += 2 + op_length(pattern, k + 2)
        else:
            if pattern[k] in (PIPE, DOLLAR):
                # no special meaning inside a class
                found = pattern[k] == byte
            else:
                found = match_token(pattern, k, byte, flags)
            k += op_length(pattern, k)
    return found ^ negated


if __name__ == "__main__":
    import doctest

    doctest.testmod()
