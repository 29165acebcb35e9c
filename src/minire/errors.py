from enum import Enum
from typing import ClassVar


class ErrorKind(Enum):
    """
    Every way a match call can end without a match

    The values are the classic signed result codes, so a caller that wants a
    single integer can use `kind.code`.
    """

    NO_MATCH = -1
    UNEXPECTED_QUANTIFIER = -2
    UNBALANCED_BRACKETS = -3
    INTERNAL_ERROR = -4
    INVALID_CHARACTER_SET = -5
    INVALID_METACHARACTER = -6
    CAPS_ARRAY_TOO_SMALL = -7
    TOO_MANY_BRANCHES = -8
    TOO_MANY_BRACKETS = -9
    STEP_LIMIT_EXCEEDED = -10
    RECURSION_LIMIT_EXCEEDED = -11

    @property
    def code(self) -> int:
        return self.value


class RegexError(Exception):
    """
    Base class of all errors that abort a match

    Not finding a match is not an error: matching functions return None for that.

    Examples
    --------
    >>> err = UnbalancedBrackets("unexpected ')' at offset 1")
    >>> err.kind, err.kind.code
    (<ErrorKind.UNBALANCED_BRACKETS: -3>, -3)
    >>> isinstance(err, RegexError)
    True
    """

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message or self.kind.name)


class UnexpectedQuantifier(RegexError):
    kind = ErrorKind.UNEXPECTED_QUANTIFIER


class UnbalancedBrackets(RegexError):
    kind = ErrorKind.UNBALANCED_BRACKETS


class InternalError(RegexError):
    kind = ErrorKind.INTERNAL_ERROR


class InvalidCharacterSet(RegexError):
    kind = ErrorKind.INVALID_CHARACTER_SET


class InvalidMetacharacter(RegexError):
    kind = ErrorKind.INVALID_METACHARACTER


class CapsArrayTooSmall(RegexError):
    kind = ErrorKind.CAPS_ARRAY_TOO_SMALL


class TooManyBranches(RegexError):
    kind = ErrorKind.TOO_MANY_BRANCHES


class TooManyBrackets(RegexError):
    kind = ErrorKind.TOO_MANY_BRACKETS


class StepLimitExceeded(RegexError):
    kind = ErrorKind.STEP_LIMIT_EXCEEDED


class RecursionLimitExceeded(RegexError):
    kind = ErrorKind.RECURSION_LIMIT_EXCEEDED


if __name__ == "__main__":
    import doctest

    doctest.testmod()
