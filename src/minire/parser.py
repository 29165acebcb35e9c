from dataclasses import dataclass
from enum import Enum, auto
from itertools import groupby, pairwise
from operator import attrgetter
from typing import Optional

from more_itertools import ilen

from minire.errors import (
    CapsArrayTooSmall,
    InternalError,
    TooManyBrackets,
    TooManyBranches,
    UnbalancedBrackets,
    UnexpectedQuantifier,
)
from minire.tokens import (
    CLOSE_PAREN,
    OPEN_BRACKET,
    OPEN_PAREN,
    PIPE,
    PLUS,
    QUESTION,
    STAR,
    is_quantifier,
    op_length,
    token_length,
)
from minire.utils import MAX_BRACKETS, MAX_BRANCHES


@dataclass(slots=True)
class BracketPair:
    """
    The structural record of one `(...)` group

    Attributes
    ----------
    start: int
        Offset of the first pattern byte after the opening parenthesis
    length: Optional[int]
        Number of pattern bytes between the parentheses, None until the `)` is seen
    branch_start: int
        Index of the first branch owned by this bracket in the sorted branch table
    branch_count: int
        Number of `|` separators directly inside this bracket
    """

    start: int
    length: Optional[int] = None
    branch_start: int = 0
    branch_count: int = 0

    @property
    def end(self) -> int:
        assert self.length is not None
        return self.start + self.length


@dataclass(slots=True, frozen=True)
class Branch:
    bracket: int
    separator: int


class _Position(Enum):
    """What the analyzer saw last, used to validate quantifier placement"""

    BRANCH_START = auto()
    UNIT = auto()
    REPEATED = auto()  # after `*` or `+`, a lazy `?` may follow
    QUANTIFIED = auto()


class RegexParser:
    """
    Single pass analysis of a pattern into a bracket table and a branch table

    Entry 0 of the bracket table spans the whole pattern. Nested groups form a tree through
    the stack of open brackets, and every `|` belongs to the innermost open bracket.

    Examples
    --------
    >>> parser = RegexParser(b"(cat|dog)s|x")
    >>> parser.group_count
    1
    >>> parser.branch_spans(0)
    [(0, 10), (11, 12)]
    >>> parser.branch_spans(1)
    [(1, 4), (5, 8)]
    >>> parser.bracket_at(0)
    1
    >>> RegexParser(b"a)b")
    Traceback (most recent call last):
        ...
    minire.errors.UnbalancedBrackets: unexpected ')' at offset 1
    """

    def __init__(
        self,
        pattern: bytes,
        max_brackets: int = MAX_BRACKETS,
        max_branches: int = MAX_BRANCHES,
        num_caps: int = 0,
    ):
        if max_brackets <= 0 or max_branches <= 0:
            raise ValueError(
                f"capacities must be positive: brackets={max_brackets}, branches={max_branches}"
            )
        self._pattern = pattern
        self._max_brackets = max_brackets
        self._max_branches = max_branches
        self._num_caps = num_caps
        self._pos = 0
        self._brackets: list[BracketPair] = [BracketPair(0, len(pattern))]
        self._branches: list[Branch] = []
        # offset of a '(' -> handle into the bracket table
        self._openings: dict[int, int] = {}
        # offset of a '(' or '[' -> number of pattern bytes the unit spans
        self._unit_lengths: dict[int, int] = {}
        self._spans: list[list[tuple[int, int]]] = []
        self._analyze()
        self._index_branches()

    @property
    def pattern(self) -> bytes:
        return self._pattern

    @property
    def brackets(self) -> list[BracketPair]:
        return self._brackets

    @property
    def branches(self) -> list[Branch]:
        return self._branches

    @property
    def group_count(self) -> int:
        return len(self._brackets) - 1

    @property
    def is_anchored(self) -> bool:
        return self._pattern[:1] == b"^"

    def current(self) -> int:
        return self._pattern[self._pos]

    def within_bounds(self) -> bool:
        return self._pos < len(self._pattern)

    def _open_bracket(self, stack: list[int]) -> None:
        if len(self._brackets) >= self._max_brackets:
            raise TooManyBrackets(
                f"more than {self._max_brackets - 1} groups at offset {self._pos}"
            )
        stack.append(len(self._brackets))
        self._openings[self._pos] = len(self._brackets)
        self._brackets.append(BracketPair(self._pos + 1))
        if 0 < self._num_caps < self.group_count:
            raise CapsArrayTooSmall(
                f"{self.group_count} groups but only {self._num_caps} capture slots"
            )

    def _close_bracket(self, stack: list[int]) -> None:
        if not stack:
            raise UnbalancedBrackets(f"unexpected ')' at offset {self._pos}")
        bracket = self._brackets[stack.pop()]
        if bracket.start == self._pos:
            raise UnbalancedBrackets(f"empty group at offset {self._pos - 1}")
        bracket.length = self._pos - bracket.start
        self._unit_lengths[bracket.start - 1] = bracket.length + 2

    def _add_branch(self, stack: list[int]) -> None:
        if len(self._branches) >= self._max_branches:
            raise TooManyBranches(
                f"more than {self._max_branches} alternations at offset {self._pos}"
            )
        self._branches.append(Branch(stack[-1] if stack else 0, self._pos))

    def _check_quantifier(self, last: _Position) -> _Position:
        char = self.current()
        if last is _Position.UNIT:
            return _Position.REPEATED if char in (STAR, PLUS) else _Position.QUANTIFIED
        if last is _Position.REPEATED and char == QUESTION:
            return _Position.QUANTIFIED
        raise UnexpectedQuantifier(
            f"nothing to repeat for {chr(char)!r} at offset {self._pos}"
        )

    def _analyze(self) -> None:
        stack: list[int] = []
        last = _Position.BRANCH_START
        while self.within_bounds():
            char = self.current()
            step = 1
            if char == PIPE:
                self._add_branch(stack)
                last = _Position.BRANCH_START
            elif char == OPEN_PAREN:
                self._open_bracket(stack)
                last = _Position.BRANCH_START
            elif char == CLOSE_PAREN:
                self._close_bracket(stack)
                last = _Position.UNIT
            elif is_quantifier(char):
                last = self._check_quantifier(last)
            else:
                step = token_length(self._pattern, self._pos)
                if char == OPEN_BRACKET:
                    self._unit_lengths[self._pos] = step
                last = _Position.UNIT
            self._pos += step

        if stack:
            raise UnbalancedBrackets(
                f"{len(stack)} unclosed group(s), last opened at offset "
                f"{self._brackets[stack[-1]].start - 1}"
            )

    def _index_branches(self) -> None:
        # list.sort is stable: branches of one bracket keep their left-to-right order
        self._branches.sort(key=attrgetter("bracket"))
        position = 0
        for bracket, members in groupby(self._branches, key=attrgetter("bracket")):
            count = ilen(members)
            self._brackets[bracket].branch_start = position
            self._brackets[bracket].branch_count = count
            position += count

        for pair in self._brackets:
            owned = self._branches[
                pair.branch_start : pair.branch_start + pair.branch_count
            ]
            bounds = [pair.start - 1, *(branch.separator for branch in owned), pair.end]
            self._spans.append([(lo + 1, hi) for lo, hi in pairwise(bounds)])

    def branch_spans(self, bracket: int) -> list[tuple[int, int]]:
        """Pattern spans of the alternatives of `bracket`, in left-to-right order"""
        if not 0 <= bracket < len(self._spans):
            raise InternalError(f"bracket {bracket} is not in the bracket table")
        return self._spans[bracket]

    def bracket_at(self, offset: int) -> int:
        """The handle of the group whose '(' is at pattern[offset]"""
        try:
            return self._openings[offset]
        except KeyError:
            raise InternalError(f"no group opens at offset {offset}") from None

    def unit_length(self, offset: int) -> int:
        """
        Number of pattern bytes taken by the unit at `offset`

        A group or a class spans up to and including its closing byte, anything else is a
        single token.

        >>> parser = RegexParser(b"(ab)[cd]\\\\x41e")
        >>> [parser.unit_length(offset) for offset in (0, 4, 8, 12)]
        [4, 4, 4, 1]
        """
        if offset in self._unit_lengths:
            return self._unit_lengths[offset]
        if self._pattern[offset] in (OPEN_PAREN, OPEN_BRACKET):
            raise InternalError(f"unit at offset {offset} was not analyzed")
        return op_length(self._pattern, offset)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._pattern!r})"


if __name__ == "__main__":
    import doctest

    doctest.testmod()
