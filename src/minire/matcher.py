import logging
from typing import NamedTuple, Optional

from minire.errors import (
    InternalError,
    RecursionLimitExceeded,
    StepLimitExceeded,
    UnexpectedQuantifier,
)
from minire.parser import RegexParser
from minire.tokens import (
    CARET,
    DOLLAR,
    OPEN_BRACKET,
    OPEN_PAREN,
    PLUS,
    QUESTION,
    is_quantifier,
    match_class,
    match_token,
)
from minire.utils import MAX_DEPTH, Capture, CaptureSlots, RegexFlag

logger = logging.getLogger(__name__)


class Budget:
    """
    Bounds on the work done while looking for one match

    Attributes
    ----------
    step_limit: Optional[int]
        Maximum number of branch attempts, None for no limit
    max_depth: int
        Maximum nesting of branch attempts
    """

    __slots__ = ("step_limit", "max_depth", "steps", "depth")

    def __init__(self, step_limit: Optional[int] = None, max_depth: int = MAX_DEPTH):
        if step_limit is not None and step_limit <= 0:
            raise ValueError(f"step_limit must be positive, got {step_limit}")
        if max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self.step_limit = step_limit
        self.max_depth = max_depth
        self.steps = 0
        self.depth = 0

    def enter(self) -> None:
        self.steps += 1
        if self.step_limit is not None and self.steps > self.step_limit:
            raise StepLimitExceeded(f"gave up after {self.step_limit} steps")
        if self.depth >= self.max_depth:
            raise RecursionLimitExceeded(f"nesting deeper than {self.max_depth}")
        self.depth += 1

    def leave(self) -> None:
        self.depth -= 1

    def reset(self) -> None:
        self.steps = 0
        self.depth = 0


class Context(NamedTuple):
    """
    What a match attempt shares across the whole recursion

    The tuple itself is never rebuilt except for `origin`, which the driver sets per
    candidate start. `caps` is filled in place as groups match and `budget` counts the
    steps and nesting of the attempt.

    Attributes
    ---------
    subject: memoryview
        The bytes we are matching against this pattern
    flags: RegexFlag
        Matching flags, only IGNORECASE and DEBUG are consulted
    caps: Optional[CaptureSlots]
        Caller owned capture slots, None when captures are not recorded
    origin: int
        Subject offset of the current candidate start, where `^` succeeds
    budget: Budget
        Step and depth accounting, reset before each match is looked for
    """

    subject: memoryview
    flags: RegexFlag
    caps: Optional[CaptureSlots]
    origin: int
    budget: Budget


class BacktrackingMatcher:
    """
    Recursive backtracking over the tables built by a RegexParser

    Windows are half-open subject ranges [position, limit). Every method returns the number
    of bytes consumed from `position`, or None when there is no match.

    Examples
    --------
    >>> matcher = BacktrackingMatcher(RegexParser(b"a*a"))
    >>> subject = memoryview(b"aaa")
    >>> ctx = Context(subject, RegexFlag.NOFLAG, None, 0, Budget())
    >>> matcher.resolve_bracket(0, 0, len(subject), ctx)
    3
    """

    def __init__(self, parser: RegexParser):
        self.parser = parser
        self.pattern = parser.pattern

    def resolve_bracket(
        self, bracket: int, position: int, limit: int, context: Context
    ) -> Optional[int]:
        """Try the alternatives of `bracket` left to right, the first one to match wins"""
        for start, end in self.parser.branch_spans(bracket):
            consumed = self.match_branch(start, end, position, limit, context)
            if consumed is not None:
                return consumed
        return None

    def match_branch(
        self, start: int, end: int, position: int, limit: int, context: Context
    ) -> Optional[int]:
        """
        Match the tokens in pattern[start:end] against the subject window [position, limit)

        A group or a repeated unit is matched together with the rest of the branch, so the
        walk returns as soon as it meets one.
        """
        context.budget.enter()
        try:
            if context.flags.debugging():
                logger.debug(
                    "branch %r against %r",
                    self.pattern[start:end],
                    bytes(context.subject[position:limit]),
                )
            pattern, subject = self.pattern, context.subject
            i, j = start, 0
            while i < end:
                char = pattern[i]
                if is_quantifier(char):
                    raise UnexpectedQuantifier(
                        f"nothing to repeat for {chr(char)!r} at offset {i}"
                    )
                step = self.parser.unit_length(i)
                after = i + step
                if after < end and is_quantifier(pattern[after]):
                    if pattern[after] == QUESTION:
                        consumed = self.match_branch(
                            i, after, position + j, limit, context
                        )
                        j += consumed or 0
                        i = after + 1
                        continue
                    consumed = self._match_repeated(
                        i, after, end, position + j, limit, context
                    )
                    return None if consumed is None else j + consumed

                if char == OPEN_BRACKET:
                    if position + j >= limit or not match_class(
                        pattern, i + 1, after - 1, subject[position + j], context.flags
                    ):
                        return None
                    j += 1
                elif char == OPEN_PAREN:
                    consumed = self._match_group(i, after, end, position + j, limit, context)
                    return None if consumed is None else j + consumed
                elif char == CARET:
                    if position + j != context.origin:
                        return None
                elif char == DOLLAR:
                    if position + j != limit:
                        return None
                else:
                    if position + j >= limit or not match_token(
                        pattern, i, subject[position + j], context.flags
                    ):
                        return None
                    j += 1
                i = after
            return j
        finally:
            context.budget.leave()

    def _match_rest(
        self, start: int, end: int, position: int, limit: int, context: Context
    ) -> Optional[int]:
        if start >= end:
            return 0
        return self.match_branch(start, end, position, limit, context)

    def _match_group(
        self,
        start: int,
        after: int,
        end: int,
        position: int,
        limit: int,
        context: Context,
    ) -> Optional[int]:
        """
        Match the group at pattern[start:after], then the rest of the branch up to `end`

        When more of the branch follows the group, the group is tried against shrinking
        windows until the rest of the branch matches right after it. The returned length
        covers both the group and that rest.
        """
        bracket = self.parser.bracket_at(start)
        consumed, rest = None, 0
        for window_end in range(limit, position - 1, -1):
            consumed = self.resolve_bracket(bracket, position, window_end, context)
            if consumed is not None:
                rest = self._match_rest(after, end, position + consumed, limit, context)
                if rest is not None:
                    break
            if after >= end:
                # nothing follows, the whole window was the only trial
                break
        else:
            consumed = None
        if consumed is None or rest is None:
            return None

        if context.caps is not None:
            if bracket > len(context.caps):
                raise InternalError(
                    f"group {bracket} has no capture slot, {len(context.caps)} reserved"
                )
            context.caps[bracket - 1] = Capture(position, consumed)
            if context.flags.debugging():
                logger.debug(
                    "group %d captured %r",
                    bracket,
                    bytes(context.subject[position : position + consumed]),
                )
        return consumed + rest

    def _match_repeated(
        self,
        start: int,
        quantifier: int,
        end: int,
        position: int,
        limit: int,
        context: Context,
    ) -> Optional[int]:
        """
        Match the unit pattern[start:quantifier] repeated, followed by the rest of the branch

        Greedy repetition keeps the largest repetition count after which the rest matches,
        lazy repetition (`*?`, `+?`) stops at the first one.
        """
        pattern = self.pattern
        rest = quantifier + 1
        lazy = rest < end and pattern[rest] == QUESTION
        if lazy:
            rest += 1

        best = None
        if pattern[quantifier] != PLUS:
            best = self._match_rest(rest, end, position, limit, context)
            if lazy and best is not None:
                return best

        consumed = 0
        while True:
            repeated = self.match_branch(
                start, quantifier, position + consumed, limit, context
            )
            if repeated is None:
                break
            consumed += repeated
            tail = self._match_rest(rest, end, position + consumed, limit, context)
            if tail is not None:
                best = consumed + tail
                if lazy:
                    break
            if repeated == 0:
                # a zero-width unit would repeat forever
                break
        return best


if __name__ == "__main__":
    import doctest

    doctest.testmod()
