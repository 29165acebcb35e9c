from sys import maxsize
from typing import Callable, Iterator, NamedTuple, Optional

from more_itertools import first, take
from tqdm import tqdm

from minire.matcher import BacktrackingMatcher, Budget, Context
from minire.parser import RegexParser
from minire.utils import (
    MAX_BRACKETS,
    MAX_BRANCHES,
    MAX_DEPTH,
    Capture,
    CaptureSlots,
    RegexFlag,
    to_bytes,
)

Data = bytes | bytearray | memoryview | str


class RegexMatch(NamedTuple):
    start: int
    end: int
    subject: memoryview
    captures: tuple[Optional[Capture], ...]

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end

    @property
    def length(self) -> int:
        return self.end - self.start

    def group(self, index: int = 0) -> Optional[bytes]:
        if index < 0 or index > len(self.captures):
            raise IndexError(f"index should be 0 <= {index} <= {len(self.captures)}")
        if index == 0:
            return bytes(self.subject[self.start : self.end])
        capture = self.captures[index - 1]
        if capture is None:
            return None
        return bytes(self.subject[capture.offset : capture.end])

    def groups(self) -> tuple[Optional[bytes], ...]:
        return tuple(map(self.group, range(1, len(self.captures) + 1)))

    def __repr__(self):
        return (
            f"{self.__class__.__name__}"
            f"(span={self.span}, "
            f"match={self.group(0)!r})"
        )


def _scan(
    parser: RegexParser, matcher: BacktrackingMatcher, context: Context, start: int
) -> Optional[RegexMatch]:
    """Leftmost match whose start is at or after `start`"""
    limit = len(context.subject)
    if parser.is_anchored:
        offsets = range(0, 1) if start == 0 else range(0)
    else:
        offsets = range(start, limit + 1)
    for offset in offsets:
        consumed = matcher.resolve_bracket(
            0, offset, limit, context._replace(origin=offset)
        )
        if consumed is not None:
            captures = tuple(context.caps) if context.caps is not None else ()
            return RegexMatch(offset, offset + consumed, context.subject, captures)
    return None


def finditer(
    pattern: Data,
    subject: Data,
    flags: RegexFlag = RegexFlag.NOFLAG,
    caps: Optional[CaptureSlots] = None,
    *,
    max_brackets: int = MAX_BRACKETS,
    max_branches: int = MAX_BRANCHES,
    step_limit: Optional[int] = None,
    max_depth: int = MAX_DEPTH,
) -> Iterator[RegexMatch]:
    """
    Yield the successive non-overlapping matches of `pattern` in `subject`

    The pattern is analyzed once per call; nothing is cached across calls. An empty match
    moves the next search one byte further.

    Parameters
    ----------
    pattern: Data
        The regular expression, str patterns are encoded as UTF-8
    subject: Data
        The bytes to search; it is never copied
    flags: RegexFlag
        IGNORECASE for ASCII case-insensitive matching, DEBUG for tracing
    caps: Optional[CaptureSlots]
        Caller owned capture slots, slot i receives group i + 1. Its length is the
        capacity; None or an empty list means captures are not recorded. Slots of groups
        that never took part in a match keep their previous value.
    max_brackets, max_branches: int
        Capacities of the bracket and branch tables
    step_limit: Optional[int]
        Give up with StepLimitExceeded after this many branch attempts while looking
        for one match; the count starts over for every match yielded
    max_depth: int
        Give up with RecursionLimitExceeded beyond this nesting of branch attempts

    Raises
    ------
    RegexError
        A subclass naming the structural problem of the pattern or the exhausted budget

    Examples
    --------
    >>> [m.group() for m in finditer(b"[0-9]+", b"a1b22c333")]
    [b'1', b'22', b'333']
    """
    flags = RegexFlag(flags)
    pattern = bytes(to_bytes(pattern))
    view = to_bytes(subject)
    slots = caps if caps else None
    parser = RegexParser(
        pattern, max_brackets, max_branches, len(slots) if slots is not None else 0
    )
    matcher = BacktrackingMatcher(parser)
    context = Context(view, flags, slots, 0, Budget(step_limit, max_depth))

    show_progress = flags.debugging()
    if show_progress:
        t = tqdm(total=len(view), desc=repr(pattern))
    start = 0
    try:
        while start <= len(view):
            context.budget.reset()
            if (found := _scan(parser, matcher, context, start)) is None:
                if show_progress:
                    t.update(len(view) - start)
                break
            yield found
            # an empty match must not be found again at the same offset
            next_start = found.end if found.end > found.start else found.end + 1
            if show_progress:
                t.update(next_start - start)
            start = next_start
    finally:
        if show_progress:
            t.close()


def search(
    pattern: Data,
    subject: Data,
    flags: RegexFlag = RegexFlag.NOFLAG,
    caps: Optional[CaptureSlots] = None,
    **options,
) -> Optional[RegexMatch]:
    """
    Find the leftmost match of `pattern` in `subject`, or None when there is none

    Patterns starting with `^` are only tried at offset 0. See `finditer` for the parameters.

    Examples
    --------
    >>> search(b"<SCRIPT", b"text<script src=x>", RegexFlag.IGNORECASE)
    RegexMatch(span=(4, 11), match=b'<script')
    >>> slots = [None]
    >>> search(b"(cat|dog)", b"hotdog", caps=slots).groups()
    (b'dog',)
    >>> slots
    [Capture(offset=3, length=3)]
    >>> search(b"^abc", b"xabc") is None
    True
    """
    return first(finditer(pattern, subject, flags, caps, **options), default=None)


def findall(
    pattern: Data,
    subject: Data,
    flags: RegexFlag = RegexFlag.NOFLAG,
    **options,
) -> list[bytes]:
    return [m.group(0) for m in finditer(pattern, subject, flags, **options)]


def _sub(
    pattern: Data,
    subject: Data,
    replacer: bytes | Callable[[RegexMatch], bytes],
    count: int,
    flags: RegexFlag,
    options: dict,
) -> tuple[bytes, int]:
    if isinstance(replacer, bytes):
        r = lambda _: replacer
    else:
        r = replacer
    view = to_bytes(subject)
    matches = take(count, finditer(pattern, view, flags, **options))
    chunks = []
    start, subs = 0, 0
    for match in matches:
        chunks.append(bytes(view[start : match.start]))
        chunks.append(r(match))
        start = match.end
        subs += 1
    chunks.append(bytes(view[start:]))
    return b"".join(chunks), subs


def subn(
    pattern: Data,
    subject: Data,
    replacer: bytes | Callable[[RegexMatch], bytes],
    count: int = maxsize,
    flags: RegexFlag = RegexFlag.NOFLAG,
    **options,
) -> tuple[bytes, int]:
    """
    Like `sub`, but also return the number of replacements made

    A callable replacer receives each RegexMatch, so it can splice captured groups.

    >>> subn(b"([a-z])([0-9])", b"a1 b2", lambda m: m.group(2) + m.group(1), caps=[None, None])
    (b'1a 2b', 2)
    """
    return _sub(pattern, subject, replacer, count, flags, options)


def sub(
    pattern: Data,
    subject: Data,
    replacer: bytes | Callable[[RegexMatch], bytes],
    count: int = maxsize,
    flags: RegexFlag = RegexFlag.NOFLAG,
    **options,
) -> bytes:
    """
    Replace the first `count` matches of `pattern` in `subject`

    >>> sub(b"\\\\s+", b"a  b\\tc", b" ")
    b'a b c'
    """
    return _sub(pattern, subject, replacer, count, flags, options)[0]


if __name__ == "__main__":
    import doctest

    doctest.testmod()
