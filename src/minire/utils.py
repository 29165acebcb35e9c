from enum import IntFlag
from typing import Final, NamedTuple, Optional

# structural capacities; entry 0 of the bracket table counts against MAX_BRACKETS
MAX_BRACKETS: Final[int] = 100
MAX_BRANCHES: Final[int] = 100
# nesting bound for the recursive matcher, kept well below the interpreter's limit
MAX_DEPTH: Final[int] = 150


class RegexFlag(IntFlag):
    NOFLAG = 0
    IGNORECASE = 1
    DEBUG = 2  # trace matching through logging and show progress with tqdm

    def ignores_case(self) -> bool:
        return bool(self & RegexFlag.IGNORECASE)

    def debugging(self) -> bool:
        return bool(self & RegexFlag.DEBUG)


class Capture(NamedTuple):
    """
    A span of the subject recorded for one capturing group

    Attributes
    ----------
    offset: int
        Offset of the first captured byte in the subject
    length: int
        Number of captured bytes

    Examples
    --------
    >>> Capture(3, 4).end
    7
    """

    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


CaptureSlots = list[Optional[Capture]]


def to_bytes(data: bytes | bytearray | memoryview | str) -> memoryview:
    """
    View `data` as a sequence of unsigned bytes without copying it

    Strings are encoded as UTF-8 first, so offsets are always byte offsets.

    Examples
    --------
    >>> to_bytes("ab")[1]
    98
    >>> bytes(to_bytes(bytearray(b"xyz"))[1:])
    b'yz'
    >>> to_bytes(42)
    Traceback (most recent call last):
        ...
    TypeError: expected bytes-like object or str, got int
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        view = memoryview(data)
    except TypeError:
        raise TypeError(
            f"expected bytes-like object or str, got {type(data).__name__}"
        ) from None
    return view if view.format == "B" and view.ndim == 1 else view.cast("B")


def fold(byte: int) -> int:
    """
    ASCII lower-casing of a single byte value

    >>> chr(fold(ord("Q"))), chr(fold(ord("q"))), chr(fold(ord("[")))
    ('q', 'q', '[')
    """
    return byte | 0x20 if 0x41 <= byte <= 0x5A else byte


if __name__ == "__main__":
    import doctest

    doctest.testmod()
