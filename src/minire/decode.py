from urllib.parse import unquote_to_bytes

from minire.utils import to_bytes


def percent_decode(data: bytes | bytearray | memoryview | str) -> bytes:
    """
    Replace `%HH` escapes with the byte they encode, until none are left

    Each pass decodes the escapes present in its input; passes repeat so that multiply
    encoded input (`%2541` -> `%41` -> `A`) comes out fully decoded. A `%` that is not
    followed by two hex digits is kept as is, so decoding is idempotent.

    Examples
    --------
    >>> percent_decode("id=%3Cscript%3E")
    b'id=<script>'
    >>> percent_decode(b"%2541%")
    b'A%'
    >>> percent_decode(b"100%zz")
    b'100%zz'
    >>> percent_decode(percent_decode(b"%252541")) == percent_decode(b"%252541")
    True
    """
    decoded = bytes(to_bytes(data))
    while b"%" in decoded:
        passed = unquote_to_bytes(decoded)
        if passed == decoded:
            break
        decoded = passed
    return decoded


if __name__ == "__main__":
    import doctest

    doctest.testmod()
