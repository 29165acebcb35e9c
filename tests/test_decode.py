import pytest

from minire.decode import percent_decode
from minire.search import search
from minire.utils import RegexFlag


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", b""),
        (b"plain", b"plain"),
        (b"%41%42", b"AB"),
        (b"%3c%3E", b"<>"),
        (b"%2541", b"A"),
        (b"%25252541", b"A"),
        (b"50%", b"50%"),
        (b"%4", b"%4"),
        (b"%%41", b"%A"),
        (b"%zz%41", b"%zzA"),
        (b"%00", b"\x00"),
        (b"%ff", b"\xff"),
        (b"a+b", b"a+b"),
        ("caf%C3%A9", "café".encode("utf-8")),
    ],
)
def test_percent_decode(data, expected):
    assert percent_decode(data) == expected


@pytest.mark.parametrize("data", [b"%252541", b"%%2541", b"x%2", b"%25%34%31"])
def test_idempotent(data):
    once = percent_decode(data)
    assert percent_decode(once) == once


def test_decoded_script_tag():
    subject = percent_decode(b"q=%253CScRiPt%253Ealert(1)")
    m = search(b"<script>", subject, RegexFlag.IGNORECASE)
    assert m is not None
    assert m.span == (2, 10)
