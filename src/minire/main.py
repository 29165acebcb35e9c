import json
import logging
import sys
from typing import IO, Optional

import click

from minire.decode import percent_decode
from minire.errors import RegexError
from minire.search import RegexMatch, finditer, search
from minire.utils import RegexFlag


def _to_text(data: Optional[bytes]) -> Optional[str]:
    return None if data is None else data.decode("utf-8", errors="backslashreplace")


def _describe(m: RegexMatch) -> dict:
    return {
        "span": m.span,
        "match": _to_text(m.group(0)),
        "groups": [_to_text(group) for group in m.groups()],
    }


@click.command(name="minire", help="Backtracking regular expression matcher")
@click.argument("pattern", type=click.STRING)
@click.option("--text", type=click.STRING, help="text to search pattern")
@click.option(
    "--input-file", type=click.File("rb"), default=None, help="Input file"
)
@click.option(
    "--out", "-o", type=click.File("w"), default="-", help="Output of the file"
)
@click.option(
    "--ignorecase",
    "-i",
    is_flag=True,
    show_default=True,
    default=False,
    help="Ignore case",
)
@click.option(
    "--caps",
    "-c",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Number of capture slots to record",
)
@click.option(
    "--decode",
    "-u",
    is_flag=True,
    show_default=True,
    default=False,
    help="Percent-decode the text before matching",
)
@click.option(
    "--all",
    "-a",
    "find_all",
    is_flag=True,
    show_default=True,
    default=False,
    help="Report every non-overlapping match",
)
@click.option(
    "--step-limit",
    type=click.IntRange(min=1),
    default=None,
    help="Give up after this many backtracking steps",
)
@click.option(
    "--debug",
    "-g",
    is_flag=True,
    show_default=True,
    default=False,
    help="Turn on debug mode",
)
def entry(
    pattern: str,
    text: Optional[str],
    input_file: Optional[IO],
    out: IO,
    ignorecase: bool,
    caps: int,
    decode: bool,
    find_all: bool,
    step_limit: Optional[int],
    debug: bool,
):
    if input_file is not None:
        subject = input_file.read()
    elif text is not None:
        subject = text.encode("utf-8")
    else:
        raise click.UsageError("one of --text or --input-file is required")

    if decode:
        subject = percent_decode(subject)

    flags = RegexFlag.NOFLAG
    if ignorecase:
        flags |= RegexFlag.IGNORECASE
    if debug:
        flags |= RegexFlag.DEBUG
        logging.basicConfig(level=logging.DEBUG)

    slots = [None] * caps
    try:
        if find_all:
            result = [
                _describe(m)
                for m in finditer(pattern, subject, flags, slots, step_limit=step_limit)
            ]
        else:
            found = search(pattern, subject, flags, slots, step_limit=step_limit)
            result = None if found is None else _describe(found)
    except RegexError as err:
        with out:
            error = {"error": err.kind.name, "code": err.kind.code}
            out.write(json.dumps(error, indent=4))
            out.write("\n")
        sys.exit(1)

    with out:
        out.write(json.dumps(result, indent=4))
        out.write("\n")


if __name__ == "__main__":
    entry()
