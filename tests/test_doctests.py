import doctest

import pytest

from minire import decode, errors, matcher, parser, search, tokens, utils


@pytest.mark.parametrize("module", [utils, errors, tokens, parser, matcher, search, decode])
def test_doctests(module):
    failures, _ = doctest.testmod(module)
    assert failures == 0
