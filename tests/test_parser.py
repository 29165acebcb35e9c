import pytest

from minire.errors import (
    CapsArrayTooSmall,
    InternalError,
    TooManyBrackets,
    TooManyBranches,
    UnbalancedBrackets,
    UnexpectedQuantifier,
)
from minire.parser import Branch, RegexParser


def test_whole_pattern_is_bracket_zero():
    parser = RegexParser(b"abc")
    assert parser.group_count == 0
    assert parser.brackets[0].start == 0
    assert parser.brackets[0].length == 3
    assert parser.branch_spans(0) == [(0, 3)]


def test_nested_brackets():
    parser = RegexParser(b"((a)(b))(c)")
    assert parser.group_count == 4
    assert [(b.start, b.length) for b in parser.brackets] == [
        (0, 11),
        (1, 6),
        (2, 1),
        (5, 1),
        (9, 1),
    ]
    assert [parser.bracket_at(offset) for offset in (0, 1, 4, 8)] == [1, 2, 3, 4]


def test_branches_are_grouped_by_bracket():
    parser = RegexParser(b"a|(b|c|d)|(e|f)")
    assert [branch.bracket for branch in parser.branches] == [0, 0, 1, 1, 2]
    assert parser.branches[:2] == [Branch(0, 1), Branch(0, 9)]
    assert parser.brackets[1].branch_start == 2
    assert parser.brackets[1].branch_count == 2
    assert parser.branch_spans(1) == [(3, 4), (5, 6), (7, 8)]
    assert parser.branch_spans(2) == [(11, 12), (13, 14)]
    assert parser.branch_spans(0) == [(0, 1), (2, 9), (10, 15)]


def test_branch_after_closed_group_belongs_to_parent():
    parser = RegexParser(b"(a(b)|c)")
    assert parser.branches == [Branch(1, 5)]
    assert parser.branch_spans(1) == [(1, 5), (6, 7)]
    assert parser.branch_spans(2) == [(3, 4)]


def test_empty_alternatives():
    parser = RegexParser(b"a||b|")
    assert parser.branch_spans(0) == [(0, 1), (2, 2), (3, 4), (5, 5)]


def test_escaped_parens_are_not_groups():
    parser = RegexParser(b"\\(a\\)")
    assert parser.group_count == 0
    parser = RegexParser(b"(\\()")
    assert parser.group_count == 1
    assert parser.brackets[1].length == 2


def test_parens_inside_class_are_literal():
    parser = RegexParser(b"[()|]")
    assert parser.group_count == 0
    assert parser.branches == []


def test_unit_length():
    parser = RegexParser(b"(a|b)*[xy]+\\d?")
    assert parser.unit_length(0) == 5
    assert parser.unit_length(6) == 4
    assert parser.unit_length(11) == 2
    with pytest.raises(InternalError):
        parser.bracket_at(6)


def test_anchored():
    assert RegexParser(b"^a").is_anchored
    assert not RegexParser(b"a^").is_anchored
    assert not RegexParser(b"\\^a").is_anchored


@pytest.mark.parametrize(
    "pattern",
    [b"a*", b"a+?", b"a*?b", b"(a)?", b"[a]+", b"\\d*", b"a?b|c+", b"(a|b?)*"],
)
def test_valid_quantifiers(pattern):
    RegexParser(pattern)


@pytest.mark.parametrize(
    "pattern",
    [b"?", b"+a", b"a|*", b"(*a)", b"a***", b"a?+", b"a??", b"a*?*", b"(?:a)"],
)
def test_misplaced_quantifiers(pattern):
    with pytest.raises(UnexpectedQuantifier):
        RegexParser(pattern)


@pytest.mark.parametrize("pattern", [b"(", b"())", b")", b"(a))", b"((a)", b"()"])
def test_unbalanced(pattern):
    with pytest.raises(UnbalancedBrackets):
        RegexParser(pattern)


def test_capacities():
    RegexParser(b"(a)(b)", max_brackets=3)
    with pytest.raises(TooManyBrackets):
        RegexParser(b"(a)(b)(c)", max_brackets=3)
    RegexParser(b"a|b|c", max_branches=2)
    with pytest.raises(TooManyBranches):
        RegexParser(b"a|b|c|d", max_branches=2)
    with pytest.raises(ValueError):
        RegexParser(b"a", max_brackets=0)


def test_caps_capacity():
    RegexParser(b"(a)(b)", num_caps=2)
    RegexParser(b"(a)(b)", num_caps=0)
    with pytest.raises(CapsArrayTooSmall):
        RegexParser(b"(a)(b)(c)", num_caps=2)


def test_branch_spans_out_of_range():
    with pytest.raises(InternalError):
        RegexParser(b"(a)").branch_spans(2)
