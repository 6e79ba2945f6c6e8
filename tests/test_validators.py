import pytest

from saypi.errors import InvalidParams, ValidationIssue
from saypi.validators import (
    IssueCollector,
    parse_list_args,
    parse_think,
    strip_nul,
    validate_face_part,
    validate_heading,
    validate_text,
)


def test_parse_list_args_defaults():
    args = parse_list_args(None, None, None)
    assert (args.after, args.before, args.limit) == (None, None, 10)
    assert args.descending is False
    assert args.cursor is None


def test_parse_list_args_descending():
    args = parse_list_args(None, "cv_1", "0")
    assert args.descending is True
    assert args.cursor == "cv_1"
    assert args.limit == 0


def test_parse_list_args_rejects_two_cursors():
    with pytest.raises(InvalidParams) as excinfo:
        parse_list_args("a", "b", None)
    assert excinfo.value.issues[0].field == "starting_after, ending_before"


@pytest.mark.parametrize("limit", ["-1", "101", "ten", "1.5"])
def test_parse_list_args_rejects_bad_limit(limit):
    with pytest.raises(ValidationIssue) as excinfo:
        parse_list_args(None, None, limit)
    assert excinfo.value.field == "limit"


@pytest.mark.parametrize("value, expected", [(None, False), ("", False), ("false", False), ("true", True)])
def test_parse_think(value, expected):
    assert parse_think(value) is expected


def test_parse_think_rejects_other_values():
    with pytest.raises(ValidationIssue):
        parse_think("yes")


def test_face_parts_count_characters_not_bytes():
    validate_face_part("", "eyes")
    validate_face_part("öö", "eyes")
    with pytest.raises(ValidationIssue):
        validate_face_part("ö", "eyes")


def test_length_limits():
    validate_heading("h" * 60)
    validate_text("t" * 1024)
    with pytest.raises(ValidationIssue):
        validate_heading("h" * 61)
    with pytest.raises(ValidationIssue):
        validate_text("t" * 1025)


def test_strip_nul():
    assert strip_nul("a\x00b") == "ab"
    assert strip_nul(None) == ""


def test_issue_collector_reports_all_failures():
    issues = IssueCollector()
    issues.check(validate_face_part, "x", "eyes")
    issues.check(validate_face_part, "xx", "tongue")
    issues.check(parse_think, "maybe")
    with pytest.raises(InvalidParams) as excinfo:
        issues.raise_if_any()
    assert [issue.field for issue in excinfo.value.issues] == ["eyes", "think"]
