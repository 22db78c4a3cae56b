"""Tests for the required-heading check."""

from briefgate.app.providers.mock import build_sample_brief
from briefgate.app.services.brief_validator import (
    REQUIRED_HEADINGS,
    find_missing_headings,
    is_valid_brief,
)


def test_sample_brief_is_valid():
    assert is_valid_brief(build_sample_brief())
    assert find_missing_headings(build_sample_brief()) == []


def test_missing_headings_reported_in_canonical_order():
    text = "DECISION BEING MADE\nx\nNEXT 3 ACTIONS\ny\n"

    missing = find_missing_headings(text)

    assert missing == [h for h in REQUIRED_HEADINGS if h not in ("DECISION BEING MADE", "NEXT 3 ACTIONS")]
    assert not is_valid_brief(text)


def test_case_insensitive():
    text = "\n".join(h.lower() for h in REQUIRED_HEADINGS)
    assert is_valid_brief(text)


def test_custom_required_headings():
    assert is_valid_brief("## Summary\ntext", required=["SUMMARY"])
    assert find_missing_headings("text", required=["SUMMARY"]) == ["SUMMARY"]
