import asyncio
import logging

import pytest

from scanner.classifier import (
    AUTH,
    QUOTA,
    TIMEOUT,
    UNKNOWN,
    categorize_issue,
    classify_error,
    is_quota_error,
    normalize_impact,
)


@pytest.mark.parametrize("text,expected", [
    ("Missing page title", "On-Page SEO"),
    ("Meta viewport missing", "On-Page SEO"),      # first bucket wins
    ("Images lack alt text", "Accessibility"),
    ("Slow page speed", "Performance"),
    ("Not mobile friendly", "Mobile UX"),
    ("Heading hierarchy skips levels", "Content Structure"),
    ("Broken canonical", "General SEO"),
    ("", "General SEO"),
])
def test_categorize_issue(text, expected):
    assert categorize_issue(text) == expected


@pytest.mark.parametrize("value,expected", [
    ("Critical", "High"),
    ("high", "High"),
    ("Moderate", "Medium"),
    ("minor", "Low"),
    ("LOW", "Low"),
    ("whatever", "Medium"),
    (None, "Medium"),
])
def test_normalize_impact(value, expected):
    assert normalize_impact(value) == expected


class RateLimitError(Exception):
    pass


@pytest.mark.parametrize("exc", [
    Exception("429 Too Many Requests"),
    Exception("You exceeded your current quota"),
    Exception("RESOURCE_EXHAUSTED: try later"),
    RateLimitError(),
])
def test_quota_errors(exc):
    assert classify_error(exc) == QUOTA
    assert is_quota_error(exc)


def test_auth_error():
    assert classify_error(Exception("Invalid API key provided")) == AUTH


def test_timeout_error():
    assert classify_error(asyncio.TimeoutError()) == TIMEOUT
    assert classify_error(Exception("request timed out")) == TIMEOUT


def test_unknown_error_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="scanner.classifier"):
        assert classify_error(ValueError("something odd")) == UNKNOWN
    assert "Unclassified" in caplog.text
    assert not is_quota_error(ValueError("something odd"))
