import json
from unittest.mock import MagicMock, patch

import pytest
import redis

from api import cache


@pytest.fixture
def fake_redis():
    conn = MagicMock()
    with patch("api.cache.redis.from_url", return_value=conn), patch.object(cache, "_redis", None):
        yield conn


def test_single_page_key_ignores_budgets():
    a = cache.report_key("https://example.com/", False, 5, 2)
    b = cache.report_key("https://example.com/", False, 20, 4)
    assert a == b
    assert a.startswith(f"scan:v{cache.REPORT_VERSION}:")


def test_multi_page_key_depends_on_budgets():
    a = cache.report_key("https://example.com/", True, 5, 2)
    assert a != cache.report_key("https://example.com/", True, 6, 2)
    assert a != cache.report_key("https://example.com/", False, 5, 2)


def test_round_trip(fake_redis):
    report = {"url": "https://example.com/", "summary": {"totalPages": 1}}
    cache.save_report("scan:v1:abc", report, ttl=60)

    fake_redis.setex.assert_called_once_with("scan:v1:abc", 60, json.dumps(report))

    fake_redis.get.return_value = json.dumps(report)
    assert cache.load_report("scan:v1:abc") == report


def test_miss_and_corrupt_entry(fake_redis):
    fake_redis.get.return_value = None
    assert cache.load_report("k") is None
    fake_redis.get.return_value = "{not json"
    assert cache.load_report("k") is None


def test_read_error_degrades(fake_redis):
    fake_redis.get.side_effect = redis.ConnectionError("gone")
    assert cache.load_report("k") is None


def test_status_follows_ping(fake_redis):
    assert cache.cache_status() == "connected"
    fake_redis.ping.side_effect = redis.ConnectionError("gone")
    assert cache.cache_status() == "unavailable"


def test_redis_down_is_noop():
    with patch("api.cache.redis.from_url", side_effect=redis.ConnectionError("refused")), \
         patch.object(cache, "_redis", None):
        assert cache.load_report("k") is None
        cache.save_report("k", {"a": 1})
        assert cache.cache_status() == "unavailable"
