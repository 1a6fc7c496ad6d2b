"""Redis cache-aside for finished scan reports. Every call is a no-op while Redis is unreachable."""
import hashlib
import json
import logging
from typing import Optional

import redis

from scanner.config import get_settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "scan"

# bump when the report shape changes so old entries are never served
REPORT_VERSION = 1

_redis: Optional[redis.Redis] = None


def _connect() -> Optional[redis.Redis]:
    global _redis
    if _redis is not None:
        return _redis
    redis_url = get_settings().redis_url
    try:
        conn = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=2)
        conn.ping()
    except (redis.RedisError, ValueError) as exc:
        logger.warning("Redis at %s unreachable, report cache off: %s", redis_url, exc)
        return None
    _redis = conn
    return _redis


def report_key(url: str, multi_page: bool, max_pages: int, max_depth: int) -> str:
    # budgets only shape multi-page reports
    parts = [url, "multi", str(max_pages), str(max_depth)] if multi_page else [url, "single"]
    digest = hashlib.sha256("|".join(parts).encode()).hexdigest()[:16]
    return f"{KEY_PREFIX}:v{REPORT_VERSION}:{digest}"


def load_report(key: str) -> Optional[dict]:
    conn = _connect()
    if conn is None:
        return None
    try:
        raw = conn.get(key)
    except redis.RedisError as exc:
        logger.warning("Report cache read failed for %s: %s", key, exc)
        return None
    if not raw:
        return None
    try:
        report = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring undecodable cache entry %s", key)
        return None
    return report if isinstance(report, dict) else None


def save_report(key: str, report: dict, ttl: Optional[int] = None) -> None:
    conn = _connect()
    if conn is None:
        return
    try:
        conn.setex(key, ttl or get_settings().cache_ttl_seconds, json.dumps(report))
    except redis.RedisError as exc:
        logger.warning("Report cache write failed for %s: %s", key, exc)


def cache_status() -> str:
    conn = _connect()
    if conn is None:
        return "unavailable"
    try:
        conn.ping()
    except redis.RedisError:
        return "unavailable"
    return "connected"
