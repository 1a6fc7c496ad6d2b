"""
Best-effort extraction of a JSON payload from free-form model output.

This is deliberately narrow. It assumes the first `{` or `[` starts the
payload, that the last matching closer ends it, and that nesting inside
that span is already correct. The only repairs are the ones models get
wrong most often: markdown code fences and stray commas. It is not a
parser and will not fix unbalanced brackets or unescaped quotes.
"""
import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*")
_REPEATED_COMMA_RE = re.compile(r",(\s*,)+")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

# aggressive pass only
_LEADING_COMMA_RE = re.compile(r"([{\[])\s*,")
_MISSING_COMMA_RE = re.compile(r"([}\]])\s*([{\[])")
_SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})

_CLOSERS = {"{": "}", "[": "]"}


def _strip_commas(text: str) -> str:
    text = _REPEATED_COMMA_RE.sub(",", text)
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def _slice(text: str) -> Optional[str]:
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    end = text.rfind(_CLOSERS[text[start]])
    if end < start:
        return None
    return text[start:end + 1]


def _parses(candidate: str) -> bool:
    try:
        json.loads(candidate)
    except (ValueError, RecursionError):
        return False
    return True


def extract_json(text: Any) -> Optional[str]:
    """
    Return the candidate JSON substring of `text`, or None.

    Slices from the first opening bracket (object or array, whichever comes
    first) to the last matching closer, and returns that slice untouched when
    it already parses. Otherwise code fences are stripped, the slice is taken
    again, repeated commas are collapsed and commas before a closing bracket
    dropped.
    """
    if not isinstance(text, str) or not text:
        return None

    # string values may legitimately hold fences or commas
    raw = _slice(text)
    if raw is not None and _parses(raw):
        return raw

    candidate = _slice(_FENCE_RE.sub("", text))
    if candidate is None or _parses(candidate):
        return candidate
    return _strip_commas(candidate)


def _aggressive_repair(candidate: str) -> str:
    text = candidate.translate(_SMART_QUOTES)
    text = _LEADING_COMMA_RE.sub(r"\1", text)       # "[ ,1" -> "[1"
    text = _MISSING_COMMA_RE.sub(r"\1,\2", text)    # "} {" -> "},{"
    return _strip_commas(text)


def safe_parse(text: Any, fallback: Any = None) -> Any:
    """
    Parse the JSON payload embedded in `text`; return `fallback` (the very
    same object) when nothing usable can be recovered. Never raises.
    """
    candidate = extract_json(text)
    if candidate is None:
        logger.debug("No JSON payload found in model output")
        return fallback

    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        pass

    try:
        return json.loads(_aggressive_repair(candidate))
    except (ValueError, RecursionError) as exc:
        logger.debug("JSON repair failed: %s", exc)
        return fallback
