import logging

logger = logging.getLogger(__name__)

# --- issue categories ---

# checked in order; first bucket with a matching keyword wins
_CATEGORY_SIGNALS: list[tuple[str, tuple[str, ...]]] = [
    ("On-Page SEO",       ("title", "meta")),
    ("Accessibility",     ("alt", "access")),
    ("Performance",       ("speed", "load")),
    ("Mobile UX",         ("mobile", "viewport")),
    ("Content Structure", ("heading",)),
]
DEFAULT_CATEGORY = "General SEO"

# --- impact levels ---

IMPACT_LEVELS = ("High", "Medium", "Low")

_IMPACT_ALIASES = {
    "critical": "High",
    "high":     "High",
    "medium":   "Medium",
    "moderate": "Medium",
    "low":      "Low",
    "minor":    "Low",
}

# --- upstream error kinds ---

QUOTA = "quota"
AUTH = "auth"
TIMEOUT = "timeout"
UNKNOWN = "unknown"

# provider error texts carry no stable code, only phrases like these
_QUOTA_SIGNALS = (
    "quota",
    "rate limit",
    "rate_limit",
    "ratelimit",
    "too many requests",
    "resource_exhausted",
    "resource exhausted",
    "429",
)
_AUTH_SIGNALS = (
    "api key",
    "api_key",
    "authentication",
    "unauthorized",
    "permission",
    "401",
    "403",
)
_TIMEOUT_SIGNALS = (
    "timeout",
    "timed out",
    "deadline",
)


def categorize_issue(text: str) -> str:
    """Map free issue text to one of the fixed issue categories."""
    lowered = (text or "").lower()
    for category, keywords in _CATEGORY_SIGNALS:
        if any(k in lowered for k in keywords):
            return category
    return DEFAULT_CATEGORY


def normalize_impact(value) -> str:
    """Coerce a model-provided priority/impact label to High, Medium or Low."""
    return _IMPACT_ALIASES.get(str(value or "").strip().lower(), "Medium")


def classify_error(exc: BaseException) -> str:
    """
    Bucket an opaque upstream exception into quota | auth | timeout | unknown.

    Matching is on the exception text plus its class name, so e.g. an SDK
    `RateLimitError` with an empty message still lands in the quota bucket.
    Quota is checked first.
    """
    haystack = f"{type(exc).__name__} {exc}".lower()

    if any(s in haystack for s in _QUOTA_SIGNALS):
        return QUOTA
    if any(s in haystack for s in _AUTH_SIGNALS):
        return AUTH
    if any(s in haystack for s in _TIMEOUT_SIGNALS):
        return TIMEOUT

    logger.warning("Unclassified upstream error (%s): %s", type(exc).__name__, exc)
    return UNKNOWN


def is_quota_error(exc: BaseException) -> bool:
    return classify_error(exc) == QUOTA
