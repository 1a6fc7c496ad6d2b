import logging

from .classifier import categorize_issue, classify_error, normalize_impact, QUOTA
from .errors import AnalysisFailure, QuotaExceeded
from .fallback import fallback_score
from .json_extract import safe_parse
from .llm import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_TEMPERATURE, call_model
from .models import Issue, PageAnalysis, PageSnapshot
from .prompts import page_prompt

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50
MAX_QUICK_WINS = 3


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


def _score(value) -> int:
    try:
        return max(0, min(100, int(round(float(value)))))
    except (TypeError, ValueError):
        return DEFAULT_SCORE


def _to_issue(raw) -> Issue | None:
    """Normalize one model issue; accepts the several key spellings models use."""
    if isinstance(raw, str):
        raw = {"title": raw}
    if not isinstance(raw, dict):
        return None

    title = _text(raw.get("title") or raw.get("issue") or raw.get("problem"))
    why = _text(raw.get("why") or raw.get("whyItMatters") or raw.get("impactDescription"))
    fix = _text(raw.get("fix") or raw.get("recommendedFix") or raw.get("solution"))
    if not title and not fix:
        return None

    return Issue(
        title=title or fix,
        why=why,
        fix=fix or title,
        impact=normalize_impact(raw.get("impact") or raw.get("priority")),
        category=categorize_issue(f"{title} {why} {fix}"),
    )


def _issue_list(raw) -> list[Issue]:
    if not isinstance(raw, list):
        return []
    return [issue for issue in (_to_issue(item) for item in raw) if issue is not None]


def normalize_analysis(parsed: dict, snapshot: PageSnapshot) -> PageAnalysis:
    """Map a parsed model payload onto the PageAnalysis shape."""
    score = parsed.get("score", parsed.get("pageScore"))
    critical = _issue_list(parsed.get("issues", parsed.get("criticalIssues")))
    recommendations = _issue_list(parsed.get("recommendations"))

    strengths = parsed.get("strengths")
    strengths = [_text(s) for s in strengths if _text(s)] if isinstance(strengths, list) else []

    return PageAnalysis(
        page_score=_score(score) if score is not None else DEFAULT_SCORE,
        page_name=_text(parsed.get("pageName")) or snapshot.title or snapshot.url,
        page_url=snapshot.url,
        critical_issues=critical,
        recommendations=recommendations,
        strengths=strengths,
        quick_wins=[issue.title for issue in critical[:MAX_QUICK_WINS]],
    )


def to_analysis_error(exc: BaseException) -> AnalysisFailure:
    """Translate an upstream exception into QuotaExceeded or AnalysisFailure."""
    if isinstance(exc, QuotaExceeded):
        return exc
    kind = classify_error(exc)
    message = str(exc) or type(exc).__name__
    if kind == QUOTA:
        return QuotaExceeded(message)
    if isinstance(exc, AnalysisFailure):
        return exc
    return AnalysisFailure(message)


class PageAnalyzer:
    """
    Analyzes one snapshot with a single model call.

    Unusable model output degrades to the heuristic analysis; upstream
    failures are raised as QuotaExceeded or AnalysisFailure so the caller
    can decide whether to keep going.
    """

    def __init__(
        self,
        client,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ):
        self.client = client
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @property
    def model_available(self) -> bool:
        return getattr(self.client, "configured", True)

    async def analyze(self, snapshot: PageSnapshot) -> PageAnalysis:
        fallback = fallback_score(snapshot)
        if not self.model_available:
            return fallback

        try:
            raw = await call_model(
                self.client,
                page_prompt(snapshot),
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as exc:
            error = to_analysis_error(exc)
            if isinstance(error, QuotaExceeded):
                logger.warning("Model quota exhausted while analyzing %s: %s", snapshot.url, error)
            else:
                logger.warning("Model call failed for %s: %s", snapshot.url, error)
            if error is exc:
                raise
            raise error from exc

        parsed = safe_parse(raw, fallback)
        if parsed is fallback:
            logger.info("Unparseable model output for %s, using heuristics", snapshot.url)
            return fallback
        if not isinstance(parsed, dict) or ("score" not in parsed and "pageScore" not in parsed):
            logger.info("Model output for %s has no score, using heuristics", snapshot.url)
            return fallback

        return normalize_analysis(parsed, snapshot)
