import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from .aggregator import SiteAggregator
from .analyzer import PageAnalyzer
from .crawler import LINK_FANOUT, PAGE_DELAY_SECONDS, crawl
from .errors import AnalysisFailure, InvalidInput, QuotaExceeded
from .fallback import fallback_score
from .renderer import DEFAULT_TIMEOUT_MS, Renderer

logger = logging.getLogger(__name__)

ANALYSIS_DELAY_SECONDS = 1.0
QUOTA_NOTE = "Heuristic analysis: AI quota exceeded."


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _round_half_up(value: float) -> int:
    # half rounds up; scores are never negative
    return int(value + 0.5)


def validate_url(url) -> str:
    """Return the stripped URL or raise InvalidInput if it isn't absolute http(s)."""
    if url is None or (isinstance(url, str) and not url.strip()):
        raise InvalidInput("URL is required")
    if not isinstance(url, str):
        raise InvalidInput("Invalid URL")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidInput("Invalid URL")
    return url


async def scan_page(
    url: str,
    renderer: Renderer,
    analyzer: PageAnalyzer,
    *,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> dict:
    """
    Render and analyze a single page.

    Model failures degrade to the heuristic analysis; a render failure has
    nothing to fall back on and propagates as RenderFailure.
    """
    url = validate_url(url)
    async with renderer:
        snapshot = await renderer.render(url, timeout_ms=timeout_ms)

    try:
        analysis = await analyzer.analyze(snapshot)
    except QuotaExceeded:
        analysis = fallback_score(snapshot)
        analysis.note = QUOTA_NOTE
    except AnalysisFailure:
        analysis = fallback_score(snapshot)

    return {"url": url, "timestamp": _timestamp(), "analysis": analysis.to_dict()}


async def scan_site(
    url: str,
    renderer: Renderer,
    analyzer: PageAnalyzer,
    aggregator: Optional[SiteAggregator] = None,
    *,
    max_pages: int = 5,
    max_depth: int = 2,
    link_fanout: int = LINK_FANOUT,
    page_delay: float = PAGE_DELAY_SECONDS,
    analysis_delay: float = ANALYSIS_DELAY_SECONDS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> dict:
    """
    Crawl the site, then analyze each page in visit order, one model call at
    a time. Quota exhaustion stops all further model calls for this run but
    keeps everything analyzed so far.
    """
    url = validate_url(url)
    async with renderer:
        result = await crawl(
            url,
            renderer,
            max_pages=max_pages,
            max_depth=max_depth,
            link_fanout=link_fanout,
            page_delay=page_delay,
            timeout_ms=timeout_ms,
        )

    entries: list[dict] = []
    analyzed_snapshots = []
    scores: list[int] = []
    quota_exceeded = False

    for index, snapshot in enumerate(result.pages):
        if index > 0 and analysis_delay > 0:
            await asyncio.sleep(analysis_delay)

        entry = {"pageNumber": index + 1, "url": snapshot.url, "title": snapshot.title}
        try:
            analysis = await analyzer.analyze(snapshot)
        except QuotaExceeded as exc:
            entry["error"] = f"AI quota exceeded: {exc}"
            entries.append(entry)
            quota_exceeded = True
            logger.warning(
                "Quota exceeded after %d of %d page(s); stopping analysis", index, result.total_pages
            )
            break
        except AnalysisFailure as exc:
            entry["error"] = str(exc)
            entries.append(entry)
            continue

        entry["aiAnalysis"] = analysis.to_dict()
        entries.append(entry)
        analyzed_snapshots.append(snapshot)
        scores.append(analysis.page_score)
        logger.info("Analyzed %s: score=%d", snapshot.url, analysis.page_score)

    site_wide = None
    if aggregator is not None and not quota_exceeded and len(analyzed_snapshots) >= 2:
        if analysis_delay > 0:
            await asyncio.sleep(analysis_delay)
        site_wide = await aggregator.aggregate(analyzed_snapshots)

    return {
        "url": url,
        "timestamp": _timestamp(),
        "summary": {
            "totalPages": result.total_pages,
            "analyzedPages": len(scores),
            "averageScore": _round_half_up(sum(scores) / len(scores)) if scores else 0,
            "quotaExceeded": quota_exceeded,
        },
        "pages": entries,
        "siteWide": site_wide,
    }
