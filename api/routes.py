import logging
from datetime import datetime, timezone
from typing import Union

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from scanner.aggregator import SiteAggregator
from scanner.analyzer import PageAnalyzer
from scanner.config import get_settings
from scanner.core import scan_page, scan_site
from scanner.errors import InvalidInput, QuotaExceeded
from scanner.fixes import FixGenerator
from scanner.llm import ModelClient
from scanner.renderer import open_renderer
from .cache import cache_status, load_report, report_key, save_report
from .schemas import (
    ErrorResponse,
    FixRequest,
    FixResponse,
    HealthResponse,
    MultiPageScanResponse,
    ScanRequest,
    SinglePageScanResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_model_client(request: Request) -> ModelClient:
    """The process-wide model client; built on first use if startup didn't."""
    client = getattr(request.app.state, "model_client", None)
    if client is None:
        client = ModelClient.from_settings(get_settings())
        request.app.state.model_client = client
    return client


def _is_cacheable(report: dict) -> bool:
    # quota hits and heuristic fallbacks should be retried, not served again
    if "analysis" in report:
        return "_note" not in report["analysis"]
    if report["summary"]["quotaExceeded"]:
        return False
    return all("aiAnalysis" in p and "_note" not in p["aiAnalysis"] for p in report["pages"])


@router.post(
    "/scan",
    response_model=Union[MultiPageScanResponse, SinglePageScanResponse],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Scan a page or a whole site and report SEO/UX issues",
)
async def scan(body: ScanRequest, client: ModelClient = Depends(get_model_client)):
    """
    Single-page mode renders and analyzes just `url`. Multi-page mode
    (`options.multiPage`) crawls the site breadth-first within
    `maxPages`/`maxDepth`, analyzes every page and adds a site-wide summary.

    - Completed reports are cached in Redis; `cached: true` marks a hit.
    - Budgets above the configured limits are clamped.
    """
    settings = get_settings()
    options = body.options
    multi_page = options.multi_page
    max_pages = min(options.max_pages or settings.default_max_pages, settings.max_pages_limit)
    max_depth = min(
        settings.default_max_depth if options.max_depth is None else options.max_depth,
        settings.max_depth_limit,
    )
    response_model = MultiPageScanResponse if multi_page else SinglePageScanResponse

    # cache-aside: serve a recent identical scan from Redis
    cache_key = report_key(body.url, multi_page, max_pages, max_depth)
    cached = load_report(cache_key)
    if cached:
        logger.info("Cache hit for %s", body.url)
        return response_model.model_validate({**cached, "cached": True})

    analyzer = PageAnalyzer(
        client,
        temperature=settings.model_temperature,
        max_output_tokens=settings.model_max_output_tokens,
    )

    try:
        if multi_page:
            report = await scan_site(
                body.url,
                open_renderer(settings),
                analyzer,
                SiteAggregator(client),
                max_pages=max_pages,
                max_depth=max_depth,
                link_fanout=settings.link_fanout,
                page_delay=settings.page_delay_seconds,
                analysis_delay=settings.analysis_delay_seconds,
                timeout_ms=settings.render_timeout_ms,
            )
        else:
            report = await scan_page(
                body.url,
                open_renderer(settings),
                analyzer,
                timeout_ms=settings.single_page_timeout_ms,
            )
    except InvalidInput as exc:
        return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})
    except Exception as exc:
        logger.error("Scan failed for %s: %s", body.url, exc, exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    response = response_model.model_validate(report)
    if _is_cacheable(report):
        save_report(cache_key, response.model_dump(by_alias=True, exclude={"cached"}))
    return response


@router.post(
    "/fix",
    response_model=FixResponse,
    responses={429: {"model": ErrorResponse}},
    summary="Generate code that fixes one reported issue",
)
async def generate_fix(body: FixRequest, client: ModelClient = Depends(get_model_client)):
    try:
        fix = await FixGenerator(client).generate(body.issue.model_dump(), body.context)
    except QuotaExceeded as exc:
        return JSONResponse(status_code=429, content={"success": False, "error": str(exc)})
    return FixResponse(fix=fix)


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(client: ModelClient = Depends(get_model_client)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        api_key_configured=client.configured,
        cache=cache_status(),
    )
