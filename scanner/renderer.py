import asyncio
import logging
from typing import Optional

import requests
from playwright.async_api import async_playwright

from .config import Settings
from .errors import RenderFailure
from .models import PageSnapshot
from .parser import parse_snapshot

logger = logging.getLogger(__name__)

# realistic browser UA
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

DEFAULT_TIMEOUT_MS = 15000
MAX_CONTENT_BYTES = 5 * 1024 * 1024  # 5 MB ceiling to avoid runaway pages

# resource types the snapshot never needs; aborting them speeds up loads
_BLOCKED_RESOURCES = {"image", "stylesheet", "font", "media"}

_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class Renderer:
    """
    Renders one URL into a PageSnapshot.

    Renderers are scoped resources: use them as `async with renderer:` so
    the underlying session/browser is released on every exit path.
    `render` enforces a hard wall-clock bound per call and reports every
    failure as RenderFailure.
    """

    async def __aenter__(self) -> "Renderer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def render(self, url: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> PageSnapshot:
        # small margin over the navigation bound so the inner timeout fires first
        hard_bound = timeout_ms / 1000 + self._extra_seconds()
        try:
            return await asyncio.wait_for(self._render(url, timeout_ms), timeout=hard_bound)
        except RenderFailure:
            raise
        except asyncio.TimeoutError as exc:
            raise RenderFailure(url, f"timed out after {timeout_ms}ms") from exc
        except Exception as exc:
            raise RenderFailure(url, str(exc) or type(exc).__name__) from exc

    def _extra_seconds(self) -> float:
        return 1.0

    async def _render(self, url: str, timeout_ms: int) -> PageSnapshot:
        raise NotImplementedError


class HttpRenderer(Renderer):
    """Static renderer: plain HTTP fetch, no JavaScript execution."""

    def __init__(self):
        self._session: Optional[requests.Session] = None

    async def __aenter__(self) -> "HttpRenderer":
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        })
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _sync_fetch(self, url: str, timeout_ms: int) -> tuple[str, str]:
        """Synchronous fetch using requests, run inside a thread executor."""
        session = self._session or requests.Session()
        response = session.get(url, timeout=timeout_ms / 1000, allow_redirects=True)
        response.raise_for_status()
        content_type = response.headers.get("Content-Type", "")
        if content_type and "html" not in content_type.lower():
            raise RenderFailure(url, f"unsupported content type {content_type}")
        return response.text[:MAX_CONTENT_BYTES], response.url

    async def _render(self, url: str, timeout_ms: int) -> PageSnapshot:
        loop = asyncio.get_running_loop()
        html, final_url = await loop.run_in_executor(None, self._sync_fetch, url, timeout_ms)
        return parse_snapshot(html, final_url)


class BrowserRenderer(Renderer):
    """Headless Chromium via Playwright; one browser + page per crawl."""

    def __init__(self, settle_seconds: float = 1.5):
        self.settle_seconds = settle_seconds
        self._playwright = None
        self._browser = None
        self._page = None

    async def __aenter__(self) -> "BrowserRenderer":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=True, args=_BROWSER_ARGS)
            context = await self._browser.new_context(
                user_agent=USER_AGENT,
                viewport={"width": 1920, "height": 1080},
            )
            self._page = await context.new_page()
            await self._page.route("**/*", self._filter_request)
        except Exception:
            await self._close()
            raise
        logger.info("Browser session started")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._close()

    async def _close(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as exc:
                logger.warning("Browser close failed: %s", exc)
            self._browser = None
            self._page = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            logger.info("Browser session closed")

    @staticmethod
    async def _filter_request(route) -> None:
        if route.request.resource_type in _BLOCKED_RESOURCES:
            await route.abort()
        else:
            await route.continue_()

    def _extra_seconds(self) -> float:
        return self.settle_seconds + 5.0

    async def _render(self, url: str, timeout_ms: int) -> PageSnapshot:
        if self._page is None:
            raise RenderFailure(url, "browser session is not open")
        await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        if self.settle_seconds > 0:
            # give client-side scripts a moment to populate the DOM
            await asyncio.sleep(self.settle_seconds)
        html = await self._page.content()
        return parse_snapshot(html, self._page.url)


def open_renderer(settings: Settings) -> Renderer:
    """Build the renderer selected by `renderer_mode` (not yet opened)."""
    mode = (settings.renderer_mode or "browser").strip().lower()
    if mode == "http":
        return HttpRenderer()
    if mode != "browser":
        logger.warning("Unknown renderer_mode %r, using browser", settings.renderer_mode)
    return BrowserRenderer(settle_seconds=settings.render_settle_seconds)
