import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field

from .errors import RenderFailure
from .models import CrawlResult, PageSnapshot
from .renderer import DEFAULT_TIMEOUT_MS, Renderer

logger = logging.getLogger(__name__)

# cap on links enqueued from any one page
LINK_FANOUT = 10

# fixed politeness delay between page visits
PAGE_DELAY_SECONDS = 1.0


@dataclass
class CrawlState:
    """Mutable state of one traversal. Single writer, discarded on return."""

    visited: set[str] = field(default_factory=set)
    frontier: deque[tuple[str, int]] = field(default_factory=deque)
    queued: set[str] = field(default_factory=set)          # urls currently in frontier
    results: list[PageSnapshot] = field(default_factory=list)

    def push(self, url: str, depth: int) -> None:
        self.frontier.append((url, depth))
        self.queued.add(url)

    def pop(self) -> tuple[str, int]:
        url, depth = self.frontier.popleft()
        self.queued.discard(url)
        return url, depth


async def crawl(
    seed_url: str,
    renderer: Renderer,
    *,
    max_pages: int = 5,
    max_depth: int = 2,
    link_fanout: int = LINK_FANOUT,
    page_delay: float = PAGE_DELAY_SECONDS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> CrawlResult:
    """
    Breadth-first traversal from `seed_url` bounded by a page budget and a
    depth budget. `renderer` must already be open.

    Pages are rendered one at a time. A page that fails to render is logged
    and skipped. Entries still in the frontier when the page budget is hit
    are dropped.
    """
    state = CrawlState()
    state.push(seed_url, 0)

    logger.info("Crawl started: %s (max_pages=%d, max_depth=%d)", seed_url, max_pages, max_depth)

    while state.frontier and len(state.results) < max_pages:
        url, depth = state.pop()

        if url in state.visited or depth > max_depth:
            continue

        # mark before rendering so nothing this page links to can re-queue it
        state.visited.add(url)

        snapshot = None
        try:
            snapshot = await renderer.render(url, timeout_ms=timeout_ms)
        except RenderFailure as exc:
            logger.warning("Skipping %s: %s", url, exc.reason)

        if snapshot is not None and snapshot.url != url and snapshot.url in state.visited:
            logger.debug("Skipping %s: redirects to already scanned %s", url, snapshot.url)
            snapshot = None

        if snapshot is not None:
            # a redirect target is the same page; don't scan it twice
            state.visited.add(snapshot.url)
            state.results.append(snapshot)
            logger.info(
                "[%d/%d] %s (depth=%d, headings=%d, links=%d)",
                len(state.results), max_pages, snapshot.url, depth,
                len(snapshot.headings), snapshot.links_count,
            )

            if depth < max_depth:
                new_links = [
                    link for link in snapshot.internal_links
                    if link not in state.visited and link not in state.queued
                ][:link_fanout]
                for link in new_links:
                    state.push(link, depth + 1)
                if new_links:
                    logger.debug("Queued %d new links from %s", len(new_links), snapshot.url)

        if page_delay > 0 and state.frontier and len(state.results) < max_pages:
            await asyncio.sleep(page_delay)

    logger.info("Crawl finished: %d page(s) from %s", len(state.results), seed_url)
    return CrawlResult(start_url=seed_url, pages=state.results)
