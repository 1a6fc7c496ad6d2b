import pytest

from scanner.errors import RenderFailure
from scanner.models import Heading, ImageInfo, PageMeta, PageSnapshot, PageStructure
from scanner.renderer import Renderer


def build_snapshot(
    url="https://example.com/",
    title="Example Store | Handmade Goods",
    links=(),
    h1_count=1,
    description="Handmade goods shipped worldwide.",
    viewport="width=device-width, initial-scale=1",
    images=None,
    buttons=("Contact us",),
    structure=None,
):
    headings = [Heading(level=1, text="Welcome")] * h1_count + [Heading(level=2, text="Products")]
    return PageSnapshot(
        url=url,
        title=title,
        headings=headings,
        buttons=list(buttons),
        links_count=len(links),
        internal_links=list(links),
        images=images if images is not None else [ImageInfo(src="/a.png", alt="A product")],
        meta=PageMeta(description=description, viewport=viewport, h1_count=h1_count, lang="en"),
        structure=structure or PageStructure(has_header=True, has_nav=True, has_main=True, has_footer=True),
    )


class FakeRenderer(Renderer):
    """Serves prebuilt snapshots by URL; unknown or failing URLs raise RenderFailure."""

    def __init__(self, pages, failures=()):
        self.pages = pages
        self.failures = set(failures)
        self.rendered = []
        self.opened = False
        self.closed = False

    async def __aenter__(self):
        self.opened = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def render(self, url, timeout_ms=0):
        self.rendered.append(url)
        if url in self.failures or url not in self.pages:
            raise RenderFailure(url, "navigation failed")
        return self.pages[url]


class FakeModelClient:
    """Returns queued responses in order; queued exceptions are raised instead."""

    configured = True

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.prompts = []
        self.options = []

    def generate(self, prompt, **options):
        self.prompts.append(prompt)
        self.options.append(options)
        item = self.responses.pop(0) if self.responses else "{}"
        if isinstance(item, BaseException):
            raise item
        return item


def build_site(graph: dict[str, list[str]]) -> dict[str, PageSnapshot]:
    """Snapshots for a link graph of {url: [linked urls]}."""
    return {url: build_snapshot(url=url, title=f"Page {url}", links=links) for url, links in graph.items()}


@pytest.fixture
def make_snapshot():
    return build_snapshot


@pytest.fixture
def make_site():
    return build_site


@pytest.fixture
def renderer_cls():
    return FakeRenderer


@pytest.fixture
def model_client_cls():
    return FakeModelClient
