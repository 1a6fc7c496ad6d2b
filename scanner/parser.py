import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .models import Heading, ImageInfo, PageMeta, PageSnapshot, PageStructure

PLACEHOLDER_TITLE = "No title"

_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

# anything a user would read as a clickable action
_BUTTON_SELECTOR = "button, a[role='button'], input[type='button'], input[type='submit']"

_SKIPPED_SCHEMES = ("mailto:", "tel:", "javascript:")


def _get_meta(soup: BeautifulSoup, name: str) -> str:
    """Pull content from a <meta name=...> tag, empty string when absent."""
    tag = soup.find("meta", attrs={"name": re.compile(rf"^{re.escape(name)}$", re.I)})
    if tag:
        return (tag.get("content") or "").strip()
    return ""


def _clean_text(raw: str) -> str:
    """Collapse whitespace and strip control characters from extracted text."""
    text = re.sub(r"[\r\n\t]+", " ", raw)
    text = re.sub(r" {2,}", " ", text)
    return text.strip()


def _to_int(value: Optional[str]) -> int:
    if not value:
        return 0
    match = re.match(r"\s*(\d+)", str(value))
    return int(match.group(1)) if match else 0


def _charset(soup: BeautifulSoup) -> str:
    tag = soup.find("meta", attrs={"charset": True})
    if tag:
        return tag.get("charset", "").strip()
    http_equiv = soup.find("meta", attrs={"http-equiv": re.compile(r"^content-type$", re.I)})
    if http_equiv:
        match = re.search(r"charset=([\w-]+)", http_equiv.get("content") or "", re.I)
        if match:
            return match.group(1)
    return ""


def _button_label(tag) -> str:
    text = _clean_text(tag.get_text(" "))
    return text or (tag.get("value") or "").strip() or (tag.get("aria-label") or "").strip()


def _internal_links(soup: BeautifulSoup, page_url: str) -> tuple[int, list[str]]:
    """
    Count every <a href> and collect the same-host ones.
    Fragment links and mailto/tel/javascript targets are dropped; order is
    preserved and duplicates removed so the crawler sees discovery order.
    """
    host = urlparse(page_url).hostname
    anchors = soup.find_all("a", href=True)
    links: dict[str, None] = {}

    for a in anchors:
        href = (a["href"] or "").strip()
        if not href or href.lower().startswith(_SKIPPED_SCHEMES):
            continue
        resolved = urljoin(page_url, href)
        if "#" in resolved:
            continue
        parsed = urlparse(resolved)
        if parsed.scheme not in ("http", "https") or parsed.hostname != host:
            continue
        links.setdefault(resolved, None)

    return len(anchors), list(links)


def parse_snapshot(html: str, url: str) -> PageSnapshot:
    """
    Parse rendered HTML into a PageSnapshot.
    `url` must be the final (post-redirect) URL; internal links are resolved
    against it and compared by hostname.
    """
    soup = BeautifulSoup(html or "", "lxml")

    # --- title ---
    title_tag = soup.find("title")
    title = _clean_text(title_tag.get_text()) if title_tag else ""

    # --- headings, in document order, empty ones excluded ---
    headings = []
    for tag in soup.find_all(_HEADING_TAGS):
        text = _clean_text(tag.get_text(" "))
        if text:
            headings.append(Heading(level=int(tag.name[1]), text=text))

    # --- buttons / CTAs ---
    buttons = [label for label in (_button_label(b) for b in soup.select(_BUTTON_SELECTOR)) if label]

    # --- links ---
    links_count, internal_links = _internal_links(soup, url)

    # --- images ---
    images = [
        ImageInfo(
            src=(img.get("src") or img.get("data-src") or "").strip(),
            alt=(img.get("alt") or "").strip(),
            width=_to_int(img.get("width")),
            height=_to_int(img.get("height")),
        )
        for img in soup.find_all("img")
    ]

    html_tag = soup.find("html")
    meta = PageMeta(
        description=_get_meta(soup, "description"),
        keywords=_get_meta(soup, "keywords"),
        viewport=_get_meta(soup, "viewport"),
        h1_count=len(soup.find_all("h1")),
        charset=_charset(soup),
        lang=(html_tag.get("lang") or "").strip() if html_tag else "",
    )

    structure = PageStructure(
        has_header=soup.find("header") is not None,
        has_nav=soup.find("nav") is not None,
        has_main=soup.find("main") is not None,
        has_footer=soup.find("footer") is not None,
        form_count=len(soup.find_all("form")),
    )

    return PageSnapshot(
        url=url,
        title=title or PLACEHOLDER_TITLE,
        headings=headings,
        buttons=buttons,
        links_count=links_count,
        internal_links=internal_links,
        images=images,
        meta=meta,
        structure=structure,
    )
