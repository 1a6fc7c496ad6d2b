from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Heading:
    level: int                          # 1..6
    text: str

    def to_dict(self) -> dict:
        return {"level": self.level, "text": self.text}


@dataclass
class ImageInfo:
    src: str = ""
    alt: str = ""
    width: int = 0
    height: int = 0

    def to_dict(self) -> dict:
        return {"src": self.src, "alt": self.alt, "width": self.width, "height": self.height}


@dataclass
class PageMeta:
    description: str = ""
    keywords: str = ""
    viewport: str = ""
    h1_count: int = 0
    charset: str = ""
    lang: str = ""

    @property
    def has_h1(self) -> bool:
        # derived so it can never disagree with h1_count
        return self.h1_count > 0

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "keywords": self.keywords,
            "viewport": self.viewport,
            "hasH1": self.has_h1,
            "h1Count": self.h1_count,
            "charset": self.charset,
            "lang": self.lang,
        }


@dataclass
class PageStructure:
    has_header: bool = False
    has_nav: bool = False
    has_main: bool = False
    has_footer: bool = False
    form_count: int = 0

    def to_dict(self) -> dict:
        return {
            "hasHeader": self.has_header,
            "hasNav": self.has_nav,
            "hasMain": self.has_main,
            "hasFooter": self.has_footer,
            "formCount": self.form_count,
        }


@dataclass
class PageSnapshot:
    url: str                            # final URL, after redirects
    title: str = "No title"

    headings: list[Heading] = field(default_factory=list)
    buttons: list[str] = field(default_factory=list)

    links_count: int = 0
    internal_links: list[str] = field(default_factory=list)   # unique, discovery order

    images: list[ImageInfo] = field(default_factory=list)
    meta: PageMeta = field(default_factory=PageMeta)
    structure: PageStructure = field(default_factory=PageStructure)

    @property
    def missing_alt_count(self) -> int:
        return sum(1 for img in self.images if not img.alt.strip())

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "headings": [h.to_dict() for h in self.headings],
            "buttons": list(self.buttons),
            "linksCount": self.links_count,
            "internalLinks": list(self.internal_links),
            "images": [img.to_dict() for img in self.images],
            "meta": self.meta.to_dict(),
            "structure": self.structure.to_dict(),
        }


@dataclass
class Issue:
    title: str
    why: str = ""
    fix: str = ""
    impact: str = "Medium"              # High | Medium | Low
    category: str = "General SEO"

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "why": self.why,
            "fix": self.fix,
            "impact": self.impact,
            "category": self.category,
        }


@dataclass
class PageAnalysis:
    page_score: int
    page_name: str
    page_url: str

    critical_issues: list[Issue] = field(default_factory=list)
    recommendations: list[Issue] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    quick_wins: list[str] = field(default_factory=list)      # at most 3

    # set only when the result came from the heuristic scorer
    note: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.note is not None

    def to_dict(self) -> dict:
        data = {
            "pageScore": self.page_score,
            "pageName": self.page_name,
            "pageUrl": self.page_url,
            "criticalIssues": [i.to_dict() for i in self.critical_issues],
            "recommendations": [i.to_dict() for i in self.recommendations],
            "strengths": list(self.strengths),
            "quickWins": list(self.quick_wins),
        }
        if self.note is not None:
            data["_note"] = self.note
        return data


@dataclass
class CrawlResult:
    start_url: str
    pages: list[PageSnapshot] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def to_dict(self) -> dict:
        return {
            "pages": [p.to_dict() for p in self.pages],
            "totalPages": self.total_pages,
            "startUrl": self.start_url,
        }
