from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from scanner.core import validate_url
from scanner.errors import InvalidInput


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- requests ---

class ScanOptions(CamelModel):
    multi_page: bool = False
    max_pages: Optional[int] = Field(default=None, ge=1)
    max_depth: Optional[int] = Field(default=None, ge=0)


class ScanRequest(CamelModel):
    url: str
    options: ScanOptions = Field(default_factory=ScanOptions)

    @field_validator("url", mode="before")
    @classmethod
    def url_must_be_absolute(cls, v: Any) -> str:
        try:
            return validate_url(v)
        except InvalidInput as exc:
            raise ValueError(str(exc)) from exc


class FixIssue(CamelModel):
    title: str = Field(min_length=1)
    why: str = ""
    fix: str = ""
    impact: str = ""
    category: str = ""


class FixRequest(CamelModel):
    issue: FixIssue
    context: dict[str, Any] = Field(default_factory=dict)


# --- responses ---

class IssueOut(CamelModel):
    title: str
    why: str = ""
    fix: str = ""
    impact: str = "Medium"
    category: str = "General SEO"


class PageAnalysisOut(CamelModel):
    page_score: int
    page_name: str
    page_url: str
    critical_issues: list[IssueOut] = []
    recommendations: list[IssueOut] = []
    strengths: list[str] = []
    quick_wins: list[str] = []
    note: Optional[str] = Field(default=None, alias="_note")   # set on heuristic results


class PageEntry(CamelModel):
    page_number: int
    url: str
    title: str
    ai_analysis: Optional[PageAnalysisOut] = None
    error: Optional[str] = None


class ScanSummary(CamelModel):
    total_pages: int
    analyzed_pages: int
    average_score: int
    quota_exceeded: bool


class SiteWide(CamelModel):
    common_issues: list[str] = []
    top_priority: list[str] = []
    score: Optional[int] = None


class SinglePageScanResponse(CamelModel):
    success: bool = True
    scan_type: Literal["single-page-ai"] = "single-page-ai"
    url: str
    timestamp: str
    analysis: PageAnalysisOut
    cached: bool = False


class MultiPageScanResponse(CamelModel):
    success: bool = True
    scan_type: Literal["multi-page-ai"] = "multi-page-ai"
    url: str
    timestamp: str
    summary: ScanSummary
    pages: list[PageEntry]
    site_wide: Optional[SiteWide] = None
    cached: bool = False


class FixResponse(CamelModel):
    success: bool = True
    fix: dict[str, Any]


class HealthResponse(CamelModel):
    status: str
    timestamp: str
    api_key_configured: bool
    cache: str  # "connected" or "unavailable"


class ErrorResponse(BaseModel):
    success: bool = False
    message: Optional[str] = None
    error: Optional[str] = None
