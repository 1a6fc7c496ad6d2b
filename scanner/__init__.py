from .aggregator import SiteAggregator
from .analyzer import PageAnalyzer
from .core import scan_page, scan_site, validate_url
from .crawler import crawl
from .errors import AnalysisFailure, InvalidInput, QuotaExceeded, RenderFailure, ScanError
from .fallback import fallback_score
from .json_extract import extract_json, safe_parse
from .llm import ModelClient
from .models import PageAnalysis, PageSnapshot
from .renderer import open_renderer

__all__ = [
    "crawl", "scan_page", "scan_site", "validate_url", "open_renderer",
    "PageAnalyzer", "SiteAggregator", "ModelClient",
    "extract_json", "safe_parse", "fallback_score",
    "PageSnapshot", "PageAnalysis",
    "ScanError", "InvalidInput", "RenderFailure", "AnalysisFailure", "QuotaExceeded",
]
