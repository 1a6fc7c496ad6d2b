import logging
from typing import Optional

from .json_extract import safe_parse
from .llm import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_TEMPERATURE, call_model
from .models import PageSnapshot
from .prompts import site_prompt

logger = logging.getLogger(__name__)

MIN_PAGES = 2


def _str_list(value) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("title") or item.get("issue") or ""
        text = str(item).strip() if item is not None else ""
        if text:
            out.append(text)
    return out


def _score(value) -> Optional[int]:
    try:
        return max(0, min(100, int(round(float(value)))))
    except (TypeError, ValueError):
        return None


class SiteAggregator:
    """Cross-page comparison. A missing aggregate is a normal outcome, never an error."""

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

    async def aggregate(self, pages: list[PageSnapshot]) -> Optional[dict]:
        if len(pages) < MIN_PAGES or not getattr(self.client, "configured", True):
            return None

        try:
            raw = await call_model(
                self.client,
                site_prompt(pages),
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as exc:
            logger.warning("Site-wide analysis failed: %s", exc)
            return None

        parsed = safe_parse(raw, None)
        if not isinstance(parsed, dict):
            logger.info("Site-wide analysis returned no usable JSON")
            return None

        return {
            "commonIssues": _str_list(parsed.get("commonIssues")),
            "topPriority": _str_list(parsed.get("topPriority")),
            "score": _score(parsed.get("score")),
        }
