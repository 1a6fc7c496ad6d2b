import logging

from .analyzer import to_analysis_error
from .errors import QuotaExceeded
from .json_extract import safe_parse
from .llm import call_model
from .prompts import fix_prompt

logger = logging.getLogger(__name__)

FIX_TEMPERATURE = 0.4
FIX_MAX_OUTPUT_TOKENS = 4000


def placeholder_fix(issue: dict) -> dict:
    """Deterministic stand-in when no usable code could be generated."""
    return {
        "htmlCode": "<!-- Unable to generate code -->",
        "cssCode": "/* Unable to generate CSS */",
        "javascriptCode": None,
        "schemaMarkup": None,
        "implementation": {
            "steps": ["Manual review required"],
            "fileChanges": [],
            "testing": ["Test the fix manually"],
            "seoNotes": [],
        },
        "explanation": {
            "before": issue.get("title", ""),
            "after": issue.get("fix", ""),
            "seoImpact": "",
            "userImpact": "Improved user experience",
        },
        "bestPractices": [],
    }


class FixGenerator:
    def __init__(self, client):
        self.client = client

    async def generate(self, issue: dict, context: dict | None = None) -> dict:
        """
        Ask the model for ready-to-paste code fixing `issue`.
        Only quota exhaustion escapes; everything else yields the placeholder.
        """
        fallback = placeholder_fix(issue)
        if not getattr(self.client, "configured", True):
            return fallback

        try:
            raw = await call_model(
                self.client,
                fix_prompt(issue, context or {}),
                temperature=FIX_TEMPERATURE,
                max_output_tokens=FIX_MAX_OUTPUT_TOKENS,
            )
        except Exception as exc:
            error = to_analysis_error(exc)
            if isinstance(error, QuotaExceeded):
                raise error from exc
            logger.warning("Fix generation failed for %r: %s", issue.get("title"), error)
            return fallback

        parsed = safe_parse(raw, fallback)
        if not isinstance(parsed, dict):
            return fallback
        # keep every expected key present even if the model skipped some
        return {**fallback, **parsed}
