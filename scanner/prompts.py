"""Prompt builders. Only derived counts go to the model, never full snapshots."""
import json

from .models import PageSnapshot

SYSTEM_MESSAGE = """You are a senior SEO and UX auditor.
Return ONLY valid raw JSON that matches the requested schema exactly.
Do not include markdown, code fences, or text outside JSON."""

PAGE_TEMPLATE = """Audit this page using the extracted signals below.

URL: {url}
Title: {title}
Meta Description: {description}
Language: {lang}
H1 Count: {h1_count}
Total Headings: {heading_count}
Images: {image_count} (missing alt: {missing_alt})
Links: {links_count}
Has Viewport: {has_viewport}
Semantic Structure: header={has_header}, nav={has_nav}, main={has_main}, footer={has_footer}
Forms: {form_count}
Buttons: {button_count}

Return ONLY this JSON structure:
{{
  "score": number 0-100,
  "issues": [
    {{"title": "string", "why": "string", "fix": "string", "impact": "High|Medium|Low"}}
  ],
  "recommendations": [
    {{"title": "string", "why": "string", "fix": "string", "impact": "Medium|Low"}}
  ],
  "strengths": ["string"]
}}"""

SITE_TEMPLATE = """Compare these pages from one website and find site-wide patterns.

Pages:
{pages}

Return ONLY this JSON structure:
{{
  "commonIssues": ["issue that appears on several pages"],
  "topPriority": ["most valuable site-wide fix, in order"],
  "score": number 0-100
}}"""

FIX_TEMPLATE = """Generate production-ready code that fixes this issue.

Issue: {title}
Why it matters: {why}
Suggested fix: {fix}
Category: {category}

Page context:
{context}

Return ONLY this JSON structure:
{{
  "htmlCode": "string",
  "cssCode": "string",
  "javascriptCode": "string or null",
  "schemaMarkup": "string or null",
  "implementation": {{"steps": ["string"], "fileChanges": ["string"], "testing": ["string"], "seoNotes": ["string"]}},
  "explanation": {{"before": "string", "after": "string", "seoImpact": "string", "userImpact": "string"}},
  "bestPractices": ["string"]
}}"""


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def page_prompt(snapshot: PageSnapshot) -> str:
    meta = snapshot.meta
    structure = snapshot.structure
    return PAGE_TEMPLATE.format(
        url=snapshot.url,
        title=snapshot.title,
        description=meta.description or "MISSING",
        lang=meta.lang or "Not set",
        h1_count=meta.h1_count,
        heading_count=len(snapshot.headings),
        image_count=len(snapshot.images),
        missing_alt=snapshot.missing_alt_count,
        links_count=snapshot.links_count,
        has_viewport=_yes_no(meta.viewport),
        has_header=_yes_no(structure.has_header),
        has_nav=_yes_no(structure.has_nav),
        has_main=_yes_no(structure.has_main),
        has_footer=_yes_no(structure.has_footer),
        form_count=structure.form_count,
        button_count=len(snapshot.buttons),
    )


def site_prompt(snapshots: list[PageSnapshot]) -> str:
    rows = [
        {
            "url": s.url,
            "title": s.title,
            "hasDescription": bool(s.meta.description),
            "h1Count": s.meta.h1_count,
            "headings": len(s.headings),
            "imagesMissingAlt": s.missing_alt_count,
            "hasViewport": bool(s.meta.viewport),
        }
        for s in snapshots
    ]
    return SITE_TEMPLATE.format(pages=json.dumps(rows, indent=2))


def fix_prompt(issue: dict, context: dict) -> str:
    return FIX_TEMPLATE.format(
        title=issue.get("title", ""),
        why=issue.get("why", "") or "Not provided",
        fix=issue.get("fix", "") or "Not provided",
        category=issue.get("category", "") or "General SEO",
        context=json.dumps(context or {}, indent=2, default=str),
    )
