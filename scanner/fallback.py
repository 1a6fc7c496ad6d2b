from .models import Issue, PageAnalysis, PageSnapshot
from .parser import PLACEHOLDER_TITLE

FALLBACK_NOTE = "Heuristic analysis: AI analysis was unavailable for this page."

# --- penalties, subtracted from a perfect 100 ---
PENALTY_TITLE = 20
PENALTY_DESCRIPTION = 15
PENALTY_NO_H1 = 15
PENALTY_MULTIPLE_H1 = 10
PENALTY_MISSING_ALT = 10
PENALTY_VIEWPORT = 15

_CTA_KEYWORDS = ("buy", "contact", "get", "start", "apply", "join")


def _has_title(snapshot: PageSnapshot) -> bool:
    title = (snapshot.title or "").strip()
    return bool(title) and title != PLACEHOLDER_TITLE


def _has_cta(snapshot: PageSnapshot) -> bool:
    return any(k in label.lower() for label in snapshot.buttons for k in _CTA_KEYWORDS)


def fallback_score(snapshot: PageSnapshot) -> PageAnalysis:
    """
    Deterministic rule-based analysis of one snapshot.

    Used whenever the model cannot produce a usable answer, so it must
    never call out and must give identical output for identical input.
    """
    score = 100
    issues: list[Issue] = []
    strengths: list[str] = []
    meta = snapshot.meta

    if not _has_title(snapshot):
        score -= PENALTY_TITLE
        issues.append(Issue(
            title="Missing page title",
            why="Search engines use the title as the main ranking and click-through signal.",
            fix="Add a unique, descriptive <title> of 50-60 characters with the primary keyword.",
            impact="High",
            category="On-Page SEO",
        ))

    if not meta.description.strip():
        score -= PENALTY_DESCRIPTION
        issues.append(Issue(
            title="Missing meta description",
            why="Without a description search engines pick arbitrary page text for the snippet.",
            fix='Add <meta name="description"> with a 150-160 character summary and a call to action.',
            impact="High",
            category="On-Page SEO",
        ))
    else:
        strengths.append("Meta description is present")

    if meta.h1_count == 0:
        score -= PENALTY_NO_H1
        issues.append(Issue(
            title="No H1 heading",
            why="The H1 tells users and crawlers what the page is about.",
            fix="Add exactly one <h1> that states the page topic.",
            impact="High",
            category="Content Structure",
        ))
    elif meta.h1_count > 1:
        score -= PENALTY_MULTIPLE_H1
        issues.append(Issue(
            title=f"Multiple H1 headings ({meta.h1_count})",
            why="Several H1s dilute the main topic signal of the page.",
            fix="Keep a single <h1> and demote the others to <h2>.",
            impact="Medium",
            category="Content Structure",
        ))
    else:
        strengths.append("Exactly one H1 heading")

    missing_alt = snapshot.missing_alt_count
    if missing_alt:
        score -= PENALTY_MISSING_ALT
        issues.append(Issue(
            title=f"{missing_alt} image(s) missing alt text",
            why="Screen readers and image search depend on alt text.",
            fix="Add concise, descriptive alt attributes to every meaningful image.",
            impact="Medium",
            category="Accessibility",
        ))

    if not meta.viewport.strip():
        score -= PENALTY_VIEWPORT
        issues.append(Issue(
            title="Missing viewport meta tag",
            why="Without it the page renders at desktop width on phones and fails mobile-first indexing.",
            fix='Add <meta name="viewport" content="width=device-width, initial-scale=1">.',
            impact="High",
            category="Mobile UX",
        ))

    structure = snapshot.structure
    if structure.has_header and structure.has_main and structure.has_footer:
        strengths.append("Semantic structure (header, main, footer) is in place")

    if _has_cta(snapshot):
        strengths.append("Clear call-to-action is present")

    critical = [i for i in issues if i.impact == "High"]
    recommendations = [i for i in issues if i.impact != "High"]

    return PageAnalysis(
        page_score=max(0, score),
        page_name=snapshot.title if _has_title(snapshot) else snapshot.url,
        page_url=snapshot.url,
        critical_issues=critical,
        recommendations=recommendations,
        strengths=strengths,
        quick_wins=[i.title for i in (critical + recommendations)[:3]],
        note=FALLBACK_NOTE,
    )
