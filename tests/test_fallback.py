from scanner.fallback import FALLBACK_NOTE, fallback_score
from scanner.models import ImageInfo, PageStructure


def _bare_page(make_snapshot):
    return make_snapshot(
        url="https://example.com/bare",
        title="No title",
        description="",
        viewport="",
        h1_count=0,
        images=[ImageInfo(src="/x.png", alt="")],
        buttons=(),
        structure=PageStructure(),
    )


def test_bare_page_scores_25(make_snapshot):
    result = fallback_score(_bare_page(make_snapshot))

    assert result.page_score == 25
    assert len(result.critical_issues) + len(result.recommendations) == 5
    assert all(i.impact == "High" for i in result.critical_issues)
    assert len(result.critical_issues) == 4
    assert len(result.recommendations) == 1
    assert result.recommendations[0].impact == "Medium"
    assert "alt" in result.recommendations[0].title


def test_bare_page_uses_url_as_name(make_snapshot):
    result = fallback_score(_bare_page(make_snapshot))
    assert result.page_name == "https://example.com/bare"
    assert result.page_url == "https://example.com/bare"


def test_well_formed_page_scores_100(make_snapshot):
    result = fallback_score(make_snapshot())

    assert result.page_score == 100
    assert result.critical_issues == []
    assert result.recommendations == []
    assert "Meta description is present" in result.strengths
    assert "Exactly one H1 heading" in result.strengths
    assert "Semantic structure (header, main, footer) is in place" in result.strengths
    assert "Clear call-to-action is present" in result.strengths


def test_multiple_h1_is_medium(make_snapshot):
    result = fallback_score(make_snapshot(h1_count=3))
    assert result.page_score == 90
    assert result.recommendations[0].title == "Multiple H1 headings (3)"
    assert result.recommendations[0].impact == "Medium"


def test_no_cta_no_strength(make_snapshot):
    result = fallback_score(make_snapshot(buttons=("Read more",)))
    assert "Clear call-to-action is present" not in result.strengths


def test_is_deterministic(make_snapshot):
    snap = _bare_page(make_snapshot)
    assert fallback_score(snap) == fallback_score(snap)
    assert fallback_score(snap).to_dict() == fallback_score(snap).to_dict()


def test_marked_as_heuristic(make_snapshot):
    result = fallback_score(make_snapshot())
    assert result.note == FALLBACK_NOTE
    assert result.is_fallback
    assert result.to_dict()["_note"] == FALLBACK_NOTE


def test_score_in_range_and_quick_wins_capped(make_snapshot):
    variants = [
        make_snapshot(),
        make_snapshot(description=""),
        make_snapshot(h1_count=0, viewport=""),
        _bare_page(make_snapshot),
    ]
    for snap in variants:
        result = fallback_score(snap)
        assert 0 <= result.page_score <= 100
        assert len(result.quick_wins) <= 3
