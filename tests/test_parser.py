from scanner.parser import PLACEHOLDER_TITLE, parse_snapshot


SAMPLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>Best Camping Tents for 2024</title>
    <meta name="description" content="A guide to the top camping tents for outdoor enthusiasts.">
    <meta name="keywords" content="camping, tents, outdoor, hiking">
    <meta name="viewport" content="width=device-width, initial-scale=1">
</head>
<body>
    <header><nav>
        <a href="/tents">Tents</a>
        <a href="/tents">Tents again</a>
        <a href="https://example.com/stoves">Stoves</a>
        <a href="#reviews">Reviews</a>
        <a href="/guide#sizing">Sizing</a>
        <a href="mailto:hello@example.com">Mail</a>
        <a href="tel:+15550100">Call</a>
        <a href="javascript:void(0)">Menu</a>
        <a href="https://other.example.org/">Partner</a>
    </nav></header>
    <main>
        <h1>Best Camping Tents</h1>
        <h2>Budget Picks</h2>
        <h3>   </h3>
        <h2>Premium Picks</h2>
        <img src="/tent.jpg" alt="Two-person tent" width="640" height="480px">
        <img src="/stove.jpg">
        <button>Buy now</button>
        <a href="/signup" role="button">Join the club</a>
        <form><input type="submit" value="Subscribe"></form>
    </main>
    <footer>Footer content here</footer>
</body>
</html>
"""

PAGE_URL = "https://example.com/guide"


def test_title_extracted():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    assert snap.title == "Best Camping Tents for 2024"
    assert snap.url == PAGE_URL


def test_missing_title_uses_placeholder():
    snap = parse_snapshot("<html><body><p>hi</p></body></html>", PAGE_URL)
    assert snap.title == PLACEHOLDER_TITLE


def test_meta_fields():
    meta = parse_snapshot(SAMPLE_HTML, PAGE_URL).meta
    assert "camping tents" in meta.description.lower()
    assert "hiking" in meta.keywords
    assert meta.viewport.startswith("width=device-width")
    assert meta.charset == "utf-8"
    assert meta.lang == "en"


def test_headings_in_order_and_empty_skipped():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    assert [(h.level, h.text) for h in snap.headings] == [
        (1, "Best Camping Tents"),
        (2, "Budget Picks"),
        (2, "Premium Picks"),
    ]


def test_h1_count_matches_has_h1():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    assert snap.meta.h1_count == 1
    assert snap.meta.has_h1 is True

    empty = parse_snapshot("<html><body></body></html>", PAGE_URL)
    assert empty.meta.h1_count == 0
    assert empty.meta.has_h1 is False


def test_internal_links_same_host_deduped():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    assert snap.internal_links == [
        "https://example.com/tents",
        "https://example.com/stoves",
        "https://example.com/signup",
    ]


def test_links_count_includes_every_anchor():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    # 9 nav anchors + the role=button link
    assert snap.links_count == 10


def test_images_and_missing_alt():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    assert len(snap.images) == 2
    assert snap.images[0].width == 640
    assert snap.images[0].height == 480
    assert snap.images[1].alt == ""
    assert snap.missing_alt_count == 1


def test_buttons_collected():
    snap = parse_snapshot(SAMPLE_HTML, PAGE_URL)
    assert snap.buttons == ["Buy now", "Join the club", "Subscribe"]


def test_structure_flags():
    structure = parse_snapshot(SAMPLE_HTML, PAGE_URL).structure
    assert structure.has_header
    assert structure.has_nav
    assert structure.has_main
    assert structure.has_footer
    assert structure.form_count == 1


def test_empty_html_does_not_crash():
    snap = parse_snapshot("", PAGE_URL)
    assert snap.title == PLACEHOLDER_TITLE
    assert snap.headings == []
    assert snap.internal_links == []
    assert snap.links_count == 0
