# File: tests/test_content_extractor.py
import pytest

from page_scout.parser.content_extractor import UNTITLED, clean_title, extract_content

URL = "https://www.example.com/blog/post"
LONG = "Plant-based cooking is mostly about technique. " * 6  # > 200 chars


def page(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


# --------------------------------------------------------------------------- #
#                                   Title                                      #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "head,body,expected",
    [
        ('<meta property="og:title" content="OG title | Site"><meta name="twitter:title" content="TW">'
         "<title>Doc</title>", "<h1>Heading</h1>", "OG title"),
        ('<meta name="twitter:title" content="Twitter title"><title>Doc</title>', "<h1>Heading</h1>", "Twitter title"),
        ("<title>Doc title - Site</title>", "<h1>  Main\n heading </h1>", "Main heading"),
        ("<title>Doc title - Site</title>", "<p>no heading</p>", "Doc title"),
        ('<meta property="og:title" content="   ">', "<p>nothing</p>", UNTITLED),
    ],
)
def test_title_fallback_order(head, body, expected):
    assert extract_content(page(body, head), URL).title == expected


def test_clean_title():
    assert clean_title("Post name | Blog | Site") == "Post name"
    assert clean_title("Post name – Site") == "Post name"
    assert clean_title("Self-hosted setup") == "Self-hosted setup"
    assert clean_title("  Spaced   out  ") == "Spaced out"
    assert clean_title(None) == UNTITLED
    assert clean_title("") == UNTITLED

    long_title = clean_title("x" * 200)
    assert len(long_title) == 150
    assert long_title.endswith("...")
    assert clean_title("y" * 150) == "y" * 150


def test_domain_without_www():
    assert extract_content(page("<p>hi</p>"), "https://WWW.Example.com/x").domain == "example.com"
    assert extract_content(page("<p>hi</p>"), "http://blog.example.com:8080/").domain == "blog.example.com"


# --------------------------------------------------------------------------- #
#                               Selective mode                                 #
# --------------------------------------------------------------------------- #


def test_selective_drops_chrome_and_keeps_article():
    html = page(
        '<nav><a href="/">Home</a> Menu</nav>'
        "<header>Site header</header>"
        f"<article><h2>Section</h2><p>{LONG}</p><p>Second paragraph</p></article>"
        '<div class="sidebar">Sidebar stuff</div>'
        "<footer>Footer text</footer>"
        "<script>var tracking = 1;</script>",
        "<title>Doc</title>",
    )
    result = extract_content(html, URL)

    assert result.content == f"Section\n\n{LONG.strip()}\n\nSecond paragraph"
    for chrome in ("Menu", "Site header", "Sidebar", "Footer", "tracking"):
        assert chrome not in result.content


def test_selective_removes_marked_blocks_inside_container():
    html = page(
        f'<main><p>{LONG}</p><div class="social-share">Share this</div>'
        '<div id="comments"><p>Nice post!</p></div><div role="complementary">Related</div>'
        '<div class="ad">Buy now</div><form><button>Subscribe</button></form></main>'
    )
    content = extract_content(html, URL).content

    assert content == LONG.strip()


def test_short_container_falls_back_to_body():
    html = page("<article><p>Short teaser</p></article><p>Other text</p>")
    assert extract_content(html, URL).content == "Short teaser\n\nOther text"


def test_container_priority_skips_short_candidates():
    html = page(f'<main><p>tiny</p></main><div class="content"><p>{LONG}</p></div><p>outside</p>')
    assert extract_content(html, URL).content == LONG.strip()


def test_nested_blocks_not_repeated():
    html = page("<div><div><p>Alpha</p></div><ul><li>Beta</li></ul><blockquote>Gamma</blockquote></div>")
    assert extract_content(html, URL).content == "Alpha\n\nBeta\n\nGamma"


def test_loose_text_without_blocks():
    assert extract_content(page("Just   loose\n text"), URL).content == "Just loose text"


def test_empty_page():
    result = extract_content("", URL)
    assert result.content == ""
    assert result.title == UNTITLED


# --------------------------------------------------------------------------- #
#                                 Full mode                                    #
# --------------------------------------------------------------------------- #


def test_full_mode_keeps_chrome_and_skips_hidden():
    html = page(
        "<nav>Menu</nav>"
        "<main><h1>Title</h1><p>Para one</p><p>Para   one</p>"
        "<div hidden><p>Secret</p></div><p style=\"display: none\">Hidden para</p></main>"
        "<footer>Footer</footer><script>evil()</script><!-- a comment -->"
    )
    result = extract_content(html, URL, full_extraction=True)

    assert result.content == "Menu Title Para one Footer"
    assert result.title == "Title"


def test_full_mode_collects_mixed_text():
    html = page("<div>Lead <b>bold</b> tail</div><p>Closing</p>")
    assert extract_content(html, URL, full_extraction=True).content == "Lead tail bold Closing"


def test_to_dict():
    data = extract_content(page("<p>Body</p>", "<title>T</title>"), URL).to_dict()
    assert data == {"title": "T", "domain": "example.com", "content": "Body"}
