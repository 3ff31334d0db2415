# File: tests/test_report.py
import json

from page_scout.crawler.models import DiscoveredPage, ScoredPage
from page_scout.report import build_rows, render_html, render_json

PAGES = [
    DiscoveredPage("https://example.com/blog/first-post", "First <post>", True),
    DiscoveredPage("https://example.com/blog/second-post", None, False),
]


def test_build_rows_without_scores():
    assert build_rows(PAGES) == [
        {"url": "https://example.com/blog/first-post", "title": "First <post>", "is_new": True},
        {"url": "https://example.com/blog/second-post", "title": None, "is_new": False},
    ]


def test_build_rows_with_scores():
    rows = build_rows(PAGES, [ScoredPage("https://example.com/blog/first-post", 0.8)])
    assert rows[0]["score"] == 0.8
    assert rows[1]["score"] is None


def test_render_json(tmp_path):
    out = render_json(PAGES, tmp_path / "nested" / "pages.json", pretty=False)
    data = json.loads(out.read_text(encoding="utf-8"))

    assert out.exists()
    assert [row["url"] for row in data["pages"]] == [p.url for p in PAGES]
    assert "score" not in data["pages"][0]


def test_render_html_escapes_titles(tmp_path):
    out = render_html(PAGES, tmp_path / "report.html", title="Site report")
    html = out.read_text(encoding="utf-8")

    assert "<title>Site report</title>" in html
    assert "First &lt;post&gt;" in html
    assert 'href="https://example.com/blog/second-post"' in html
    assert "2 pages, 1 new" in html
    assert "<th>Score</th>" not in html


def test_render_html_with_scores(tmp_path):
    scored = [ScoredPage(PAGES[0].url, 0.756), ScoredPage(PAGES[1].url, 0.1)]
    html = render_html(PAGES, tmp_path / "report.html", scored).read_text(encoding="utf-8")

    assert "<th>Score</th>" in html
    assert "0.76" in html
    assert "0.10" in html


def test_render_html_custom_template(tmp_path):
    tpl_dir = tmp_path / "tpl"
    tpl_dir.mkdir()
    (tpl_dir / "report.html.j2").write_text("{% for r in rows %}{{ r.url }};{% endfor %}", encoding="utf-8")

    html = render_html(PAGES, tmp_path / "r.html", template_dir=tpl_dir).read_text(encoding="utf-8")
    assert html == "https://example.com/blog/first-post;https://example.com/blog/second-post;"
