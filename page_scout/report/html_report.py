"""page_scout.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, PackageLoader, select_autoescape

from page_scout.crawler.models import DiscoveredPage, ScoredPage
from page_scout.report.json_report import build_rows

TEMPLATE_NAME = "report.html.j2"


def _environment(template_dir: Union[Path, str, None]) -> Environment:
    loader = (
        FileSystemLoader(str(template_dir))
        if template_dir is not None
        else PackageLoader("page_scout.report", "templates")
    )
    return Environment(loader=loader, autoescape=select_autoescape(["html", "xml", "j2"]))


def render_html(
    pages: Sequence[DiscoveredPage],
    output_path: Union[Path, str],
    scored: Optional[Sequence[ScoredPage]] = None,
    *,
    template_dir: Union[Path, str, None] = None,
    title: str = "PageScout report",
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        pages: результат discover_pages.
        output_path: путь к итоговому HTML-файлу.
        scored: оценки релевантности (необязательно).
        template_dir: своя директория с ``report.html.j2``; по умолчанию шаблон из пакета.
        title: заголовок отчёта.

    Returns:
        Path до сохранённого HTML-файла.
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    template = _environment(template_dir).get_template(TEMPLATE_NAME)
    context: dict[str, Any] = {
        "title": title,
        "rows": build_rows(pages, scored),
        "with_scores": scored is not None,
        "new_count": sum(1 for p in pages if p.is_new),
    }
    output.write_text(template.render(**context), encoding="utf-8")
    return output
