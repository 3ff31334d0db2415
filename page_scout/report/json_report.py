# page_scout/report/json_report.py

"""
Генерация JSON-отчёта PageScout.

Сериализация списка DiscoveredPage (и, при наличии, оценок релевантности) в файл.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from page_scout.crawler.models import DiscoveredPage, ScoredPage


def build_rows(
    pages: Sequence[DiscoveredPage],
    scored: Optional[Sequence[ScoredPage]] = None,
) -> List[Dict[str, Any]]:
    """Плоские словари для отчётов; ``score`` добавляется, если переданы оценки."""
    scores = {s.url: s.score for s in scored} if scored is not None else None
    rows: List[Dict[str, Any]] = []
    for page in pages:
        row = page.to_dict()
        if scores is not None:
            row["score"] = scores.get(page.url)
        rows.append(row)
    return rows


def render_json(
    pages: Sequence[DiscoveredPage],
    output_path: Path | str,
    scored: Optional[Sequence[ScoredPage]] = None,
    *,
    pretty: bool = True,
) -> Path:
    """
    Сохраняет отчёт в формате JSON по указанному пути.

    :param pages: результат discover_pages
    :param output_path: путь к JSON-файлу
    :param scored: оценки релевантности (необязательно)
    :return: Path сохранённого файла

    Пример:
    ```python
    from page_scout.report.json_report import render_json
    report_path = render_json(pages, 'reports/pages.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {"pages": build_rows(pages, scored)}

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output
