# File: page_scout/report/__init__.py
"""page_scout.report: Генерация отчётов (JSON и HTML) об обнаруженных страницах."""

from __future__ import annotations

from page_scout.report.html_report import render_html
from page_scout.report.json_report import build_rows, render_json

__all__ = ["build_rows", "render_json", "render_html"]
