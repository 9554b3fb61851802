# File: deal_scout/report/__init__.py
"""deal_scout.report: Отчёты (JSON и HTML) по загруженным сделкам для CLI и тестов."""

from deal_scout.report.html_report import render_html
from deal_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
