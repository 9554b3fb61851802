# File: deal_scout/report/html_report.py
"""deal_scout.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from deal_scout.aggregator import LoadReport

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def render_html(
    report: LoadReport,
    template_dir: Optional[Union[Path, str]],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт со списком сделок и сохраняет его по указанному пути.

    Args:
        report: объект LoadReport.
        template_dir: директория с шаблоном ``report.html.j2``;
            None означает встроенный шаблон пакета.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template("report.html.j2")

    context: dict[str, Any] = {
        "domain": report.domain,
        "deals": report.deals,
        "tasks": report.tasks,
        "failed_task_deals": report.failed_task_deals,
        "message": report.message,
        "error": report.error,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
