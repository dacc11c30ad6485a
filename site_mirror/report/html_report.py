# File: site_mirror/report/html_report.py
"""site_mirror.report.html_report: HTML-индекс зеркала с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import BaseLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from site_mirror.aggregator import MirrorReport

TEMPLATE_NAME = "index.html.j2"


def render_html(
    report: MirrorReport,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Рендерит HTML-индекс из шаблона и сохраняет его по указанному пути.

    Args:
        report: объект MirrorReport.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с шаблоном ``index.html.j2``;
            по умолчанию используется шаблон из пакета.

    Returns:
        Path до сохранённого HTML-файла.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    loader: BaseLoader
    if template_dir is not None:
        loader = FileSystemLoader(str(template_dir))
    else:
        loader = PackageLoader("site_mirror", "templates")
    env = Environment(loader=loader, autoescape=select_autoescape(["html", "xml", "j2"]))
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "seeds": report.seeds,
        "entries": report.entries,
        "counts": report.counts,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
