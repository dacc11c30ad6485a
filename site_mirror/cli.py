# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска site_mirror через командную строку.

Команды:
  mirror    Зеркалировать сайт по конфигу и вывести/сохранить отчёты
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда mirror опции:
  --directory DIR       Каталог для копии (override directory)
  --overwrite           Разрешить запись в непустой каталог
  --manifest PATH       Сохранить JSON-манифест в файл
  --html PATH           Сохранить HTML-индекс в файл
  --pretty              Преформатировать JSON-вывод (отступ 2)
  --mirror-timeout SEC  Таймаут всего зеркалирования (секунд)

Пример:
  site_mirror --config configs/default.yaml mirror --directory ./out --manifest out.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_mirror import __version__
from site_mirror.config import load_config
from site_mirror.engine import start_mirror
from site_mirror.logger import DEFAULT_FORMAT, init_logging
from site_mirror.report.html_report import render_html
from site_mirror.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="SiteMirror, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default="configs/default.yaml",
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Путь к файлу конфигурации YAML/JSON.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Уровень логирования",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Путь к файлу логов (stdout, если не указан)",
)
@click.option(
    "--log-format", "log_format",
    default=DEFAULT_FORMAT,
    show_default=True,
    help="Строка формата для логов",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteMirror CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f"Ошибка загрузки конфигурации: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("mirror", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--directory", "-d", "directory",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Каталог для локальной копии (override directory)",
)
@click.option("--overwrite", is_flag=True, help="Разрешить запись в непустой каталог")
@click.option(
    "--manifest", "-m", "manifest_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Сохранить JSON-манифест в файл",
)
@click.option(
    "--html", "-h", "html_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Сохранить HTML-индекс в файл",
)
@click.option("--pretty", is_flag=True, help="Преформатировать JSON-вывод (отступ 2)")
@click.option(
    "--mirror-timeout", "mirror_timeout",
    type=float,
    default=None,
    help="Таймаут всего зеркалирования (секунд)",
)
@click.pass_context
def mirror(ctx, directory, overwrite, manifest_output, html_output, pretty, mirror_timeout):
    """Зеркалировать сайт и сгенерировать отчёты."""
    cfg = ctx.obj["config"]
    updates = {}
    if directory is not None:
        updates["directory"] = directory
    if overwrite:
        updates["overwrite"] = True
    if updates:
        cfg = cfg.model_copy(update=updates)

    click.echo(f"Mirroring {', '.join(cfg.seed_urls)} into {cfg.directory}")
    try:
        if mirror_timeout:
            report = asyncio.run(asyncio.wait_for(start_mirror(cfg), timeout=mirror_timeout))
        else:
            report = asyncio.run(start_mirror(cfg))
    except asyncio.TimeoutError:
        print_error(f"Зеркалирование не завершено за {mirror_timeout} секунд")
    except Exception as e:
        print_error(f"Ошибка при зеркалировании: {e}")

    if not manifest_output and not html_output:
        indent = 2 if pretty else None
        click.echo(json.dumps(report.counts, ensure_ascii=False, indent=indent))
        return

    if manifest_output:
        try:
            saved_json = render_json(report, manifest_output, pretty=pretty)
            click.echo(f"JSON manifest: {saved_json}")
        except Exception as e:
            print_error(f"Ошибка при сохранении JSON: {e}")

    if html_output:
        try:
            saved_html = render_html(report, html_output)
            click.echo(f"HTML index: {saved_html}")
        except Exception as e:
            print_error(f"Ошибка при сохранении HTML: {e}")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj["config"]
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
