# === FILE: deal_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска загрузчика DealScout через командную строку.

Команды:
  load      Загрузить все сделки (и задачи выбранных сделок), вывести/сохранить отчёт
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда load опции:
  --domain DOMAIN     Домен аккаунта, например acme.amocrm.ru
  --token TOKEN       Долгосрочный токен (или переменная DEAL_SCOUT_TOKEN)
  --expand ID         Открыть сделку и загрузить её задачи (можно повторять)
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблоном report.html.j2
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --load-timeout SEC  Таймаут всей сессии загрузки (секунд)

Пример:
  deal-scout load --domain acme.amocrm.ru --expand 101 --json deals.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from deal_scout import __version__
from deal_scout.config import load_config
from deal_scout.engine import start_load
from deal_scout.logger import init_logging
from deal_scout.report.html_report import render_html
from deal_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _deal_id(value: str):
    return int(value) if value.isdigit() else value


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='DealScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд DealScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load config: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('load', context_settings=CONTEXT_SETTINGS)
@click.option('--domain', '-d', required=True, help='Домен аккаунта CRM')
@click.option(
    '--token', '-k', required=True, envvar='DEAL_SCOUT_TOKEN',
    help='Bearer-токен API (или DEAL_SCOUT_TOKEN)'
)
@click.option(
    '--expand', '-e', 'expand', multiple=True,
    help='ID сделки, задачи которой нужно загрузить'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию встроенный)'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option(
    '--load-timeout', 'load_timeout',
    type=float,
    default=None,
    help='Таймаут всей загрузки (секунд)'
)
@click.option('--quiet', '-q', is_flag=True, help='Не печатать ход загрузки')
@click.pass_context
def load(ctx, domain, token, expand, json_output, html_output, template_dir, pretty, load_timeout, quiet):
    """Загрузить сделки и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    deal_ids = [_deal_id(value) for value in expand]
    run = start_load(cfg, domain, token, deal_ids, echo=not quiet)
    try:
        if load_timeout:
            report = asyncio.run(asyncio.wait_for(run, timeout=load_timeout))
        else:
            report = asyncio.run(run)
    except asyncio.TimeoutError:
        print_error(f'Load did not finish within {load_timeout} seconds')
    except Exception as e:
        print_error(f'Load failed: {e}')

    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
    else:
        if json_output:
            try:
                saved_json = render_json(report, json_output, pretty=pretty)
                click.echo(f'JSON report: {saved_json}')
            except Exception as e:
                print_error(f'Failed to save JSON: {e}')

        if html_output:
            try:
                saved_html = render_html(report, template_dir, html_output)
                click.echo(f'HTML report: {saved_html}')
            except Exception as e:
                print_error(f'Failed to save HTML: {e}')

    if report.error:
        sys.exit(2)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
