# === FILE: page_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа PageScout для командной строки.

Команды:
  discover URL   Найти контентные страницы сайта и вывести/сохранить отчёт
  score URL      Найти страницы и оценить их релевантность каналу через LLM
  scrape URL     Извлечь заголовок и основной текст одной страницы (+ хэш содержимого)
  config         Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stderr, если не указан)
  --log-format FORMAT Формат логирования

Пример:
  page_scout discover https://example.com --max-pages 30 --json pages.json
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional, Set

import click

from page_scout import __version__
from page_scout.config import DiscoveryConfig, load_config
from page_scout.crawler.models import ChannelContext, PageInfo
from page_scout.engine import discover_pages
from page_scout.exceptions import ContentTooShortError, FetchError, InvalidUrlError
from page_scout.llm import ChatClient
from page_scout.logger import DEFAULT_FORMAT, init_logging
from page_scout.relevance import RELEVANCE_THRESHOLD, score_page_relevance
from page_scout.report.html_report import render_html
from page_scout.report.json_report import build_rows, render_json
from page_scout.scraper import scrape_page

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _read_existing(path: Optional[Path]) -> Set[str]:
    if path is None:
        return set()
    lines = (line.strip() for line in path.read_text(encoding='utf-8').splitlines())
    return {line for line in lines if line and not line.startswith('#')}


def _overrides(cfg: DiscoveryConfig, max_pages: Optional[int], patterns: tuple, delay: Optional[float]) -> DiscoveryConfig:
    update = {}
    if max_pages is not None:
        update['max_pages'] = max_pages
    if patterns:
        update['filter_patterns'] = list(cfg.filter_patterns) + list(patterns)
    if delay is not None:
        update['rate_limit_delay'] = delay
    return cfg.model_copy(update=update) if update else cfg


async def _discover(cfg: DiscoveryConfig, url: str, existing: Set[str], timeout: Optional[float]):
    coro = discover_pages(url, existing_urls=existing, config=cfg)
    if timeout is not None:
        return await asyncio.wait_for(coro, timeout=timeout)
    return await coro


async def _discover_and_score(cfg: DiscoveryConfig, url: str, existing: Set[str], timeout: Optional[float], context: ChannelContext):
    pages = await _discover(cfg, url, existing, timeout)
    async with ChatClient(cfg.llm) as chat:
        scored = await score_page_relevance(
            [PageInfo(p.url, p.title) for p in pages],
            context,
            chat,
            temperature=cfg.llm.temperature,
            max_tokens=cfg.llm.max_tokens,
        )
    return pages, scored


def _run(coro, timeout: Optional[float]):
    try:
        return asyncio.run(coro)
    except asyncio.TimeoutError:
        print_error(f'Обнаружение не завершено за {timeout} секунд')
    except InvalidUrlError as e:
        print_error(f'Некорректный URL: {e}')


def _emit(pages, scored, json_output: Optional[Path], html_output: Optional[Path], pretty: bool):
    if not json_output and not html_output:
        indent = 2 if pretty else None
        click.echo(json.dumps(build_rows(pages, scored), ensure_ascii=False, indent=indent))
        return
    if json_output:
        try:
            saved_json = render_json(pages, json_output, scored, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
    if html_output:
        try:
            saved_html = render_html(pages, html_output, scored)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


def discovery_options(func):
    """Опции, общие для discover и score."""
    options = [
        click.argument('url'),
        click.option('--max-pages', '-n', 'max_pages', type=click.IntRange(min=1), default=None,
                     help='Макс. число страниц в результате (override max_pages)'),
        click.option('--filter', '-f', 'patterns', multiple=True,
                     help='Regex-исключение URL (можно повторять)'),
        click.option('--existing', '-e', 'existing_file', default=None,
                     type=click.Path(exists=True, dir_okay=False, path_type=Path),
                     help='Файл с уже известными URL, по одному на строку'),
        click.option('--delay', 'delay', type=click.FloatRange(min=0), default=None,
                     help='Пауза между запросами обхода, секунд'),
        click.option('--json', '-j', 'json_output', default=None,
                     type=click.Path(writable=True, dir_okay=False, path_type=Path),
                     help='Сохранить JSON-отчёт в файл'),
        click.option('--html', 'html_output', default=None,
                     type=click.Path(writable=True, dir_okay=False, path_type=Path),
                     help='Сохранить HTML-отчёт в файл'),
        click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)'),
        click.option('--timeout', 'timeout', type=click.FloatRange(min=0, min_open=True), default=None,
                     help='Таймаут всего обнаружения (секунд)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PageScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд PageScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('discover', context_settings=CONTEXT_SETTINGS)
@discovery_options
@click.pass_context
def discover(ctx, url, max_pages, patterns, existing_file, delay, json_output, html_output, pretty, timeout):
    """Найти контентные страницы сайта URL."""
    cfg = _overrides(ctx.obj['config'], max_pages, patterns, delay)
    existing = _read_existing(existing_file)
    click.echo(f'Discovering pages for {url}', err=True)
    pages = _run(_discover(cfg, url, existing, timeout), timeout)
    _emit(pages, None, json_output, html_output, pretty)


@cli.command('score', context_settings=CONTEXT_SETTINGS)
@discovery_options
@click.option('--niche', default=None, help='Тематика канала')
@click.option('--description', default=None, help='Описание канала')
@click.option('--language', default=None, help='Язык канала')
@click.option('--threshold', type=click.FloatRange(0, 1), default=None,
              help=f'Оставить только страницы с оценкой не ниже порога (обычно {RELEVANCE_THRESHOLD})')
@click.pass_context
def score(ctx, url, max_pages, patterns, existing_file, delay, json_output, html_output, pretty, timeout,
          niche, description, language, threshold):
    """Найти страницы сайта URL и оценить их релевантность каналу."""
    cfg = _overrides(ctx.obj['config'], max_pages, patterns, delay)
    if cfg.llm is None:
        print_error('LLM не настроен: добавьте секцию llm в конфиг')
    existing = _read_existing(existing_file)
    context = ChannelContext(niche=niche, description=description, language=language)
    click.echo(f'Discovering and scoring pages for {url}', err=True)
    pages, scored = _run(_discover_and_score(cfg, url, existing, timeout, context), timeout)
    if threshold is not None:
        keep = {s.url for s in scored if s.score >= threshold}
        pages = [p for p in pages if p.url in keep]
        scored = [s for s in scored if s.url in keep]
    _emit(pages, scored, json_output, html_output, pretty)


@cli.command('scrape', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--full', 'full_extraction', is_flag=True,
              help='Полное извлечение: не удалять навигацию, брать весь видимый текст')
@click.option('--previous-hash', 'previous_hash', default=None,
              help='Хэш предыдущей версии; в выводе changed=false, если совпадает')
@click.option('--json', '-j', 'json_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help='Сохранить результат в JSON-файл')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option('--timeout', 'timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Таймаут загрузки страницы (секунд, по умолчанию page_timeout)')
@click.pass_context
def scrape(ctx, url, full_extraction, previous_hash, json_output, pretty, timeout):
    """Извлечь заголовок, домен и основной текст страницы URL."""
    cfg = ctx.obj['config']
    click.echo(f'Scraping {url}', err=True)
    try:
        page = _run(scrape_page(url, config=cfg, full_extraction=full_extraction,
                                previous_hash=previous_hash, timeout=timeout), timeout)
    except ContentTooShortError as e:
        print_error(f'Слишком мало текста: {e}')
    except FetchError as e:
        print_error(f'Ошибка загрузки: {e}')
    text = json.dumps(page.to_dict(), ensure_ascii=False, indent=2 if pretty else None)
    if json_output is None:
        click.echo(text)
        return
    try:
        json_output.parent.mkdir(parents=True, exist_ok=True)
        json_output.write_text(text, encoding='utf-8')
    except OSError as e:
        print_error(f'Ошибка при сохранении JSON: {e}')
    click.echo(f'JSON: {json_output}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


def main(argv: Optional[List[str]] = None):
    cli.main(args=argv, prog_name='page_scout')


if __name__ == "__main__":
    main()
