# === FILE: link_scout/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for LinkScout.

Commands:
  check      Find broken links (exit code 1 when any are found)
  analyze    Classify every link by type
  index      Find links search engines will not index or follow
  canonical  Verify canonical URLs and redirects
  latency    Measure page response times
  metacheck  Audit titles and meta descriptions
  pagerank   Rank internal pages with PageRank
  config     Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file
  --version, -v       Show the LinkScout version

Crawl options (every tool):
  -c, --concurrency N  -t, --timeout SEC  -d, --depth N  --max-pages N
  --json PATH  --csv PATH  --html PATH

Example:
  link-scout check https://example.com -c 20 --json broken.json
"""
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from link_scout import __version__
from link_scout.config import load_config, override
from link_scout.engine import run_tool
from link_scout.errors import InvalidSeedError
from link_scout.logger import configure
from link_scout.report import render_console, render_csv, render_html, render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def crawl_options(func):
    """Options shared by every tool subcommand."""
    decorators = [
        click.argument('url'),
        click.option('--concurrency', '-c', type=int, default=None,
                     help='Maximum simultaneous fetches.'),
        click.option('--timeout', '-t', type=float, default=None,
                     help='Per-request timeout in seconds.'),
        click.option('--depth', '-d', 'max_depth', type=int, default=None,
                     help='Maximum link depth (0 = unlimited).'),
        click.option('--max-pages', 'max_pages', type=int, default=None,
                     help='Safety cap on visited URLs.'),
        click.option('--limit', '--top', '-n', 'limit', type=int, default=20, show_default=True,
                     help='Items shown per section on the console (0 = all).'),
        click.option('--json', 'json_output', default=None,
                     type=click.Path(dir_okay=False, path_type=Path),
                     help='Save a JSON report.'),
        click.option('--csv', 'csv_output', default=None,
                     type=click.Path(dir_okay=False, path_type=Path),
                     help='Save a CSV report.'),
        click.option('--html', 'html_output', default=None,
                     type=click.Path(dir_okay=False, path_type=Path),
                     help='Save an HTML report.'),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkScout, version %(version)s')
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Logging level.'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Also write logs to this file.'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file):
    """LinkScout: crawl a site and analyze its links."""
    configure(level=log_level.upper(), log_file=str(log_file) if log_file else None)
    try:
        settings = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Failed to load config: {e}')
    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings


def _run(ctx, tool, url, crawl_changes, rank_changes, limit, json_output, csv_output, html_output):
    settings = ctx.obj['settings']
    try:
        settings = settings.model_copy(update={
            'crawl': override(settings.crawl, **crawl_changes),
            'rank': override(settings.rank, **rank_changes),
        })
    except ValidationError as e:
        print_error(f'Invalid option: {e}')

    try:
        result = cli.run_tool(tool, url, settings)
    except InvalidSeedError as e:
        print_error(f'Error: {e}')
    except Exception as e:
        print_error(f'{tool} failed: {e}')

    render_console(result, limit)

    reports = (
        ('JSON', json_output, cli.render_json),
        ('CSV', csv_output, cli.render_csv),
        ('HTML', html_output, cli.render_html),
    )
    for label, path, render in reports:
        if not path:
            continue
        try:
            saved = render(result, path)
        except OSError as e:
            print_error(f'Failed to save {label} report: {e}')
        click.echo(f'{label} report: {saved}', err=True)
    return result


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.pass_context
def check(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
          json_output, csv_output, html_output):
    """Find broken links (HTTP >= 400 or unreachable)."""
    result = _run(ctx, 'check', url,
                  dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
                       max_pages=max_pages),
                  {}, limit, json_output, csv_output, html_output)
    if result.broken_links:
        sys.exit(1)


@cli.command('analyze', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.pass_context
def analyze(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
            json_output, csv_output, html_output):
    """Classify links: internal, external, files, mailto, tel, ..."""
    _run(ctx, 'analyze', url,
         dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
              max_pages=max_pages),
         {}, limit, json_output, csv_output, html_output)


@cli.command('index', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.option('--no-robots', is_flag=True, help='Do not consult robots.txt.')
@click.pass_context
def index(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
          json_output, csv_output, html_output, no_robots):
    """Find links that will not be indexed or followed."""
    _run(ctx, 'index', url,
         dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
              max_pages=max_pages, check_robots=False if no_robots else None),
         {}, limit, json_output, csv_output, html_output)


@cli.command('canonical', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.pass_context
def canonical(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
              json_output, csv_output, html_output):
    """Check canonical tags, redirects and canonical chains."""
    _run(ctx, 'canonical', url,
         dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
              max_pages=max_pages),
         {}, limit, json_output, csv_output, html_output)


@cli.command('latency', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.pass_context
def latency(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
            json_output, csv_output, html_output):
    """Measure response time of every page."""
    _run(ctx, 'latency', url,
         dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
              max_pages=max_pages),
         {}, limit, json_output, csv_output, html_output)


@cli.command('metacheck', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.pass_context
def metacheck(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
              json_output, csv_output, html_output):
    """Audit page titles and meta descriptions (missing, duplicate, length)."""
    _run(ctx, 'metacheck', url,
         dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
              max_pages=max_pages),
         {}, limit, json_output, csv_output, html_output)


@cli.command('pagerank', context_settings=CONTEXT_SETTINGS)
@crawl_options
@click.option('--damping', type=float, default=None, help='Damping factor in (0, 1].')
@click.option('--iter', 'max_iterations', type=int, default=None, help='Maximum iterations.')
@click.option('--tolerance', type=float, default=None, help='L1 convergence threshold.')
@click.pass_context
def pagerank(ctx, url, concurrency, timeout, max_depth, max_pages, limit,
             json_output, csv_output, html_output, damping, max_iterations, tolerance):
    """Rank internal pages by PageRank."""
    _run(ctx, 'pagerank', url,
         dict(concurrency=concurrency, timeout=timeout, max_depth=max_depth,
              max_pages=max_pages),
         dict(damping_factor=damping, max_iterations=max_iterations, tolerance=tolerance),
         limit, json_output, csv_output, html_output)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    click.echo(ctx.obj['settings'].model_dump_json(indent=2))


# expose these names at module level for test monkey-patching
cli.run_tool = run_tool
cli.render_json = render_json
cli.render_csv = render_csv
cli.render_html = render_html

if __name__ == "__main__":
    cli()
