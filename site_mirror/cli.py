# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point of SiteMirror.

Usage:
  site-mirror [URL] [OPTIONS]

  URL                     Seed URL (default: https://example.com)

Options:
  --config, -c PATH       YAML/JSON config file (values are overridden by options)
  --output, -o DIR        Root directory of the mirrored tree
  --max-requests, -m INT  Hard cap on requests per crawl (default 500)
  --concurrency INT       Number of concurrent fetch workers
  --html-match MODE       strict | loose matching of page links
  --on-collision MODE     overwrite | suffix when two URLs share a file name
  --request-timeout SEC   Timeout of a single request
  --crawl-timeout SEC     Timeout of the whole crawl
  --log-level LEVEL       Logging level (DEBUG, INFO, ...)
  --log-file PATH         Log file (stdout only if omitted)
  --log-format FMT        default | worker | short, or a logging format string
  --json                  Print the final counters as JSON
  --version, -v           Show SiteMirror version

Example:
  site-mirror https://example.com -o mirror --max-requests 100
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_mirror import __version__
from site_mirror.config import DEFAULT_SEED_URL, load_config
from site_mirror.engine import start_mirror
from site_mirror.errors import SeedInvalid, WriteError
from site_mirror.logger import configure
from site_mirror.urls import validate_seed

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMirror, version %(version)s')
@click.argument('url', required=False, default=None)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--output', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Root directory of the mirrored tree (default: output).'
)
@click.option(
    '--max-requests', '-m', 'max_requests',
    type=click.IntRange(min=1),
    default=None,
    help='Hard cap on requests per crawl (default: 500).'
)
@click.option(
    '--concurrency', 'concurrency',
    type=click.IntRange(min=1),
    default=None,
    help='Number of concurrent fetch workers.'
)
@click.option(
    '--html-match', 'html_match',
    type=click.Choice(['strict', 'loose']),
    default=None,
    help='How anchors are judged to point at pages.'
)
@click.option(
    '--on-collision', 'on_collision',
    type=click.Choice(['overwrite', 'suffix']),
    default=None,
    help='What to do when two URLs derive the same file name.'
)
@click.option(
    '--request-timeout', 'request_timeout',
    type=float,
    default=None,
    help='Timeout of a single request (seconds).'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Timeout of the whole crawl (seconds).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout only if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='default', show_default=True,
    help='Log line format: default, worker, short or a %-style format string'
)
@click.option('--json', 'as_json', is_flag=True, help='Print the final counters as JSON')
def cli(url, config_path, output_dir, max_requests, concurrency, html_match, on_collision,
        request_timeout, crawl_timeout, log_level, log_file, log_format, as_json):
    """Mirror a website starting from URL."""
    try:
        configure(level=log_level, log_file=log_file, log_format=log_format)
    except ValueError as e:
        print_error(f'Error: {e}')

    if url is None and config_path is None:
        click.echo(f'No URL given, using default URL: {DEFAULT_SEED_URL}')
        url = DEFAULT_SEED_URL

    if url is not None:
        try:
            url = validate_seed(url)
        except SeedInvalid:
            print_error(
                f'Error: invalid URL "{url}". Provide a valid URL, e.g. https://example.com\n'
                f'Example: site-mirror https://example.com'
            )

    try:
        cfg = load_config(
            config_path,
            seed_url=url,
            output_dir=output_dir,
            max_requests=max_requests,
            concurrency=concurrency,
            html_match=html_match,
            on_collision=on_collision,
            timeout=request_timeout,
        )
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Failed to load configuration: {e}')

    click.echo(f'Mirroring {cfg.seed_url} into {cfg.output_dir}')
    try:
        if crawl_timeout:
            stats = asyncio.run(asyncio.wait_for(start_mirror(cfg), timeout=crawl_timeout))
        else:
            stats = asyncio.run(start_mirror(cfg))
    except asyncio.TimeoutError:
        print_error(f'Mirror did not finish within {crawl_timeout} seconds')
    except WriteError as e:
        print_error(f'Cannot prepare output directory: {e}')

    if as_json:
        click.echo(stats.json(pretty=True))
    else:
        click.echo(stats.summary())


if __name__ == "__main__":
    cli()
