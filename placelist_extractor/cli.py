"""
Command line entry point for placelist-export
"""

import asyncio
import sys
from typing import Optional, Tuple

import click
import structlog

from . import __version__
from .errors import PlaceListError
from .jobs.models import ExportJob
from .jobs.tasks import export_list, run_bulk_export
from .scraper.pipeline import parse_list_html
from .settings import configure_logging

log = structlog.get_logger()


def _convert_file(html_file, output_file, output_dir, csv_export) -> ExportJob:
    job = ExportJob(url=html_file.name)
    job.set_status('parsing', 'Decoding saved page...')
    data = parse_list_html(html_file.read())
    job.list_name = data.name
    job.total_places = len(data.places)
    export_list(job, data, output_file, output_dir, csv_export)
    job.set_status('completed', f'✓ {job.total_places} places')
    return job


@click.command()
@click.version_option(version=__version__)
@click.argument('urls', nargs=-1)
@click.option('--output-file', '-o', type=click.Path(dir_okay=False),
              help='KML file to create. Defaults to the list name with a .kml extension.')
@click.option('--output-dir', '-d', type=click.Path(file_okay=False),
              help='Directory for files named after each list.')
@click.option('--csv', 'csv_export', is_flag=True, help='Also write a CSV next to each KML file.')
@click.option('--html-file', type=click.File('r', encoding='utf-8'),
              help='Convert a saved list page instead of downloading one.')
@click.option('--browser-fallback', is_flag=True,
              help='Render the page in headless Chromium when Google withholds the data.')
@click.option('--cache-dir', type=click.Path(file_okay=False),
              help='Reuse downloaded pages from this directory.')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging for troubleshooting.')
def main(
    urls: Tuple[str, ...],
    output_file: Optional[str],
    output_dir: Optional[str],
    csv_export: bool,
    html_file,
    browser_fallback: bool,
    cache_dir: Optional[str],
    verbose: bool,
):
    """
    Convert Google Maps lists into KML (and CSV) files.

    Examples:
        placelist-export https://maps.app.goo.gl/AbCdEf --csv
        placelist-export URL1 URL2 --output-dir exports/
        placelist-export --html-file saved_list.html -o list.kml
    """
    configure_logging(verbose)

    if html_file is None and not urls:
        raise click.UsageError('Provide at least one list URL or --html-file.')
    if html_file is not None and urls:
        raise click.UsageError('Use either list URLs or --html-file, not both.')
    if output_file and len(urls) > 1:
        raise click.UsageError('--output-file only applies to a single list.')

    try:
        if html_file is not None:
            jobs = [_convert_file(html_file, output_file, output_dir, csv_export)]
        else:
            jobs = asyncio.run(run_bulk_export(
                urls,
                output_file=output_file,
                output_dir=output_dir,
                csv_export=csv_export,
                browser_fallback=browser_fallback,
                cache_dir=cache_dir,
            ))
    except KeyboardInterrupt:
        log.warning('cli.cancelled', message='Operation cancelled by user.')
        sys.exit(1)
    except (PlaceListError, OSError) as e:
        log.error('cli.failed', error=str(e))
        sys.exit(1)

    for job in jobs:
        if job.status == 'completed':
            for path in job.outputs:
                click.echo(path)
        else:
            click.echo(f'{job.url}: {job.error_message}', err=True)

    if any(job.status != 'completed' for job in jobs):
        sys.exit(1)


if __name__ == '__main__':
    main()
