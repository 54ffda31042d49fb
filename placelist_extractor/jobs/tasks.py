# jobs/tasks.py
import asyncio
from typing import Iterable, List, Optional

import aiohttp
import structlog

from ..errors import PlaceListError
from ..scraper.browser import SharedBrowserPool
from ..scraper.concurrency import get_optimal_concurrency
from ..scraper.pipeline import fetch_list_html, parse_list_html
from ..scraper.proxy_pool import ProxyPoolManager
from .export import write_csv, write_kml
from .models import ExportJob, GoogleMapsListData
from .paths import resolve_output_path, sibling_path

log = structlog.get_logger()


def export_list(
    job: ExportJob,
    data: GoogleMapsListData,
    output_file: Optional[str] = None,
    output_dir: Optional[str] = None,
    csv_export: bool = False,
):
    """Write the KML (and optionally CSV) files for one decoded list."""
    job.set_status('writing', f'Writing {len(data.places)} places...')

    kml_path = resolve_output_path(output_file, data.name, '.kml', output_dir)
    job.outputs.append(write_kml(data, kml_path))
    log.info('export.kml_created', path=kml_path)

    if csv_export:
        csv_path = sibling_path(kml_path, '.csv')
        job.outputs.append(write_csv(data, csv_path))
        log.info('export.csv_created', path=csv_path)


async def run_export_job(
    job: ExportJob,
    session: aiohttp.ClientSession,
    output_file: Optional[str] = None,
    output_dir: Optional[str] = None,
    csv_export: bool = False,
    proxy_pool: Optional[ProxyPoolManager] = None,
    browser_pool: Optional[SharedBrowserPool] = None,
    cache_dir: Optional[str] = None,
) -> ExportJob:
    """
    One list URL end to end. Failures land on the job, never raised,
    so one broken list does not stop the others.
    """
    try:
        job.set_status('fetching', 'Downloading list page...')
        html = await fetch_list_html(
            session, job.url, proxy_pool, browser_pool, cache_dir
        )

        job.set_status('parsing', 'Decoding initialization payload...')
        data = parse_list_html(html)
        job.list_name = data.name
        job.total_places = len(data.places)

        export_list(job, data, output_file, output_dir, csv_export)

        job.set_status('completed', f'✓ {job.total_places} places')
        log.info('job.completed', url=job.url, list_name=data.name, places=job.total_places)

    except (PlaceListError, OSError) as e:
        job.error_message = str(e)
        job.set_status('failed', f'Failed: {e}')
        log.error('job.failed', url=job.url, error=str(e))

    return job


async def run_bulk_export(
    urls: Iterable[str],
    output_file: Optional[str] = None,
    output_dir: Optional[str] = None,
    csv_export: bool = False,
    browser_fallback: bool = False,
    cache_dir: Optional[str] = None,
) -> List[ExportJob]:
    """
    Launches ALL list exports in parallel over one HTTP session and,
    when enabled, one shared browser.
    """
    jobs = [ExportJob(url=url) for url in urls]
    limits = get_optimal_concurrency()
    sem = asyncio.Semaphore(limits['http'])
    proxy_pool = ProxyPoolManager()
    browser_pool = SharedBrowserPool(limits['browser']) if browser_fallback else None

    log.info('bulk.start', lists=len(jobs), concurrency=limits['http'])

    async def run_one(job):
        async with sem:
            return await run_export_job(
                job, session,
                output_file=output_file,
                output_dir=output_dir,
                csv_export=csv_export,
                proxy_pool=proxy_pool,
                browser_pool=browser_pool,
                cache_dir=cache_dir,
            )

    try:
        async with aiohttp.ClientSession() as session:
            await asyncio.gather(*[run_one(job) for job in jobs])
    finally:
        if browser_pool is not None:
            await browser_pool.stop()

    log.info('bulk.completed',
             lists=len(jobs),
             failed=sum(1 for j in jobs if j.status == 'failed'),
             places=sum(j.total_places for j in jobs))
    return jobs
