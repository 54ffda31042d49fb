"""Tests for single and bulk export jobs."""

import asyncio
import os

import pytest
from aiohttp import test_utils, web
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from placelist_extractor.jobs.models import ExportJob
from placelist_extractor.jobs.tasks import export_list, run_bulk_export
from placelist_extractor.scraper.browser import SharedBrowserPool
from placelist_extractor.scraper.pipeline import parse_script_text

from payloads import list_array, place_entry, script_for, wrap_html


@pytest.fixture(autouse=True)
def no_proxies(monkeypatch, tmp_path):
    monkeypatch.setattr('placelist_extractor.scraper.proxy_pool.PROXY_LIST', '')
    monkeypatch.setattr(
        'placelist_extractor.scraper.proxy_pool.PROXY_FILE', str(tmp_path / 'missing.txt')
    )


def bulk_against(pages, **kwargs):
    async def run():
        app = web.Application()
        for path, (body, status) in pages.items():
            async def handler(request, body=body, status=status):
                return web.Response(text=body, status=status, content_type='text/html')
            app.router.add_get(path, handler)
        async with test_utils.TestServer(app) as server:
            urls = [str(server.make_url(path)) for path in pages]
            return await run_bulk_export(urls, **kwargs)
    return asyncio.run(run())


def test_export_list_writes_kml_and_csv(script_text, tmp_path):
    job = ExportJob(url='saved.html')
    export_list(job, parse_script_text(script_text), output_dir=str(tmp_path), csv_export=True)
    assert job.status == 'writing'
    assert job.outputs == [str(tmp_path / 'My List.kml'), str(tmp_path / 'My List.csv')]
    assert all(os.path.exists(p) for p in job.outputs)

def test_export_list_explicit_file(script_text, tmp_path):
    job = ExportJob(url='saved.html')
    target = str(tmp_path / 'out.kml')
    export_list(job, parse_script_text(script_text), output_file=target)
    assert job.outputs == [target]

def test_bulk_export_isolates_failures(list_html, tmp_path):
    other = wrap_html(script_for([list_array(name='Second', places=[place_entry(), place_entry()])]))
    jobs = bulk_against(
        {
            '/one': (list_html, 200),
            '/two': (other, 200),
            '/gone': ('missing', 404),
            '/changed': (wrap_html(script_for([[0, 0, [0, 0, 'x']]])), 200),
        },
        output_dir=str(tmp_path),
    )
    assert [j.status for j in jobs] == ['completed', 'completed', 'failed', 'failed']
    assert [j.list_name for j in jobs[:2]] == ['My List', 'Second']
    assert [j.total_places for j in jobs[:2]] == [1, 2]
    assert 'http_404' in jobs[2].error_message
    assert 'shape' in jobs[3].error_message
    assert sorted(os.listdir(tmp_path)) == ['My List.kml', 'Second.kml']

def test_bulk_export_with_csv_and_cache(list_html, tmp_path):
    out = tmp_path / 'out'
    cache = tmp_path / 'cache'
    jobs = bulk_against(
        {'/one': (list_html, 200)},
        output_dir=str(out),
        csv_export=True,
        cache_dir=str(cache),
    )
    assert jobs[0].status == 'completed'
    assert sorted(os.listdir(out)) == ['My List.csv', 'My List.kml']
    assert len(os.listdir(cache)) == 1

def test_bulk_export_browser_failure_stays_on_its_job(list_html, tmp_path, monkeypatch):
    async def timed_out(self, url):
        raise PlaywrightTimeoutError('Timeout 25000ms exceeded.')
    monkeypatch.setattr(SharedBrowserPool, '_render', timed_out)

    jobs = bulk_against(
        {
            '/one': (list_html, 200),
            '/empty': ('<html><script>var x=1</script></html>', 200),
        },
        output_dir=str(tmp_path),
        browser_fallback=True,
    )
    assert [j.status for j in jobs] == ['completed', 'failed']
    assert 'browser:Timeout 25000ms' in jobs[1].error_message
    assert os.listdir(tmp_path) == ['My List.kml']
