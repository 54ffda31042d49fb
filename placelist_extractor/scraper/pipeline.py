# scraper/pipeline.py
# ─────────────────────────────────────────────────────────────────
# HTML → script → balanced payload → tree → signature → decoder
#
# The parsing half is synchronous and pure. The fetch half is async:
# cache first, then HTTP, then a headless browser when Google hands
# back a page without the initialization state.
# ─────────────────────────────────────────────────────────────────
import hashlib
import os
import time
from typing import Optional

import aiohttp
import structlog

from ..errors import FetchFailed, SignatureNotFound
from ..jobs.models import GoogleMapsListData
from ..settings import CACHE_TTL, INIT_STATE_MARKER
from .extractor import decode_list
from .http_fetch import detect_block, fetch_html
from .payload import extract_payload, find_initialization_script
from .search import find_signature_match
from .tree import parse_tree

log = structlog.get_logger()


# ── PARSING ────────────────────────────────────────────────────────
def parse_script_text(script_text: str) -> GoogleMapsListData:
    payload = extract_payload(script_text)
    root = parse_tree(payload)

    matched = find_signature_match(root)
    if matched is None:
        raise SignatureNotFound()

    return decode_list(matched)


def parse_list_html(html: str) -> GoogleMapsListData:
    """Convert a downloaded list page into the domain model."""
    script_text = find_initialization_script(html)
    data = parse_script_text(script_text)
    log.info('pipeline.parsed', list_name=data.name, places=len(data.places))
    return data


# ── CACHE ──────────────────────────────────────────────────────────
def _ckey(url: str) -> str:
    return hashlib.md5(url.strip().encode()).hexdigest()


def cache_get(cache_dir: str, url: str, ttl: int = CACHE_TTL) -> Optional[str]:
    path = os.path.join(cache_dir, _ckey(url) + '.html')
    if not os.path.exists(path):
        return None
    if time.time() - os.path.getmtime(path) > ttl:
        os.remove(path)
        return None
    with open(path, encoding='utf-8') as f:
        return f.read()


def cache_set(cache_dir: str, url: str, html: str):
    os.makedirs(cache_dir, exist_ok=True)
    path = os.path.join(cache_dir, _ckey(url) + '.html')
    with open(path, 'w', encoding='utf-8') as f:
        f.write(html)


# ── FETCH ──────────────────────────────────────────────────────────
async def fetch_list_html(
    session: aiohttp.ClientSession,
    url: str,
    proxy_pool=None,
    browser_pool=None,
    cache_dir: Optional[str] = None,
) -> str:
    """
    HTML of one list page, from the cache, HTTP, or the browser.
    Raises FetchFailed when Google blocks the request outright.
    """
    if cache_dir:
        cached = cache_get(cache_dir, url)
        if cached is not None:
            log.info('pipeline.cache_hit', url=url)
            return cached

    proxy = proxy_pool.get_proxy() if proxy_pool else None
    try:
        html = await fetch_html(session, url, proxy=proxy)
    except FetchFailed as e:
        if proxy and e.reason.startswith(('err:', 'timeout')):
            proxy_pool.mark_failed(proxy)
        raise

    method = 'http'
    if INIT_STATE_MARKER not in html:
        reason = detect_block(html) or 'no_data'
        if browser_pool is None:
            if reason == 'blocked':
                raise FetchFailed(url, reason)
            # Let the parser report the missing script
            return html

        log.info('pipeline.browser_fallback', url=url, reason=reason)
        html = await browser_pool.render(url)
        method = 'browser'

    if cache_dir and INIT_STATE_MARKER in html:
        cache_set(cache_dir, url, html)

    log.debug('pipeline.fetched', url=url, method=method)
    return html


async def fetch_list(
    url: str,
    session: Optional[aiohttp.ClientSession] = None,
    proxy_pool=None,
    browser_pool=None,
    cache_dir: Optional[str] = None,
) -> GoogleMapsListData:
    """Download a Google Maps list and extract its metadata and places."""
    log.info('pipeline.start', url=url)
    t0 = time.time()

    if session is None:
        async with aiohttp.ClientSession() as own_session:
            html = await fetch_list_html(
                own_session, url, proxy_pool, browser_pool, cache_dir
            )
    else:
        html = await fetch_list_html(
            session, url, proxy_pool, browser_pool, cache_dir
        )

    data = parse_list_html(html)
    log.info('pipeline.complete',
             url=url,
             list_name=data.name,
             places=len(data.places),
             time_sec=round(time.time() - t0, 1))
    return data
