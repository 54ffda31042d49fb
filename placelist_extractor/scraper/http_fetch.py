# scraper/http_fetch.py
import asyncio
import random
from typing import Optional

import aiohttp
import structlog

from ..errors import FetchFailed
from ..settings import CONSENT_COOKIE, HTTP_TIMEOUT, USER_AGENTS

log = structlog.get_logger()

BLOCK_MARKERS = (
    'unusual traffic',
    'captcha',
    'before you continue',
    'not a robot',
)


def build_headers() -> dict:
    return {
        'User-Agent': random.choice(USER_AGENTS),
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
        'Cookie': CONSENT_COOKIE,
    }


def detect_block(html: str) -> Optional[str]:
    """'blocked' when Google answered with a captcha or consent page."""
    low = html.lower()
    if any(marker in low for marker in BLOCK_MARKERS):
        return 'blocked'
    return None


async def fetch_html(
    session: aiohttp.ClientSession,
    url: str,
    proxy: Optional[str] = None,
    timeout: float = HTTP_TIMEOUT,
) -> str:
    """Download one list page. Never retries."""
    start = asyncio.get_event_loop().time()

    try:
        async with session.get(
            url,
            headers=build_headers(),
            proxy=proxy,
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=True,
        ) as resp:
            if resp.status != 200:
                raise FetchFailed(url, f'http_{resp.status}')
            html = await resp.text(encoding='utf-8', errors='replace')

    except asyncio.TimeoutError as e:
        log.error('fetch.timeout', url=url, timeout=timeout)
        raise FetchFailed(url, 'timeout') from e
    except aiohttp.ClientError as e:
        log.error('fetch.error', url=url, error=str(e)[:60])
        raise FetchFailed(url, f'err:{str(e)[:60]}') from e

    elapsed = asyncio.get_event_loop().time() - start
    log.info('fetch.done', url=url, chars=len(html), elapsed=f'{elapsed:.1f}')
    return html
