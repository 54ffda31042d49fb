# scraper/browser.py
import asyncio
import random

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..errors import FetchFailed
from ..settings import BROWSER_CONCURRENCY, USER_AGENTS

log = structlog.get_logger()


class SharedBrowserPool:
    """
    One headless Chromium shared by every export in a run.
    Each render gets its own context (isolated session).
    Started lazily on the first render.
    """

    def __init__(self, concurrency: int = BROWSER_CONCURRENCY):
        self.browser = None
        self.playwright = None
        self._sem = asyncio.Semaphore(concurrency)
        self._lock = asyncio.Lock()

    async def start(self):
        async with self._lock:
            if self.browser is not None:
                return
            self.playwright = await async_playwright().start()
            try:
                self.browser = await self.playwright.chromium.launch(
                    headless=True,
                    args=[
                        '--no-sandbox',
                        '--disable-dev-shm-usage',
                        '--disable-blink-features=AutomationControlled',
                        '--disable-gpu',
                    ]
                )
            except PlaywrightError:
                await self.playwright.stop()
                self.playwright = None
                raise
            log.info('browser.started')

    async def render(self, url: str) -> str:
        """
        Load the page in a real browser and return its HTML.
        Playwright failures are raised as FetchFailed for this URL.
        """
        try:
            return await self._render(url)
        except PlaywrightError as e:
            log.error('browser.error', url=url, error=str(e)[:60])
            raise FetchFailed(url, f'browser:{str(e)[:60]}') from e

    async def _render(self, url: str) -> str:
        await self.start()

        async with self._sem:
            context = await self.browser.new_context(
                viewport={'width': 1366, 'height': 768},
                user_agent=random.choice(USER_AGENTS),
                locale='en-US',
            )
            try:
                await context.route(
                    '**/*.{png,jpg,jpeg,gif,svg,webp,woff,woff2,ttf}',
                    lambda route: route.abort()
                )

                page = await context.new_page()
                await page.goto(url, wait_until='domcontentloaded', timeout=25000)

                btn = page.locator('button:has-text("Accept all")').first
                if await btn.count() > 0:
                    await btn.click()
                    await page.wait_for_load_state('domcontentloaded')

                html = await page.content()
                log.info('browser.rendered', url=url, chars=len(html))
                return html
            finally:
                await context.close()

    async def stop(self):
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()
        self.browser = None
        self.playwright = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.stop()
