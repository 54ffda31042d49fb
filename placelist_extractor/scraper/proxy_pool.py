# scraper/proxy_pool.py
import os
from itertools import cycle
from typing import List, Optional

import structlog

from ..settings import PROXY_FILE, PROXY_LIST

log = structlog.get_logger()


class ProxyPoolManager:
    """
    Rotating proxies for list downloads.
    - Rotation: each request takes the next proxy in the cycle.
    - Failure: a proxy that raised a transport error leaves the rotation.
    With no proxies configured every request goes out directly.
    """

    def __init__(self, proxies: Optional[List[str]] = None):
        if proxies is None:
            proxies = self._load_proxies()
        self.proxies = [self._normalize(p) for p in proxies if p.strip()]
        self._reset_cycle()

    @staticmethod
    def _load_proxies() -> List[str]:
        if PROXY_LIST:
            proxies = [p.strip() for p in PROXY_LIST.split(',') if p.strip()]
            log.info('proxy_pool.loaded_env', count=len(proxies))
            return proxies

        if os.path.exists(PROXY_FILE):
            with open(PROXY_FILE, 'r', encoding='utf-8') as f:
                proxies = [line.strip() for line in f if line.strip()]
            log.info('proxy_pool.loaded_file', count=len(proxies))
            return proxies

        log.debug('proxy_pool.no_proxies', message='Using direct connection')
        return []

    @staticmethod
    def _normalize(proxy_url: str) -> str:
        proxy_url = proxy_url.strip()
        if not proxy_url.startswith('http'):
            proxy_url = f'http://{proxy_url}'
        return proxy_url

    def _reset_cycle(self):
        self.proxy_cycle = cycle(self.proxies) if self.proxies else None

    def get_proxy(self) -> Optional[str]:
        """Next proxy URL, or None for a direct connection."""
        if self.proxy_cycle is None:
            return None
        return next(self.proxy_cycle)

    def mark_failed(self, proxy_url: Optional[str]):
        if proxy_url is None or proxy_url not in self.proxies:
            return
        log.warning('proxy_pool.removing_proxy', proxy=proxy_url)
        self.proxies.remove(proxy_url)
        self._reset_cycle()
