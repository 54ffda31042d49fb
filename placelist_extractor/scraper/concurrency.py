# scraper/concurrency.py
import psutil

from ..settings import BROWSER_CONCURRENCY, HTTP_CONCURRENCY


def get_optimal_concurrency() -> dict:
    """
    Calculate safe concurrency based on current system resources.
    """
    ram = psutil.virtual_memory()
    ram_available_gb = ram.available / (1024 ** 3)

    # A list page plus its parsed payload is ~20MB in memory
    # Each Playwright context uses ~150MB RAM
    http_limit = max(1, min(HTTP_CONCURRENCY, int(ram_available_gb * 4)))
    browser_limit = min(BROWSER_CONCURRENCY, max(1, int(ram_available_gb / 0.3)))

    return {
        'http': http_limit,
        'browser': browser_limit,
    }
