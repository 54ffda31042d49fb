# settings.py
import os
import sys
import logging
import structlog

# ── PAYLOAD ────────────────────────────────────────────────────────
INIT_STATE_MARKER = 'window.APP_INITIALIZATION_STATE'
INIT_STATE_ASSIGNMENT = INIT_STATE_MARKER + '='
SHARE_URL_PREFIX = 'https://www.google.com/maps/placelists/list/'

# Vendor-controlled input, real payloads stay under ~20 levels
MAX_TREE_DEPTH = int(os.environ.get('PLACELIST_MAX_TREE_DEPTH', 128))

# ── HTTP ───────────────────────────────────────────────────────────
HTTP_TIMEOUT = float(os.environ.get('PLACELIST_HTTP_TIMEOUT', 45))
HTTP_CONCURRENCY = int(os.environ.get('PLACELIST_HTTP_CONCURRENCY', 8))
BROWSER_CONCURRENCY = 3

USER_AGENTS = [
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36',
]

CONSENT_COOKIE = 'CONSENT=YES+cb.20230101-00-p0.en+FX+449;'

# ── CACHE ──────────────────────────────────────────────────────────
CACHE_TTL = int(os.environ.get('PLACELIST_CACHE_TTL', 3600 * 6))

# ── PROXIES ────────────────────────────────────────────────────────
PROXY_LIST = os.environ.get('PROXY_LIST', '')
PROXY_FILE = os.path.join(os.path.dirname(__file__), 'proxies.txt')


def configure_logging(verbose: bool = False):
    """Route structlog output to stderr, DEBUG when verbose."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='%Y-%m-%d %H:%M:%S'),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
