"""Tests for request headers and block detection."""

from placelist_extractor.scraper.http_fetch import build_headers, detect_block
from placelist_extractor.settings import USER_AGENTS


def test_build_headers():
    headers = build_headers()
    assert headers['User-Agent'] in USER_AGENTS
    assert headers['Cookie'].startswith('CONSENT=YES')
    assert 'en-US' in headers['Accept-Language']

def test_detect_block_captcha():
    assert detect_block('<title>Sorry...</title> Our systems have detected unusual traffic') == 'blocked'

def test_detect_block_consent():
    assert detect_block('<h1>Before you continue to Google</h1>') == 'blocked'

def test_detect_block_normal_page(list_html):
    assert detect_block(list_html) is None
